"""
Engine for one posting_watch run: extract every client, diff against seen
state, send one digest, persist.

Features:
  - Sequential clients on one shared renderer
  - Per-client fault isolation via ClientResult
  - Modes: live, `dry_run` (preview only), `ingest_only` (persist, no email)
  - Digest is sent BEFORE seen state is persisted, so a failed send re-alerts next run
  - Dependency injection for testability (`renderer`, `store`, `notify`)
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Callable

from . import logging_bridge, render
from .browser import BaseRenderer, open_renderer
from .classify import classify_division
from .config import Settings
from .models import Alert, ClassifiedJob, ClientConfig, ClientResult, RunReport
from .scrapers import extract_jobs
from .seen_store import SeenStateStore

log = logging.getLogger(__name__)

# (subject, html) -> message id
Notifier = Callable[[str, str], str]


# =============================================================================
# DEFAULT NOTIFIER (PRODUCTION)
# =============================================================================
def _default_notifier(settings: Settings) -> Notifier:
    """SMTP delivery via service.emailer, to settings.email_to."""
    from service.emailer import send_html

    def _send(subject: str, html: str) -> str:
        return send_html(subject=subject, html=html, to=settings.email_to)

    return _send


# =============================================================================
# PER-CLIENT PIPELINE
# =============================================================================
def _collect_client(client: ClientConfig, renderer: BaseRenderer, settings: Settings) -> ClientResult:
    """Extract + classify one client. Never raises; failures land in .error."""
    try:
        records = extract_jobs(client, renderer, settings)
    except Exception as e:
        log.warning("Error checking %s: %s", client.name, e)
        logging_bridge.error({
            "component": "posting_watch.engine",
            "op": "extract",
            "client": client.name,
            "url": client.url,
            "error": repr(e),
        })
        return ClientResult(client=client, error=f"{type(e).__name__}: {e}")

    jobs = [ClassifiedJob(title=r.title, url=r.url, division=classify_division(r.title, r.url)) for r in records]
    return ClientResult(client=client, jobs=jobs)


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    *,
    renderer: BaseRenderer | None = None,
    store: SeenStateStore | None = None,
    notify: Notifier | None = None,
) -> RunReport:
    """
    Run one complete cycle.

    Args:
        settings: validated Settings (client list, paths, flags).
        renderer: optional already-open renderer (tests); otherwise one is
                  opened from settings and closed at the end.
        store:    optional seen-state store; loaded here unless dry-run.
        notify:   optional (subject, html) -> message_id sender.

    Raises:
        SeenStateError if seen state cannot be loaded/persisted.
        Whatever `notify` raises (e.g. EmailSendError); seen state is then NOT persisted.
    """
    start_ns = time.perf_counter_ns()
    report = RunReport(dry_run=settings.dry_run, ingest_only=settings.ingest_only)
    clients = settings.clients()

    if not settings.dry_run:
        store = (store or SeenStateStore(settings.seen_path)).load()

    logging_bridge.activity({
        "component": "posting_watch.engine",
        "op": "start",
        "clients": len(clients),
        "dry_run": settings.dry_run,
        "ingest_only": settings.ingest_only,
        "renderer": settings.renderer,
    })

    with contextlib.ExitStack() as stack:
        if renderer is None:
            renderer = stack.enter_context(open_renderer(settings))

        for client in clients:
            log.info("Checking: %s", client.name)
            logging_bridge.activity({"component": "posting_watch.engine", "op": "checking", "client": client.name})
            result = _collect_client(client, renderer, settings)
            report.results.append(result)

            if settings.dry_run:
                report.previews.append(
                    render.dry_run_preview(client.name, client.url, result.jobs, cap=settings.preview_cap)
                )
                continue

            if not result.ok:
                continue

            _seen, new_jobs = store.split_new(client.name, result.jobs)
            # Also creates the client's (possibly empty) entry.
            store.mark_seen(client.name, (j.url for j in new_jobs))
            if new_jobs:
                report.alerts.append(Alert(client_name=client.name, client_url=client.url, jobs=new_jobs))

    found_by_client = {r.client.name: len(r.jobs) for r in report.results}
    new_by_client = {a.client_name: len(a.jobs) for a in report.alerts}
    total_us = int((time.perf_counter_ns() - start_ns) // 1000)

    logging_bridge.activity({
        "component": "posting_watch.engine",
        "op": "summary",
        "dry_run": settings.dry_run,
        "ingest_only": settings.ingest_only,
        "found_by_client": found_by_client,
        "new_by_client": new_by_client,
        "failed_clients": report.failed_clients,
        "total_us": total_us,
    })

    # -------------------------------------------------------------------------
    # DRY RUN: nothing read, written, or sent
    # -------------------------------------------------------------------------
    if settings.dry_run:
        return report

    # -------------------------------------------------------------------------
    # LIVE: send first, then persist
    # -------------------------------------------------------------------------
    if report.alerts and not settings.ingest_only:
        report.html = render.build_digest(report.alerts, group_cap=settings.digest_group_cap)
        subject = render.build_subject(report.alerts)
        report.meta = {
            "subject": subject,
            "new_total": report.new_total,
            "by_client": new_by_client,
            "total_us": total_us,
        }

        send = notify or _default_notifier(settings)
        try:
            report.message_id = send(subject, report.html)
        except Exception as e:
            logging_bridge.error({
                "component": "posting_watch.engine",
                "op": "send",
                "new_total": report.new_total,
                "error": repr(e),
                "note": "seen state not persisted; alerts will repeat next run",
            })
            raise

        logging_bridge.activity({
            "component": "posting_watch.engine",
            "op": "sent",
            "subject": subject,
            "message_id": report.message_id,
            "new_total": report.new_total,
        })
    elif settings.ingest_only:
        logging_bridge.activity({
            "component": "posting_watch.engine",
            "op": "ingest_only",
            "new_total": report.new_total,
        })
    else:
        logging_bridge.activity({"component": "posting_watch.engine", "op": "no_new"})

    store.persist()
    logging_bridge.activity({
        "component": "posting_watch.engine",
        "op": "persisted",
        "path": store.path,
        "clients": len(store.snapshot()),
    })
    return report
