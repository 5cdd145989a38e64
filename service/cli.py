# service/cli.py
"""
User-facing command-line entrypoints.

Subcommands
-----------
run [--dry-run | --ingest-only] [--print-html] [--kwargs k=v ...]
    - One posting_watch run via modules.posting_watch.main.run(...)
    - Dry run prints a capped per-client preview; nothing is sent or persisted

serve [--cron "0 */6 * * *"] [--timezone TZ]
    - Runs posting_watch on an APScheduler cron trigger until SIGINT/SIGTERM

validate-config
    - Loads the client list and settings; nonzero exit on error
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import signal
import sys
import threading
import time
import uuid
from collections.abc import Iterable
from typing import Any

from modules.posting_watch import main as posting_watch
from modules.posting_watch.lib.config import ConfigError, Settings
from modules.posting_watch.lib.utils import now_iso
from service import logging_utils as L
from service import scheduler as _scheduler

LOG = logging.getLogger("service.cli")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
def _parse_kv_pairs(pairs: Iterable[str]) -> dict[str, Any]:
    """
    Parse key=value strings into a dict.
    - Values that look like JSON (true/false/null/number/object/array) are parsed.
    - Otherwise keep as raw strings.
    """
    out: dict[str, Any] = {}
    for raw in pairs:
        if "=" not in raw:
            raise argparse.ArgumentTypeError(f"--kwargs item must be key=value (got {raw!r})")
        k, v = raw.split("=", 1)
        k = k.strip()
        v = v.strip()
        if not k:
            raise argparse.ArgumentTypeError(f"Invalid key in --kwargs item {raw!r}")
        try:
            out[k] = json.loads(v)
        except ValueError:
            out[k] = v
    return out


def _run_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    kwargs = _parse_kv_pairs(getattr(args, "kwargs", None) or [])
    if args.clients:
        kwargs["clients_path"] = args.clients
    if args.seen:
        kwargs["seen_path"] = args.seen
    if getattr(args, "dry_run", False):
        kwargs["dry_run"] = True
    if getattr(args, "ingest_only", False):
        kwargs["ingest_only"] = True
    return kwargs


# ------------------------------ Subcommands ----------------------------------
def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        settings = Settings.from_env_and_kwargs(_run_kwargs(args))
        print(f"OK: {len(settings.clients())} client(s) in {settings.clients_path}.")
        return 0
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 2


def cmd_run(args: argparse.Namespace) -> int:
    run_id = uuid.uuid4().hex
    start_time = time.monotonic()
    kwargs = _run_kwargs(args)
    LOG.debug("posting_watch run %s kwargs=%s", run_id, kwargs)

    try:
        report = posting_watch.run(**kwargs)
    except KeyboardInterrupt:
        return 130
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": now_iso(),
            "where": "cli.run",
            "run_id": run_id,
            "kwargs": kwargs,
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 1

    L.write_activity_log({
        "ts": now_iso(),
        "event": "cli_run",
        "run_id": run_id,
        "trigger_type": "adhoc",
        "dry_run": report.dry_run,
        "ingest_only": report.ingest_only,
        "new_total": report.new_total,
        "failed_clients": report.failed_clients,
        "emailed": report.message_id is not None,
        "duration_ms": int((time.monotonic() - start_time) * 1000),
    })

    # Console output
    for r in report.results:
        if not r.ok:
            print(f"Error checking {r.client.name}: {r.error}")
    if report.dry_run:
        for block in report.previews:
            print("\n" + block + "\n")
        print("DRY RUN complete. No email sent. Seen state unchanged.")
        return 0

    if report.html and args.print_html:
        print("\n----- HTML OUTPUT -----\n")
        print(report.html)
    if report.message_id:
        print(f"SUCCESS: email sent ({report.new_total} new).")
    elif report.ingest_only:
        print(f"DONE: ingested {report.new_total} new posting(s); no email.")
    else:
        print("DONE: No new jobs found.")
    return 0


def _scheduled_run(**kwargs: Any) -> None:
    """Scheduler job: a failed run is logged and the loop keeps going."""
    run_id = uuid.uuid4().hex
    try:
        report = posting_watch.run(**kwargs)
        L.write_activity_log({
            "ts": now_iso(),
            "event": "scheduled_run",
            "run_id": run_id,
            "trigger_type": "scheduled",
            "new_total": report.new_total,
            "failed_clients": report.failed_clients,
        })
    except Exception as e:
        LOG.exception("Scheduled run failed")
        L.write_error_log({"ts": now_iso(), "where": "cli.serve", "run_id": run_id, "error": repr(e)})


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the scheduler until a termination signal is received."""
    kwargs = _run_kwargs(args)
    try:
        Settings.from_env_and_kwargs(kwargs)
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 2

    L.write_activity_log({"ts": now_iso(), "event": "serve_start", "cron": args.cron})
    stop_event = threading.Event()

    def _graceful_shutdown(signum=None, frame=None):
        LOG.info("Signal %s received; initiating shutdown...", signum)
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _graceful_shutdown)

    controller = None
    try:
        controller = _scheduler.start(_scheduled_run, cron=args.cron, timezone=args.timezone, kwargs=kwargs)
        while not stop_event.is_set():
            time.sleep(0.3)
        return 0
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        LOG.exception("Fatal error in serve: %s", e)
        return 1
    finally:
        if controller is not None:
            controller.stop()
        L.write_activity_log({"ts": now_iso(), "event": "serve_stop"})


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="posting_watch command-line tools",
    )
    p.add_argument("--clients", help="Path to the clients file (JSON/YAML); falls back to CLIENTS_PATH.")
    p.add_argument("--seen", help="Path to the seen-state file; falls back to SEEN_PATH.")
    sub = p.add_subparsers(dest="cmd", required=True)

    # run
    sp = sub.add_parser("run", help="Check every client once.")
    mode = sp.add_mutually_exclusive_group()
    mode.add_argument("--dry-run", action="store_true", help="Preview only: no seen-state read/write, no email.")
    mode.add_argument("--ingest-only", action="store_true", help="Record postings as seen without emailing.")
    sp.add_argument("--print-html", action="store_true", help="Print the digest HTML if one was built.")
    sp.add_argument(
        "--kwargs",
        metavar="k=v",
        nargs="*",
        help="Extra settings (JSON values supported), e.g. renderer=static settle_ms=0.",
    )
    sp.set_defaults(func=cmd_run)

    # serve
    sp = sub.add_parser("serve", help="Run checks on a cron schedule.")
    sp.add_argument("--cron", default=os.getenv("POSTING_WATCH_CRON", _scheduler.DEFAULT_CRON))
    sp.add_argument("--timezone", default=None, help="IANA timezone (defaults to TZ env, then UTC).")
    sp.add_argument("--kwargs", metavar="k=v", nargs="*", help="Extra settings for each run.")
    sp.set_defaults(func=cmd_serve)

    # validate-config
    sp = sub.add_parser("validate-config", help="Verify settings and the client list.")
    sp.set_defaults(func=cmd_validate_config)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
