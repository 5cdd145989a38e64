# posting_watch/scrapers/workday.py
"""
Workday (myworkdayjobs.com) adapter.

A client URL may be a Workday board itself, redirect to one, or be a hub page
(e.g. OneOncology) linking to several tenant boards. Every distinct tenant
root linked from the page is visited in turn and the results are unioned.

    https://acme.wd5.myworkdayjobs.com/en-US/External/job/Remote/Engineer_R123
      -> tenant root https://acme.wd5.myworkdayjobs.com/en-US/External
"""

from __future__ import annotations

import logging
import re

from .. import logging_bridge
from ..browser import BaseRenderer
from ..cleaning import dedupe_by_url
from ..models import JobRecord
from .base import SiteAdapter, collect_anchors
from .registry import register

log = logging.getLogger(__name__)

WORKDAY_DOMAIN = "myworkdayjobs.com"

# Career hubs known to link out to several Workday tenants
HUB_DOMAINS: tuple[str, ...] = ("oneoncology.com",)

_JOB_SUFFIX_RE = re.compile(r"/job/.*$", re.IGNORECASE)


def tenant_root(href: str) -> str:
    """Strip the job-detail suffix and any trailing slash."""
    return _JOB_SUFFIX_RE.sub("", (href or "").strip()).rstrip("/")


def discover_tenant_roots(renderer: BaseRenderer, current_url: str) -> list[str]:
    """
    Distinct tenant roots linked from the current page (first-seen order),
    plus the current page's own root when it is a Workday board.
    """
    roots: list[str] = []
    for a in renderer.query_anchors(f'a[href*="{WORKDAY_DOMAIN}/"]'):
        root = tenant_root(a.href)
        if root and root not in roots:
            roots.append(root)

    current = tenant_root(current_url)
    if f"{WORKDAY_DOMAIN}/" in current.lower() and current not in roots:
        roots.append(current)
    return roots


@register
class WorkdayAdapter(SiteAdapter):
    name = "workday"
    priority = 20

    def matches(self, start_url: str, current_url: str) -> bool:
        return (
            WORKDAY_DOMAIN in start_url
            or WORKDAY_DOMAIN in current_url
            or any(hub in start_url for hub in HUB_DOMAINS)
        )

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        roots = discover_tenant_roots(renderer, current_url)
        log.debug("Workday: %d tenant root(s) from %s", len(roots), current_url)

        all_jobs: list[JobRecord] = []
        for root in roots:
            try:
                renderer.navigate(root)
                jobs = collect_anchors(
                    renderer,
                    'a[href*="/job/"]',
                    url_filter=lambda url: "/job/" in url.lower(),
                )
            except Exception as e:
                # One dead tenant must not cost us the others.
                logging_bridge.error({
                    "component": "posting_watch.scrapers.workday",
                    "op": "tenant",
                    "root": root,
                    "error": repr(e),
                })
                continue
            log.debug("Workday: %s -> %d jobs", root, len(jobs))
            all_jobs.extend(jobs)

        return dedupe_by_url(all_jobs)
