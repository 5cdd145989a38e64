# posting_watch/scrapers/delek.py
from __future__ import annotations

from ..browser import BaseRenderer
from ..models import JobRecord
from .base import SiteAdapter, extract_deduped
from .registry import register


@register
class DelekAdapter(SiteAdapter):
    """jobs.delekus.com: detail pages under /job/."""

    name = "delek"
    priority = 50

    def matches(self, start_url: str, current_url: str) -> bool:
        return "jobs.delekus.com" in start_url

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        return extract_deduped(renderer, 'a[href*="/job/"]', url_filter=lambda url: "/job/" in url.lower())
