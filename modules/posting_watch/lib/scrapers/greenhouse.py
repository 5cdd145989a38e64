# posting_watch/scrapers/greenhouse.py
from __future__ import annotations

from ..browser import BaseRenderer
from ..models import JobRecord
from .base import SiteAdapter, extract_deduped, regex_filter
from .registry import register


@register
class GreenhouseAdapter(SiteAdapter):
    """Greenhouse boards: postings live at /jobs/<numeric id>."""

    name = "greenhouse"
    priority = 10

    def matches(self, start_url: str, current_url: str) -> bool:
        return "greenhouse.io" in start_url

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        return extract_deduped(renderer, 'a[href*="/jobs/"]', url_filter=regex_filter(r"/jobs/\d+"))
