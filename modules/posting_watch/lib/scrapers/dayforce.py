# posting_watch/scrapers/dayforce.py
from __future__ import annotations

import re

from ..browser import BaseRenderer
from ..models import JobRecord
from .base import SiteAdapter, extract_deduped, regex_filter
from .registry import register

# Dayforce has used several posting URL shapes over time.
_POSTING_SHAPES = regex_filter(
    r"/candidateportal/jobs/\d+",
    r"/jobs/\d+",
    r"/(posting|jobposting)/",
    flags=re.IGNORECASE,
)


def _is_posting(url: str) -> bool:
    return "dayforcehcm.com" in url.lower() and _POSTING_SHAPES(url)


@register
class DayforceAdapter(SiteAdapter):
    name = "dayforce"
    priority = 30

    def matches(self, start_url: str, current_url: str) -> bool:
        return "dayforcehcm.com" in start_url

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        return extract_deduped(renderer, "a[href]", url_filter=_is_posting)
