# posting_watch/scrapers/generic.py
from __future__ import annotations

import re

from ..browser import BaseRenderer
from ..models import JobRecord
from .base import SiteAdapter, extract_deduped, regex_filter
from .registry import register_fallback


@register_fallback
class GenericAdapter(SiteAdapter):
    """
    Unknown platforms: any link whose URL looks job-ish. Broad on purpose;
    the junk-title filter removes most navigation chrome.
    """

    name = "generic"

    def matches(self, start_url: str, current_url: str) -> bool:
        return True

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        return extract_deduped(
            renderer,
            "a[href]",
            url_filter=regex_filter(r"job|jobs|posting|jobdetails|viewjob", flags=re.IGNORECASE),
        )
