# posting_watch/scrapers/icims.py
"""
iCIMS portals. Many only list jobs after the search form is submitted, so we
try one click on a "Search" button first; no button (or a failed click) is fine.
"""

from __future__ import annotations

import logging
import re

from ..browser import BaseRenderer
from ..models import JobRecord
from .base import SiteAdapter, extract_deduped, regex_filter
from .registry import register

log = logging.getLogger(__name__)

_SEARCH_NAME = re.compile(r"search", re.IGNORECASE)


@register
class IcimsAdapter(SiteAdapter):
    name = "icims"
    priority = 40

    def matches(self, start_url: str, current_url: str) -> bool:
        return "icims.com" in start_url

    def _click_search(self, renderer: BaseRenderer) -> bool:
        try:
            return renderer.click_control(
                "button",
                _SEARCH_NAME,
                timeout_ms=self.settings.click_timeout_ms,
                settle_ms=self.settings.click_settle_ms,
            )
        except Exception as e:
            log.info("iCIMS search click skipped: %r", e)
            return False

    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        clicked = self._click_search(renderer)
        log.debug("iCIMS search clicked=%s on %s", clicked, current_url)
        return extract_deduped(renderer, 'a[href*="/jobs/"]', url_filter=regex_filter(r"/jobs/\d+"))
