from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable

from ..browser import BaseRenderer
from ..cleaning import dedupe_by_url, is_junk_title, normalize_text
from ..config import Settings
from ..models import JobRecord


class SiteAdapter(ABC):
    """
    One career-platform extraction strategy.

    Contract:
      - matches() decides from the lower-cased start URL and the lower-cased
        URL the renderer landed on (redirects).
      - extract() runs against the already-navigated renderer and returns
        cleaned, URL-deduped JobRecords. It may navigate further (Workday).
      - Do NOT classify, touch seen state, send email, or print.
    """

    # Stable label used in logs and the registry, e.g. "greenhouse"
    name: str = ""
    # Lower runs first; the generic fallback is not in the ordered list.
    priority: int = 100

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    @abstractmethod
    def matches(self, start_url: str, current_url: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def extract(self, renderer: BaseRenderer, current_url: str) -> list[JobRecord]:
        raise NotImplementedError


def collect_anchors(
    renderer: BaseRenderer,
    selector: str,
    *,
    url_filter: Callable[[str], bool] | None = None,
) -> list[JobRecord]:
    """
    Query anchors, normalize titles, drop junk and URLs failing `url_filter`.
    Not deduped: callers union several queries first.
    """
    out: list[JobRecord] = []
    for a in renderer.query_anchors(selector):
        title = normalize_text(a.text)
        url = a.href
        if not url:
            continue
        if url_filter is not None and not url_filter(url):
            continue
        if is_junk_title(title):
            continue
        out.append(JobRecord(title=title, url=url))
    return out


def regex_filter(*patterns: str, flags: int = 0) -> Callable[[str], bool]:
    """URL predicate: true if any pattern is found in the URL."""
    compiled = [re.compile(p, flags) for p in patterns]
    return lambda url: any(rx.search(url) for rx in compiled)


def extract_deduped(
    renderer: BaseRenderer,
    selector: str,
    *,
    url_filter: Callable[[str], bool] | None = None,
) -> list[JobRecord]:
    return dedupe_by_url(collect_anchors(renderer, selector, url_filter=url_filter))
