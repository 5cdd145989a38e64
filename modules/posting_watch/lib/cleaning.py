"""
Text cleanup shared by every site adapter.

  - normalize_text: canonical display text (whitespace collapsed, trimmed)
  - is_junk_title:  rejects navigation chrome, keeps anything ambiguous
  - dedupe_by_url:  one record per URL, first occurrence wins
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any, TypeVar

_WS_RE = re.compile(r"\s+")

# Exact (lower-cased) strings seen as link text on career pages that are never postings.
JUNK_EXACT: frozenset[str] = frozenset({
    "skip to content",
    "skip branding",
    "create alert",
    "sign in",
    "home",
    "reset",
    "title",
    "location",
    "department",
    "view all jobs",
    "see open positions",
    "see open open positions positions",
})

JUNK_MIN_LEN = 4

_JUNK_NAV_RE = re.compile(r"^(about|careers|locations|faq|privacy|terms|contact)$", re.IGNORECASE)

T = TypeVar("T")


def normalize_text(raw: Any) -> str:
    if raw is None:
        return ""
    return _WS_RE.sub(" ", str(raw)).strip()


def is_junk_title(title: Any) -> bool:
    x = normalize_text(title).lower()
    if not x:
        return True
    if x in JUNK_EXACT:
        return True
    if len(x) < JUNK_MIN_LEN:
        return True
    return bool(_JUNK_NAV_RE.match(x))


def dedupe_by_url(items: Iterable[T] | None) -> list[T]:
    """
    Keep the first record for each distinct `url`; skip records without one.
    Works for any object exposing a `url` attribute (JobRecord, ClassifiedJob).
    """
    seen_urls: set[str] = set()
    out: list[T] = []
    for it in items or []:
        url = getattr(it, "url", None)
        if not url or url in seen_urls:
            continue
        seen_urls.add(url)
        out.append(it)
    return out
