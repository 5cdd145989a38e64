# posting_watch/scrapers/__init__.py
from __future__ import annotations

import logging

from ..browser import BaseRenderer
from ..config import Settings
from ..models import ClientConfig, JobRecord
from . import registry
from .base import SiteAdapter
from .dayforce import DayforceAdapter
from .delek import DelekAdapter
from .generic import GenericAdapter
from .greenhouse import GreenhouseAdapter
from .icims import IcimsAdapter
from .workday import WorkdayAdapter

log = logging.getLogger(__name__)

__all__ = [
    "DayforceAdapter",
    "DelekAdapter",
    "GenericAdapter",
    "GreenhouseAdapter",
    "IcimsAdapter",
    "SiteAdapter",
    "WorkdayAdapter",
    "extract_jobs",
    "select_adapter",
]


def select_adapter(start_url: str, current_url: str, settings: Settings | None = None) -> SiteAdapter:
    """
    First registered adapter (priority order) matching the URLs, else the
    generic fallback. URLs are compared lower-cased.
    """
    start = (start_url or "").lower()
    current = (current_url or "").lower()
    for cls in registry.ordered():
        adapter = cls(settings)
        if adapter.matches(start, current):
            return adapter
    return registry.fallback()(settings)


def extract_jobs(client: ClientConfig, renderer: BaseRenderer, settings: Settings | None = None) -> list[JobRecord]:
    """
    Load the client's start page and run the matching adapter.
    Errors propagate; the engine isolates them per client.
    """
    current_url = renderer.navigate(client.url)
    adapter = select_adapter(client.url, current_url, settings)
    jobs = adapter.extract(renderer, current_url)
    log.info("%s: %s adapter found %d job(s)", client.name, adapter.name, len(jobs))
    return jobs
