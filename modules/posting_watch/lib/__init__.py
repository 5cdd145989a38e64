# modules/posting_watch/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience.
# Importing .scrapers registers the built-in adapters.
from . import scrapers as _scrapers  # noqa: F401
from .config import ConfigError, Settings
from .engine import run_once
from .models import Alert, ClassifiedJob, ClientConfig, ClientResult, Division, JobRecord, RunReport
from .seen_store import SeenStateError, SeenStateStore

__all__ = [
    "Alert",
    "ClassifiedJob",
    "ClientConfig",
    "ClientResult",
    "ConfigError",
    "Division",
    "JobRecord",
    "RunReport",
    "SeenStateError",
    "SeenStateStore",
    "Settings",
    "run_once",
]
