from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity
from .lib.models import RunReport


def run(**kwargs: Any) -> RunReport:
    """
    Entry point for the 'posting_watch' module (CLI and scheduler call this).

    Accepts kwargs overriding env, including:
      clients_path: str = "clients.json"     (CLIENTS_PATH)
      seen_path: str = "seen.json"           (SEEN_PATH)
      dry_run: bool = False                  (DRY_RUN)
      ingest_only: bool = False              (INGEST_ONLY)
      email_to: str | list[str]              (EMAIL_TO)
      renderer: "browser" | "static"         (RENDERER)

    Returns the RunReport; sending and persisting already happened inside.
    """
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "posting_watch.main",
        "op": "start",
        "clients_path": settings.clients_path,
        "flags": {
            "dry_run": settings.dry_run,
            "ingest_only": settings.ingest_only,
        },
    })

    return _run_engine(settings)
