from __future__ import annotations

import copy
import logging
from typing import Any

from service import logging_utils

_activity_log = logging.getLogger("posting_watch.activity")
_error_log = logging.getLogger("posting_watch.error")

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "smtp_password",
    "gmail_app_password",
    "authorization",
    "auth",
    "bearer",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    logging_utils does a deeper pass before writing to disk.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.startswith("smtp_") or lk.endswith("_secret"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSONL activity log and mirror it to
    stdlib logging. A failing log write must never break a run.
    """
    payload = _redact_record(record)
    _activity_log.info(payload)
    try:
        logging_utils.write_activity_log(payload)
    except OSError:
        _error_log.warning("activity log write failed", exc_info=True)


def error(record: dict[str, Any]) -> None:
    """Same as activity(), for the error log."""
    payload = _redact_record(record)
    _error_log.error(payload)
    try:
        logging_utils.write_error_log(payload)
    except OSError:
        _error_log.warning("error log write failed", exc_info=True)
