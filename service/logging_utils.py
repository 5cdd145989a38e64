# service/logging_utils.py
"""
Append-only JSONL logs, one file per day:

    $LOG_DIR/<ACTIVITY_LOG_PREFIX>-YYYY-MM-DD.jsonl
    $LOG_DIR/<ERROR_LOG_PREFIX>-YYYY-MM-DD.jsonl

Env is read on every write so tests (and long-running `serve`) can redirect logs.
"""

from __future__ import annotations

import datetime as _dt
import json
import os
import socket
from collections.abc import Iterable
from typing import Any

_DEFAULT_LOG_DIR = "local/logs"

# Case-insensitive substrings of keys whose values get scrubbed
_DEFAULT_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "smtp_",
    "authorization",
    "cookie",
    "set-cookie",
}

_REDACTED = "***REDACTED***"

_HOSTNAME = socket.gethostname()
_PID = os.getpid()


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Persist one structured activity record. Never mutates `record`.
    May raise OSError / TypeError on I/O or serialization failure.
    """
    _write_jsonl(activity_log_path(), record)


def write_error_log(record: dict[str, Any]) -> None:
    _write_jsonl(error_log_path(), record)


def activity_log_path() -> str:
    return _log_path_for_today(os.getenv("ACTIVITY_LOG_PREFIX", "activity"))


def error_log_path() -> str:
    return _log_path_for_today(os.getenv("ERROR_LOG_PREFIX", "error"))


def redact(record: dict[str, Any], keys: Iterable[str] | None = None) -> dict[str, Any]:
    """Redacted deep copy of `record`."""
    return _redact_deep(record, tuple(keys or _DEFAULT_REDACT_KEYS))


# ---- Internal helpers --------------------------------------------------------


def _log_path_for_today(prefix: str) -> str:
    log_dir = os.getenv("LOG_DIR", _DEFAULT_LOG_DIR)
    return os.path.join(log_dir, f"{prefix}-{_dt.date.today().isoformat()}.jsonl")


def _redact_deep(value: Any, patterns: Iterable[str]) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and any(p in k.lower() for p in patterns):
                out[k] = _REDACTED
            else:
                out[k] = _redact_deep(v, patterns)
        return out
    if isinstance(value, (list, tuple)):
        return [_redact_deep(v, patterns) for v in value]
    if isinstance(value, str) and value.lower().startswith("bearer "):
        return "Bearer " + _REDACTED
    return value


def _write_jsonl(path: str, record: dict[str, Any]) -> None:
    payload = _redact_deep(record, _DEFAULT_REDACT_KEYS)
    payload["_meta"] = {"host": _HOSTNAME, "pid": _PID}

    # Serialize before touching the file; default=str covers enums/paths.
    data = (json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    # Single write with O_APPEND keeps concurrent appends line-atomic on POSIX.
    fd = os.open(path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
    try:
        os.write(fd, data)
    finally:
        os.close(fd)
