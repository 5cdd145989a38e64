from __future__ import annotations

import html
import os
from datetime import datetime, timezone
from typing import Any

_HTML_ESCAPE_QUOTE = True  # keep quotes escaped for attributes


def esc(s: str | None) -> str:
    """
    Escape text for HTML contexts (titles, URLs). Do NOT wrap or add tags.
    """
    if s is None:
        return ""
    return html.escape(str(s), quote=_HTML_ESCAPE_QUOTE)


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def first_set(kwargs: dict[str, Any], key: str, env_name: str, default: Any = None) -> Any:
    """
    Resolve one setting: explicit kwarg wins, then the environment, then default.
    Empty strings count as unset.
    """
    val = kwargs.get(key)
    if val is not None and val != "":
        return val
    env_val = os.getenv(env_name)
    if env_val is not None and env_val.strip() != "":
        return env_val
    return default


def split_csv(v: Any) -> list[str]:
    """Accept 'a@x, b@y' or ['a@x', 'b@y'] and return a clean list."""
    if not v:
        return []
    if isinstance(v, str):
        return [s.strip() for s in v.split(",") if s.strip()]
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if str(s).strip()]
    return [str(v).strip()]
