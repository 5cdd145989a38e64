from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from .models import ClientConfig
from .utils import first_set, split_csv, truthy

RENDERERS = ("browser", "static")


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for a 'posting_watch' run.

    The client list is file-based (JSON or YAML):
        [{"name": "Acme", "url": "https://boards.greenhouse.io/acme"}, ...]
    or the same list under a top-level "clients" key.
    """

    clients_path: str = "clients.json"
    seen_path: str = "seen.json"
    _clients: list[ClientConfig] = field(default_factory=list, repr=False)

    # Run modes
    dry_run: bool = False
    ingest_only: bool = False

    # Delivery
    email_to: list[str] = field(default_factory=list)

    # Rendering
    renderer: str = "browser"
    headless: bool = True
    nav_timeout_ms: int = 90_000
    action_timeout_ms: int = 30_000
    settle_ms: int = 4_000
    click_timeout_ms: int = 5_000
    click_settle_ms: int = 3_000

    # Output caps
    preview_cap: int = 10
    digest_group_cap: int = 25

    # ------------- convenience -------------
    def clients(self) -> list[ClientConfig]:
        """Return the client list for this run (loaded from file once)."""
        if self._clients:
            return self._clients
        self._clients = load_clients(self.clients_path)
        if not self._clients:
            raise ConfigError(f"No clients found in {self.clients_path}")
        return self._clients

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs, falling back to env, then defaults.

            clients_path: str     (CLIENTS_PATH)  = "clients.json"
            seen_path: str        (SEEN_PATH)     = "seen.json"
            dry_run: bool         (DRY_RUN)       = false
            ingest_only: bool     (INGEST_ONLY)   = false
            email_to: str|list    (EMAIL_TO)      comma separated
            renderer: str         (RENDERER)      "browser" | "static"

        Timeouts/caps are kwargs only: nav_timeout_ms, action_timeout_ms,
        settle_ms, click_timeout_ms, click_settle_ms, preview_cap, digest_group_cap,
        headless.
        """
        kw = dict(kwargs or {})

        try:
            settings = cls(
                clients_path=str(first_set(kw, "clients_path", "CLIENTS_PATH", "clients.json")).strip(),
                seen_path=str(first_set(kw, "seen_path", "SEEN_PATH", "seen.json")).strip(),
                dry_run=truthy(first_set(kw, "dry_run", "DRY_RUN")),
                ingest_only=truthy(first_set(kw, "ingest_only", "INGEST_ONLY")),
                email_to=split_csv(first_set(kw, "email_to", "EMAIL_TO")),
                renderer=str(first_set(kw, "renderer", "RENDERER", "browser")).strip().lower(),
                headless=truthy(kw.get("headless", True)),
                nav_timeout_ms=_int_or(kw, "nav_timeout_ms", 90_000),
                action_timeout_ms=_int_or(kw, "action_timeout_ms", 30_000),
                settle_ms=_int_or(kw, "settle_ms", 4_000),
                click_timeout_ms=_int_or(kw, "click_timeout_ms", 5_000),
                click_settle_ms=_int_or(kw, "click_settle_ms", 3_000),
                preview_cap=_int_or(kw, "preview_cap", 10),
                digest_group_cap=_int_or(kw, "digest_group_cap", 25),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid setting value: {e}") from e

        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _int_or(kw: Mapping[str, Any], key: str, default: int) -> int:
    """Explicit values (including 0) are kept so validation can reject them."""
    val = kw.get(key)
    return default if val is None else int(val)


def load_clients(path: str) -> list[ClientConfig]:
    """Read and parse the clients file (.json, or .yml/.yaml)."""
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError as e:
        raise ConfigError(f"clients file not found: {path}") from e

    lower = path.lower()
    if lower.endswith((".yml", ".yaml")):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"clients file is invalid YAML: {path}") from e
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigError(f"clients file is invalid JSON: {path}") from e

    if isinstance(data, dict):
        data = data.get("clients")
    return _parse_clients_list(data)


def _parse_clients_list(value: Any) -> list[ClientConfig]:
    """
    Parse a flat list into ClientConfig objects.
    Accepts: [{"name": "...", "url": "..."}, ...]
    """
    if not value:
        return []
    if not isinstance(value, list):
        raise ConfigError("Expected a list of client objects.")
    out: list[ClientConfig] = []
    names: set[str] = set()
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"Item[{i}] must be an object.")
        name = str(item.get("name") or "").strip()
        url = str(item.get("url") or "").strip()
        if not name or not url:
            raise ConfigError(f"Item[{i}] requires 'name' and 'url'.")
        if name in names:
            # seen state is keyed by name; two clients can't share one
            raise ConfigError(f"Duplicate client name {name!r}.")
        names.add(name)
        out.append(ClientConfig(name=name, url=url))
    return out


def _validate_settings(s: Settings) -> None:
    if s.renderer not in RENDERERS:
        raise ConfigError(f"'renderer' must be one of {RENDERERS}, got {s.renderer!r}.")
    if s.dry_run and s.ingest_only:
        raise ConfigError("'dry_run' and 'ingest_only' are mutually exclusive.")
    if not s.clients_path:
        raise ConfigError("'clients_path' cannot be empty.")
    if not s.seen_path:
        raise ConfigError("'seen_path' cannot be empty.")

    for name in ("nav_timeout_ms", "action_timeout_ms", "click_timeout_ms", "preview_cap", "digest_group_cap"):
        if getattr(s, name) <= 0:
            raise ConfigError(f"'{name}' must be >= 1.")
    if s.settle_ms < 0 or s.click_settle_ms < 0:
        raise ConfigError("settle delays cannot be negative.")

    # Fail early on a bad client list rather than mid-run.
    s.clients()
