from __future__ import annotations

from .base import SiteAdapter

# Global in-process registry: name -> adapter class
_REGISTRY: dict[str, type[SiteAdapter]] = {}
_FALLBACK: type[SiteAdapter] | None = None


def register(cls: type[SiteAdapter]) -> type[SiteAdapter]:
    """
    Class decorator to register an adapter class.
    Requires cls.name to be a non-empty string.
    """
    name = getattr(cls, "name", "") or ""
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Cannot register adapter {cls!r}: missing/empty 'name'.")
    key = name.strip().lower()
    if key in _REGISTRY and _REGISTRY[key] is not cls:
        # Allow idempotent re-registers of the same class; otherwise reject.
        raise ValueError(f"Adapter {key!r} already registered to {_REGISTRY[key]!r}.")
    _REGISTRY[key] = cls
    return cls


def register_fallback(cls: type[SiteAdapter]) -> type[SiteAdapter]:
    """Register the adapter used when nothing in the ordered list matches."""
    global _FALLBACK
    if _FALLBACK is not None and _FALLBACK is not cls:
        raise ValueError(f"Fallback adapter already registered: {_FALLBACK!r}.")
    _FALLBACK = cls
    return cls


def ordered() -> list[type[SiteAdapter]]:
    """Registered adapters in dispatch order (priority, then name)."""
    return sorted(_REGISTRY.values(), key=lambda c: (c.priority, c.name))


def fallback() -> type[SiteAdapter]:
    if _FALLBACK is None:
        raise KeyError("No fallback adapter registered.")
    return _FALLBACK


def get(name: str) -> type[SiteAdapter]:
    """
    Look up an adapter class by name (case-insensitive).
    Raises KeyError if not found.
    """
    key = (name or "").strip().lower()
    if key not in _REGISTRY:
        raise KeyError(f"No adapter registered for {name!r}.")
    return _REGISTRY[key]

