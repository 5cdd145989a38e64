"""
Per-client "already reported" URL sets, persisted as one JSON file:

    {
      "Acme": ["https://boards.greenhouse.io/acme/jobs/1", ...],
      ...
    }

The sets only grow. Nothing is ever removed, so a relisted posting with the
same URL is never re-reported.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from collections.abc import Iterable, Sequence
from typing import TypeVar

from .logging_bridge import error as log_error

T = TypeVar("T")


class SeenStateError(RuntimeError):
    """Seen state could not be read or written. Always fatal for a run."""


class SeenStateStore:
    def __init__(self, path: str) -> None:
        self.path = path
        self._state: dict[str, list[str]] = {}
        # Per-client lookup sets, kept in step with _state
        self._index: dict[str, set[str]] = {}

    # ---- lifecycle -------------------------------------------------------

    def load(self) -> SeenStateStore:
        """Read the file. A missing file is an empty state."""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            data = {}
        except (OSError, ValueError) as e:
            # ValueError covers bad JSON and non-UTF-8 bytes
            self._fail("load", e)

        if not isinstance(data, dict):
            self._fail("load", ValueError(f"expected a JSON object, got {type(data).__name__}"))

        self._state = {}
        self._index = {}
        for client, urls in data.items():
            if not isinstance(urls, list):
                self._fail("load", ValueError(f"entry for {client!r} is not a list"))
            self.mark_seen(str(client), (str(u) for u in urls))
        return self

    def persist(self) -> None:
        """
        Write atomically: temp file in the same directory, fsync, os.replace.
        A crash mid-write leaves the previous file intact.
        """
        d = os.path.dirname(os.path.abspath(self.path)) or "."
        tmp_path = None
        try:
            os.makedirs(d, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".seen-", suffix=".tmp", dir=d)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._state, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            self._fail("persist", e)
        finally:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.remove(tmp_path)

    # ---- queries / updates -----------------------------------------------

    def get_seen(self, client: str) -> list[str]:
        return list(self._state.get(client, []))

    def is_seen(self, client: str, url: str) -> bool:
        return url in self._index.get(client, ())

    def split_new(self, client: str, jobs: Sequence[T]) -> tuple[list[T], list[T]]:
        """Partition jobs (anything with .url) into (already seen, new)."""
        seen: list[T] = []
        new: list[T] = []
        for job in jobs:
            (seen if self.is_seen(client, job.url) else new).append(job)
        return seen, new

    def mark_seen(self, client: str, urls: Iterable[str]) -> int:
        """Append URLs not yet recorded for `client`. Returns how many were added."""
        ordered = self._state.setdefault(client, [])
        index = self._index.setdefault(client, set())
        added = 0
        for url in urls:
            if url and url not in index:
                index.add(url)
                ordered.append(url)
                added += 1
        return added

    def snapshot(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._state.items()}

    # ---- internal ----------------------------------------------------------

    def _fail(self, op: str, exc: Exception):
        log_error({
            "component": "posting_watch.seen_store",
            "op": op,
            "path": self.path,
            "error": repr(exc),
        })
        raise SeenStateError(f"seen state {op} failed for {self.path}: {exc}") from exc
