# tests/conftest.py
import json
import os
import pathlib
import tempfile
import types

import pytest

from modules.posting_watch.lib import config as pw_config
from modules.posting_watch.lib.browser import StaticRenderer


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (real browser / network).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or drive a real browser (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", tempfile.mkdtemp(prefix="pw-pytest-logs-"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    # Never let a developer's shell leak run modes or recipients into tests
    for name in ("DRY_RUN", "INGEST_ONLY", "EMAIL_TO", "RENDERER", "CLIENTS_PATH", "SEEN_PATH"):
        monkeypatch.delenv(name, raising=False)
    yield


# ---------------------------------------------------------------------
# Fake page: StaticRenderer serving in-memory HTML
# ---------------------------------------------------------------------
class FakeRenderer(StaticRenderer):
    """
    pages:     url -> html
    redirects: url -> url the "browser" ends up on
    fail:      urls whose navigation raises (simulated timeout)
    """

    def __init__(self, pages=None, *, redirects=None, fail=(), click_error=None):
        super().__init__()
        self.pages = pages if pages is not None else {}
        self.redirects = dict(redirects or {})
        self.fail = set(fail)
        self.click_error = click_error
        self.visited: list[str] = []
        self.clicks: list[tuple[str, str]] = []

    def _fetch(self, url):
        self.visited.append(url)
        if url in self.fail:
            raise TimeoutError(f"Timeout 90000ms exceeded navigating to {url}")
        final = self.redirects.get(url, url)
        if final not in self.pages:
            raise KeyError(f"no fake page for {final}")
        return self.pages[final], final

    def click_control(self, role, name, *, timeout_ms, settle_ms=0):
        self.clicks.append((role, getattr(name, "pattern", str(name))))
        if self.click_error is not None:
            raise self.click_error
        return False


def anchors_page(links) -> str:
    """links: iterable of (href, text) -> minimal HTML page."""
    body = "\n".join(f'<a href="{href}">{text}</a>' for href, text in links)
    return f"<html><body><nav><a href='/'>Home</a></nav>{body}</body></html>"


@pytest.fixture
def fake_renderer():
    return FakeRenderer


@pytest.fixture
def page_html():
    return anchors_page


# ---------------------------------------------------------------------
# Settings / files
# ---------------------------------------------------------------------
@pytest.fixture
def write_clients(tmp_path: pathlib.Path):
    """Write a clients.json and return its path."""

    def _write(clients, name="clients.json") -> pathlib.Path:
        p = tmp_path / name
        p.write_text(json.dumps(clients), encoding="utf-8")
        return p

    return _write


@pytest.fixture
def make_settings(tmp_path, write_clients):
    """
    Brand-new Settings per call:
    - clients file in tmp_path
    - seen file path in tmp_path (not created)
    """

    def _make(clients, **overrides):
        path = write_clients(clients)
        kwargs = {
            "clients_path": str(path),
            "seen_path": str(tmp_path / "seen.json"),
            "renderer": "static",
            "email_to": "ops@example.com",
            "settle_ms": 0,
        }
        kwargs.update(overrides)
        return pw_config.Settings.from_env_and_kwargs(kwargs)

    return _make


@pytest.fixture
def stub_notifier():
    sent = {"messages": []}

    def notify(subject, html):
        sent["messages"].append({"subject": subject, "html": html})
        return f"<fake-{len(sent['messages'])}@example>"

    return types.SimpleNamespace(notify=notify, sent=sent)
