"""
Page rendering for the site adapters.

Adapters only need three things from a page:
  - navigate(url) -> the URL the page ended up on (after redirects)
  - query_anchors(css) -> visible text + resolved href of matching anchors
  - click_control(role, name) -> best-effort click, False if nothing matched

Two implementations:
  - PlaywrightRenderer: one headless Chromium page, reused across clients.
  - StaticRenderer: requests + BeautifulSoup, no script execution. Good enough
    for server-rendered boards and used as the fake page in tests.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from playwright.sync_api import sync_playwright

from .http_client import HttpClient

if TYPE_CHECKING:
    from .config import Settings

log = logging.getLogger(__name__)

# Runs in the page; mirrors what a user sees (innerText) and the absolute href.
_ANCHOR_JS = "els => els.map(a => ({ text: a.innerText || '', href: a.href || '' }))"


class RendererError(Exception):
    """Raised when a renderer is used out of order (e.g. query before navigate)."""


@dataclass(frozen=True)
class Anchor:
    text: str
    href: str


class BaseRenderer(ABC):
    """
    Contract shared by all renderers. One instance is reused for every client
    in a run, sequentially; nothing here is thread-safe.
    """

    @abstractmethod
    def navigate(self, url: str) -> str:
        """Load `url`, wait for the page to settle, return the current URL."""
        raise NotImplementedError

    @abstractmethod
    def query_anchors(self, selector: str) -> list[Anchor]:
        raise NotImplementedError

    def click_control(
        self,
        role: str,
        name: str | re.Pattern[str],
        *,
        timeout_ms: int,
        settle_ms: int = 0,
    ) -> bool:
        return False

    def close(self) -> None:
        return None

    def __enter__(self) -> BaseRenderer:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class StaticRenderer(BaseRenderer):
    """Fetch with requests, query with BeautifulSoup CSS selectors."""

    def __init__(self, client: HttpClient | None = None, *, timeout_s: float = 30.0) -> None:
        self._client = client
        self._timeout_s = timeout_s
        self._soup: BeautifulSoup | None = None
        self._url = ""

    @property
    def current_url(self) -> str:
        return self._url

    def _fetch(self, url: str) -> tuple[str, str]:
        if self._client is None:
            self._client = HttpClient(timeout=self._timeout_s)
        return self._client.get_page(url)

    def navigate(self, url: str) -> str:
        html, final_url = self._fetch(url)
        self._soup = BeautifulSoup(html or "", "html.parser")
        self._url = final_url or url
        return self._url

    def query_anchors(self, selector: str) -> list[Anchor]:
        if self._soup is None:
            raise RendererError("navigate() must be called before query_anchors()")
        out: list[Anchor] = []
        for el in self._soup.select(selector):
            href = str(el.get("href") or "").strip()
            out.append(
                Anchor(
                    text=el.get_text(" ", strip=True),
                    href=urljoin(self._url, href) if href else "",
                )
            )
        return out

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


class PlaywrightRenderer(BaseRenderer):
    """Single headless Chromium page. Call start() (or use open_renderer)."""

    def __init__(
        self,
        *,
        headless: bool = True,
        nav_timeout_ms: int = 90_000,
        action_timeout_ms: int = 30_000,
        settle_ms: int = 4_000,
        wait_until: str = "domcontentloaded",
    ) -> None:
        self.headless = headless
        self.nav_timeout_ms = nav_timeout_ms
        self.action_timeout_ms = action_timeout_ms
        self.settle_ms = settle_ms
        self.wait_until = wait_until
        self._pw = None
        self._browser = None
        self._page = None

    def start(self) -> PlaywrightRenderer:
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(headless=self.headless)
        self._page = self._browser.new_page()
        self._page.set_default_navigation_timeout(self.nav_timeout_ms)
        self._page.set_default_timeout(self.action_timeout_ms)
        return self

    def _require_page(self):
        if self._page is None:
            raise RendererError("PlaywrightRenderer.start() was not called")
        return self._page

    def navigate(self, url: str) -> str:
        page = self._require_page()
        page.goto(url, wait_until=self.wait_until, timeout=self.nav_timeout_ms)
        if self.settle_ms:
            page.wait_for_timeout(self.settle_ms)
        return page.url

    def query_anchors(self, selector: str) -> list[Anchor]:
        page = self._require_page()
        rows = page.eval_on_selector_all(selector, _ANCHOR_JS) or []
        return [Anchor(text=str(r.get("text") or ""), href=str(r.get("href") or "").strip()) for r in rows]

    def click_control(
        self,
        role: str,
        name: str | re.Pattern[str],
        *,
        timeout_ms: int,
        settle_ms: int = 0,
    ) -> bool:
        page = self._require_page()
        loc = page.get_by_role(role, name=name)
        if loc.count() == 0:
            return False
        loc.first.click(timeout=timeout_ms)
        if settle_ms:
            page.wait_for_timeout(settle_ms)
        return True

    def close(self) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
            if self._pw is not None:
                self._pw.stop()
        except Exception:
            log.debug("PlaywrightRenderer.close() swallow", exc_info=True)
        finally:
            self._page = None
            self._browser = None
            self._pw = None


@contextmanager
def open_renderer(settings: Settings) -> Iterator[BaseRenderer]:
    """Build the renderer selected by settings.renderer and close it afterwards."""
    if settings.renderer == "static":
        renderer: BaseRenderer = StaticRenderer(timeout_s=settings.nav_timeout_ms / 1000.0)
    else:
        renderer = PlaywrightRenderer(
            headless=settings.headless,
            nav_timeout_ms=settings.nav_timeout_ms,
            action_timeout_ms=settings.action_timeout_ms,
            settle_ms=settings.settle_ms,
        ).start()
    try:
        yield renderer
    finally:
        renderer.close()
