"""Fetch/render capability used by the crawler, with a Playwright backend.

The crawl logic only talks to the abstract :class:`Fetcher`; the concrete
:class:`PlaywrightFetcher` wraps one Playwright ``Page``.  Optional lookups
return ``None`` instead of raising, while navigation and driver failures are
reported as :class:`~scout.errors.RecoverableFetchError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator

from playwright.sync_api import Error as PlaywrightError

from scout.config import Settings, settings as default_settings
from scout.errors import RecoverableFetchError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abstract capability
# ---------------------------------------------------------------------------

class Fetcher(ABC):
    """One logical browser tab."""

    @property
    @abstractmethod
    def current_url(self) -> str:
        """URL of the document currently loaded."""

    @abstractmethod
    def navigate(self, url: str, timeout_ms: int | None = None) -> None:
        """Load *url*.  Raises ``RecoverableFetchError`` on timeout or failure."""

    @abstractmethod
    def query_all(self, selector: str, scope: Any = None) -> list[Any]:
        """Return every element matching *selector* inside *scope* (or the page)."""

    @abstractmethod
    def query_text(self, selector: str, scope: Any = None) -> str | None:
        """Return the stripped text of the first match, or ``None`` if absent."""

    @abstractmethod
    def get_attribute(self, scope: Any, name: str) -> str | None:
        """Return attribute *name* of element *scope*, or ``None`` if unset."""

    @abstractmethod
    def open_secondary_context(self) -> Fetcher:
        """Open a second tab sharing this tab's browser session."""

    @abstractmethod
    def close_secondary_context(self, ctx: Fetcher) -> None:
        """Close a tab returned by :meth:`open_secondary_context`."""

    @contextmanager
    def detail_context(self) -> Iterator[Fetcher]:
        """Yield a secondary tab that is closed on every exit path."""
        ctx = self.open_secondary_context()
        try:
            yield ctx
        finally:
            self.close_secondary_context(ctx)


# ---------------------------------------------------------------------------
# Playwright implementation
# ---------------------------------------------------------------------------

class PlaywrightFetcher(Fetcher):
    """:class:`Fetcher` backed by a Playwright sync-API ``Page``."""

    def __init__(self, page: Any, timeout_ms: int = 60000) -> None:
        self._page = page
        self._timeout_ms = timeout_ms

    @property
    def current_url(self) -> str:
        return self._page.url

    def navigate(self, url: str, timeout_ms: int | None = None) -> None:
        try:
            self._page.goto(
                url,
                timeout=timeout_ms or self._timeout_ms,
                wait_until="domcontentloaded",
            )
        except PlaywrightError as exc:
            raise RecoverableFetchError(f"navigation to {url} failed: {exc}") from exc

    def query_all(self, selector: str, scope: Any = None) -> list[Any]:
        root = scope if scope is not None else self._page
        try:
            return root.query_selector_all(selector)
        except PlaywrightError as exc:
            raise RecoverableFetchError(f"query {selector!r} failed: {exc}") from exc

    def query_text(self, selector: str, scope: Any = None) -> str | None:
        root = scope if scope is not None else self._page
        try:
            element = root.query_selector(selector)
            if element is None:
                return None
            return element.inner_text().strip()
        except PlaywrightError as exc:
            raise RecoverableFetchError(f"reading {selector!r} failed: {exc}") from exc

    def get_attribute(self, scope: Any, name: str) -> str | None:
        try:
            return scope.get_attribute(name)
        except PlaywrightError as exc:
            raise RecoverableFetchError(f"reading attribute {name!r} failed: {exc}") from exc

    def open_secondary_context(self) -> PlaywrightFetcher:
        try:
            page = self._page.context.new_page()
        except PlaywrightError as exc:
            raise RecoverableFetchError(f"could not open detail tab: {exc}") from exc
        return PlaywrightFetcher(page, timeout_ms=self._timeout_ms)

    def close_secondary_context(self, ctx: Fetcher) -> None:
        if not isinstance(ctx, PlaywrightFetcher):
            raise TypeError(f"not a Playwright tab: {ctx!r}")
        try:
            ctx._page.close()
        except PlaywrightError as exc:
            logger.warning("[BROWSER] closing detail tab failed: %s", exc)


@contextmanager
def open_browser(config: Settings | None = None) -> Iterator[PlaywrightFetcher]:
    """Launch Chromium and yield a :class:`PlaywrightFetcher` over a new page.

    Playwright is started lazily so the rest of the package can be used
    without a browser installed.  The browser is closed on exit, including
    when the body raises.
    """
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    cfg = config or default_settings
    with sync_playwright() as pw:
        browser = pw.chromium.launch(
            headless=cfg.headless,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
        )
        try:
            page = browser.new_page()
            yield PlaywrightFetcher(page, timeout_ms=cfg.navigation_timeout_ms)
        finally:
            browser.close()
