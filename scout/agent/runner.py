"""High-level runner for one crawl.

``run_crawl`` is the single public function in this module.  It opens a
browser, drives the pagination controller, and persists the accepted
listings once the crawl has stopped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, ContextManager

from scout.agent.paginator import crawl
from scout.config import Settings, settings as default_settings
from scout.errors import StoreWriteError
from scout.scraper.browser import Fetcher, open_browser
from scout.scraper.models import CrawlResult
from scout.store.listings import SaveSummary, save_new_listings

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    crawl: CrawlResult
    output_path: Path
    saved: SaveSummary | None = None
    store_error: str = ""

    @property
    def new_listings(self) -> int:
        return len(self.crawl.listings)


def run_crawl(
    config: Settings | None = None,
    *,
    start_url: str | None = None,
    output_path: Path | str | None = None,
    browser_factory: Callable[[Settings], ContextManager[Fetcher]] = open_browser,
) -> RunReport:
    """Crawl the listing index and merge the results into the store.

    The browser is closed before the store is touched, on success and on
    error.  A store write failure is logged and reported on the returned
    :class:`RunReport`; the crawl itself is still considered complete.

    Args:
        config: Settings override (defaults to the module singleton).
        start_url: First index page; defaults to ``config.start_url``.
        output_path: Workbook to merge into; defaults to ``config.output_path``.
        browser_factory: Context manager factory yielding a :class:`Fetcher`.

    Raises:
        RecoverableFetchError: If the start page cannot be loaded after retries.
    """
    cfg = config or default_settings
    url = start_url or cfg.start_url
    path = Path(output_path) if output_path else cfg.output_path

    with browser_factory(cfg) as fetcher:
        result = crawl(fetcher, url, cfg)

    report = RunReport(crawl=result, output_path=path)
    try:
        report.saved = save_new_listings(path, result.listings)
    except StoreWriteError as exc:
        logger.error("[STORE] failed to save listings: %s", exc)
        report.store_error = str(exc)
    return report
