"""Pagination controller: walks index pages until fresh content dries up.

One loop iteration is Fetching → Classifying → DecidingContinuation, then
either NextPage or Stopped.  The stop rule is asymmetric: stale pages only
count towards ``stale_page_limit`` once at least one page has produced a
fresh listing, so a run that starts on old or out-of-order pages keeps going.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from datetime import date

from scout.agent.classifier import classify_candidate
from scout.agent.retry import Exhausted, RetryResult, classify_with_retry, retry
from scout.config import Settings, settings as default_settings
from scout.scraper.browser import Fetcher
from scout.scraper.listing import extract_candidate, find_next_page_url, list_items
from scout.scraper.models import CrawlResult, CrawlState, PageOutcome, Verdict

logger = logging.getLogger(__name__)


def advance(
    state: CrawlState,
    page_found_fresh: bool,
    stale_page_limit: int,
) -> tuple[CrawlState, bool]:
    """Apply the continuation rule for one finished page.

    Returns:
        The next state and ``True`` if the crawl should stop.  ``page_index``
        is left unchanged; it only moves when a next page is actually loaded.
    """
    if page_found_fresh:
        return replace(state, stale_streak=0, ever_found_fresh=True), False

    if not state.ever_found_fresh:
        return state, False

    streak = state.stale_streak + 1
    return replace(state, stale_streak=streak), streak >= stale_page_limit


def process_page(
    fetcher: Fetcher,
    config: Settings | None = None,
    today: date | None = None,
) -> PageOutcome:
    """Classify every listing on the loaded index page.

    Each item is extracted and classified under the retry policy; items that
    exhaust their retries contribute nothing to the outcome.  A page whose
    item list cannot be read at all yields an empty, non-fresh outcome.
    """
    cfg = config or default_settings
    outcome = PageOutcome()

    listed = retry(
        lambda: list_items(fetcher),
        max_attempts=cfg.retry_max_attempts,
        backoff_ms=cfg.retry_backoff_ms,
        label="item list",
    )
    if isinstance(listed, Exhausted):
        logger.error("[PAGE] could not read the item list: %s", listed.last_error)
        return outcome
    items = listed.value
    logger.info("[PAGE] %d item(s) found", len(items))

    for index, item in enumerate(items):

        def _classify(item=item) -> Verdict:
            candidate = extract_candidate(fetcher, item)
            return classify_candidate(candidate, fetcher, cfg, today)

        verdict = classify_with_retry(
            _classify,
            max_attempts=cfg.retry_max_attempts,
            backoff_ms=cfg.retry_backoff_ms,
            label=f"item {index}",
        )
        outcome.record(verdict)

    return outcome


def _navigate(fetcher: Fetcher, url: str, cfg: Settings) -> RetryResult:
    return retry(
        lambda: fetcher.navigate(url, timeout_ms=cfg.navigation_timeout_ms),
        max_attempts=cfg.retry_max_attempts,
        backoff_ms=cfg.retry_backoff_ms,
        label=f"navigate {url}",
    )


def crawl(
    fetcher: Fetcher,
    start_url: str,
    config: Settings | None = None,
    today: date | None = None,
) -> CrawlResult:
    """Crawl from *start_url* until the stop rule fires or pages run out.

    The primary tab is reused: every page transition navigates it in place.
    Index-page loads are retried.  If the start page still cannot be loaded
    the last error propagates; a later page that cannot be reached ends the
    crawl with the listings collected so far.

    The run date is fixed once, so a crawl that crosses midnight still stamps
    every "today" listing with the same date.
    """
    cfg = config or default_settings
    run_date = today or date.today()
    state = CrawlState()
    result = CrawlResult(state=state)

    logger.info("[CRAWL] starting at %s", start_url)
    opened = _navigate(fetcher, start_url, cfg)
    if isinstance(opened, Exhausted):
        raise opened.last_error

    while True:
        logger.info("[PAGE %d] processing …", state.page_index)
        outcome = process_page(fetcher, cfg, run_date)
        result.listings.extend(outcome.listings)
        result.pages_visited += 1

        state, stopped = advance(state, outcome.found_fresh, cfg.stale_page_limit)
        if outcome.found_fresh:
            logger.info(
                "[PAGE %d] recent posts found (%d accepted).",
                state.page_index, len(outcome.listings),
            )
        elif state.ever_found_fresh:
            logger.info(
                "[PAGE %d] no recent posts: %d consecutive page(s).",
                state.page_index, state.stale_streak,
            )
        else:
            logger.info("[PAGE %d] no recent posts yet, continuing.", state.page_index)

        if stopped:
            logger.info(
                "[STOP] no recent posts for %d consecutive pages; stopping at page %d.",
                state.stale_streak, state.page_index,
            )
            break

        if cfg.max_pages and result.pages_visited >= cfg.max_pages:
            logger.info("[STOP] reached the page limit (%d).", cfg.max_pages)
            break

        found = retry(
            lambda: find_next_page_url(fetcher),
            max_attempts=cfg.retry_max_attempts,
            backoff_ms=cfg.retry_backoff_ms,
            label="next-page link",
        )
        if isinstance(found, Exhausted):
            logger.error("[STOP] could not read the next-page link: %s", found.last_error)
            break
        next_url = found.value
        if next_url is None:
            logger.info("[STOP] no next page after page %d.", state.page_index)
            break

        logger.info("[NEXT] %s", next_url)
        moved = _navigate(fetcher, next_url, cfg)
        if isinstance(moved, Exhausted):
            logger.error("[STOP] could not load %s: %s", next_url, moved.last_error)
            break
        time.sleep(cfg.page_delay_ms / 1000)
        state = replace(state, page_index=state.page_index + 1)

    result.state = state
    logger.info(
        "[CRAWL] finished after %d page(s): %d valid listing(s).",
        result.pages_visited, len(result.listings),
    )
    return result
