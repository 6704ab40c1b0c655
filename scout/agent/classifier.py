"""Four-gate classification of a single listing.

Gates run in order and the first rejection wins:

1. freshness: posted today or yesterday
2. location: inside one of the target districts
3. link: a usable URL on the target site
4. agent volume: the poster is not a high-volume agent or broker

Only the last gate touches the network (one detail tab, always closed).
"""

from __future__ import annotations

import logging
from datetime import date

from scout.config import Settings, settings as default_settings
from scout.errors import InvalidUrlError
from scout.scraper.browser import Fetcher
from scout.scraper.listing import AGENT_DESCRIPTION_SELECTOR, AGENT_PROFILE_SELECTOR
from scout.scraper.models import (
    Accept,
    ListingCandidate,
    Skip,
    SkipReason,
    ValidatedListing,
    Verdict,
)
from scout.scraper.normalizer import (
    interpret_published_date,
    is_broker_description,
    matches_any,
    parse_agent_listing_count,
    sanitize_url,
)

logger = logging.getLogger(__name__)


def check_agent_volume(detail: Fetcher, ceiling: int) -> SkipReason | None:
    """Inspect a loaded detail page; return a skip reason or ``None`` to accept.

    When the agent-profile link is present, its "see more N" count decides.
    Without the link, a professional-broker description rejects the listing.
    """
    profile_text = detail.query_text(AGENT_PROFILE_SELECTOR)
    if profile_text is not None:
        count = parse_agent_listing_count(profile_text)
        if count is None:
            logger.debug("[AGENT] profile link without listing count")
            return None
        logger.debug("[AGENT] agent has %d other listing(s)", count)
        return None if count <= ceiling else SkipReason.AGENT_VOLUME

    description = detail.query_text(AGENT_DESCRIPTION_SELECTOR)
    if is_broker_description(description):
        return SkipReason.BROKER
    return None


def classify_candidate(
    candidate: ListingCandidate,
    fetcher: Fetcher,
    config: Settings | None = None,
    today: date | None = None,
) -> Verdict:
    """Run *candidate* through every gate and return a single verdict.

    Args:
        candidate: Raw fields read from the index page.
        fetcher: The index-page tab; a secondary tab is opened from it for
            the detail-page check.
        config: Settings override (defaults to the module singleton).
        today: Run date that "today" and "yesterday" resolve against;
            defaults to the current date.

    Raises:
        RecoverableFetchError: If the detail page cannot be loaded or read.
    """
    cfg = config or default_settings

    published = interpret_published_date(candidate.published_text, today)
    if not published.is_recent:
        logger.info("[SKIP] stale: %s", candidate.published_text)
        return Skip(SkipReason.STALE)

    if not matches_any(candidate.location_text, cfg.target_districts):
        logger.info("[SKIP] wrong area: %s", candidate.location_text)
        return Skip(SkipReason.WRONG_AREA, fresh=True)

    try:
        url = sanitize_url(candidate.href, cfg.url_prefix)
    except InvalidUrlError as exc:
        logger.warning("[SKIP] bad link: %s", exc)
        return Skip(SkipReason.BAD_LINK, fresh=True)

    with fetcher.detail_context() as detail:
        detail.navigate(url, timeout_ms=cfg.navigation_timeout_ms)
        reason = check_agent_volume(detail, cfg.agent_listing_ceiling)

    if reason is not None:
        logger.info("[SKIP] %s: %s", reason.value, url)
        return Skip(reason, fresh=True)

    listing = ValidatedListing(
        date=published.display_text,
        location=candidate.location_text,
        url=url,
    )
    logger.info("[ACCEPT] %s", url)
    return Accept(listing)
