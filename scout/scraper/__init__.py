"""Scraper package — browser capability, field extraction and text helpers."""

from scout.scraper.browser import Fetcher, PlaywrightFetcher, open_browser
from scout.scraper.listing import extract_candidate, find_next_page_url, list_items
from scout.scraper.models import (
    Accept,
    CrawlResult,
    CrawlState,
    ListingCandidate,
    PersistedListing,
    Skip,
    SkipReason,
    ValidatedListing,
)

__all__ = [
    "Fetcher",
    "PlaywrightFetcher",
    "open_browser",
    "extract_candidate",
    "find_next_page_url",
    "list_items",
    "Accept",
    "CrawlResult",
    "CrawlState",
    "ListingCandidate",
    "PersistedListing",
    "Skip",
    "SkipReason",
    "ValidatedListing",
]
