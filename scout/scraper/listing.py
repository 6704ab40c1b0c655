"""Read listing fields from index and detail pages.

All CSS selectors for the target site live here so that a markup change only
touches one module.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urljoin

from scout.errors import RecoverableFetchError
from scout.scraper.browser import Fetcher
from scout.scraper.models import ListingCandidate

# ---------------------------------------------------------------------------
# Selectors
# ---------------------------------------------------------------------------
ITEM_SELECTOR = ".js__card-full-web .js__product-link-for-product-id"
PUBLISHED_SELECTOR = ".re__card-published-info-published-at"
LOCATION_SELECTOR = ".re__card-location span:last-child"
NEXT_PAGE_SELECTOR = "a.re__pagination-icon:has(> i.re__icon-chevron-right--sm)"
AGENT_PROFILE_SELECTOR = '.re__contact-link a[tracking-id="navigate-agent-profile"]'
AGENT_DESCRIPTION_SELECTOR = ".re__ldp-agent-desc"


def list_items(fetcher: Fetcher) -> list[Any]:
    """Return the listing cards on the currently loaded index page."""
    return fetcher.query_all(ITEM_SELECTOR)


def extract_candidate(fetcher: Fetcher, item: Any) -> ListingCandidate:
    """Read the raw fields of one listing card.

    The published-date text and the link are required; the location falls
    back to an empty string.

    Raises:
        RecoverableFetchError: If a required field is missing (usually the
            card has not finished rendering).
    """
    published = fetcher.query_text(PUBLISHED_SELECTOR, scope=item)
    if published is None:
        raise RecoverableFetchError("listing card has no published date")

    href = fetcher.get_attribute(item, "href")
    if href is None:
        raise RecoverableFetchError("listing card has no link")

    # Root-relative links are resolved; anything else is left to sanitize_url.
    if href.strip().startswith("/"):
        href = urljoin(fetcher.current_url, href.strip())

    location = fetcher.query_text(LOCATION_SELECTOR, scope=item) or ""
    return ListingCandidate(
        published_text=published,
        location_text=location,
        href=href,
    )


def find_next_page_url(fetcher: Fetcher) -> str | None:
    """Return the absolute URL of the next index page, or ``None`` on the last page."""
    links = fetcher.query_all(NEXT_PAGE_SELECTOR)
    if not links:
        return None
    href = fetcher.get_attribute(links[0], "href")
    if not href or not href.strip():
        return None
    return urljoin(fetcher.current_url, href.strip())
