"""Data models for the crawl pipeline.

These are plain frozen dataclasses.  The store layer serialises / deserialises
to and from :class:`PersistedListing`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class DateClass(str, Enum):
    TODAY = "today"
    YESTERDAY = "yesterday"
    OTHER = "other"


class SkipReason(str, Enum):
    STALE = "stale"
    WRONG_AREA = "wrong-area"
    BAD_LINK = "bad-link"
    AGENT_VOLUME = "agent-volume"
    BROKER = "broker"
    UNPROCESSED = "unprocessed"


@dataclass(frozen=True)
class PublishedDate:
    """Result of interpreting a listing's "posted on" phrase."""

    date_class: DateClass
    display_text: str

    @property
    def is_recent(self) -> bool:
        return self.date_class in (DateClass.TODAY, DateClass.YESTERDAY)


@dataclass(frozen=True)
class ListingCandidate:
    """Raw fields read from one item on an index page."""

    published_text: str
    location_text: str
    href: str


@dataclass(frozen=True)
class ValidatedListing:
    """A listing that passed every classification gate."""

    date: str
    location: str
    url: str


@dataclass(frozen=True)
class PersistedListing:
    """One row of the listing store, keyed by ``url``."""

    date: str
    location: str
    url: str

    @classmethod
    def from_listing(cls, listing: ValidatedListing | PersistedListing) -> PersistedListing:
        if isinstance(listing, PersistedListing):
            return listing
        return cls(date=listing.date, location=listing.location, url=listing.url)


# ---------------------------------------------------------------------------
# Classification verdicts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Skip:
    """The item was rejected.

    ``fresh`` is ``True`` when the item passed the freshness gate before being
    rejected; it still counts towards the page's "found recent" signal.
    """

    reason: SkipReason
    fresh: bool = False


@dataclass(frozen=True)
class Accept:
    listing: ValidatedListing

    @property
    def fresh(self) -> bool:
        return True


Verdict = Union[Skip, Accept]


# ---------------------------------------------------------------------------
# Crawl state
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CrawlState:
    page_index: int = 1
    stale_streak: int = 0
    ever_found_fresh: bool = False


@dataclass
class PageOutcome:
    """Everything a single index page contributed to the run."""

    listings: list[ValidatedListing] = field(default_factory=list)
    found_fresh: bool = False
    skipped: dict[SkipReason, int] = field(default_factory=dict)

    def record(self, verdict: Verdict) -> None:
        if verdict.fresh:
            self.found_fresh = True
        if isinstance(verdict, Accept):
            self.listings.append(verdict.listing)
        else:
            self.skipped[verdict.reason] = self.skipped.get(verdict.reason, 0) + 1


@dataclass
class CrawlResult:
    listings: list[ValidatedListing] = field(default_factory=list)
    state: CrawlState = field(default_factory=CrawlState)
    pages_visited: int = 0
