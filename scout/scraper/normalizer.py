"""Pure text helpers: date phrases, link cleanup and district matching."""

from __future__ import annotations

import re
import unicodedata
from datetime import date, timedelta
from typing import Iterable

from scout.errors import InvalidUrlError
from scout.scraper.models import DateClass, PublishedDate

# ---------------------------------------------------------------------------
# Site-local phrases
# ---------------------------------------------------------------------------
TODAY_PHRASE = "Đăng hôm nay"
YESTERDAY_PHRASE = "Đăng hôm qua"
SEE_MORE_PHRASE = "xem thêm"
BROKER_PHRASE = "Môi giới chuyên nghiệp"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")
_SEE_MORE_COUNT = re.compile(re.escape(SEE_MORE_PHRASE) + r"\s*(\d+)")


def _nfc(text: str) -> str:
    """Return *text* in NFC so composed and decomposed diacritics compare equal."""
    return unicodedata.normalize("NFC", text)


def interpret_published_date(text: str, today: date | None = None) -> PublishedDate:
    """Classify a "posted on" phrase and render it as ``dd/mm/yyyy``.

    "Today" and "yesterday" phrases resolve against *today* (the run date when
    omitted).  Any other text is returned unchanged with class ``OTHER``.
    """
    normalized = _nfc(text)
    run_date = today or date.today()

    if _nfc(TODAY_PHRASE) in normalized:
        return PublishedDate(DateClass.TODAY, run_date.strftime("%d/%m/%Y"))
    if _nfc(YESTERDAY_PHRASE) in normalized:
        prior = run_date - timedelta(days=1)
        return PublishedDate(DateClass.YESTERDAY, prior.strftime("%d/%m/%Y"))
    return PublishedDate(DateClass.OTHER, text)


def _prefix_pattern(prefix: str) -> re.Pattern[str]:
    """Match *prefix* followed by a path or by the end of the token."""
    escaped = re.escape(prefix)
    if prefix.endswith("/"):
        return re.compile(escaped + r"\S*")
    return re.compile(escaped + r"(?:/\S*)?(?!\S)")


def sanitize_url(raw_href: str, required_prefix: str) -> str:
    """Return a clean URL starting with *required_prefix*.

    Whitespace and control characters are removed first.  When the result does
    not start with the prefix, the first prefixed run of non-space characters
    in the raw string is used instead.  The prefix must be followed by ``/``
    or nothing, so look-alike hosts such as ``<prefix>.example`` are rejected.

    Raises:
        InvalidUrlError: If no URL with the required prefix can be recovered.
    """
    pattern = _prefix_pattern(required_prefix)
    clean = _WHITESPACE.sub("", raw_href)
    if not pattern.fullmatch(clean):
        match = pattern.search(raw_href)
        if match:
            clean = match.group(0)
    clean = _CONTROL_CHARS.sub("", clean)

    if not pattern.fullmatch(clean):
        raise InvalidUrlError(raw_href)
    return clean


def matches_any(text: str, needles: Iterable[str]) -> bool:
    """Case-insensitive containment test of *text* against each needle."""
    haystack = _nfc(text).casefold()
    return any(_nfc(n).casefold() in haystack for n in needles if n)


def parse_agent_listing_count(text: str) -> int | None:
    """Extract the "see more N" listing count from an agent-profile link.

    Returns ``None`` when the link carries no "see more" phrase at all and
    ``0`` when the phrase is present but the count cannot be parsed.
    """
    lowered = _nfc(text).lower()
    if SEE_MORE_PHRASE not in lowered:
        return None
    match = _SEE_MORE_COUNT.search(lowered)
    if not match:
        return 0
    return int(match.group(1))


def is_broker_description(text: str | None) -> bool:
    if not text:
        return False
    return _nfc(BROKER_PHRASE) in _nfc(text)
