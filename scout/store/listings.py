"""Spreadsheet-backed listing store with URL-keyed merge.

The store is a single ``.xlsx`` workbook with the columns Date, Location and
URL.  Every run re-reads it, appends the listings whose URL is new, and
rewrites the whole file (last writer wins).
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from scout.errors import StoreWriteError
from scout.scraper.models import PersistedListing, ValidatedListing

logger = logging.getLogger(__name__)

COLUMNS = ("Date", "Location", "URL")
SHEET_TITLE = "Valid Listings"
_COLUMN_WIDTHS = {"A": 25, "B": 40, "C": 75}

# Anything openpyxl can raise on a damaged workbook.  XML parse errors from
# ElementTree and lxml are SyntaxError subclasses; a workbook without sheets
# fails with IndexError.
_READ_ERRORS = (
    OSError,
    InvalidFileException,
    zipfile.BadZipFile,
    KeyError,
    ValueError,
    IndexError,
    SyntaxError,
)


@dataclass(frozen=True)
class SaveSummary:
    path: Path
    total: int
    added: int
    existing: int


def _cell(value: object) -> str:
    return "" if value is None else str(value).strip()


def _read_rows(path: Path) -> list[PersistedListing]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        index = {_cell(name): pos for pos, name in enumerate(header)}
        missing = [name for name in COLUMNS if name not in index]
        if missing:
            raise ValueError(f"missing column(s): {', '.join(missing)}")

        listings: list[PersistedListing] = []
        for row in rows:
            values = [_cell(row[index[name]]) if index[name] < len(row) else "" for name in COLUMNS]
            date, location, url = values
            if not url:
                continue
            listings.append(PersistedListing(date=date, location=location, url=url))
        return listings
    finally:
        workbook.close()


def load_listings(path: Path | str) -> list[PersistedListing]:
    """Load the persisted listings in file order.

    Returns an empty list when the file does not exist.  An unreadable or
    malformed file is logged and also treated as empty so the run continues.
    """
    path = Path(path)
    if not path.exists():
        logger.info("[STORE] no existing store at %s", path)
        return []
    try:
        listings = _read_rows(path)
    except _READ_ERRORS as exc:
        logger.error("[STORE] could not read %s, starting empty: %s", path, exc)
        return []
    logger.info("[STORE] loaded %d existing record(s) from %s", len(listings), path)
    return listings


def merge_listings(
    existing: Sequence[PersistedListing],
    incoming: Iterable[ValidatedListing | PersistedListing],
) -> list[PersistedListing]:
    """Append the *incoming* listings whose URL is not already stored.

    Existing order is preserved and new rows follow in discovery order.  The
    first occurrence of a URL wins, both in *existing* and in *incoming*.
    """
    seen: set[str] = set()
    merged: list[PersistedListing] = []
    for listing in existing:
        if listing.url in seen:
            continue
        seen.add(listing.url)
        merged.append(listing)
    for listing in incoming:
        if listing.url in seen:
            continue
        seen.add(listing.url)
        merged.append(PersistedListing.from_listing(listing))
    return merged


def write_listings(path: Path | str, listings: Sequence[PersistedListing]) -> None:
    """Overwrite *path* with *listings* in the fixed column order.

    Raises:
        StoreWriteError: If the workbook cannot be saved.
    """
    path = Path(path)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(list(COLUMNS))
    for listing in listings:
        sheet.append([listing.date, listing.location, listing.url])
    for column, width in _COLUMN_WIDTHS.items():
        sheet.column_dimensions[column].width = width

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(path)
    except OSError as exc:
        raise StoreWriteError(f"could not write {path}: {exc}") from exc


def save_new_listings(
    path: Path | str,
    incoming: Sequence[ValidatedListing | PersistedListing],
) -> SaveSummary:
    """Load, merge and rewrite the store; return what changed."""
    path = Path(path)
    existing = merge_listings(load_listings(path), [])
    combined = merge_listings(existing, incoming)
    added = len(combined) - len(existing)
    logger.info("[STORE] %d new unique listing(s) to add", added)

    write_listings(path, combined)
    summary = SaveSummary(
        path=path,
        total=len(combined),
        added=added,
        existing=len(combined) - added,
    )
    logger.info(
        "[STORE] exported %d listing(s) (%d new + %d existing) to %s",
        summary.total, summary.added, summary.existing, path,
    )
    return summary
