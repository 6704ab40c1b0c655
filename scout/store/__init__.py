"""Listing store package.

Public re-exports so callers can write::

    from scout.store import load_listings, save_new_listings
"""

from scout.store.listings import (
    COLUMNS,
    SaveSummary,
    load_listings,
    merge_listings,
    save_new_listings,
    write_listings,
)

__all__ = [
    "COLUMNS",
    "SaveSummary",
    "load_listings",
    "merge_listings",
    "save_new_listings",
    "write_listings",
]
