"""Exception types shared across the crawler."""

from __future__ import annotations


class ScoutError(Exception):
    """Base class for all crawler errors."""


class RecoverableFetchError(ScoutError):
    """A transient navigation or selector failure; the item may be retried."""


class InvalidUrlError(ScoutError, ValueError):
    """A listing link that cannot be turned into a usable URL."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"no usable URL in {raw!r}")
        self.raw = raw


class StoreWriteError(ScoutError):
    """The listing store could not be written to disk."""
