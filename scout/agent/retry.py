"""Bounded retry with a fixed backoff.

:func:`retry` returns a :class:`Success` or :class:`Exhausted` value instead
of raising, so callers decide what an exhausted item means.  Only
:class:`~scout.errors.RecoverableFetchError` is retried; anything else
propagates immediately.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from scout.errors import RecoverableFetchError
from scout.scraper.models import Skip, SkipReason, Verdict

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    attempts: int
    last_error: RecoverableFetchError


RetryResult = Union[Success[T], Exhausted]


def retry(
    op: Callable[[], T],
    max_attempts: int = 3,
    backoff_ms: int = 2000,
    label: str = "operation",
) -> RetryResult:
    """Call *op* until it succeeds or *max_attempts* recoverable failures occur.

    Waits *backoff_ms* between attempts; there is no wait after the last one.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    last_error: RecoverableFetchError | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return Success(op(), attempts=attempt)
        except RecoverableFetchError as exc:
            last_error = exc
            logger.warning(
                "[RETRY] %s failed (attempt %d/%d): %s",
                label, attempt, max_attempts, exc,
            )
            if attempt < max_attempts:
                time.sleep(backoff_ms / 1000)

    return Exhausted(attempts=max_attempts, last_error=last_error)  # type: ignore[arg-type]


def classify_with_retry(
    op: Callable[[], Verdict],
    max_attempts: int = 3,
    backoff_ms: int = 2000,
    label: Any = "item",
) -> Verdict:
    """Run a classification under :func:`retry`; exhaustion becomes ``Skip(unprocessed)``.

    An unprocessed item is not fresh, so it never counts towards the page's
    "found recent" signal.
    """
    result = retry(op, max_attempts=max_attempts, backoff_ms=backoff_ms, label=str(label))
    if isinstance(result, Exhausted):
        logger.error(
            "[SKIP] %s unprocessed after %d attempt(s): %s",
            label, result.attempts, result.last_error,
        )
        return Skip(SkipReason.UNPROCESSED)
    return result.value
