"""Tests for the retry combinator.

``time.sleep`` is patched so backoff waits are recorded instead of slept.
"""

from __future__ import annotations

from unittest.mock import MagicMock, call, patch

import pytest

from scout.agent.retry import Exhausted, Success, classify_with_retry, retry
from scout.errors import RecoverableFetchError
from scout.scraper.models import Skip, SkipReason


def _flaky(failures: int, value="ok") -> MagicMock:
    """Return a callable that raises *failures* times, then returns *value*."""
    effects = [RecoverableFetchError(f"timeout #{i}") for i in range(failures)]
    return MagicMock(side_effect=[*effects, value])


class TestRetry:
    def test_first_attempt_success_does_not_wait(self) -> None:
        op = MagicMock(return_value=42)
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            result = retry(op)

        assert result == Success(42, attempts=1)
        mock_sleep.assert_not_called()

    def test_succeeds_on_third_attempt_after_two_waits(self) -> None:
        op = _flaky(2)
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            result = retry(op, max_attempts=3, backoff_ms=2000)

        assert isinstance(result, Success)
        assert result.value == "ok"
        assert result.attempts == 3
        assert op.call_count == 3
        assert mock_sleep.call_args_list == [call(2.0), call(2.0)]

    def test_exhausted_after_max_attempts(self) -> None:
        op = MagicMock(side_effect=RecoverableFetchError("always"))
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            result = retry(op, max_attempts=3, backoff_ms=500)

        assert isinstance(result, Exhausted)
        assert result.attempts == 3
        assert str(result.last_error) == "always"
        assert op.call_count == 3
        assert mock_sleep.call_count == 2

    def test_other_exceptions_propagate_immediately(self) -> None:
        op = MagicMock(side_effect=KeyError("fatal"))
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            with pytest.raises(KeyError):
                retry(op)

        assert op.call_count == 1
        mock_sleep.assert_not_called()

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            retry(MagicMock(), max_attempts=0)


class TestClassifyWithRetry:
    def test_skip_verdict_is_not_retried(self) -> None:
        op = MagicMock(return_value=Skip(SkipReason.STALE))
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            verdict = classify_with_retry(op)

        assert verdict == Skip(SkipReason.STALE)
        assert op.call_count == 1
        mock_sleep.assert_not_called()

    def test_exhaustion_yields_unprocessed_without_fourth_attempt(self) -> None:
        op = MagicMock(side_effect=RecoverableFetchError("selector timeout"))
        with patch("scout.agent.retry.time.sleep"):
            verdict = classify_with_retry(op, max_attempts=3, backoff_ms=2000)

        assert verdict == Skip(SkipReason.UNPROCESSED)
        assert verdict.fresh is False
        assert op.call_count == 3

    def test_recovers_after_transient_failure(self) -> None:
        op = _flaky(1, value=Skip(SkipReason.WRONG_AREA, fresh=True))
        with patch("scout.agent.retry.time.sleep") as mock_sleep:
            verdict = classify_with_retry(op)

        assert verdict == Skip(SkipReason.WRONG_AREA, fresh=True)
        mock_sleep.assert_called_once_with(2.0)
