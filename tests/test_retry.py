"""Tests for declarest.retry."""

from __future__ import annotations

import pytest

from declarest.exceptions import TransportError
from declarest.retry import DefaultRetryer, NeverRetry


class TestDefaultRetryer:
    def test_backoff_grows_and_is_capped(self) -> None:
        sleeps: list[float] = []
        retryer = DefaultRetryer(period=0.5, max_period=1.0, max_attempts=5, sleep=sleeps.append)
        for _ in range(4):
            retryer.continue_or_propagate(TransportError("boom"))
        assert sleeps == pytest.approx([0.5, 0.75, 1.0, 1.0])

    def test_propagates_after_max_attempts(self) -> None:
        retryer = DefaultRetryer(max_attempts=2, sleep=lambda _: None)
        retryer.continue_or_propagate(TransportError("first"))
        error = TransportError("second")
        with pytest.raises(TransportError) as exc_info:
            retryer.continue_or_propagate(error)
        assert exc_info.value is error

    def test_single_attempt_never_retries(self) -> None:
        with pytest.raises(TransportError):
            DefaultRetryer(max_attempts=1).continue_or_propagate(TransportError("boom"))

    def test_clone_starts_fresh(self) -> None:
        retryer = DefaultRetryer(max_attempts=3, sleep=lambda _: None)
        retryer.continue_or_propagate(TransportError("boom"))
        retryer.continue_or_propagate(TransportError("boom"))

        clone = retryer.clone()
        assert clone is not retryer
        assert clone.attempt == 1
        assert clone.max_attempts == 3

    def test_defaults(self) -> None:
        retryer = DefaultRetryer()
        assert (retryer.period, retryer.max_period, retryer.max_attempts) == (0.1, 1.0, 5)

    def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            DefaultRetryer(max_attempts=0)


class TestNeverRetry:
    def test_propagates_first_failure(self) -> None:
        with pytest.raises(TransportError):
            NeverRetry().continue_or_propagate(TransportError("boom"))
