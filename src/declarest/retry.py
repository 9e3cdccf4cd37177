"""Retry policies for transport failures.

A :class:`Retryer` is consulted by
:class:`~declarest.handler.MethodHandler` each time the transport raises
:class:`~declarest.exceptions.TransportError`. It either returns (after any
back-off), which triggers a complete re-encode-and-execute cycle, or raises
to give up. No other failure class is retried.

Retryers are stateful. Each handler owns its own instance and works on a
:meth:`~Retryer.clone` of it per call, so attempt counters never leak from
one logical call into the next.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from declarest.exceptions import TransportError

logger = logging.getLogger(__name__)


class Retryer(ABC):
    """Decides whether a failed attempt is retried."""

    @abstractmethod
    def continue_or_propagate(self, exc: TransportError) -> None:
        """Return to retry (possibly after sleeping), or raise *exc* to give up."""

    @abstractmethod
    def clone(self) -> Retryer:
        """Return a fresh instance with the same settings and no attempts recorded."""


class DefaultRetryer(Retryer):
    """Retries with exponential back-off.

    The delay starts at *period* and grows by 1.5x per attempt, capped at
    *max_period*. After *max_attempts* attempts in total the failure is
    propagated.

    Args:
        period: First delay, in seconds.
        max_period: Upper bound of any delay, in seconds.
        max_attempts: Total attempts including the first one.
        sleep: Called with each delay; replaceable in tests.
    """

    def __init__(
        self,
        period: float = 0.1,
        max_period: float = 1.0,
        max_attempts: int = 5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.period = period
        self.max_period = max_period
        self.max_attempts = max_attempts
        self._sleep = sleep
        self.attempt = 1

    def continue_or_propagate(self, exc: TransportError) -> None:
        if self.attempt >= self.max_attempts:
            raise exc
        delay = self.next_max_interval()
        logger.debug(
            "Transport error: %s, retrying in %.2fs (attempt %d/%d)",
            exc, delay, self.attempt, self.max_attempts,
        )
        self.attempt += 1
        self._sleep(delay)

    def next_max_interval(self) -> float:
        return min(self.period * 1.5 ** (self.attempt - 1), self.max_period)

    def clone(self) -> DefaultRetryer:
        return DefaultRetryer(self.period, self.max_period, self.max_attempts, self._sleep)


class NeverRetry(Retryer):
    """Propagates the first failure."""

    def continue_or_propagate(self, exc: TransportError) -> None:
        raise exc

    def clone(self) -> NeverRetry:
        return self
