"""Pacing between backend calls."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Callable, Optional


class RateLimiter(ABC):
    """Blocks until the next backend call may start."""

    @abstractmethod
    def acquire(self) -> None:
        """Wait for permission to make one call."""


class FixedIntervalRateLimiter(RateLimiter):
    """Keeps consecutive call starts at least ``interval`` seconds apart.

    The first call is not delayed. An interrupt raised by ``sleep`` propagates.
    """

    def __init__(
        self,
        interval: float,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._sleep = sleep
        self._clock = clock
        self._last_start: Optional[float] = None

    def acquire(self) -> None:
        if self._last_start is not None:
            remaining = self.interval - (self._clock() - self._last_start)
            if remaining > 0:
                self._sleep(remaining)
        self._last_start = self._clock()


class NoDelayRateLimiter(RateLimiter):
    """Never waits."""

    def acquire(self) -> None:
        return None


__all__ = ["FixedIntervalRateLimiter", "NoDelayRateLimiter", "RateLimiter"]
