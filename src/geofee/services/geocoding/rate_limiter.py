"""Sliding one-minute window admission control for outbound provider calls."""

from __future__ import annotations

import time
from typing import Callable

WINDOW_SECONDS = 60.0


class SlidingWindowRateLimiter:
    def __init__(
        self,
        requests_per_minute: int = 50,
        clock: Callable[[], float] = time.time,
        window_seconds: float = WINDOW_SECONDS,
    ) -> None:
        if requests_per_minute < 1:
            raise ValueError("requests_per_minute must be at least 1.")
        self.limit = requests_per_minute
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: list[float] = []

    def _prune(self, now: float) -> None:
        self._requests = [ts for ts in self._requests if now - ts < self.window_seconds]

    def check_limit(self) -> bool:
        """Record a request and return True if it fits in the current window."""
        now = self._clock()
        self._prune(now)
        if len(self._requests) >= self.limit:
            return False
        self._requests.append(now)
        return True

    def remaining(self) -> int:
        self._prune(self._clock())
        return max(0, self.limit - len(self._requests))

    def retry_after(self) -> float:
        """Seconds until the oldest request in the window falls out of it."""
        now = self._clock()
        self._prune(now)
        if len(self._requests) < self.limit:
            return 0.0
        return max(0.0, self.window_seconds - (now - self._requests[0]))
