"""Caller-side rate limiting for the HTTP surface."""

from __future__ import annotations

import math
import time
from collections import deque
from typing import Callable


class RateLimitExceeded(Exception):
    """Raised when a caller exceeds its request quota."""

    def __init__(self, key: str, retry_after: float):
        super().__init__(f"Rate limit exceeded for {key}")
        self.key = key
        self.retry_after = retry_after

    @property
    def retry_after_header(self) -> str:
        return str(max(1, math.ceil(self.retry_after)))


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each key.

    Owned by the HTTP app and passed in explicitly; keys with no recent
    requests are dropped as they are touched.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._max_requests = max_requests
        self._window = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}

    def check(self, key: str) -> None:
        """Record a request for ``key``.

        Raises:
            RateLimitExceeded: If the quota for the current window is used up.
        """
        now = self._clock()
        hits = self._hits.setdefault(key, deque())
        while hits and hits[0] <= now - self._window:
            hits.popleft()

        if len(hits) >= self._max_requests:
            raise RateLimitExceeded(key, retry_after=hits[0] + self._window - now)

        hits.append(now)
        self._prune(now)

    def _prune(self, now: float) -> None:
        stale = [
            key
            for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._window
        ]
        for key in stale:
            del self._hits[key]
