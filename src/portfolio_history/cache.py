"""Bounded TTL cache for historical price series."""

from __future__ import annotations

import time
from collections import OrderedDict
from copy import deepcopy
from typing import Callable

from .domain import PriceSeries

CacheKey = tuple[str, int]


class PriceCache:
    """Price series cache keyed by ``(price_feed_id, day_range)``.

    Entries expire after ``ttl_seconds``; once ``max_entries`` is reached the
    least recently used entry is evicted. Only non-empty series are stored so a
    transient provider failure is never cached. Lookups return copies.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 512,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, tuple[float, PriceSeries]] = OrderedDict()

    def get(self, price_feed_id: str, days: int) -> PriceSeries | None:
        key = (price_feed_id, days)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, series = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return deepcopy(series)

    def put(self, price_feed_id: str, days: int, series: PriceSeries) -> None:
        if not series:
            return
        key = (price_feed_id, days)
        self._entries[key] = (self._clock() + self._ttl, deepcopy(series))
        self._entries.move_to_end(key)
        self._evict()

    def _evict(self) -> None:
        now = self._clock()
        for key in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
