"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .cache import PriceCache
from .settings import HistorySettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed through the pipeline to avoid global state and enable testing.
    The price cache is the only object shared across requests.
    """

    settings: HistorySettings
    logger: logging.Logger
    price_cache: PriceCache = field(default_factory=PriceCache)

    @classmethod
    def from_settings(
        cls, settings: HistorySettings, logger: logging.Logger
    ) -> "AppState":
        return cls(
            settings=settings,
            logger=logger,
            price_cache=PriceCache(
                ttl_seconds=settings.price_cache_ttl_seconds,
                max_entries=settings.price_cache_max_entries,
            ),
        )
