from __future__ import annotations

from abc import ABC, abstractmethod

from ...settings import HistorySettings


class BaseCatalogueAdapter(ABC):
    """Maps chain contract addresses to price feed ids."""

    def __init__(self, config: HistorySettings):
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_platform_map(self) -> dict[str, str]:
        """Return ``{lower-cased contract identifier: price_feed_id}``.

        An empty map means the catalogue is unavailable.
        """
        ...
