from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from ...domain import AssetBalance, FlowEvent
from ...settings import HistorySettings


class BalanceSourceError(Exception):
    """Raised when current holdings cannot be fetched. Fatal for a request."""

    pass


class BaseBalanceAdapter(ABC):
    """Abstract base class for current-balance sources."""

    def __init__(self, config: HistorySettings):
        """Initialize the adapter with configuration.

        Args:
            config: Application settings
        """
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_balances(self, address: str) -> list[AssetBalance]:
        """Fetch current balances for ``address``.

        Raises:
            BalanceSourceError: If holdings cannot be fetched at all.
        """
        ...


class BaseFlowAdapter(ABC):
    """Abstract base class for balance-changing activity sources."""

    def __init__(self, config: HistorySettings):
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    @abstractmethod
    async def fetch_flows(
        self,
        address: str,
        asset_types: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> list[FlowEvent] | None:
        """Fetch signed balance changes, or ``None`` when unavailable."""
        ...
