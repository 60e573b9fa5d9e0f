from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from ...clients.http import get_json
from ...domain import PriceSeries
from ...settings import HistorySettings


def to_price(value: Any) -> Decimal | None:
    """Parse a provider price into a positive Decimal, or ``None``."""
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


class BasePriceAdapter(ABC):
    """Abstract base class for price providers.

    Every provider answers the same two questions for a price feed id: a
    sparse daily USD series over the last ``days`` days and the current USD
    price. ``None`` is the explicit "no data" result; providers never raise
    for upstream failures.
    """

    def __init__(self, config: HistorySettings):
        """Initialize the adapter with configuration."""
        self.config = config

    @property
    @abstractmethod
    def adapter_name(self) -> str:
        """Return the name of this adapter."""
        ...

    def supports(self, price_feed_id: str) -> bool:
        """Whether this provider can price ``price_feed_id`` at all."""
        return True

    @abstractmethod
    async def fetch_daily_series(
        self, price_feed_id: str, days: int, *, end_date: date
    ) -> PriceSeries | None:
        """Fetch a daily price series covering ``days`` days up to ``end_date``."""
        ...

    @abstractmethod
    async def fetch_live_price(self, price_feed_id: str) -> Decimal | None:
        """Fetch the current USD price."""
        ...

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON document, retrying on transport errors, 429 and 5xx."""
        return await get_json(
            url,
            params=params,
            headers=self._headers(),
            timeout=self.config.provider_timeout_seconds,
            max_tries=self.config.provider_max_tries,
        )
