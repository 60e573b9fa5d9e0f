from __future__ import annotations

from datetime import date
from decimal import Decimal

from ...constants import STABLE_FEED_ID
from ...domain import PricePoint, PriceSeries, window_dates
from .base import BasePriceAdapter

USD_PEG = Decimal(1)


class StableUsdAdapter(BasePriceAdapter):
    """Prices the stable USD class at a constant $1."""

    @property
    def adapter_name(self) -> str:
        return "stable_usd"

    def supports(self, price_feed_id: str) -> bool:
        return price_feed_id == STABLE_FEED_ID

    async def fetch_daily_series(
        self, price_feed_id: str, days: int, *, end_date: date
    ) -> PriceSeries | None:
        if not self.supports(price_feed_id):
            return None
        return PriceSeries.from_points(
            price_feed_id,
            self.adapter_name,
            (
                PricePoint(price_feed_id=price_feed_id, date=day, price_usd=USD_PEG)
                for day in window_dates(end_date, days)
            ),
        )

    async def fetch_live_price(self, price_feed_id: str) -> Decimal | None:
        return USD_PEG if self.supports(price_feed_id) else None
