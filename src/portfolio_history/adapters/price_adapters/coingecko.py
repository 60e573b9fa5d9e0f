from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TypedDict, cast

import requests

from ...constants import STABLE_FEED_ID
from ...domain import PricePoint, PriceSeries
from ...settings import HistorySettings
from .base import BasePriceAdapter, to_price

logger = logging.getLogger(__name__)


class MarketChartResponse(TypedDict, total=False):
    """Subset of /coins/{id}/market_chart used here."""

    prices: list[list[float]]  # [timestamp_ms, price]


# {coin_id: {"usd": price}}
SimplePriceResponse = dict[str, dict[str, float]]


def parse_market_chart(price_feed_id: str, payload: MarketChartResponse) -> PriceSeries:
    """Convert a market_chart payload to a daily series keyed by UTC date."""
    points: list[PricePoint] = []
    raw_prices = payload.get("prices") if isinstance(payload, dict) else None
    for entry in raw_prices or []:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            continue
        price = to_price(entry[1])
        if price is None:
            continue
        try:
            day = datetime.fromtimestamp(float(entry[0]) / 1000, tz=timezone.utc).date()
        except (TypeError, ValueError, OverflowError):
            continue
        points.append(PricePoint(price_feed_id=price_feed_id, date=day, price_usd=price))
    return PriceSeries.from_points(price_feed_id, "coingecko", points)


class CoinGeckoAdapter(BasePriceAdapter):
    """Primary market-data provider: CoinGecko daily market charts and spot prices."""

    def __init__(self, config: HistorySettings):
        super().__init__(config)
        self.api_base_url = config.coingecko_api_url.rstrip("/")

    @property
    def adapter_name(self) -> str:
        return "coingecko"

    def supports(self, price_feed_id: str) -> bool:
        return price_feed_id != STABLE_FEED_ID

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self.config.coingecko_api_key is not None:
            headers["x-cg-demo-api-key"] = self.config.coingecko_api_key.get_secret_value()
        return headers

    async def fetch_daily_series(
        self, price_feed_id: str, days: int, *, end_date: date
    ) -> PriceSeries | None:
        url = f"{self.api_base_url}/coins/{price_feed_id}/market_chart"
        try:
            payload = cast(
                MarketChartResponse,
                await self._get_json(
                    url,
                    params={"vs_currency": "usd", "days": days, "interval": "daily"},
                ),
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(
                "CoinGecko market_chart unavailable for %s (%d days): %s",
                price_feed_id,
                days,
                e,
            )
            return None

        series = parse_market_chart(price_feed_id, payload)
        if not series:
            logger.warning("CoinGecko returned no prices for %s", price_feed_id)
            return None
        logger.debug("%s: loaded %d price points from CoinGecko", price_feed_id, len(series))
        return series

    async def fetch_live_price(self, price_feed_id: str) -> Decimal | None:
        url = f"{self.api_base_url}/simple/price"
        try:
            payload = cast(
                SimplePriceResponse,
                await self._get_json(
                    url, params={"ids": price_feed_id, "vs_currencies": "usd"}
                ),
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("CoinGecko live price unavailable for %s: %s", price_feed_id, e)
            return None

        entry = payload.get(price_feed_id) if isinstance(payload, dict) else None
        price = to_price(entry.get("usd")) if isinstance(entry, dict) else None
        if price is None:
            logger.warning("CoinGecko live price missing for %s", price_feed_id)
        return price
