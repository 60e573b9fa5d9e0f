from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, TypedDict, cast

import requests

from ...constants import NATIVE_FEED_ID
from ...domain import PricePoint, PriceSeries
from ...settings import HistorySettings
from .base import BasePriceAdapter, to_price

logger = logging.getLogger(__name__)

KLINE_OPEN_TIME = 0
KLINE_CLOSE = 4

# One row per candle: [open_time_ms, open, high, low, close, volume, close_time_ms, ...]
KlinesResponse = list[list[Any]]


class TickerPriceResponse(TypedDict, total=False):
    """Payload of /ticker/price for a single symbol."""

    symbol: str
    price: str


def parse_klines(price_feed_id: str, payload: KlinesResponse) -> PriceSeries:
    """Convert daily klines to a series of close prices keyed by the candle's UTC open date."""
    points: list[PricePoint] = []
    for kline in payload if isinstance(payload, list) else []:
        if not isinstance(kline, list) or len(kline) <= KLINE_CLOSE:
            continue
        price = to_price(kline[KLINE_CLOSE])
        if price is None:
            continue
        try:
            day = datetime.fromtimestamp(
                float(kline[KLINE_OPEN_TIME]) / 1000, tz=timezone.utc
            ).date()
        except (TypeError, ValueError, OverflowError):
            continue
        points.append(PricePoint(price_feed_id=price_feed_id, date=day, price_usd=price))
    return PriceSeries.from_points(price_feed_id, "binance", points)


class BinanceAdapter(BasePriceAdapter):
    """Secondary exchange fallback for the native coin.

    Daily candle closes stand in for daily prices and the USDT quote is
    treated as USD.
    """

    def __init__(self, config: HistorySettings):
        super().__init__(config)
        self.api_base_url = config.binance_api_url.rstrip("/")
        self.symbol = config.binance_symbol

    @property
    def adapter_name(self) -> str:
        return "binance"

    def supports(self, price_feed_id: str) -> bool:
        return price_feed_id == NATIVE_FEED_ID

    async def fetch_daily_series(
        self, price_feed_id: str, days: int, *, end_date: date
    ) -> PriceSeries | None:
        if not self.supports(price_feed_id):
            return None
        end_time = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
        try:
            payload = cast(
                KlinesResponse,
                await self._get_json(
                    f"{self.api_base_url}/klines",
                    params={
                        "symbol": self.symbol,
                        "interval": "1d",
                        "limit": days,
                        "endTime": int(end_time.timestamp() * 1000) - 1,
                    },
                ),
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("Binance klines unavailable for %s: %s", self.symbol, e)
            return None

        series = parse_klines(price_feed_id, payload)
        if not series:
            logger.warning("Binance returned no klines for %s", self.symbol)
            return None
        logger.debug("%s: loaded %d candles from Binance", price_feed_id, len(series))
        return series

    async def fetch_live_price(self, price_feed_id: str) -> Decimal | None:
        if not self.supports(price_feed_id):
            return None
        try:
            payload = cast(
                TickerPriceResponse,
                await self._get_json(
                    f"{self.api_base_url}/ticker/price", params={"symbol": self.symbol}
                ),
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("Binance ticker unavailable for %s: %s", self.symbol, e)
            return None
        return to_price(payload.get("price")) if isinstance(payload, dict) else None
