from __future__ import annotations

import bisect
import logging
from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from ..domain import BalanceSnapshots, HistoricalDataPoint, PriceSeries, round_usd

logger = logging.getLogger(__name__)


class PriceLookup:
    """Deterministic per-day price resolution.

    Order: exact price for the day, then the nearest earlier day in the
    series (never a later one), then the out-of-band base price, then zero.
    """

    def __init__(
        self,
        series: Mapping[str, PriceSeries],
        base_prices: Mapping[str, Decimal] | None = None,
    ):
        self._prices = {feed_id: dict(s.prices) for feed_id, s in series.items()}
        self._sorted_dates = {
            feed_id: sorted(prices) for feed_id, prices in self._prices.items()
        }
        self._base_prices = dict(base_prices or {})

    def historical(self, price_feed_id: str, day: date) -> Decimal | None:
        """Exact or nearest-earlier price from the daily series only."""
        prices = self._prices.get(price_feed_id)
        if not prices:
            return None
        exact = prices.get(day)
        if exact is not None:
            return exact
        dates = self._sorted_dates[price_feed_id]
        idx = bisect.bisect_right(dates, day)
        if idx == 0:
            return None
        return prices[dates[idx - 1]]

    def resolve(self, price_feed_id: str, day: date) -> Decimal:
        price = self.historical(price_feed_id, day)
        if price is not None:
            return price
        base = self._base_prices.get(price_feed_id)
        if base is not None:
            logger.debug("%s %s: using base price %s", price_feed_id, day, base)
            return base
        logger.debug("%s %s: no price available, valuing at 0", price_feed_id, day)
        return Decimal(0)


def value_balances(
    balances: Mapping[str, Decimal], day: date, lookup: PriceLookup
) -> Decimal:
    """Unrounded USD value of ``balances`` priced for ``day``."""
    total = Decimal(0)
    for feed_id, balance in balances.items():
        if not balance:
            continue
        total += balance * lookup.resolve(feed_id, day)
    return total


def value_series(
    snapshots: BalanceSnapshots,
    dates: Sequence[date],
    lookup: PriceLookup,
) -> list[HistoricalDataPoint]:
    """Price every end-of-day snapshot; one point per date, rounded to cents."""
    series: list[HistoricalDataPoint] = []
    for day in dates:
        value = round_usd(value_balances(snapshots.get(day, {}), day, lookup))
        series.append(HistoricalDataPoint(date=day, value_usd=value))
        logger.debug("%s: $%s", day.isoformat(), value)
    return series
