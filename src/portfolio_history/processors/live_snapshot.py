from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from ..domain import HistoricalDataPoint, round_usd
from .valuation import PriceLookup

logger = logging.getLogger(__name__)


def price_deviation_percentage(reference_price: Decimal, actual_price: Decimal) -> Decimal:
    """Absolute percentage deviation of ``reference_price`` from ``actual_price``.

    Raises:
        ValueError: If actual_price is zero
    """
    if actual_price == 0:
        raise ValueError("actual_price cannot be zero")
    return abs((reference_price - actual_price) / actual_price * 100)


def is_confident_anchor_price(
    live_price: Decimal | None,
    reference_price: Decimal | None,
    max_deviation_percentage: float,
) -> bool:
    """A live anchor price is trusted when positive and, if a historical
    reference exists, within ``max_deviation_percentage`` of it."""
    if live_price is None or live_price <= 0:
        return False
    if reference_price is None or reference_price <= 0:
        return True
    deviation = price_deviation_percentage(reference_price, live_price)
    if deviation > Decimal(str(max_deviation_percentage)):
        logger.warning(
            "Live anchor price %s deviates %.2f%% from historical %s; ignoring",
            live_price,
            deviation,
            reference_price,
        )
        return False
    return True


def inject_live_snapshot(
    series: Sequence[HistoricalDataPoint],
    today: date,
    balances: Mapping[str, Decimal],
    live_prices: Mapping[str, Decimal],
    lookup: PriceLookup,
    *,
    anchor_feed_id: str,
    max_deviation_percentage: float,
) -> list[HistoricalDataPoint]:
    """Replace (or append) today's point with a live valuation.

    Only applied when the anchor asset's live price is confidently known;
    otherwise the series is returned unchanged. Assets without a live price
    keep their historical price for today.
    """
    result = list(series)
    anchor_price = live_prices.get(anchor_feed_id)
    reference = lookup.historical(anchor_feed_id, today)
    if not is_confident_anchor_price(anchor_price, reference, max_deviation_percentage):
        logger.info("Live anchor price unavailable; keeping historical value for %s", today)
        return result

    total = Decimal(0)
    for feed_id, balance in balances.items():
        if not balance:
            continue
        price = live_prices.get(feed_id)
        if price is None:
            price = lookup.resolve(feed_id, today)
        total += balance * price
    point = HistoricalDataPoint(date=today, value_usd=round_usd(total))

    for idx, existing in enumerate(result):
        if existing.date == today:
            logger.info(
                "Live snapshot for %s: $%s (historical $%s)",
                today,
                point.value_usd,
                existing.value_usd,
            )
            result[idx] = point
            return result

    if result and result[-1].date > today:
        logger.warning("Series extends past %s; live snapshot not appended", today)
        return result

    logger.info("Live snapshot appended for %s: $%s", today, point.value_usd)
    result.append(point)
    return result
