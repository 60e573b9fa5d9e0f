"""Domain models for the portfolio history engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from ..constants import TIMEFRAME_DAYS

CENT = Decimal("0.01")

# date -> price_feed_id -> net delta (human units)
FlowMap = dict[date, dict[str, Decimal]]
# date -> price_feed_id -> end-of-day balance
BalanceSnapshots = dict[date, dict[str, Decimal]]


class Timeframe(str, Enum):
    D7 = "7D"
    D30 = "30D"
    D90 = "90D"

    @property
    def days(self) -> int:
        return TIMEFRAME_DAYS[self.value]


class AssetClass(str, Enum):
    NATIVE = "native"
    STABLE = "stable"
    OTHER = "other"


@dataclass(frozen=True)
class AssetBalance:
    """Current balance of one on-chain asset type held by the wallet."""

    asset_type: str
    symbol: str
    decimals: int
    current_balance: Decimal

    @property
    def contract_address(self) -> str:
        """Address part of the asset type (everything before the first ``::``)."""
        return self.asset_type.split("::", 1)[0].lower()


@dataclass(frozen=True)
class ResolvedAsset:
    """A deduplicated, priceable holding.

    ``asset_types`` lists the on-chain types whose balance is represented
    here; flows are tracked for these types only.
    """

    price_feed_id: str
    symbol: str
    balance: Decimal
    asset_class: AssetClass
    asset_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class FlowEvent:
    """A single signed balance change reported by the flow source."""

    asset_type: str
    timestamp: datetime
    raw_amount: int


@dataclass(frozen=True)
class DailyFlow:
    date: date
    price_feed_id: str
    net_delta: Decimal


@dataclass(frozen=True)
class PricePoint:
    price_feed_id: str
    date: date
    price_usd: Decimal


@dataclass
class PriceSeries:
    """Sparse daily USD price series for one price feed."""

    price_feed_id: str
    source: str
    prices: dict[date, Decimal] = field(default_factory=dict)

    @classmethod
    def from_points(
        cls, price_feed_id: str, source: str, points: Iterable[PricePoint]
    ) -> "PriceSeries":
        series = cls(price_feed_id=price_feed_id, source=source)
        for point in points:
            # later points for the same day win (latest observation)
            series.prices[point.date] = point.price_usd
        return series

    def __len__(self) -> int:
        return len(self.prices)

    def __bool__(self) -> bool:
        return bool(self.prices)


@dataclass(frozen=True)
class HistoricalDataPoint:
    date: date
    value_usd: Decimal

    def to_dict(self) -> dict[str, object]:
        return {"date": self.date.isoformat(), "value": float(self.value_usd)}


def round_usd(value: Decimal) -> Decimal:
    """Round a USD amount to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def window_dates(today: date, days: int) -> list[date]:
    """One calendar day per point, ascending, ending with ``today``."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


__all__ = [
    "AssetBalance",
    "AssetClass",
    "BalanceSnapshots",
    "DailyFlow",
    "FlowEvent",
    "FlowMap",
    "HistoricalDataPoint",
    "PricePoint",
    "PriceSeries",
    "ResolvedAsset",
    "Timeframe",
    "round_usd",
    "window_dates",
]
