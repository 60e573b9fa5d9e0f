from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal

from ..adapters.asset_adapters import (
    AptosIndexerBalanceAdapter,
    AptosIndexerFlowAdapter,
    BaseBalanceAdapter,
    BaseFlowAdapter,
)
from ..adapters.catalogue_adapters import BaseCatalogueAdapter, CoinGeckoCatalogueAdapter
from ..adapters.price_adapters import PRICE_ADAPTERS
from ..adapters.price_adapters.base import BasePriceAdapter
from ..domain import (
    AssetBalance,
    BalanceSnapshots,
    FlowMap,
    HistoricalDataPoint,
    PriceSeries,
    ResolvedAsset,
    Timeframe,
    window_dates,
)
from ..settings import HistorySettings
from ..state import AppState


@dataclass
class PipelineAdapters:
    """External collaborators used by one history request."""

    balances: BaseBalanceAdapter
    flows: BaseFlowAdapter
    catalogue: BaseCatalogueAdapter
    prices: list[BasePriceAdapter]

    @classmethod
    def default(cls, settings: HistorySettings) -> "PipelineAdapters":
        return cls(
            balances=AptosIndexerBalanceAdapter(settings),
            flows=AptosIndexerFlowAdapter(settings),
            catalogue=CoinGeckoCatalogueAdapter(settings),
            prices=[AdapterClass(settings) for AdapterClass in PRICE_ADAPTERS],
        )


@dataclass
class PipelineContext:
    state: AppState
    address: str
    timeframe: Timeframe
    adapters: PipelineAdapters
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    balances: list[AssetBalance] | None = None
    assets: list[ResolvedAsset] | None = None
    price_series: dict[str, PriceSeries] = field(default_factory=dict)
    live_prices: dict[str, Decimal] = field(default_factory=dict)
    flows: FlowMap = field(default_factory=dict)
    snapshots: BalanceSnapshots | None = None
    series: list[HistoricalDataPoint] | None = None

    def __post_init__(self) -> None:
        if self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=timezone.utc)
        self.now = self.now.astimezone(timezone.utc)
        self.dates: list[date] = window_dates(self.today, self.timeframe.days)

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def window_start(self) -> datetime:
        """Midnight UTC of the first day in the window."""
        return datetime.combine(self.dates[0], time.min, tzinfo=timezone.utc)

    @property
    def window_end(self) -> datetime:
        return self.now

    @property
    def balances_required(self) -> list[AssetBalance]:
        if self.balances is None:
            raise RuntimeError(
                "Balances have not been set. Ensure collect_assets() is called before accessing this property."
            )
        return self.balances

    @property
    def assets_required(self) -> list[ResolvedAsset]:
        if self.assets is None:
            raise RuntimeError(
                "Resolved assets have not been set. Ensure collect_assets() is called before accessing this property."
            )
        return self.assets

    @property
    def series_required(self) -> list[HistoricalDataPoint]:
        if self.series is None:
            raise RuntimeError(
                "Series has not been set. Ensure build_series() is called before accessing this property."
            )
        return self.series
