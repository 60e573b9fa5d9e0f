"""Shared fixtures: settings, state and in-memory collaborators.

The fakes implement the adapter interfaces so pipeline and API tests run
without any network access.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Sequence

import pytest

from portfolio_history.adapters.asset_adapters.base import (
    BalanceSourceError,
    BaseBalanceAdapter,
    BaseFlowAdapter,
)
from portfolio_history.adapters.catalogue_adapters.base import BaseCatalogueAdapter
from portfolio_history.adapters.price_adapters.base import BasePriceAdapter
from portfolio_history.constants import APT_COIN_TYPE
from portfolio_history.domain import AssetBalance, FlowEvent, PriceSeries, window_dates
from portfolio_history.pipeline import PipelineAdapters
from portfolio_history.settings import HistorySettings
from portfolio_history.state import AppState

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
TODAY = NOW.date()
WALLET = "0x" + "ab" * 32


class FakeBalanceAdapter(BaseBalanceAdapter):
    def __init__(
        self,
        config: HistorySettings,
        balances: list[AssetBalance] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        super().__init__(config)
        self.balances = balances or []
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    @property
    def adapter_name(self) -> str:
        return "fake_balances"

    async def fetch_balances(self, address: str) -> list[AssetBalance]:
        self.calls.append(address)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.balances)


class FakeFlowAdapter(BaseFlowAdapter):
    def __init__(
        self,
        config: HistorySettings,
        events: list[FlowEvent] | None = None,
        unavailable: bool = False,
        delay: float = 0.0,
    ):
        super().__init__(config)
        self.events = events or []
        self.unavailable = unavailable
        self.delay = delay
        self.calls: list[tuple[str, list[str], datetime, datetime]] = []

    @property
    def adapter_name(self) -> str:
        return "fake_flows"

    async def fetch_flows(
        self,
        address: str,
        asset_types: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> list[FlowEvent] | None:
        self.calls.append((address, list(asset_types), start, end))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.unavailable:
            return None
        return list(self.events)


class FakeCatalogueAdapter(BaseCatalogueAdapter):
    def __init__(self, config: HistorySettings, mapping: dict[str, str] | None = None):
        super().__init__(config)
        self.mapping = mapping or {}
        self.calls = 0

    @property
    def adapter_name(self) -> str:
        return "fake_catalogue"

    async def fetch_platform_map(self) -> dict[str, str]:
        self.calls += 1
        return dict(self.mapping)


class FakePriceAdapter(BasePriceAdapter):
    """Serves fixed daily prices and live prices per feed id."""

    def __init__(
        self,
        config: HistorySettings,
        name: str = "fake_prices",
        daily: dict[str, dict[date, Decimal]] | None = None,
        live: dict[str, Decimal] | None = None,
        supported: set[str] | None = None,
        delay: float = 0.0,
    ):
        super().__init__(config)
        self.name = name
        self.daily = daily or {}
        self.live = live or {}
        self.supported = supported
        self.delay = delay
        self.series_calls: list[tuple[str, int, date]] = []
        self.live_calls: list[str] = []

    @property
    def adapter_name(self) -> str:
        return self.name

    def supports(self, price_feed_id: str) -> bool:
        return self.supported is None or price_feed_id in self.supported

    async def fetch_daily_series(
        self, price_feed_id: str, days: int, *, end_date: date
    ) -> PriceSeries | None:
        self.series_calls.append((price_feed_id, days, end_date))
        if self.delay:
            await asyncio.sleep(self.delay)
        prices = self.daily.get(price_feed_id)
        if not prices:
            return None
        return PriceSeries(price_feed_id=price_feed_id, source=self.name, prices=dict(prices))

    async def fetch_live_price(self, price_feed_id: str) -> Decimal | None:
        self.live_calls.append(price_feed_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.live.get(price_feed_id)


def _apt_balance(amount: str | int) -> AssetBalance:
    return AssetBalance(
        asset_type=APT_COIN_TYPE,
        symbol="APT",
        decimals=8,
        current_balance=Decimal(amount),
    )


def _flat_prices(price: str, days: int = 8, end: date = TODAY) -> dict[date, Decimal]:
    return {day: Decimal(price) for day in window_dates(end, days)}


@pytest.fixture
def now() -> datetime:
    """Fixed reference time: 2024-06-15 12:00 UTC."""
    return NOW


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def apt_balance():
    return _apt_balance


@pytest.fixture
def flat_prices():
    return _flat_prices


@pytest.fixture
def settings() -> HistorySettings:
    return HistorySettings(
        provider_max_tries=1,
        provider_timeout_seconds=1.0,
        global_timeout_seconds=5.0,
        use_flows=True,
        live_snapshot_enabled=True,
    )


@pytest.fixture
def state(settings: HistorySettings) -> AppState:
    return AppState.from_settings(settings, logging.getLogger("test"))


@pytest.fixture
def make_adapters(settings: HistorySettings):
    """Factory assembling PipelineAdapters from fakes with sensible defaults."""

    def _make(
        balances: list[AssetBalance] | None = None,
        *,
        balance_error: Exception | None = None,
        balance_delay: float = 0.0,
        events: list[FlowEvent] | None = None,
        flows_unavailable: bool = False,
        catalogue: dict[str, str] | None = None,
        prices: list[BasePriceAdapter] | None = None,
    ) -> PipelineAdapters:
        return PipelineAdapters(
            balances=FakeBalanceAdapter(
                settings, balances, error=balance_error, delay=balance_delay
            ),
            flows=FakeFlowAdapter(settings, events, unavailable=flows_unavailable),
            catalogue=FakeCatalogueAdapter(settings, catalogue),
            prices=prices if prices is not None else [FakePriceAdapter(settings)],
        )

    return _make


@pytest.fixture
def fake_price_adapter(settings: HistorySettings):
    def _make(**kwargs) -> FakePriceAdapter:
        return FakePriceAdapter(settings, **kwargs)

    return _make


@pytest.fixture
def balance_source_error() -> BalanceSourceError:
    return BalanceSourceError("Failed to fetch current token balances")
