from datetime import datetime, timezone
from decimal import Decimal

import pytest

from portfolio_history.constants import APT_COIN_TYPE, NATIVE_FEED_ID
from portfolio_history.domain import AssetClass, FlowEvent, ResolvedAsset, Timeframe
from portfolio_history.pipeline.context import PipelineContext
from portfolio_history.pipeline.flows import collect_flows


@pytest.fixture
def ctx_factory(state, make_adapters, apt_balance, wallet, now):
    def _make(**adapter_kwargs) -> PipelineContext:
        balance = apt_balance(100)
        ctx = PipelineContext(
            state=state,
            address=wallet,
            timeframe=Timeframe.D7,
            adapters=make_adapters([balance], **adapter_kwargs),
            now=now,
        )
        ctx.balances = [balance]
        ctx.assets = [
            ResolvedAsset(
                price_feed_id=NATIVE_FEED_ID,
                symbol="APT",
                balance=Decimal("100"),
                asset_class=AssetClass.NATIVE,
                asset_types=(APT_COIN_TYPE,),
            )
        ]
        return ctx

    return _make


@pytest.mark.asyncio
async def test_disabled_flows_use_flat_mode(ctx_factory):
    ctx = ctx_factory()
    ctx.state.settings.use_flows = False

    await collect_flows(ctx)

    assert ctx.flows == {}
    assert ctx.adapters.flows.calls == []


@pytest.mark.asyncio
async def test_unavailable_flows_use_flat_mode(ctx_factory):
    ctx = ctx_factory(flows_unavailable=True)

    await collect_flows(ctx)

    assert ctx.flows == {}
    assert len(ctx.adapters.flows.calls) == 1


@pytest.mark.asyncio
async def test_flow_timeout_uses_flat_mode(ctx_factory):
    ctx = ctx_factory()
    ctx.state.settings.provider_timeout_seconds = 0.05
    ctx.adapters.flows.delay = 0.5

    await collect_flows(ctx)

    assert ctx.flows == {}


@pytest.mark.asyncio
async def test_events_aggregated_per_day(ctx_factory, today):
    noon = datetime(today.year, today.month, today.day, 12, tzinfo=timezone.utc)
    events = [
        FlowEvent(asset_type=APT_COIN_TYPE, timestamp=noon, raw_amount=5 * 10**8),
        FlowEvent(asset_type=APT_COIN_TYPE, timestamp=noon, raw_amount=-2 * 10**8),
    ]
    ctx = ctx_factory(events=events)

    await collect_flows(ctx)

    assert ctx.flows == {today: {NATIVE_FEED_ID: Decimal("3")}}
