"""Balance reconstruction, valuation and live snapshot injection."""

from __future__ import annotations

from ..constants import NATIVE_FEED_ID
from ..processors import (
    PriceLookup,
    current_balances,
    inject_live_snapshot,
    reconstruct_balances,
    value_series,
)
from .context import PipelineContext


async def build_series(ctx: PipelineContext) -> None:
    """Compute the daily USD series from balances, flows and prices.

    Sets snapshots and the final series in the context.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    current = current_balances(ctx.assets_required)
    ctx.snapshots = reconstruct_balances(current, ctx.flows, ctx.dates)

    lookup = PriceLookup(ctx.price_series, base_prices=ctx.live_prices)
    series = value_series(ctx.snapshots, ctx.dates, lookup)

    if s.live_snapshot_enabled:
        series = inject_live_snapshot(
            series,
            ctx.today,
            current,
            ctx.live_prices,
            lookup,
            anchor_feed_id=NATIVE_FEED_ID,
            max_deviation_percentage=s.live_price_max_deviation_percentage,
        )

    log.info("Generated %d historical data points", len(series))
    ctx.series = series
