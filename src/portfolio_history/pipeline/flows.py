"""Flow collection for balance reconstruction."""

from __future__ import annotations

import asyncio

from ..processors import aggregate_flows, to_daily_flows, tracked_asset_types
from .context import PipelineContext


async def collect_flows(ctx: PipelineContext) -> None:
    """Fetch balance-changing activity and aggregate it per day and asset.

    Falls back to flat mode (empty flow map) when flows are disabled,
    unavailable, or time out.
    """
    s = ctx.state.settings
    log = ctx.state.logger
    assets = ctx.assets_required
    adapter = ctx.adapters.flows

    if not s.use_flows:
        log.info("Flow reconstruction disabled; using flat balances")
        ctx.flows = {}
        return

    asset_types = tracked_asset_types(assets)
    if not asset_types:
        ctx.flows = {}
        return

    log.info(
        "Fetching activity for %d asset types (%s -> %s)...",
        len(asset_types),
        ctx.window_start.isoformat(),
        ctx.window_end.isoformat(),
    )
    events = None
    try:
        async with asyncio.timeout(s.provider_timeout_seconds):
            events = await adapter.fetch_flows(
                ctx.address, asset_types, ctx.window_start, ctx.window_end
            )
    except TimeoutError:
        log.warning(
            "Flow source '%s' timed out after %.1fs",
            adapter.adapter_name,
            s.provider_timeout_seconds,
        )
    except Exception as e:
        log.warning("Flow source '%s' failed: %s", adapter.adapter_name, e)

    if events is None:
        log.warning("Flow data unavailable; using flat balances")
        ctx.flows = {}
        return

    decimals_by_type = {b.asset_type: b.decimals for b in ctx.balances_required}
    ctx.flows = aggregate_flows(
        to_daily_flows(events, assets, decimals_by_type), ctx.dates
    )
    log.debug("Aggregated flows on %d days", len(ctx.flows))
