from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from ..domain import DailyFlow, FlowEvent, FlowMap, ResolvedAsset
from ..units import clamp_decimals

logger = logging.getLogger(__name__)


def tracked_asset_types(assets: Iterable[ResolvedAsset]) -> list[str]:
    """Asset types whose activity should be fetched, sorted and unique."""
    return sorted({asset_type for asset in assets for asset_type in asset.asset_types})


def to_daily_flows(
    events: Iterable[FlowEvent],
    assets: Iterable[ResolvedAsset],
    decimals_by_type: Mapping[str, int],
) -> list[DailyFlow]:
    """Convert raw flow events to per-feed daily flows in human units.

    Events for untracked asset types are ignored.
    """
    feed_by_type = {
        asset_type: asset.price_feed_id
        for asset in assets
        for asset_type in asset.asset_types
    }
    flows: list[DailyFlow] = []
    for event in events:
        feed_id = feed_by_type.get(event.asset_type)
        if feed_id is None:
            continue
        decimals = clamp_decimals(decimals_by_type.get(event.asset_type))
        flows.append(
            DailyFlow(
                date=event.timestamp.date(),
                price_feed_id=feed_id,
                net_delta=Decimal(event.raw_amount).scaleb(-decimals),
            )
        )
    return flows


def aggregate_flows(flows: Iterable[DailyFlow], dates: Sequence[date]) -> FlowMap:
    """Accumulate net deltas per (date, feed id) for dates inside the window."""
    window = set(dates)
    ledger: FlowMap = {}
    skipped = 0
    for flow in flows:
        if flow.date not in window:
            skipped += 1
            continue
        day = ledger.setdefault(flow.date, {})
        day[flow.price_feed_id] = day.get(flow.price_feed_id, Decimal(0)) + flow.net_delta

    if skipped:
        logger.debug("Ignored %d flows outside the requested window", skipped)
    return ledger
