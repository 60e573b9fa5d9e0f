from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

from ..domain import BalanceSnapshots, FlowMap


def total_flows(flow_map: FlowMap) -> dict[str, Decimal]:
    """Sum of net deltas per feed id over every date in the map."""
    totals: dict[str, Decimal] = {}
    for day_flows in flow_map.values():
        for feed_id, delta in day_flows.items():
            totals[feed_id] = totals.get(feed_id, Decimal(0)) + delta
    return totals


def start_balances(
    current: Mapping[str, Decimal], flow_map: FlowMap
) -> dict[str, Decimal]:
    """Balance before the first window day: ``current - total flow``."""
    totals = total_flows(flow_map)
    return {
        feed_id: balance - totals.get(feed_id, Decimal(0))
        for feed_id, balance in current.items()
    }


def reconstruct_balances(
    current: Mapping[str, Decimal],
    flow_map: FlowMap,
    dates: Sequence[date],
) -> BalanceSnapshots:
    """Roll balances forward from the start of the window.

    Each day's flows are applied before the snapshot is recorded, so a
    snapshot is the end-of-day balance. Assets without flows stay at their
    current balance on every day; an empty ``flow_map`` is flat mode.

    Raises:
        ValueError: If ``dates`` is not strictly ascending.
    """
    if any(later <= earlier for earlier, later in zip(dates, dates[1:])):
        raise ValueError("dates must be strictly ascending")

    running = start_balances(current, flow_map)
    snapshots: BalanceSnapshots = {}
    for day in dates:
        for feed_id, delta in flow_map.get(day, {}).items():
            if feed_id in running:
                running[feed_id] += delta
        snapshots[day] = dict(running)
    return snapshots
