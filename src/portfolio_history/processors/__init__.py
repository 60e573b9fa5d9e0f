from __future__ import annotations

from .asset_resolver import classify_asset, current_balances, needs_catalogue, resolve_assets
from .balance_reconstructor import reconstruct_balances, start_balances, total_flows
from .flow_ledger import aggregate_flows, to_daily_flows, tracked_asset_types
from .live_snapshot import inject_live_snapshot, is_confident_anchor_price
from .valuation import PriceLookup, value_balances, value_series

__all__ = [
    "PriceLookup",
    "aggregate_flows",
    "classify_asset",
    "current_balances",
    "inject_live_snapshot",
    "is_confident_anchor_price",
    "needs_catalogue",
    "reconstruct_balances",
    "resolve_assets",
    "start_balances",
    "to_daily_flows",
    "total_flows",
    "tracked_asset_types",
    "value_balances",
    "value_series",
]
