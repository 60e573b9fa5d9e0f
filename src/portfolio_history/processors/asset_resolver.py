from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Mapping

from ..constants import NATIVE_ASSET_TYPES, NATIVE_FEED_ID, STABLE_FEED_ID, STABLE_SYMBOLS
from ..domain import AssetBalance, AssetClass, ResolvedAsset

logger = logging.getLogger(__name__)

_NATIVE_TYPES_LOWER = frozenset(t.lower() for t in NATIVE_ASSET_TYPES)


def classify_asset(balance: AssetBalance) -> AssetClass:
    """Classify a balance entry as native coin, known stable or other.

    The native check is an exact match on the reserved coin types and takes
    precedence over the symbol-based stable check.
    """
    if balance.asset_type.lower() in _NATIVE_TYPES_LOWER:
        return AssetClass.NATIVE
    if balance.symbol.upper() in STABLE_SYMBOLS:
        return AssetClass.STABLE
    return AssetClass.OTHER


def needs_catalogue(balances: Iterable[AssetBalance]) -> bool:
    """True when some non-zero holding can only be priced via the catalogue."""
    return any(
        b.current_balance > 0 and classify_asset(b) is AssetClass.OTHER
        for b in balances
    )


def _feed_id_for(
    balance: AssetBalance, asset_class: AssetClass, platform_map: Mapping[str, str]
) -> str | None:
    if asset_class is AssetClass.NATIVE:
        return NATIVE_FEED_ID
    if asset_class is AssetClass.STABLE:
        return STABLE_FEED_ID
    return platform_map.get(balance.asset_type.lower()) or platform_map.get(
        balance.contract_address
    )


def resolve_assets(
    balances: Iterable[AssetBalance],
    platform_map: Mapping[str, str],
) -> list[ResolvedAsset]:
    """Resolve balances to price feeds and deduplicate by feed id.

    Args:
        balances: Current balance entries for the wallet.
        platform_map: Lower-cased contract identifier -> price feed id.

    Returns:
        One ResolvedAsset per price feed id, in first-seen order.

    Zero balances are dropped before resolution and entries without a price
    feed are dropped as unpriceable. Stable entries are summed; any other
    duplicate keeps the largest balance, since duplicates are the same claim
    surfaced by more than one balance-tracking mechanism. Every surviving
    on-chain type of a feed stays in ``asset_types`` so activity recorded
    under any of them is tracked.
    """
    resolved: dict[str, ResolvedAsset] = {}

    for balance in balances:
        if balance.current_balance <= 0:
            continue

        asset_class = classify_asset(balance)
        feed_id = _feed_id_for(balance, asset_class, platform_map)
        if feed_id is None:
            logger.debug(
                "Dropping unpriceable asset %s (%s)", balance.asset_type, balance.symbol
            )
            continue

        existing = resolved.get(feed_id)
        if existing is None:
            resolved[feed_id] = ResolvedAsset(
                price_feed_id=feed_id,
                symbol=balance.symbol,
                balance=balance.current_balance,
                asset_class=asset_class,
                asset_types=(balance.asset_type,),
            )
            continue

        asset_types = existing.asset_types
        if balance.asset_type not in asset_types:
            asset_types += (balance.asset_type,)

        if asset_class is AssetClass.STABLE:
            resolved[feed_id] = replace(
                existing,
                balance=existing.balance + balance.current_balance,
                asset_types=asset_types,
            )
        elif balance.current_balance > existing.balance:
            resolved[feed_id] = replace(
                existing,
                symbol=balance.symbol,
                balance=balance.current_balance,
                asset_types=asset_types,
            )
        else:
            resolved[feed_id] = replace(existing, asset_types=asset_types)

    assets = list(resolved.values())
    logger.info(
        "Selected %d assets: %s",
        len(assets),
        ", ".join(f"{a.symbol or a.price_feed_id}({a.balance:.4f})" for a in assets),
    )
    return assets


def current_balances(assets: Iterable[ResolvedAsset]) -> dict[str, Decimal]:
    return {asset.price_feed_id: asset.balance for asset in assets}
