from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Sequence

import requests

from ...clients.aptos_indexer import (
    AptosIndexerClient,
    FungibleAssetActivityResult,
    FungibleAssetBalanceResult,
    IndexerQueryError,
    IndexerRateLimitError,
)
from ...domain import AssetBalance, FlowEvent
from ...logger import get_logger
from ...settings import HistorySettings
from ...units import clamp_decimals, format_units, parse_signed_raw
from .base import BalanceSourceError, BaseBalanceAdapter, BaseFlowAdapter

logger = get_logger(__name__)

INDEXER_ERRORS = (
    requests.exceptions.RequestException,
    IndexerQueryError,
    IndexerRateLimitError,
    ValueError,
)


def _build_client(config: HistorySettings) -> AptosIndexerClient:
    return AptosIndexerClient(
        config.indexer_url_required,
        request_timeout=config.provider_timeout_seconds,
        max_tries=config.provider_max_tries,
        page_size=config.flow_page_size,
        max_pages=config.flow_max_pages,
    )


def parse_balance_row(row: FungibleAssetBalanceResult) -> AssetBalance | None:
    """Convert an indexer balance row into an AssetBalance.

    Rows without an asset type are dropped. Missing metadata falls back to an
    empty symbol and 8 decimals.
    """
    asset_type = str(row.get("asset_type") or "").strip()
    if not asset_type:
        return None
    metadata = row.get("metadata") or {}
    symbol = str(metadata.get("symbol") or "").strip().upper()
    decimals = clamp_decimals(metadata.get("decimals"))
    return AssetBalance(
        asset_type=asset_type,
        symbol=symbol,
        decimals=decimals,
        current_balance=format_units(row.get("amount"), decimals),
    )


def signed_activity_amount(row: FungibleAssetActivityResult) -> int | None:
    """Signed raw amount of an activity, or ``None`` if it moves no balance.

    Gas fees and withdrawals reduce the balance, deposits increase it. Failed
    transactions only pay gas. Other activity kinds count only when the
    indexer reports an explicitly signed amount.
    """
    activity_type = str(row.get("type") or "")
    raw = row.get("amount")
    amount = abs(parse_signed_raw(raw))
    if amount == 0:
        return None

    if row.get("is_gas_fee") or "GasFee" in activity_type:
        return -amount
    if row.get("is_transaction_success") is False:
        return None
    if "Withdraw" in activity_type:
        return -amount
    if "Deposit" in activity_type:
        return amount
    if str(raw).strip().startswith("-"):
        return -amount
    return None


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class AptosIndexerBalanceAdapter(BaseBalanceAdapter):
    """Current fungible asset balances from the Aptos indexer."""

    def __init__(self, config: HistorySettings, client: AptosIndexerClient | None = None):
        super().__init__(config)
        self._client = client or _build_client(config)

    @property
    def adapter_name(self) -> str:
        return "aptos_indexer_balances"

    async def fetch_balances(self, address: str) -> list[AssetBalance]:
        try:
            rows = await asyncio.to_thread(self._client.fetch_balances, address)
        except INDEXER_ERRORS as e:
            logger.error("Balance fetch failed for %s: %s", address, e)
            raise BalanceSourceError("Failed to fetch current token balances") from e

        balances: list[AssetBalance] = []
        for row in rows:
            try:
                balance = parse_balance_row(row)
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("Skipping malformed balance row %r: %s", row, e)
                continue
            if balance is not None:
                balances.append(balance)
        logger.debug("Parsed %d balances for %s", len(balances), address)
        return balances


class AptosIndexerFlowAdapter(BaseFlowAdapter):
    """Signed per-asset balance changes from fungible_asset_activities."""

    def __init__(self, config: HistorySettings, client: AptosIndexerClient | None = None):
        super().__init__(config)
        self._client = client or _build_client(config)

    @property
    def adapter_name(self) -> str:
        return "aptos_indexer_activities"

    async def fetch_flows(
        self,
        address: str,
        asset_types: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> list[FlowEvent] | None:
        try:
            rows = await asyncio.to_thread(
                self._client.fetch_activities, address, list(asset_types), start, end
            )
        except INDEXER_ERRORS as e:
            logger.warning(
                "Activity fetch failed for %s (%s -> %s): %s",
                address,
                start.isoformat(),
                end.isoformat(),
                e,
            )
            return None

        events: list[FlowEvent] = []
        for row in rows:
            amount = signed_activity_amount(row)
            if amount is None:
                continue
            try:
                timestamp = parse_timestamp(str(row.get("transaction_timestamp") or ""))
            except ValueError:
                logger.debug(
                    "Skipping activity with bad timestamp: %r",
                    row.get("transaction_timestamp"),
                )
                continue
            events.append(
                FlowEvent(
                    asset_type=str(row.get("asset_type") or ""),
                    timestamp=timestamp,
                    raw_amount=amount,
                )
            )
        return events
