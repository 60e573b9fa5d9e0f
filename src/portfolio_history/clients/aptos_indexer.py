"""Aptos indexer GraphQL client for balances and fungible asset activities.

Wraps the two queries the history engine needs:
- current fungible asset balances for an owner
- fungible asset activities for an owner, restricted by asset type and time
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence, TypedDict

import requests

from ..logger import get_logger
from .http import retrying

logger = get_logger(__name__)

BALANCES_QUERY = """
query GetCurrentBalances($address: String!) {
  current_fungible_asset_balances(where: {owner_address: {_eq: $address}}) {
    amount
    asset_type
    metadata {
      name
      symbol
      decimals
    }
  }
}
"""

ACTIVITIES_QUERY = """
query Activities(
  $address: String!
  $start: timestamptz
  $end: timestamptz
  $assetTypes: [String!]
  $limit: Int
  $offset: Int
) {
  fungible_asset_activities(
    where: {
      owner_address: {_eq: $address}
      transaction_timestamp: {_gte: $start, _lte: $end}
      asset_type: {_in: $assetTypes}
    }
    order_by: [{transaction_timestamp: asc}, {transaction_version: asc}, {event_index: asc}]
    limit: $limit
    offset: $offset
  ) {
    transaction_timestamp
    transaction_version
    amount
    asset_type
    type
    is_gas_fee
    is_transaction_success
  }
}
"""


class IndexerRateLimitError(Exception):
    """Raised when the indexer answers with HTTP 429."""

    pass


class IndexerQueryError(Exception):
    """Raised when the indexer returns GraphQL errors or an unusable payload."""

    pass


class AssetMetadataResult(TypedDict, total=False):
    name: str | None
    symbol: str | None
    decimals: int | None


class FungibleAssetBalanceResult(TypedDict, total=False):
    """Raw indexer row from current_fungible_asset_balances."""

    amount: str | int | None
    asset_type: str | None
    metadata: AssetMetadataResult | None


class FungibleAssetActivityResult(TypedDict, total=False):
    """Raw indexer row from fungible_asset_activities."""

    transaction_timestamp: str
    transaction_version: int
    amount: str | int | None
    asset_type: str | None
    type: str | None
    is_gas_fee: bool | None
    is_transaction_success: bool | None


class AptosIndexerClient:
    """Synchronous client for the Aptos indexer GraphQL endpoint.

    Provides:
    - Exponential backoff retry on transport errors, 429 and 5xx
    - Offset pagination for the activities query
    """

    def __init__(
        self,
        graphql_url: str,
        *,
        request_timeout: float = 10.0,
        max_tries: int = 3,
        page_size: int = 1000,
        max_pages: int = 10,
        session: requests.Session | None = None,
    ):
        self._graphql_url = graphql_url
        self._request_timeout = request_timeout
        self._max_tries = max(1, max_tries)
        self._page_size = max(1, page_size)
        self._max_pages = max(1, max_pages)
        self._session = session or requests.Session()

    def fetch_balances(self, address: str) -> list[FungibleAssetBalanceResult]:
        """Fetch current fungible asset balances for ``address``."""
        data = self._query(BALANCES_QUERY, {"address": address})
        rows = data.get("current_fungible_asset_balances")
        if not isinstance(rows, list):
            raise IndexerQueryError("Unexpected balances payload")
        logger.debug("Indexer returned %d balance rows for %s", len(rows), address)
        return rows

    def fetch_activities(
        self,
        address: str,
        asset_types: Sequence[str],
        start: datetime,
        end: datetime,
    ) -> list[FungibleAssetActivityResult]:
        """Fetch fungible asset activities for ``address`` within [start, end].

        Pages through results until a short page is returned or
        ``max_pages`` is reached (in which case a warning is logged).
        """
        if not asset_types:
            return []

        activities: list[FungibleAssetActivityResult] = []
        for page in range(self._max_pages):
            data = self._query(
                ACTIVITIES_QUERY,
                {
                    "address": address,
                    "start": start.isoformat(),
                    "end": end.isoformat(),
                    "assetTypes": list(asset_types),
                    "limit": self._page_size,
                    "offset": page * self._page_size,
                },
            )
            rows = data.get("fungible_asset_activities")
            if not isinstance(rows, list):
                raise IndexerQueryError("Unexpected activities payload")
            activities.extend(rows)
            if len(rows) < self._page_size:
                break
        else:
            logger.warning(
                "Activity pagination stopped at %d pages for %s; results truncated",
                self._max_pages,
                address,
            )

        logger.debug(
            "Indexer returned %d activities for %s (%d asset types)",
            len(activities),
            address,
            len(asset_types),
        )
        return activities

    def _query(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        caller = retrying(
            self._max_tries,
            (requests.exceptions.RequestException, IndexerRateLimitError),
        )(self._call)
        return caller(query, variables)

    def _call(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        response = self._session.post(
            self._graphql_url,
            json={"query": query, "variables": variables},
            headers={"Content-Type": "application/json"},
            timeout=self._request_timeout,
        )
        if response.status_code == 429:
            raise IndexerRateLimitError("Indexer rate limit exceeded")
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise IndexerQueryError("Unexpected indexer payload format")
        if payload.get("errors"):
            raise IndexerQueryError(f"GraphQL errors: {payload['errors']}")

        data = payload.get("data")
        if not isinstance(data, dict):
            raise IndexerQueryError("Indexer payload missing data")
        return data
