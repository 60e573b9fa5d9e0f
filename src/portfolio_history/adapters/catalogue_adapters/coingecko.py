from __future__ import annotations

import logging

import requests

from ...clients.http import get_json
from ...constants import COINGECKO_APTOS_PLATFORM
from ...settings import HistorySettings
from .base import BaseCatalogueAdapter

logger = logging.getLogger(__name__)


def parse_coins_list(payload: object, platform: str = COINGECKO_APTOS_PLATFORM) -> dict[str, str]:
    """Build a contract -> coin id map for one platform from /coins/list."""
    mapping: dict[str, str] = {}
    for coin in payload if isinstance(payload, list) else []:
        if not isinstance(coin, dict):
            continue
        coin_id = coin.get("id")
        platforms = coin.get("platforms") or {}
        contract = platforms.get(platform) if isinstance(platforms, dict) else None
        if coin_id and isinstance(contract, str) and contract.strip():
            mapping[contract.strip().lower()] = str(coin_id)
    return mapping


class CoinGeckoCatalogueAdapter(BaseCatalogueAdapter):
    """Asset catalogue backed by CoinGecko's coin list with platform contracts."""

    def __init__(self, config: HistorySettings):
        super().__init__(config)
        self.api_base_url = config.coingecko_api_url.rstrip("/")

    @property
    def adapter_name(self) -> str:
        return "coingecko_catalogue"

    async def fetch_platform_map(self) -> dict[str, str]:
        try:
            payload = await self._fetch_coins_list()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("CoinGecko coin list fetch failed: %s", e)
            return {}

        mapping = parse_coins_list(payload)
        logger.debug("CoinGecko catalogue: %d %s contracts", len(mapping), COINGECKO_APTOS_PLATFORM)
        return mapping

    async def _fetch_coins_list(self) -> object:
        headers = {"Accept": "application/json"}
        if self.config.coingecko_api_key is not None:
            headers["x-cg-demo-api-key"] = self.config.coingecko_api_key.get_secret_value()

        return await get_json(
            f"{self.api_base_url}/coins/list",
            params={"include_platform": "true"},
            headers=headers,
            timeout=self.config.provider_timeout_seconds,
            max_tries=self.config.provider_max_tries,
        )
