from __future__ import annotations

from .asset_adapters import AptosIndexerBalanceAdapter, AptosIndexerFlowAdapter
from .catalogue_adapters import CoinGeckoCatalogueAdapter
from .price_adapters import PRICE_ADAPTERS

__all__ = [
    "AptosIndexerBalanceAdapter",
    "AptosIndexerFlowAdapter",
    "CoinGeckoCatalogueAdapter",
    "PRICE_ADAPTERS",
]
