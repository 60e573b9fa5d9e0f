from __future__ import annotations

from .aptos_indexer import AptosIndexerBalanceAdapter, AptosIndexerFlowAdapter
from .base import BalanceSourceError, BaseBalanceAdapter, BaseFlowAdapter

__all__ = [
    "AptosIndexerBalanceAdapter",
    "AptosIndexerFlowAdapter",
    "BalanceSourceError",
    "BaseBalanceAdapter",
    "BaseFlowAdapter",
]
