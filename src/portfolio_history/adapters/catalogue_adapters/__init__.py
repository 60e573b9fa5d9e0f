from __future__ import annotations

from .base import BaseCatalogueAdapter
from .coingecko import CoinGeckoCatalogueAdapter

__all__ = ["BaseCatalogueAdapter", "CoinGeckoCatalogueAdapter"]
