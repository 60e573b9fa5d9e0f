from __future__ import annotations

from .binance import BinanceAdapter
from .coingecko import CoinGeckoAdapter
from .stable import StableUsdAdapter

# Priority order: the first adapter returning data for a feed wins.
PRICE_ADAPTERS = [
    StableUsdAdapter,
    CoinGeckoAdapter,
    BinanceAdapter,
]

__all__ = ["PRICE_ADAPTERS", "BinanceAdapter", "CoinGeckoAdapter", "StableUsdAdapter"]
