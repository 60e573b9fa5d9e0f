"""Chain and provider constants."""

MAINNET_INDEXER_URL = "https://api.mainnet.aptoslabs.com/v1/graphql"
TESTNET_INDEXER_URL = "https://api.testnet.aptoslabs.com/v1/graphql"

DEFAULT_COINGECKO_API_URL = "https://api.coingecko.com/api/v3"
DEFAULT_BINANCE_API_URL = "https://api.binance.com/api/v3"

# Native coin. The legacy coin type and the fungible-asset metadata address
# both surface the same APT balance in current_fungible_asset_balances.
APT_COIN_TYPE = "0x1::aptos_coin::AptosCoin"
APT_FA_METADATA = "0x000000000000000000000000000000000000000000000000000000000000000a"
NATIVE_ASSET_TYPES = frozenset({APT_COIN_TYPE, APT_FA_METADATA, "0xa"})

# Price feed ids
NATIVE_FEED_ID = "aptos"
STABLE_FEED_ID = "STABLE_USD"

STABLE_SYMBOLS = frozenset({"USDC", "USDT", "USDE", "USD1"})

# CoinGecko platform key for Aptos contract addresses
COINGECKO_APTOS_PLATFORM = "aptos"

DEFAULT_TOKEN_DECIMALS = 8
MAX_TOKEN_DECIMALS = 18

TIMEFRAME_DAYS: dict[str, int] = {
    "7D": 7,
    "30D": 30,
    "90D": 90,
}

# HTTP statuses worth retrying against upstream providers
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
