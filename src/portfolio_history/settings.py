"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import (
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_BINANCE_API_URL,
    DEFAULT_COINGECKO_API_URL,
    MAINNET_INDEXER_URL,
    TESTNET_INDEXER_URL,
)

load_dotenv()


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


SECRET_FIELDS = {"coingecko_api_key"}


class HistorySettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with PORTFOLIO_HISTORY_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- chain / endpoints ---
    network: Network = Network.MAINNET
    indexer_url: str | None = None
    coingecko_api_url: str = DEFAULT_COINGECKO_API_URL
    coingecko_api_key: SecretStr | None = None
    binance_api_url: str = DEFAULT_BINANCE_API_URL
    binance_symbol: str = "APTUSDT"

    # --- flow reconstruction ---
    use_flows: bool = True
    flow_page_size: int = Field(default=1000, ge=1, le=10_000)
    flow_max_pages: int = Field(default=10, ge=1)

    # --- provider calls ---
    provider_timeout_seconds: float = Field(default=8.0, gt=0)
    provider_max_tries: int = Field(default=3, ge=1)
    price_max_concurrent_calls: int = Field(default=4, ge=1)
    global_timeout_seconds: float | None = 25.0

    # --- price cache ---
    price_cache_ttl_seconds: float = Field(default=300.0, gt=0)
    price_cache_max_entries: int = Field(default=512, ge=1)

    # --- live snapshot ---
    live_snapshot_enabled: bool = True
    live_price_max_deviation_percentage: float = Field(
        default=50.0,
        gt=0,
        description="Maximum deviation (%) between the live anchor price and its latest historical price.",
    )

    # --- rate limiting (HTTP surface) ---
    rate_limit_requests: int = Field(default=10, ge=1)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0)

    # --- http server ---
    host: str = "127.0.0.1"
    port: int = 8000

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_HISTORY_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("coingecko_api_key", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr."""
        if v is None or isinstance(v, SecretStr):
            return v
        return SecretStr(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        return str(v).upper()

    @model_validator(mode="after")
    def set_derived_values(self) -> "HistorySettings":
        """Fill the indexer endpoint from the selected network when not given."""
        if self.indexer_url is None:
            self.indexer_url = (
                TESTNET_INDEXER_URL
                if self.network == Network.TESTNET
                else MAINNET_INDEXER_URL
            )
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("PORTFOLIO_HISTORY_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("portfolio-history.toml")
                    user_config = (
                        Path.home() / ".config" / "portfolio-history" / "config.toml"
                    )
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [portfolio_history]
                body = data.get("portfolio_history", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a dict with secrets redacted."""
        data = self.model_dump(mode="json")
        if self.coingecko_api_key:
            data["coingecko_api_key"] = "***redacted***"
        return data

    @property
    def indexer_url_required(self) -> str:
        """Get indexer_url, raising ValueError if not set."""
        if self.indexer_url is None:
            raise ValueError("indexer_url must be configured")
        return self.indexer_url
