"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Server-side price cache parameters."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    ttl_seconds: float = 300.0  # 5 minutes


class CoinGeckoSettings(BaseSettings):
    """Primary price source (CoinGecko token_price endpoint)."""

    model_config = SettingsConfigDict(env_prefix="COINGECKO_")

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.coingecko.com/api/v3"
    platform: str = "base"  # CoinGecko asset platform id
    request_timeout: float = 10.0


class MoralisSettings(BaseSettings):
    """Fallback price source (Moralis ERC20 price endpoint)."""

    model_config = SettingsConfigDict(env_prefix="MORALIS_")

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://deep-index.moralis.io/api/v2.2"
    chain: str = "base"
    request_timeout: float = 10.0


class ServerSettings(BaseSettings):
    """HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    cache: CacheSettings = CacheSettings()
    coingecko: CoinGeckoSettings = CoinGeckoSettings()
    moralis: MoralisSettings = MoralisSettings()
    server: ServerSettings = ServerSettings()
