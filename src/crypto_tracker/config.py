"""Dashboard settings loaded by pydantic-settings from the environment and .env.

Each upstream API and the dashboard itself get their own env prefix
(COINGECKO_, RATES_, DASHBOARD_); AppSettings composes them.
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoinGeckoSettings(BaseSettings):
    """CoinGecko market-data API connection settings."""

    model_config = SettingsConfigDict(env_prefix="COINGECKO_")

    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: SecretStr = SecretStr("")  # optional demo key for higher rate limits
    timeout_seconds: float = 10.0


class ExchangeRateSettings(BaseSettings):
    """Open Exchange Rates API settings.

    Only used when the dashboard converts monetary values client-side.
    """

    model_config = SettingsConfigDict(env_prefix="RATES_")

    base_url: str = "https://openexchangerates.org/api"
    app_id: SecretStr = SecretStr("")
    base_currency: str = "USD"  # free plan only serves USD-based snapshots
    cache_ttl_seconds: int = 3600
    timeout_seconds: float = 10.0


class DashboardSettings(BaseSettings):
    """Dashboard server and view configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    host: str = "0.0.0.0"
    port: int = 8080
    currency: str = "zar"
    page_size: int = 10
    include_descriptions: bool = False
    convert_client_side: bool = False
    max_sessions: int = 256


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"
    coingecko: CoinGeckoSettings = CoinGeckoSettings()
    rates: ExchangeRateSettings = ExchangeRateSettings()
    dashboard: DashboardSettings = DashboardSettings()
