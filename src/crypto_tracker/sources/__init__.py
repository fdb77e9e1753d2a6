"""Upstream API clients -- CoinGecko market data and Open Exchange Rates via httpx."""

from crypto_tracker.sources.client import MarketDataSource
from crypto_tracker.sources.coingecko import CoinGeckoClient
from crypto_tracker.sources.exchange_rates import OpenExchangeRatesClient
from crypto_tracker.sources.http import JsonApiClient

__all__ = [
    "CoinGeckoClient",
    "JsonApiClient",
    "MarketDataSource",
    "OpenExchangeRatesClient",
]
