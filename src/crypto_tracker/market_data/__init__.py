"""Market data layer -- coin list, coin detail and exchange-rate fetchers."""

from crypto_tracker.market_data.detail_fetcher import CoinDetailFetcher
from crypto_tracker.market_data.exchange_rates import ExchangeRateFetcher
from crypto_tracker.market_data.list_fetcher import ListQuery, MarketDataFetcher

__all__ = ["CoinDetailFetcher", "ExchangeRateFetcher", "ListQuery", "MarketDataFetcher"]
