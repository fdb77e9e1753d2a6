"""Abstract market-data source interface.

Fetchers depend only on this interface, keeping CoinGecko-specific URL and
parameter shaping isolated in the concrete client.
"""

from abc import ABC, abstractmethod
from typing import Any


class MarketDataSource(ABC):
    """Abstract base class for market-data API clients."""

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        ...

    @abstractmethod
    async def fetch_markets(self, vs_currency: str, per_page: int) -> list[dict[str, Any]]:
        """Fetch page 1 of coins ranked by market cap, priced in ``vs_currency``.

        Returns raw market objects with keys such as id, symbol, current_price,
        market_cap, market_cap_rank, price_change_percentage_24h.
        """
        ...

    @abstractmethod
    async def fetch_coin(self, coin_id: str) -> dict[str, Any]:
        """Fetch full coin data with per-currency maps under ``market_data``.

        Raises CoinNotFoundError when the identifier is unknown.
        """
        ...

    @abstractmethod
    async def fetch_description(self, coin_id: str) -> str | None:
        """Fetch only the long-form English description of a coin."""
        ...
