"""Market data fetcher -- ranked coin list with optional per-coin descriptions.

One request fetches the ranked page. With descriptions enabled, one request
per coin runs concurrently and all are awaited before the list is built. A
failed description only blanks that coin's description; a failed primary
request fails the whole chain.

Cancelling the task that runs ``fetch`` cancels the primary request and
every pending description request with it.
"""

import asyncio
from dataclasses import dataclass

from crypto_tracker.exceptions import TrackerError
from crypto_tracker.logging import get_logger
from crypto_tracker.market_data.exchange_rates import ExchangeRateFetcher
from crypto_tracker.market_data.normalize import Converter, no_conversion, summary_from_market
from crypto_tracker.models import CoinSummary
from crypto_tracker.sources.client import MarketDataSource

logger = get_logger(__name__)


@dataclass(frozen=True)
class ListQuery:
    """Parameters of one list fetch."""

    target_currency: str
    page_size: int = 10
    include_descriptions: bool = False


class MarketDataFetcher:
    """Builds CoinSummary lists from the market-data source.

    Args:
        source: Market-data API client.
        rates: Exchange-rate fetcher; required when ``convert_client_side``.
        convert_client_side: Request prices in the rates base currency and
            convert every monetary field locally instead of asking the
            market-data API for the target currency.
    """

    def __init__(
        self,
        source: MarketDataSource,
        rates: ExchangeRateFetcher | None = None,
        convert_client_side: bool = False,
    ) -> None:
        if convert_client_side and rates is None:
            raise ValueError("convert_client_side requires an ExchangeRateFetcher")
        self._source = source
        self._rates = rates
        self._convert_client_side = convert_client_side

    async def fetch(self, query: ListQuery) -> list[CoinSummary]:
        """Fetch the ranked page described by ``query``.

        Raises:
            TrackerError: The primary request (or, in client-side mode, the
                rates request) failed.
        """
        convert: Converter = no_conversion
        vs_currency = query.target_currency
        if self._convert_client_side:
            snapshot = await self._rates.latest()  # type: ignore[union-attr]
            convert = snapshot.to_target
            vs_currency = self._rates.base_currency  # type: ignore[union-attr]

        markets = await self._source.fetch_markets(vs_currency.lower(), query.page_size)

        descriptions: list[str | None] = [None] * len(markets)
        if query.include_descriptions and markets:
            descriptions = await asyncio.gather(
                *(self._describe(item) for item in markets)
            )

        coins = [
            summary_from_market(item, query.target_currency, convert, description)
            for item, description in zip(markets, descriptions)
        ]

        logger.info(
            "coin_list_fetched",
            currency=query.target_currency,
            count=len(coins),
            with_descriptions=query.include_descriptions,
            client_side_conversion=self._convert_client_side,
        )
        return coins

    async def _describe(self, item: dict) -> str | None:
        """Fetch one coin's description, degrading to None on any failure other than cancellation."""
        coin_id = item.get("id") if isinstance(item, dict) else None
        if not coin_id:
            return None
        try:
            return await self._source.fetch_description(coin_id)
        except TrackerError as e:
            logger.warning(
                "coin_description_unavailable",
                coin_id=coin_id,
                error=str(e),
                error_code=e.code,
            )
            return None
        except Exception:
            logger.exception("coin_description_failed", coin_id=coin_id)
            return None
