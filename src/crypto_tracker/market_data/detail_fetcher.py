"""Coin detail fetcher -- full data for one coin in the target currency."""

from crypto_tracker.logging import get_logger
from crypto_tracker.market_data.exchange_rates import ExchangeRateFetcher
from crypto_tracker.market_data.normalize import Converter, detail_from_coin, no_conversion
from crypto_tracker.models import CoinDetail
from crypto_tracker.sources.client import MarketDataSource

logger = get_logger(__name__)


class CoinDetailFetcher:
    """Builds a CoinDetail from a single /coins/{id} request.

    Args:
        source: Market-data API client.
        rates: Exchange-rate fetcher; required when ``convert_client_side``.
        convert_client_side: Read the rates base currency from the
            per-currency maps and convert locally.
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

    async def fetch(self, coin_id: str, target_currency: str) -> CoinDetail:
        """Fetch and normalize one coin.

        Raises:
            CoinNotFoundError: Unknown identifier.
            UnsupportedCurrencyError: The coin has no prices in the currency read.
            TrackerError: Any other transport, status or shape failure.
        """
        convert: Converter = no_conversion
        price_currency = target_currency
        if self._convert_client_side:
            snapshot = await self._rates.latest()  # type: ignore[union-attr]
            convert = snapshot.to_target
            price_currency = self._rates.base_currency  # type: ignore[union-attr]

        data = await self._source.fetch_coin(coin_id)
        detail = detail_from_coin(data, price_currency, target_currency, convert)

        logger.info(
            "coin_detail_fetched",
            coin_id=coin_id,
            currency=target_currency,
            client_side_conversion=self._convert_client_side,
        )
        return detail
