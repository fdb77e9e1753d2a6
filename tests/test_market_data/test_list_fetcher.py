"""Tests for MarketDataFetcher: list building, descriptions, conversion and cancellation."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from crypto_tracker.config import CoinGeckoSettings
from crypto_tracker.exceptions import UpstreamStatusError, UpstreamTransportError
from crypto_tracker.market_data.exchange_rates import ExchangeRateFetcher
from crypto_tracker.market_data.list_fetcher import ListQuery, MarketDataFetcher
from crypto_tracker.sources.coingecko import CoinGeckoClient
from crypto_tracker.sources.exchange_rates import OpenExchangeRatesClient


def _rates(rates: dict[str, float]) -> ExchangeRateFetcher:
    client = AsyncMock(spec=OpenExchangeRatesClient)
    client.fetch_latest.return_value = {"base": "USD", "timestamp": 1717243200, "rates": rates}
    return ExchangeRateFetcher(client, target_currency="ZAR")


# ---------------------------------------------------------------------------
# Server-side pricing
# ---------------------------------------------------------------------------


class TestFetchList:
    @pytest.mark.asyncio
    async def test_builds_summaries_in_rank_order(self, mock_source) -> None:
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", page_size=2))

        assert [c.id for c in coins] == ["bitcoin", "ethereum"]
        assert [c.symbol for c in coins] == ["BTC", "ETH"]
        assert coins[0].currency == "ZAR"
        assert coins[0].formatted_price == "R 1,234,567.89"
        assert coins[0].formatted_market_cap == "R 24,500,000,000,000"
        assert coins[1].formatted_price_change_percentage == "-1.25%"
        assert coins[1].is_price_up is False
        assert all(c.description is None for c in coins)
        mock_source.fetch_markets.assert_awaited_once_with("zar", 2)
        mock_source.fetch_description.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_page(self, mock_source) -> None:
        mock_source.fetch_markets.return_value = []
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))

        assert coins == []
        mock_source.fetch_description.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_null_fields_render_placeholder(self, mock_source, markets) -> None:
        markets[1]["current_price"] = None
        markets[1]["market_cap_rank"] = None
        mock_source.fetch_markets.return_value = markets
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar"))

        assert coins[1].current_price is None
        assert coins[1].formatted_price == "-"
        assert coins[1].market_cap_rank is None

    @pytest.mark.asyncio
    async def test_primary_failure_propagates(self, mock_source) -> None:
        mock_source.fetch_markets.side_effect = UpstreamStatusError("Failed", status_code=500)
        fetcher = MarketDataFetcher(mock_source)

        with pytest.raises(UpstreamStatusError):
            await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))
        mock_source.fetch_description.assert_not_awaited()


# ---------------------------------------------------------------------------
# Description enrichment
# ---------------------------------------------------------------------------


class TestDescriptions:
    @pytest.mark.asyncio
    async def test_one_request_per_coin(self, mock_source) -> None:
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))

        assert [c.description for c in coins] == ["A coin.", "A coin."]
        awaited = sorted(call.args[0] for call in mock_source.fetch_description.await_args_list)
        assert awaited == ["bitcoin", "ethereum"]

    @pytest.mark.asyncio
    async def test_failed_description_only_blanks_that_coin(self, mock_source) -> None:
        async def describe(coin_id: str) -> str:
            if coin_id == "ethereum":
                raise UpstreamTransportError("Could not reach CoinGecko: ConnectError")
            return "Digital gold."

        mock_source.fetch_description.side_effect = describe
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))

        assert len(coins) == 2
        assert coins[0].description == "Digital gold."
        assert coins[1].description is None
        assert coins[1].formatted_price == "R 65,000.00"

    @pytest.mark.asyncio
    async def test_unexpected_description_error_only_blanks_that_coin(self, mock_source) -> None:
        async def describe(coin_id: str) -> str:
            if coin_id == "ethereum":
                raise RuntimeError("unexpected")
            return "Digital gold."

        mock_source.fetch_description.side_effect = describe
        fetcher = MarketDataFetcher(mock_source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))

        assert [c.description for c in coins] == ["Digital gold.", None]

    @pytest.mark.asyncio
    async def test_undecodable_description_body_keeps_list(self, markets) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/coins/markets"):
                return httpx.Response(200, json=markets)
            if request.url.path.endswith("/coins/ethereum"):
                return httpx.Response(
                    200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"
                )
            return httpx.Response(200, json={"id": "bitcoin", "description": {"en": "Digital gold."}})

        source = CoinGeckoClient(
            CoinGeckoSettings(base_url="https://coingecko.test/api/v3"),
            transport=httpx.MockTransport(handler),
        )
        fetcher = MarketDataFetcher(source)

        coins = await fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))
        await source.close()

        assert [c.id for c in coins] == ["bitcoin", "ethereum"]
        assert coins[0].description == "Digital gold."
        assert coins[1].description is None

    @pytest.mark.asyncio
    async def test_cancel_stops_pending_descriptions(self, mock_source) -> None:
        started = 0
        cancelled = 0
        all_started = asyncio.Event()

        async def describe(coin_id: str) -> str:
            nonlocal started, cancelled
            started += 1
            if started == 2:
                all_started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled += 1
                raise
            return "never"

        mock_source.fetch_description.side_effect = describe
        fetcher = MarketDataFetcher(mock_source)

        task = asyncio.create_task(
            fetcher.fetch(ListQuery(target_currency="zar", include_descriptions=True))
        )
        await asyncio.wait_for(all_started.wait(), timeout=1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert cancelled == 2


# ---------------------------------------------------------------------------
# Client-side conversion
# ---------------------------------------------------------------------------


class TestClientSideConversion:
    def test_requires_rates(self, mock_source) -> None:
        with pytest.raises(ValueError):
            MarketDataFetcher(mock_source, convert_client_side=True)

    @pytest.mark.asyncio
    async def test_converts_every_monetary_field(self, mock_source, markets) -> None:
        markets[0].update(
            current_price=100.0,
            price_change_24h=-2.0,
            market_cap=1000.0,
            total_volume=10.0,
            high_24h=110.0,
            low_24h=90.0,
            ath=200.0,
        )
        mock_source.fetch_markets.return_value = markets
        fetcher = MarketDataFetcher(mock_source, rates=_rates({"ZAR": 18.0}), convert_client_side=True)

        coins = await fetcher.fetch(ListQuery(target_currency="zar"))

        btc = coins[0]
        mock_source.fetch_markets.assert_awaited_once_with("usd", 10)
        assert btc.current_price == 1800.0
        assert btc.price_change_24h == -36.0
        assert btc.market_cap == 18000.0
        assert btc.total_volume == 180.0
        assert btc.high_24h == 1980.0
        assert btc.low_24h == 1620.0
        assert btc.ath == 3600.0
        # Currency-independent fields pass through untouched
        assert btc.price_change_percentage_24h == 1.2345
        assert btc.circulating_supply == 19700000.0
        assert btc.formatted_price == "R 1,800.00"
        assert btc.formatted_price_change == "-R 36.00"

    @pytest.mark.asyncio
    async def test_missing_target_rate_shows_placeholder(self, mock_source) -> None:
        fetcher = MarketDataFetcher(mock_source, rates=_rates({"EUR": 0.92}), convert_client_side=True)

        coins = await fetcher.fetch(ListQuery(target_currency="zar"))

        assert coins[0].current_price is None
        assert coins[0].formatted_price == "-"
        assert coins[0].formatted_market_cap == "-"
        assert coins[0].formatted_price_change_percentage == "+1.23%"

    @pytest.mark.asyncio
    async def test_rates_failure_fails_the_chain(self, mock_source) -> None:
        client = AsyncMock(spec=OpenExchangeRatesClient)
        client.fetch_latest.side_effect = UpstreamStatusError("Failed", status_code=401)
        rates = ExchangeRateFetcher(client, target_currency="ZAR")
        fetcher = MarketDataFetcher(mock_source, rates=rates, convert_client_side=True)

        with pytest.raises(UpstreamStatusError):
            await fetcher.fetch(ListQuery(target_currency="zar"))
        mock_source.fetch_markets.assert_not_awaited()
