"""Shared test fixtures and sample CoinGecko payloads for the crypto tracker."""

import copy
from unittest.mock import AsyncMock

import pytest

from crypto_tracker.config import (
    AppSettings,
    CoinGeckoSettings,
    DashboardSettings,
    ExchangeRateSettings,
)
from crypto_tracker.sources.client import MarketDataSource

# ---------------------------------------------------------------------------
# Sample payloads (trimmed CoinGecko v3 responses, priced in ZAR)
# ---------------------------------------------------------------------------

BTC_MARKET = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    "current_price": 1234567.89,
    "market_cap": 24500000000000,
    "market_cap_rank": 1,
    "total_volume": 650000000000,
    "high_24h": 1250000.0,
    "low_24h": 1200000.0,
    "price_change_24h": 15000.5,
    "price_change_percentage_24h": 1.2345,
    "circulating_supply": 19700000.0,
    "ath": 1350000.0,
    "ath_date": "2024-03-14T07:10:36.635Z",
    "last_updated": "2024-06-01T12:00:00.000Z",
}

ETH_MARKET = {
    "id": "ethereum",
    "symbol": "eth",
    "name": "Ethereum",
    "image": "https://assets.coingecko.com/coins/images/279/large/ethereum.png",
    "current_price": 65000.0,
    "market_cap": 7800000000000,
    "market_cap_rank": 2,
    "total_volume": 300000000000,
    "high_24h": 66000.0,
    "low_24h": 63000.0,
    "price_change_24h": -820.25,
    "price_change_percentage_24h": -1.25,
    "circulating_supply": 120100000.0,
    "ath": 90000.0,
    "ath_date": "2021-11-10T14:24:19.604Z",
    "last_updated": "2024-06-01T12:00:00.000Z",
}

BTC_COIN = {
    "id": "bitcoin",
    "symbol": "btc",
    "name": "Bitcoin",
    "image": {
        "thumb": "https://assets.coingecko.com/coins/images/1/thumb/bitcoin.png",
        "large": "https://assets.coingecko.com/coins/images/1/large/bitcoin.png",
    },
    "description": {"en": "Bitcoin is the first decentralized cryptocurrency."},
    "links": {
        "homepage": ["http://www.bitcoin.org", "", ""],
        "blockchain_site": ["", "https://mempool.space/", "https://blockchair.com/bitcoin/"],
    },
    "sentiment_votes_up_percentage": 84.5,
    "sentiment_votes_down_percentage": 15.5,
    "market_cap_rank": 1,
    "market_data": {
        "current_price": {"usd": 67000.0, "zar": 1234567.89},
        "ath": {"usd": 73738.0, "zar": 1350000.0},
        "ath_date": {"usd": "2024-03-14T07:10:36.635Z", "zar": "2024-03-14T07:10:36.635Z"},
        "atl": {"usd": 67.81, "zar": 535.5},
        "atl_date": {"usd": "2013-07-06T00:00:00.000Z", "zar": "2013-07-05T00:00:00.000Z"},
        "market_cap": {"usd": 1320000000000, "zar": 24500000000000},
        "market_cap_rank": 1,
        "total_volume": {"usd": 35000000000, "zar": 650000000000},
        "high_24h": {"usd": 68000.0, "zar": 1250000.0},
        "low_24h": {"usd": 66000.0, "zar": 1200000.0},
        "price_change_24h_in_currency": {"usd": 800.0, "zar": 15000.5},
        "price_change_percentage_24h_in_currency": {"usd": 1.21, "zar": 1.2345},
        "circulating_supply": 19700000.0,
    },
    "last_updated": "2024-06-01T12:00:00.000Z",
}


def market_payload() -> list[dict]:
    """Fresh copy of a two-coin /coins/markets response."""
    return [copy.deepcopy(BTC_MARKET), copy.deepcopy(ETH_MARKET)]


def coin_payload() -> dict:
    """Fresh copy of a /coins/bitcoin response."""
    return copy.deepcopy(BTC_COIN)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings pointing at unroutable test hosts."""
    return AppSettings(
        log_level="DEBUG",
        coingecko=CoinGeckoSettings(base_url="https://coingecko.test/api/v3"),
        rates=ExchangeRateSettings(
            base_url="https://rates.test/api",
            app_id="test-app-id",  # type: ignore[arg-type]
        ),
        dashboard=DashboardSettings(currency="zar", page_size=2, max_sessions=4),
    )


@pytest.fixture
def mock_source() -> AsyncMock:
    """Mock MarketDataSource returning the sample payloads."""
    source = AsyncMock(spec=MarketDataSource)
    source.fetch_markets.return_value = market_payload()
    source.fetch_coin.return_value = coin_payload()
    source.fetch_description.return_value = "A coin."
    return source


@pytest.fixture
def markets() -> list[dict]:
    """Two-coin /coins/markets response (bitcoin, ethereum)."""
    return market_payload()


@pytest.fixture
def coin() -> dict:
    """/coins/bitcoin response."""
    return coin_payload()
