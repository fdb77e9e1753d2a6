"""Entry point for the crypto tracker dashboard.

Wires the upstream API clients, fetchers and view registry together and
serves the FastAPI dashboard with uvicorn. The FastAPI lifespan owns the
httpx connection pools and cancels every view's in-flight fetch on shutdown.

Component wiring order (in build_components):
1. CoinGeckoClient (market-data source)
2. OpenExchangeRatesClient + ExchangeRateFetcher (client-side conversion only)
3. MarketDataFetcher and CoinDetailFetcher
4. SessionRegistry (per-browser list/detail views)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from crypto_tracker.config import AppSettings
from crypto_tracker.dashboard.app import create_dashboard_app
from crypto_tracker.dashboard.views import SessionRegistry
from crypto_tracker.logging import get_logger, setup_logging
from crypto_tracker.market_data.detail_fetcher import CoinDetailFetcher
from crypto_tracker.market_data.exchange_rates import ExchangeRateFetcher
from crypto_tracker.market_data.list_fetcher import MarketDataFetcher
from crypto_tracker.sources.coingecko import CoinGeckoClient
from crypto_tracker.sources.exchange_rates import OpenExchangeRatesClient


def build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all dashboard components from settings.

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances. ``rates_client`` and
        ``rates`` are None unless client-side conversion is enabled.
    """
    logger = get_logger("crypto_tracker.main")
    dashboard = settings.dashboard

    # 1. Market-data source
    market_source = CoinGeckoClient(settings.coingecko)

    # 2. Exchange rates, only when converting locally
    rates_client: OpenExchangeRatesClient | None = None
    rates: ExchangeRateFetcher | None = None
    if dashboard.convert_client_side:
        if not settings.rates.app_id.get_secret_value():
            logger.warning(
                "no_exchange_rate_app_id",
                note="Client-side conversion is enabled but RATES_APP_ID is empty; "
                "rate requests will be rejected upstream.",
            )
        rates_client = OpenExchangeRatesClient(settings.rates)
        rates = ExchangeRateFetcher(
            rates_client,
            target_currency=dashboard.currency,
            base_currency=settings.rates.base_currency,
            cache_ttl_seconds=settings.rates.cache_ttl_seconds,
        )

    # 3. Fetchers
    list_fetcher = MarketDataFetcher(
        market_source, rates=rates, convert_client_side=dashboard.convert_client_side
    )
    detail_fetcher = CoinDetailFetcher(
        market_source, rates=rates, convert_client_side=dashboard.convert_client_side
    )

    # 4. Views
    sessions = SessionRegistry(list_fetcher, detail_fetcher, dashboard)

    return {
        "market_source": market_source,
        "rates_client": rates_client,
        "rates": rates,
        "list_fetcher": list_fetcher,
        "detail_fetcher": detail_fetcher,
        "sessions": sessions,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close upstream clients and cancel in-flight fetches on shutdown."""
    logger = get_logger("crypto_tracker.main")
    settings: AppSettings = app.state.settings
    components = app.state.components

    logger.info(
        "crypto_tracker_started",
        currency=settings.dashboard.currency,
        page_size=settings.dashboard.page_size,
        client_side_conversion=settings.dashboard.convert_client_side,
    )

    yield

    await components["sessions"].close()
    await components["market_source"].close()
    if components["rates_client"] is not None:
        await components["rates_client"].close()

    logger.info("crypto_tracker_stopped")


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Create the fully wired dashboard application."""
    settings = settings or AppSettings()
    components = build_components(settings)

    app = create_dashboard_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components
    app.state.sessions = components["sessions"]
    app.state.currency = settings.dashboard.currency
    return app


async def run() -> None:
    """Run the dashboard server until interrupted."""
    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("crypto_tracker.main")

    app = create_app(settings)

    logger.info(
        "starting_dashboard",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
