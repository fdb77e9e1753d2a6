"""CoinGecko market-data API client over httpx."""

from typing import Any

import httpx

from crypto_tracker.config import CoinGeckoSettings
from crypto_tracker.exceptions import (
    CoinNotFoundError,
    MalformedResponseError,
    UpstreamStatusError,
)
from crypto_tracker.logging import get_logger
from crypto_tracker.sources.client import MarketDataSource
from crypto_tracker.sources.http import JsonApiClient

logger = get_logger(__name__)

# Trim /coins/{id} payloads to what the dashboard reads
_COIN_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "community_data": "false",
    "developer_data": "false",
}


class CoinGeckoClient(MarketDataSource):
    """Concrete market-data source backed by the public CoinGecko v3 API."""

    def __init__(
        self,
        settings: CoinGeckoSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {}
        api_key = settings.api_key.get_secret_value()
        if api_key:
            headers["x-cg-demo-api-key"] = api_key

        self._api = JsonApiClient(
            "CoinGecko",
            settings.base_url,
            timeout=settings.timeout_seconds,
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        await self._api.close()

    async def fetch_markets(self, vs_currency: str, per_page: int) -> list[dict[str, Any]]:
        data = await self._api.get_json(
            "/coins/markets",
            params={
                "vs_currency": vs_currency.lower(),
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
        )
        if not isinstance(data, list):
            raise MalformedResponseError("CoinGecko market list is not a JSON array")
        logger.debug("coin_markets_fetched", vs_currency=vs_currency, count=len(data))
        return data

    async def fetch_coin(self, coin_id: str) -> dict[str, Any]:
        return await self._get_coin(coin_id, _COIN_PARAMS)

    async def fetch_description(self, coin_id: str) -> str | None:
        data = await self._get_coin(coin_id, {**_COIN_PARAMS, "market_data": "false"})
        description = data.get("description") or {}
        if not isinstance(description, dict):
            return None
        text = description.get("en")
        return text if isinstance(text, str) and text else None

    async def _get_coin(self, coin_id: str, params: dict[str, str]) -> dict[str, Any]:
        try:
            data = await self._api.get_json(f"/coins/{coin_id}", params=params)
        except UpstreamStatusError as e:
            if e.status_code == 404:
                raise CoinNotFoundError(coin_id) from e
            raise
        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"CoinGecko coin payload for '{coin_id}' is not a JSON object"
            )
        return data
