"""Open Exchange Rates API client over httpx."""

from typing import Any

import httpx

from crypto_tracker.config import ExchangeRateSettings
from crypto_tracker.exceptions import MalformedResponseError
from crypto_tracker.sources.http import JsonApiClient


class OpenExchangeRatesClient:
    """Fetches the latest rates snapshot relative to the account's base currency."""

    def __init__(
        self,
        settings: ExchangeRateSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._app_id = settings.app_id.get_secret_value()
        self._api = JsonApiClient(
            "Open Exchange Rates",
            settings.base_url,
            timeout=settings.timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._api.close()

    async def fetch_latest(self) -> dict[str, Any]:
        """Return ``{"base", "timestamp", "rates"}`` from /latest.json."""
        data = await self._api.get_json("/latest.json", params={"app_id": self._app_id})
        if not isinstance(data, dict) or not isinstance(data.get("rates"), dict):
            raise MalformedResponseError("Open Exchange Rates payload has no rates map")
        return data
