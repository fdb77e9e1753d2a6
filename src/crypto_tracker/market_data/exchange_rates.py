"""Exchange-rate fetcher with a TTL-cached snapshot and base -> target conversion.

Only needed when the dashboard converts monetary values itself because the
market-data API was asked for prices in the rates base currency.
"""

import asyncio
import time

from crypto_tracker.exceptions import MalformedResponseError
from crypto_tracker.logging import get_logger
from crypto_tracker.models import ExchangeRateSnapshot
from crypto_tracker.sources.exchange_rates import OpenExchangeRatesClient

logger = get_logger(__name__)


class ExchangeRateFetcher:
    """Loads and caches the latest rates snapshot.

    Args:
        client: Open Exchange Rates API client.
        target_currency: Currency code conversions produce (e.g. "ZAR").
        base_currency: Currency the snapshot's rates are relative to.
        cache_ttl_seconds: How long a snapshot is served before refreshing.
    """

    def __init__(
        self,
        client: OpenExchangeRatesClient,
        target_currency: str,
        base_currency: str = "USD",
        cache_ttl_seconds: int = 3600,
    ) -> None:
        self._client = client
        self._target = target_currency.upper()
        self._base = base_currency.upper()
        self._ttl = cache_ttl_seconds
        self._snapshot: ExchangeRateSnapshot | None = None
        self._fetched_at: float = 0
        self._lock = asyncio.Lock()

    @property
    def base_currency(self) -> str:
        return self._base

    @property
    def target_currency(self) -> str:
        return self._target

    @property
    def snapshot(self) -> ExchangeRateSnapshot | None:
        return self._snapshot

    def _is_cache_valid(self) -> bool:
        return self._snapshot is not None and (time.time() - self._fetched_at < self._ttl)

    async def refresh(self) -> ExchangeRateSnapshot:
        """Fetch a fresh snapshot and make it current."""
        data = await self._client.fetch_latest()
        try:
            rates = {str(code).upper(): float(rate) for code, rate in data["rates"].items()}
            snapshot = ExchangeRateSnapshot(
                base=str(data.get("base") or self._base).upper(),
                timestamp=int(data.get("timestamp") or 0),
                target_currency=self._target,
                rates=rates,
            )
        except (TypeError, ValueError) as e:
            raise MalformedResponseError("Exchange rate snapshot has non-numeric rates") from e

        if snapshot.base != self._base:
            raise MalformedResponseError(
                f"Exchange rates are based on {snapshot.base}, expected {self._base}"
            )

        self._snapshot = snapshot
        self._fetched_at = time.time()

        if snapshot.target_rate is None:
            logger.warning(
                "exchange_rate_target_missing",
                base=snapshot.base,
                target=self._target,
                currencies=len(rates),
            )
        else:
            logger.info(
                "exchange_rates_loaded",
                base=snapshot.base,
                target=self._target,
                rate=snapshot.target_rate,
            )
        return snapshot

    async def latest(self) -> ExchangeRateSnapshot:
        """Return the cached snapshot, refreshing it once the TTL has passed."""
        async with self._lock:
            if self._is_cache_valid():
                return self._snapshot  # type: ignore[return-value]
            return await self.refresh()

    def to_target(self, amount: float | None) -> float | None:
        """Convert a base-currency amount, or None while no rate is available."""
        if self._snapshot is None:
            return None
        return self._snapshot.to_target(amount)
