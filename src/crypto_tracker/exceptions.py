"""Custom exceptions for the crypto tracker.

Every failure a fetch chain can report lives here. Each class carries a
short ``code`` that the dashboard uses to pick an error presentation
(e.g. the not-found page). Cancellation is not part of this hierarchy:
it is plain ``asyncio.CancelledError`` and never becomes an error state.
"""


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    code = "error"


class UpstreamTransportError(TrackerError):
    """Raised when an upstream API cannot be reached (DNS, connect, timeout)."""

    code = "transport"


class UpstreamStatusError(TrackerError):
    """Raised when an upstream API answers with a non-2xx status."""

    code = "http_status"

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class CoinNotFoundError(UpstreamStatusError):
    """Raised when the market-data API does not know a coin identifier."""

    code = "not_found"

    def __init__(self, coin_id: str) -> None:
        super().__init__(f"Cryptocurrency '{coin_id}' not found", status_code=404)
        self.coin_id = coin_id


class UnsupportedCurrencyError(TrackerError):
    """Raised when a coin's market data has no entry for the requested currency."""

    code = "unsupported_currency"

    def __init__(self, coin_id: str, currency: str) -> None:
        super().__init__(
            f"Currency '{currency.upper()}' is not supported for coin '{coin_id}'"
        )
        self.coin_id = coin_id
        self.currency = currency


class MalformedResponseError(TrackerError):
    """Raised when an upstream payload is not JSON or lacks expected fields."""

    code = "malformed"
