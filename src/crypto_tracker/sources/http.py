"""Shared JSON-over-HTTP plumbing for upstream API clients.

Wraps one httpx.AsyncClient per upstream and maps every transport, status
and decoding failure onto the tracker's exception hierarchy, so callers
never see httpx exceptions.
"""

from typing import Any

import httpx

from crypto_tracker.exceptions import (
    MalformedResponseError,
    UpstreamStatusError,
    UpstreamTransportError,
)
from crypto_tracker.logging import get_logger

logger = get_logger(__name__)


class JsonApiClient:
    """Minimal async JSON GET client bound to one base URL.

    Args:
        service: Human-readable upstream name used in error messages.
        base_url: Root URL every request path is appended to.
        timeout: Per-request timeout in seconds.
        headers: Extra headers sent with every request.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        service: str,
        base_url: str,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._service = service
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json", **(headers or {})},
            transport=transport,
        )

    @property
    def service(self) -> str:
        return self._service

    async def close(self) -> None:
        await self._http.aclose()

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            UpstreamTransportError: Connection, timeout or other request failure.
            UpstreamStatusError: Any non-2xx response (carries status_code).
            MalformedResponseError: Body cannot be decoded or is not valid JSON.
        """
        try:
            response = await self._http.get(path, params=params)
        except httpx.DecodingError as e:
            raise MalformedResponseError(
                f"{self._service} returned a body that could not be decoded"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamTransportError(
                f"Could not reach {self._service}: {e.__class__.__name__}"
            ) from e

        if not response.is_success:
            logger.info(
                "upstream_status_error",
                service=self._service,
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamStatusError(
                f"Failed to fetch data from {self._service}: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{self._service} returned a response that is not valid JSON"
            ) from e
