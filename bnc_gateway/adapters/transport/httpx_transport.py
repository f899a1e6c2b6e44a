"""httpx transport adapter."""

from __future__ import annotations

from typing import Mapping

import httpx

from bnc_gateway.adapters.transport.base import AbstractTransport, TransportResponse
from bnc_gateway.core.errors import TransportError


class HttpxTransport(AbstractTransport):
    """Send gateway requests through an ``httpx.AsyncClient``.

    Timeouts and connection handling are left to httpx; any request-level
    failure (connect, timeout, body decoding, redirect loops) surfaces as
    ``TransportError``.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout_seconds: Total request timeout, used when ``client`` is None.
            client: Pre-built client (tests pass one with ``httpx.MockTransport``).
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
    ) -> TransportResponse:
        try:
            response = await self.client.request(method, url, headers=dict(headers))
        except httpx.RequestError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response.content,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
