"""Tests for the httpx transport adapter using httpx.MockTransport."""

import httpx
import pytest

from bnc_gateway.adapters.rate_limit.in_memory import WeightBudget
from bnc_gateway.adapters.transport.httpx_transport import HttpxTransport
from bnc_gateway.core.errors import TransportError
from bnc_gateway.gateway.outcome import CallSpec, RetryWarning, Success
from bnc_gateway.gateway.request_gateway import RequestGateway


def _transport(handler) -> HttpxTransport:
    return HttpxTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_send_returns_status_headers_and_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(429, headers={"Retry-After": "9"}, content=b"slow down")

    async with _transport(handler) as transport:
        response = await transport.send(
            "GET",
            "https://api.test.local/api/v3/time",
            {"X-MBX-APIKEY": "abc"},
        )

    assert response.status_code == 429
    assert response.header("retry-after") == "9"
    assert response.body == b"slow down"
    assert seen[0].method == "GET"
    assert seen[0].headers["x-mbx-apikey"] == "abc"


@pytest.mark.asyncio
async def test_connect_error_maps_to_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = _transport(handler)

    with pytest.raises(TransportError) as exc_info:
        await transport.send("GET", "https://api.test.local/api/v3/time", {})

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert "ConnectError" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_through_gateway_is_warning() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    gateway = RequestGateway(
        base_url="https://api.test.local",
        budget=WeightBudget(limit=10),
        transport=_transport(handler),
        transport_backoff_seconds=2.5,
    )

    outcome = await gateway.execute(CallSpec("/api/v3/time"))

    assert outcome == RetryWarning(retry_after_seconds=2.5, message="transport failure")


@pytest.mark.asyncio
async def test_end_to_end_success_through_gateway() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["symbol"] == "ETHUSDT"
        return httpx.Response(200, json={"lastUpdateId": 1, "bids": [], "asks": []})

    gateway = RequestGateway(
        base_url="https://api.test.local",
        budget=WeightBudget(limit=10),
        transport=_transport(handler),
    )

    outcome = await gateway.execute(CallSpec("/api/v3/depth", {"symbol": "ETHUSDT"}))

    assert isinstance(outcome, Success)
    assert b"lastUpdateId" in outcome.payload


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    transport = HttpxTransport(client=client)

    await transport.aclose()

    assert client.is_closed is False
    await client.aclose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        lambda request: httpx.DecodingError("bad gzip", request=request),
        lambda request: httpx.TooManyRedirects("redirect loop", request=request),
    ],
)
async def test_request_errors_through_gateway_are_warnings(error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error(request)

    gateway = RequestGateway(
        base_url="https://api.test.local",
        budget=WeightBudget(limit=10),
        transport=_transport(handler),
        transport_backoff_seconds=4.0,
    )

    outcome = await gateway.execute(CallSpec("/api/v3/time"))

    assert outcome == RetryWarning(retry_after_seconds=4.0, message="transport failure")
