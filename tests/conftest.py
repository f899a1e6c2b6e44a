"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets TESTING before settings are imported so local .env files are
ignored, and provides a fake clock and a recording transport.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["TESTING"] = "true"

os.environ.setdefault("BINANCE_API_KEY", "test-binance-key")
os.environ.setdefault("BINANCE_BASE_URL", "https://api.test.local")
os.environ.setdefault("LOG_FORMAT", "plain")

from typing import Mapping

import pytest

from bnc_gateway.adapters.rate_limit.in_memory import WeightBudget
from bnc_gateway.adapters.transport.base import AbstractTransport, TransportResponse
from bnc_gateway.gateway.request_gateway import RequestGateway


class FakeClock:
    """Deterministic monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingTransport(AbstractTransport):
    """Transport returning queued responses (or raising queued errors)."""

    def __init__(self, *responses: TransportResponse | Exception) -> None:
        self.queue = list(responses)
        self.calls: list[tuple[str, str, dict[str, str]]] = []

    async def send(self, method: str, url: str, headers: Mapping[str, str]) -> TransportResponse:
        self.calls.append((method, url, dict(headers)))
        item = self.queue.pop(0) if self.queue else TransportResponse(200, {}, b"{}")
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def budget(clock: FakeClock) -> WeightBudget:
    return WeightBudget(limit=10, window_seconds=60, clock=clock)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def gateway(budget: WeightBudget, transport: RecordingTransport) -> RequestGateway:
    return RequestGateway(
        base_url="https://api.test.local",
        budget=budget,
        transport=transport,
        api_key="secret-key",
        edge_rejection_cooldown_seconds=60.0,
        transport_backoff_seconds=10.0,
    )
