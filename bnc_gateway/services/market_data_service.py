"""Market-data client built on the rate-limited request gateway.

Each operation maps its arguments onto a ``CallSpec`` (endpoint, query
parameters and weight from the API's cost table), runs it through the
gateway, and decodes a successful body into a typed model. Warnings and
failures from the gateway are passed through unchanged; a body that cannot
be decoded becomes a ``Failure``.
"""

from __future__ import annotations

import logging
from typing import Any

from bnc_gateway.adapters.rate_limit.base import AbstractWeightBudget
from bnc_gateway.adapters.rate_limit.in_memory import WeightBudget
from bnc_gateway.adapters.transport.base import AbstractTransport
from bnc_gateway.adapters.transport.httpx_transport import HttpxTransport
from bnc_gateway.core.config import BinanceSettings
from bnc_gateway.core.errors import UpstreamAppError, ValidationAppError
from bnc_gateway.gateway.outcome import CallSpec, Failure, Outcome, Success
from bnc_gateway.gateway.request_gateway import RequestGateway
from bnc_gateway.schemas.market import AggTrade, OrderBook, ServerTime, Trade
from bnc_gateway.services.decoding import decode_payload

logger = logging.getLogger(__name__)

# Order book weight by requested depth; None means "server default" (100).
ORDER_BOOK_WEIGHTS: dict[int | None, int] = {
    None: 1,
    5: 1,
    10: 1,
    20: 1,
    50: 1,
    100: 1,
    500: 5,
    1000: 10,
    5000: 50,
}

SERVER_TIME_WEIGHT = 1
RECENT_TRADES_WEIGHT = 1
HISTORICAL_TRADES_WEIGHT = 5
AGG_TRADES_WEIGHT = 1


def _query(**params: Any) -> dict[str, str]:
    """Drop unset optional parameters and stringify the rest."""
    return {key: str(value) for key, value in params.items() if value is not None}


class MarketDataClient:
    """Typed market-data operations.

    Attributes:
        gateway: Request gateway shared by all operations of this client.
    """

    def __init__(self, gateway: RequestGateway) -> None:
        self.gateway = gateway

    async def _call(self, spec: CallSpec, target: Any) -> Outcome[Any]:
        outcome = await self.gateway.execute(spec)
        if not isinstance(outcome, Success):
            return outcome

        try:
            return Success(decode_payload(outcome.payload, target))
        except UpstreamAppError as exc:
            logger.warning(
                "market_data.decode_failed",
                extra={
                    "endpoint": spec.endpoint,
                    "error_code": exc.code,
                    "error_message": exc.message,
                },
            )
            return Failure(exc)

    async def get_server_time(self) -> Outcome[int]:
        """Return the server time in milliseconds since the epoch."""
        outcome = await self._call(
            CallSpec("/api/v3/time", weight=SERVER_TIME_WEIGHT),
            ServerTime,
        )
        if isinstance(outcome, Success):
            return Success(outcome.payload.server_time)
        return outcome

    async def get_order_book(self, symbol: str, limit: int | None = None) -> Outcome[OrderBook]:
        """Fetch the order book for ``symbol``.

        Args:
            symbol: Trading pair, e.g. ``ETHUSDT``.
            limit: Depth; one of 5, 10, 20, 50, 100, 500, 1000, 5000 or None.

        Raises:
            ValidationAppError: If ``limit`` is not an allowed depth.
        """
        if limit not in ORDER_BOOK_WEIGHTS:
            raise ValidationAppError(
                code="invalid_order_book_limit",
                message=(
                    f"Order book limit {limit} is not allowed. Valid values: "
                    f"{sorted(k for k in ORDER_BOOK_WEIGHTS if k is not None)}"
                ),
            )
        spec = CallSpec(
            "/api/v3/depth",
            _query(symbol=symbol, limit=limit),
            weight=ORDER_BOOK_WEIGHTS[limit],
        )
        return await self._call(spec, OrderBook)

    async def get_recent_trades(self, symbol: str, limit: int | None = None) -> Outcome[list[Trade]]:
        spec = CallSpec(
            "/api/v3/trades",
            _query(symbol=symbol, limit=limit),
            weight=RECENT_TRADES_WEIGHT,
        )
        return await self._call(spec, list[Trade])

    async def get_historical_trades(
        self,
        symbol: str,
        limit: int | None = None,
        from_id: int | None = None,
    ) -> Outcome[list[Trade]]:
        """Look up older trades. The API requires a key for this endpoint."""
        spec = CallSpec(
            "/api/v3/historicalTrades",
            _query(symbol=symbol, limit=limit, fromId=from_id),
            weight=HISTORICAL_TRADES_WEIGHT,
        )
        return await self._call(spec, list[Trade])

    async def get_aggregated_trades(
        self,
        symbol: str,
        from_id: int | None = None,
        start_time_ms: int | None = None,
        end_time_ms: int | None = None,
        limit: int | None = None,
    ) -> Outcome[list[AggTrade]]:
        """Fetch compressed trades; all filters are optional."""
        spec = CallSpec(
            "/api/v3/aggTrades",
            _query(
                symbol=symbol,
                fromId=from_id,
                startTime=start_time_ms,
                endTime=end_time_ms,
                limit=limit,
            ),
            weight=AGG_TRADES_WEIGHT,
        )
        return await self._call(spec, list[AggTrade])


def create_market_data_client(
    binance_settings: BinanceSettings,
    *,
    budget: AbstractWeightBudget | None = None,
    transport: AbstractTransport | None = None,
) -> MarketDataClient:
    """Wire a client from settings.

    Args:
        binance_settings: API and budget configuration.
        budget: Existing budget to share with other clients using the same
            credential; a new one is created when omitted.
        transport: HTTP sender; an ``HttpxTransport`` is created when omitted.

    Returns:
        MarketDataClient ready to use.
    """
    if budget is None:
        budget = WeightBudget(
            limit=binance_settings.weight_limit,
            window_seconds=binance_settings.window_seconds,
        )
    if transport is None:
        transport = HttpxTransport(timeout_seconds=binance_settings.timeout_seconds)

    gateway = RequestGateway(
        base_url=binance_settings.base_url,
        budget=budget,
        transport=transport,
        api_key=binance_settings.api_key,
        edge_rejection_cooldown_seconds=binance_settings.edge_rejection_cooldown_seconds,
        transport_backoff_seconds=binance_settings.transport_backoff_seconds,
    )
    return MarketDataClient(gateway)
