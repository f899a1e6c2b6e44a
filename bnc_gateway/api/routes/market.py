from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from bnc_gateway.core.dependencies import get_market_data_client
from bnc_gateway.core.errors import AppError, UpstreamAppError, UpstreamBackoffError
from bnc_gateway.gateway.outcome import Failure, Outcome, RetryWarning, Success
from bnc_gateway.schemas.market import AggTrade, BudgetStatus, OrderBook, ServerTime, Trade
from bnc_gateway.services.market_data_service import MarketDataClient

router = APIRouter(prefix="/market", tags=["Market data"])

Client = Annotated[MarketDataClient, Depends(get_market_data_client)]
Symbol = Annotated[str, Query(min_length=1, description="Trading pair, e.g. ETHUSDT")]


def unwrap(outcome: Outcome[Any]) -> Any:
    """Return the payload of a Success or raise the matching AppError.

    Raises:
        UpstreamBackoffError: For a RetryWarning (rendered as 503 + Retry-After).
        AppError: The Failure's cause when it already is one.
        UpstreamAppError: Wrapping any other Failure cause.
    """
    if isinstance(outcome, Success):
        return outcome.payload
    if isinstance(outcome, RetryWarning):
        raise UpstreamBackoffError(outcome.retry_after_seconds, outcome.message)
    if isinstance(outcome, Failure):
        if isinstance(outcome.cause, AppError):
            raise outcome.cause
        raise UpstreamAppError(
            code="upstream_failure",
            message=str(outcome.cause),
        ) from outcome.cause
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


@router.get("/time", response_model=ServerTime)
async def server_time(client: Client) -> ServerTime:
    return ServerTime(server_time=unwrap(await client.get_server_time()))


@router.get("/depth", response_model=OrderBook)
async def order_book(
    client: Client,
    symbol: Symbol,
    limit: int | None = Query(None, description="5, 10, 20, 50, 100, 500, 1000 or 5000"),
) -> OrderBook:
    """Order book snapshot; deeper books cost more weight."""
    return unwrap(await client.get_order_book(symbol, limit))


@router.get("/trades", response_model=list[Trade])
async def recent_trades(
    client: Client,
    symbol: Symbol,
    limit: int | None = Query(None, ge=1, le=1000),
) -> list[Trade]:
    return unwrap(await client.get_recent_trades(symbol, limit))


@router.get("/historical-trades", response_model=list[Trade])
async def historical_trades(
    client: Client,
    symbol: Symbol,
    limit: int | None = Query(None, ge=1, le=1000),
    from_id: int | None = Query(None, ge=0),
) -> list[Trade]:
    return unwrap(await client.get_historical_trades(symbol, limit, from_id))


@router.get("/agg-trades", response_model=list[AggTrade])
async def aggregated_trades(
    client: Client,
    symbol: Symbol,
    from_id: int | None = Query(None, ge=0),
    start_time: int | None = Query(None, ge=0, description="Epoch milliseconds"),
    end_time: int | None = Query(None, ge=0, description="Epoch milliseconds"),
    limit: int | None = Query(None, ge=1, le=1000),
) -> list[AggTrade]:
    return unwrap(
        await client.get_aggregated_trades(
            symbol,
            from_id=from_id,
            start_time_ms=start_time,
            end_time_ms=end_time,
            limit=limit,
        )
    )


@router.get("/budget", response_model=BudgetStatus)
async def budget_status(client: Client) -> BudgetStatus:
    """Current weight budget usage; does not consume weight."""
    snapshot = client.gateway.budget.snapshot()
    return BudgetStatus(
        limit=snapshot.limit,
        accumulated=snapshot.effective_accumulated,
        remaining=snapshot.remaining,
        window_seconds=snapshot.window_seconds,
        resets_in_seconds=round(snapshot.resets_in, 3),
    )
