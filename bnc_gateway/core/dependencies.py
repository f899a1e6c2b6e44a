"""FastAPI dependencies exposing application-scoped objects to routes."""

from __future__ import annotations

from fastapi import Request

from bnc_gateway.services.market_data_service import MarketDataClient


def get_market_data_client(request: Request) -> MarketDataClient:
    """Return the client created by the app factory.

    One client (and therefore one weight budget) exists per application, so
    every route spends the same budget.
    """

    return request.app.state.market_data
