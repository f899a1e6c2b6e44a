"""Application factory for the FastAPI app.

Builds the market-data client once per application and keeps it on
``app.state`` so every request shares one weight budget.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from bnc_gateway.api.routes import health_router, market_router
from bnc_gateway.core.config import Settings, settings as default_settings
from bnc_gateway.core.exception_handlers import setup_exception_handlers
from bnc_gateway.core.logging import configure_logging
from bnc_gateway.core.middleware import request_id_middleware
from bnc_gateway.services.market_data_service import (
    MarketDataClient,
    create_market_data_client,
)

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    *,
    market_data: MarketDataClient | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build from; defaults to the global settings.
        market_data: Pre-built client (tests inject one with a fake transport).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = app_settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log, debug=cfg.app.debug)

    client = market_data or create_market_data_client(cfg.binance)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app.startup",
            extra={
                "base_url": cfg.binance.base_url,
                "weight_limit": cfg.binance.weight_limit,
                "window_s": cfg.binance.window_seconds,
            },
        )
        try:
            yield
        finally:
            close = getattr(client.gateway.transport, "aclose", None)
            if close is not None:
                await close()

    app = FastAPI(
        title="Binance Market Data Gateway",
        description=(
            "Weight-budgeted proxy for Binance spot market data. Calls that "
            "would exceed the per-minute weight budget, or that the API asks to "
            "back off, return 503 with a Retry-After header."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.market_data = client
    app.state.request_id_header = cfg.log.request_id_header

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(market_router, prefix="/v1")
    app.include_router(health_router)

    return app
