from __future__ import annotations

from bnc_gateway.api.routes.health import router as health_router
from bnc_gateway.api.routes.market import router as market_router

__all__ = ["health_router", "market_router"]
