"""Pydantic schemas for market-data payloads.

Field aliases follow the wire format; prices and quantities arrive as decimal
strings and are parsed to float.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ServerTime(_WireModel):
    """Server clock in milliseconds since the epoch."""

    server_time: int = Field(..., alias="serverTime")


class Trade(_WireModel):
    """Single trade from the recent or historical trades lists."""

    id: int
    price: float
    qty: float
    quote_qty: float = Field(..., alias="quoteQty")
    time: int
    is_buyer_maker: bool = Field(..., alias="isBuyerMaker")
    is_best_match: bool = Field(..., alias="isBestMatch")


class AggTrade(_WireModel):
    """Trades that filled at the same time, from one taker order, at one price."""

    agg_trade_id: int = Field(..., alias="a")
    price: float = Field(..., alias="p")
    qty: float = Field(..., alias="q")
    first_trade_id: int = Field(..., alias="f")
    last_trade_id: int = Field(..., alias="l")
    time: int = Field(..., alias="T")
    is_buyer_maker: bool = Field(..., alias="m")
    is_best_match: bool = Field(..., alias="M")


class PriceLevel(BaseModel):
    """One side entry of the order book; sent as a ``[price, qty]`` pair."""

    price: float
    qty: float

    @model_validator(mode="before")
    @classmethod
    def _from_pair(cls, data: Any) -> Any:
        if isinstance(data, (list, tuple)):
            if len(data) != 2:
                raise ValueError("price level must be a [price, qty] pair")
            return {"price": data[0], "qty": data[1]}
        return data


class OrderBook(_WireModel):
    last_update_id: int = Field(..., alias="lastUpdateId")
    bids: list[PriceLevel] = Field(default_factory=list)
    asks: list[PriceLevel] = Field(default_factory=list)


class BinanceErrorEnvelope(BaseModel):
    """Error body the API returns instead of the requested resource."""

    model_config = ConfigDict(extra="forbid")

    code: int
    msg: str


class BudgetStatus(BaseModel):
    """Weight budget view exposed by the HTTP surface."""

    limit: int = Field(..., description="Weight allowed per window.")
    accumulated: int = Field(..., description="Weight spent in the current window.")
    remaining: int = Field(..., description="Weight still available in the current window.")
    window_seconds: float = Field(..., description="Window length in seconds.")
    resets_in_seconds: float = Field(..., description="Seconds until the window rolls over.")
