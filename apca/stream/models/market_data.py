"""Realtime market data payloads.

Events (bars, quotes, trades) and the control payloads of the market data
channel. All numeric price/size fields are ``Decimal``; frames are decoded
with ``parse_float=Decimal`` so no value ever passes through a float.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ._time import parse_timestamp
from .symbols import MarketData

_WIRE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Bar(BaseModel):
    """Aggregate (minute) bar for a symbol."""

    symbol: str = Field(..., alias="S", min_length=1)
    open_price: Decimal = Field(..., alias="o")
    high_price: Decimal = Field(..., alias="h")
    low_price: Decimal = Field(..., alias="l")
    close_price: Decimal = Field(..., alias="c")
    volume: Decimal = Field(..., alias="v", ge=0)
    timestamp: datetime = Field(..., alias="t")
    trade_count: int | None = Field(None, alias="n")
    vwap: Decimal | None = Field(None, alias="vw")

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)

    model_config = _WIRE_CONFIG


class Quote(BaseModel):
    """Best bid/ask quote for a symbol."""

    symbol: str = Field(..., alias="S", min_length=1)
    bid_exchange: str | None = Field(None, alias="bx")
    bid_price: Decimal = Field(..., alias="bp")
    bid_size: Decimal = Field(..., alias="bs")
    ask_exchange: str | None = Field(None, alias="ax")
    ask_price: Decimal = Field(..., alias="ap")
    ask_size: Decimal = Field(..., alias="as")
    timestamp: datetime = Field(..., alias="t")
    conditions: list[str] = Field(default_factory=list, alias="c")
    tape: str | None = Field(None, alias="z")

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)

    model_config = _WIRE_CONFIG


class Trade(BaseModel):
    """Single executed trade for a symbol."""

    symbol: str = Field(..., alias="S", min_length=1)
    trade_id: int = Field(..., alias="i")
    exchange: str | None = Field(None, alias="x")
    price: Decimal = Field(..., alias="p")
    size: Decimal = Field(..., alias="s")
    timestamp: datetime = Field(..., alias="t")
    conditions: list[str] = Field(default_factory=list, alias="c")
    tape: str | None = Field(None, alias="z")

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)

    model_config = _WIRE_CONFIG


class SuccessMessage(BaseModel):
    """``{"T": "success", "msg": ...}``: connected / authenticated markers."""

    msg: str

    model_config = _WIRE_CONFIG


class ErrorMessage(BaseModel):
    """``{"T": "error", "code": ..., "msg": ...}`` as reported by the server."""

    code: int
    msg: str

    model_config = _WIRE_CONFIG

    def __str__(self) -> str:
        return f"{self.msg} ({self.code})"


class SubscriptionMessage(BaseModel):
    """``{"T": "subscription", ...}``: the full resulting subscription state."""

    bars: list[str] | None = None
    quotes: list[str] | None = None
    trades: list[str] | None = None

    model_config = _WIRE_CONFIG

    def to_market_data(self) -> MarketData:
        return MarketData(bars=self.bars, quotes=self.quotes, trades=self.trades)


def parse_control(tag: str, payload: dict[str, Any]) -> BaseModel | None:
    """Parse a control payload by its ``T`` tag, or return None for non-control tags."""
    model = _CONTROL_TYPES.get(tag)
    if model is None:
        return None
    return model.model_validate(payload)


_CONTROL_TYPES: dict[str, type[BaseModel]] = {
    "success": SuccessMessage,
    "error": ErrorMessage,
    "subscription": SubscriptionMessage,
}
