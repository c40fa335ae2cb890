"""Order and trade update payloads of the trade-update channel."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.enums import AssetClass, OrderSide, OrderStatus, OrderType, StreamType, TimeInForce, TradeEvent
from ._time import parse_timestamp

_WIRE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Order(BaseModel):
    """Order as embedded in a trade update."""

    id: str = Field(..., min_length=1)
    client_order_id: str
    status: OrderStatus
    created_at: datetime
    updated_at: datetime | None = None
    submitted_at: datetime | None = None
    filled_at: datetime | None = None
    expired_at: datetime | None = None
    canceled_at: datetime | None = None
    asset_class: AssetClass = AssetClass.US_EQUITY
    asset_id: str
    symbol: str = Field(..., min_length=1)
    quantity: Decimal | None = Field(None, alias="qty")
    notional: Decimal | None = None
    filled_quantity: Decimal = Field(Decimal("0"), alias="filled_qty")
    filled_avg_price: Decimal | None = None
    type: OrderType
    side: OrderSide
    time_in_force: TimeInForce
    limit_price: Decimal | None = None
    stop_price: Decimal | None = None
    extended_hours: bool = False

    @field_validator(
        "created_at", "updated_at", "submitted_at", "filled_at", "expired_at", "canceled_at", mode="before"
    )
    @classmethod
    def validate_timestamps(cls, v: Any) -> Any:
        return parse_timestamp(v)

    model_config = _WIRE_CONFIG


class TradeUpdate(BaseModel):
    """Order lifecycle update received through the ``trade_updates`` stream.

    ``price``, ``quantity`` and ``position_quantity`` are only present for
    fill and partial-fill events.
    """

    event: TradeEvent
    order: Order
    timestamp: datetime | None = None
    price: Decimal | None = None
    quantity: Decimal | None = Field(None, alias="qty")
    position_quantity: Decimal | None = Field(None, alias="position_qty")

    @field_validator("timestamp", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        return parse_timestamp(v)

    model_config = _WIRE_CONFIG


class AuthorizationMessage(BaseModel):
    """``{"stream": "authorization", "data": {"status": ..., "action": ...}}``."""

    status: str
    action: str | None = None

    model_config = _WIRE_CONFIG

    @property
    def authorized(self) -> bool:
        return self.status == "authorized"


class ListeningMessage(BaseModel):
    """``{"stream": "listening", "data": {"streams": [...]}}``."""

    streams: list[str] = Field(default_factory=list)

    model_config = _WIRE_CONFIG

    def includes(self, stream: StreamType) -> bool:
        return stream.value in self.streams
