"""Core enumerations shared by the streaming channels and payload models.

Architecture:
    String enums map one-to-one onto wire values so pydantic models can
    validate payloads directly and outbound commands can be serialized with
    ``.value``.

Design Decisions:
    - String enums: Allow easy serialization and wire compatibility
    - Lenient lifecycle enums: Unknown order/trade states decode to UNKNOWN
      instead of failing the whole payload, because the broker adds states
      over time

Key Types:
    - Feed: Market data source (IEX or SIP)
    - StreamType: Account-level streams of the trade-update channel
    - TradeEvent: Order lifecycle events reported through trade updates
    - OrderStatus, OrderSide, OrderType, TimeInForce, AssetClass: order fields
    - ServerErrorCode: Error codes reported by the market data server
"""

from __future__ import annotations

from enum import Enum, IntEnum


class _LenientStrEnum(str, Enum):
    """String enum decoding unrecognised values to ``UNKNOWN``."""

    @classmethod
    def _missing_(cls, value: object) -> _LenientStrEnum | None:
        return cls.__members__.get("UNKNOWN")


class Feed(str, Enum):
    """Source of realtime market data.

    IEX is available with every plan; SIP requires the unlimited data plan.
    """

    IEX = "iex"
    SIP = "sip"


class StreamType(str, Enum):
    """Streams that can be listened to on the trade-update channel."""

    ACCOUNT_UPDATES = "account_updates"
    TRADE_UPDATES = "trade_updates"


class TradeEvent(_LenientStrEnum):
    """Order lifecycle event carried by a trade update."""

    NEW = "new"
    REPLACED = "replaced"
    REPLACE_REJECTED = "order_replace_rejected"
    PARTIAL_FILL = "partial_fill"
    FILL = "fill"
    DONE_FOR_DAY = "done_for_day"
    CANCELED = "canceled"
    CANCEL_REJECTED = "order_cancel_rejected"
    EXPIRED = "expired"
    PENDING_CANCEL = "pending_cancel"
    STOPPED = "stopped"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    PENDING_NEW = "pending_new"
    PENDING_REPLACE = "pending_replace"
    CALCULATED = "calculated"
    # Any state not listed above. Seeing it usually means this list is stale.
    UNKNOWN = "unknown"


class OrderStatus(_LenientStrEnum):
    """Status of an order."""

    NEW = "new"
    REPLACED = "replaced"
    PARTIALLY_FILLED = "partially_filled"
    FILLED = "filled"
    DONE_FOR_DAY = "done_for_day"
    CANCELED = "canceled"
    EXPIRED = "expired"
    ACCEPTED = "accepted"
    PENDING_NEW = "pending_new"
    ACCEPTED_FOR_BIDDING = "accepted_for_bidding"
    PENDING_CANCEL = "pending_cancel"
    PENDING_REPLACE = "pending_replace"
    STOPPED = "stopped"
    REJECTED = "rejected"
    SUSPENDED = "suspended"
    CALCULATED = "calculated"
    HELD = "held"
    UNKNOWN = "unknown"


class OrderSide(str, Enum):
    """Side of an order."""

    BUY = "buy"
    SELL = "sell"


class OrderType(_LenientStrEnum):
    """Type of an order."""

    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"
    STOP_LIMIT = "stop_limit"
    TRAILING_STOP = "trailing_stop"
    UNKNOWN = "unknown"


class TimeInForce(_LenientStrEnum):
    """How long an order stays active."""

    DAY = "day"
    GTC = "gtc"
    OPG = "opg"
    CLS = "cls"
    IOC = "ioc"
    FOK = "fok"
    UNKNOWN = "unknown"


class AssetClass(_LenientStrEnum):
    """Class of the asset an order refers to."""

    US_EQUITY = "us_equity"
    CRYPTO = "crypto"
    UNKNOWN = "unknown"


class ServerErrorCode(IntEnum):
    """Error codes reported by the market data server in ``{"T": "error"}``."""

    INVALID_SYNTAX = 400
    NOT_AUTHENTICATED = 401
    AUTH_FAILED = 402
    ALREADY_AUTHENTICATED = 403
    AUTH_TIMEOUT = 404
    SYMBOL_LIMIT_EXCEEDED = 405
    CONNECTION_LIMIT_EXCEEDED = 406
    SLOW_CLIENT = 407
    INSUFFICIENT_SUBSCRIPTION = 409
    INTERNAL_ERROR = 500

    @classmethod
    def describe(cls, code: int | None) -> str:
        """Human-readable name for a code, falling back to the raw number."""
        try:
            return cls(code).name.lower().replace("_", " ")
        except ValueError:
            return f"error {code}"
