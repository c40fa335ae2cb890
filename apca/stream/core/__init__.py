"""Core components."""

from .config import (
    API_BASE_URL,
    DATA_BASE_URL,
    DATA_STREAM_BASE_URL,
    LIVE_API_BASE_URL,
    ApiInfo,
    stream_url_from_base,
)
from .enums import (
    AssetClass,
    Feed,
    OrderSide,
    OrderStatus,
    OrderType,
    ServerErrorCode,
    StreamType,
    TimeInForce,
    TradeEvent,
)
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    ProtocolError,
    ProviderError,
    RateLimitError,
    StreamError,
    TransportError,
    UnauthorizedError,
)

__all__ = [
    "API_BASE_URL",
    "LIVE_API_BASE_URL",
    "DATA_BASE_URL",
    "DATA_STREAM_BASE_URL",
    "ApiInfo",
    "stream_url_from_base",
    # Enums
    "AssetClass",
    "Feed",
    "OrderSide",
    "OrderStatus",
    "OrderType",
    "ServerErrorCode",
    "StreamType",
    "TimeInForce",
    "TradeEvent",
    # Exceptions
    "StreamError",
    "ConfigurationError",
    "TransportError",
    "DecodeError",
    "ProtocolError",
    "AuthenticationError",
    "ProviderError",
    "RateLimitError",
    "UnauthorizedError",
]
