"""APCA Stream - Async event streams for the Alpaca broker and market data APIs."""

from .channels import (
    MarketDataClassifier,
    MarketDataSubscription,
    RealtimeData,
    TradeUpdates,
    TradeUpdatesClassifier,
    TradeUpdatesSubscription,
)
from .clients import Client, Subscribable
from .core import (
    ApiInfo,
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    Feed,
    ProtocolError,
    ProviderError,
    RateLimitError,
    StreamError,
    StreamType,
    TradeEvent,
    TransportError,
    UnauthorizedError,
)
from .models import (
    Bar,
    ErrorMessage,
    MarketData,
    Order,
    Quote,
    SymbolSet,
    Trade,
    TradeUpdate,
)
from .runtime.ws import (
    ControlMessage,
    MessageStream,
    Subscription,
    TransportConfig,
    UserMessage,
    WebSocketTransport,
    drive,
    subscribe,
)
from .utils import HTTPClient

__version__ = "0.1.0"

__all__ = [
    # Client
    "Client",
    "Subscribable",
    "HTTPClient",
    "ApiInfo",
    # Channels
    "RealtimeData",
    "MarketDataClassifier",
    "MarketDataSubscription",
    "TradeUpdates",
    "TradeUpdatesClassifier",
    "TradeUpdatesSubscription",
    # Engine
    "MessageStream",
    "Subscription",
    "ControlMessage",
    "UserMessage",
    "TransportConfig",
    "WebSocketTransport",
    "drive",
    "subscribe",
    # Models
    "Bar",
    "Quote",
    "Trade",
    "Order",
    "TradeUpdate",
    "ErrorMessage",
    "MarketData",
    "SymbolSet",
    # Enums
    "Feed",
    "StreamType",
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
