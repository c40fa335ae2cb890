"""Data models for the streaming channels.

Architecture:
    Pydantic v2 models for every payload the engine decodes, plus the
    subscription state types. Event models are immutable (frozen=True) and
    keep prices and sizes as Decimal.

Model Categories:
    - Market data events: Bar, Quote, Trade
    - Trade update events: TradeUpdate (with its Order)
    - Control payloads: SuccessMessage, ErrorMessage, SubscriptionMessage,
      AuthorizationMessage, ListeningMessage
    - Subscription state: SymbolSet, MarketData
"""

from .market_data import Bar, ErrorMessage, Quote, SubscriptionMessage, SuccessMessage, Trade
from .order import AuthorizationMessage, ListeningMessage, Order, TradeUpdate
from .symbols import WILDCARD, MarketData, SymbolSet, is_normalized, normalize

__all__ = [
    "Bar",
    "Quote",
    "Trade",
    "Order",
    "TradeUpdate",
    "SuccessMessage",
    "ErrorMessage",
    "SubscriptionMessage",
    "AuthorizationMessage",
    "ListeningMessage",
    "MarketData",
    "SymbolSet",
    "WILDCARD",
    "is_normalized",
    "normalize",
]
