"""Streaming channels: realtime market data and trade updates."""

from .market_data import MarketDataClassifier, MarketDataSubscription, RealtimeData
from .trade_updates import TradeUpdates, TradeUpdatesClassifier, TradeUpdatesSubscription

__all__ = [
    "RealtimeData",
    "MarketDataClassifier",
    "MarketDataSubscription",
    "TradeUpdates",
    "TradeUpdatesClassifier",
    "TradeUpdatesSubscription",
]
