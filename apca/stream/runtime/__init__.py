"""Runtime layer: transport, unfolding, classification and request driving."""

from .ws import MessageStream, Subscription, TransportConfig, WebSocketTransport, drive, subscribe

__all__ = [
    "MessageStream",
    "Subscription",
    "TransportConfig",
    "WebSocketTransport",
    "drive",
    "subscribe",
]
