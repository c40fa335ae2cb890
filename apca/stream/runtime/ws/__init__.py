"""Runtime WebSocket helpers."""

from .classify import ControlMessage, MessageClassifier, UserMessage, WireDecodable, is_error
from .subscribe import MessageStream, Subscription, drive, subscribe
from .transport import FrameConnection, TransportConfig, WebSocketConnection, WebSocketTransport
from .unfold import FrameDecoder, Unfold, decode_frame

__all__ = [
    "TransportConfig",
    "WebSocketTransport",
    "WebSocketConnection",
    "FrameConnection",
    "FrameDecoder",
    "Unfold",
    "decode_frame",
    "ControlMessage",
    "UserMessage",
    "MessageClassifier",
    "WireDecodable",
    "is_error",
    "MessageStream",
    "Subscription",
    "drive",
    "subscribe",
]
