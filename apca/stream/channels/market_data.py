"""Realtime market data channel (bars, quotes, trades).

Handshake:
    1. The server sends ``[{"T": "success", "msg": "connected"}]`` unprompted.
    2. ``{"action": "auth", "key": ..., "secret": ...}`` is answered with
       ``[{"T": "success", "msg": "authenticated"}]`` or an error message.
    3. Optionally ``{"action": "subscribe", "bars": [...], ...}`` is answered
       with ``[{"T": "subscription", "bars": [...], ...}]``.

After the handshake, ``subscribe``/``unsubscribe`` can be issued at any time
through ``drive``. The server always echoes the complete resulting state,
which replaces the locally cached one.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..core.config import ApiInfo
from ..core.enums import Feed, ServerErrorCode
from ..core.exceptions import AuthenticationError, DecodeError, ProtocolError, TransportError
from ..models.market_data import (
    Bar,
    ErrorMessage,
    Quote,
    SubscriptionMessage,
    SuccessMessage,
    Trade,
    parse_control,
)
from ..models.symbols import MarketData
from ..runtime.ws.classify import Classified, ControlMessage, UserMessage, WireDecodable, is_error, tag_of
from ..runtime.ws.subscribe import MessageStream, Subscription, drive, subscribe
from ..runtime.ws.transport import TransportConfig, WebSocketTransport

logger = logging.getLogger(__name__)

_CONTROL_TYPES = (SuccessMessage, ErrorMessage, SubscriptionMessage)


class MarketDataClassifier:
    """Decoding and classification rules of the market data channel.

    Event payloads are dispatched on their ``T`` tag to the configured event
    types, which may be any ``WireDecodable`` class.
    """

    def __init__(
        self,
        bar_type: type[Any] = Bar,
        quote_type: type[Any] = Quote,
        trade_type: type[Any] = Trade,
    ) -> None:
        for event_type in (bar_type, quote_type, trade_type):
            if not isinstance(event_type, WireDecodable):
                raise TypeError(f"{event_type!r} cannot be decoded from the wire (no model_validate)")
        self._events: dict[str, type[Any]] = {"b": bar_type, "q": quote_type, "t": trade_type}

    def parse(self, raw: Any) -> Any:
        tag = tag_of(raw, "T")
        event_type = self._events.get(tag)
        if event_type is not None:
            return event_type.model_validate(raw)
        control = parse_control(tag, raw)
        if control is None:
            raise DecodeError(f"unknown message type {tag!r}", payload=raw)
        return control

    def classify(self, item: Any) -> Classified:
        if isinstance(item, _CONTROL_TYPES):
            return ControlMessage(item)
        return UserMessage(item)

    def is_error(self, value: Any) -> bool:
        return is_error(value)

    def surface_unsolicited(self, control: Any) -> bool:
        # Errors the server reports on its own (e.g. slow client) still
        # matter to the application.
        return isinstance(control, ErrorMessage)


class MarketDataSubscription:
    """Control handle of a market data connection.

    Keeps the last subscription state confirmed by the server. The state only
    changes when the server confirms a subscribe/unsubscribe request.
    """

    def __init__(self, subscription: Subscription) -> None:
        self._subscription = subscription
        self._subscriptions = MarketData()

    @property
    def subscriptions(self) -> MarketData:
        """Server-confirmed subscription state."""
        return self._subscriptions

    async def authenticate(self, key_id: str, secret: str) -> None:
        """Authenticate the connection.

        Raises:
            AuthenticationError: If the server rejects the credentials
            ProtocolError: If the server answers with an unexpected message
            TransportError: If the connection ends before an answer arrives
        """
        response = await self._subscription.send({"action": "auth", "key": key_id, "secret": secret})
        if response is None:
            raise TransportError("stream was closed before authentication response was received")
        if isinstance(response, ErrorMessage):
            raise AuthenticationError(
                f"failed to authenticate with server: {response.msg} "
                f"({ServerErrorCode.describe(response.code)})",
                code=response.code,
            )
        if not isinstance(response, SuccessMessage) or response.msg != "authenticated":
            raise ProtocolError(f"server responded with an unexpected message: {response!r}")

    async def subscribe(self, data: MarketData) -> None:
        """Subscribe to the given symbols in addition to existing subscriptions."""
        await self._change("subscribe", data)

    async def unsubscribe(self, data: MarketData) -> None:
        """Remove the given symbols from existing subscriptions."""
        await self._change("unsubscribe", data)

    async def _change(self, action: str, data: MarketData) -> None:
        response = await self._subscription.send({"action": action, **data.to_wire()})
        if response is None:
            raise TransportError(f"stream was closed before {action} confirmation was received")
        if isinstance(response, ErrorMessage):
            raise ProtocolError(f"failed to {action}: {response}", code=response.code)
        if not isinstance(response, SubscriptionMessage):
            raise ProtocolError(f"server responded with an unexpected message: {response!r}")
        self._subscriptions = response.to_market_data()
        logger.debug(f"Subscription state after {action}: {self._subscriptions}")

    async def close(self) -> None:
        await self._subscription.close()


async def _await_connected(subscription: Subscription, stream: MessageStream[Any]) -> None:
    response = await drive(subscription.read(), stream)
    if response is None:
        raise TransportError("stream was closed before connection confirmation was received")
    if isinstance(response, ErrorMessage):
        raise ProtocolError(f"server refused connection: {response}", code=response.code)
    if not isinstance(response, SuccessMessage) or response.msg != "connected":
        raise ProtocolError(f"server responded with an unexpected message: {response!r}")


@dataclass(frozen=True)
class RealtimeData:
    """Realtime market data for a given feed.

    ``bar_type``, ``quote_type`` and ``trade_type`` may be replaced by any
    ``WireDecodable`` classes accepting the same wire payloads.
    """

    feed: Feed = Feed.IEX
    bar_type: type[Any] = Bar
    quote_type: type[Any] = Quote
    trade_type: type[Any] = Trade
    transport: Any = None
    transport_config: TransportConfig | None = None

    def classifier(self) -> MarketDataClassifier:
        return MarketDataClassifier(self.bar_type, self.quote_type, self.trade_type)

    async def connect(
        self,
        api_info: ApiInfo,
        subscriptions: MarketData | None = None,
    ) -> tuple[MessageStream[Any], MarketDataSubscription]:
        """Connect, authenticate and optionally subscribe.

        No handle is returned unless every step succeeded; on failure the
        connection is closed before the error propagates.

        Raises:
            TransportError: If the connection cannot be established or breaks
            AuthenticationError: If the credentials are rejected
            ProtocolError: If the server deviates from the handshake
            DecodeError: If a handshake message cannot be decoded
        """
        url = api_info.data_stream_url(self.feed)
        transport = self.transport or WebSocketTransport(self.transport_config)
        classifier = self.classifier()
        connection = await transport.connect(url)

        stream, inner = subscribe(connection, classifier)
        subscription = MarketDataSubscription(inner)
        try:
            await _await_connected(inner, stream)
            await drive(subscription.authenticate(api_info.key_id, api_info.secret), stream)
            if subscriptions is not None and not subscriptions.is_empty:
                await drive(subscription.subscribe(subscriptions), stream)
        except asyncio.CancelledError:
            await connection.close()
            raise
        except Exception as e:
            logger.warning(f"Market data handshake with {url} failed: {e}")
            await connection.close()
            raise

        logger.debug(f"Market data stream {url} ready")
        return stream, subscription
