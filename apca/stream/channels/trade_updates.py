"""Trade update channel (order lifecycle events of the account).

Every frame carries one object tagged by ``stream``: ``authorization`` and
``listening`` are control messages of the handshake, ``trade_updates``
carries an update. There is no unsolicited greeting; the client
authenticates first and then listens to the ``trade_updates`` stream.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from ..core.config import ApiInfo
from ..core.enums import StreamType
from ..core.exceptions import AuthenticationError, DecodeError, ProtocolError, TransportError
from ..models.order import AuthorizationMessage, ListeningMessage, TradeUpdate
from ..runtime.ws.classify import Classified, ControlMessage, UserMessage, WireDecodable, is_error, tag_of
from ..runtime.ws.subscribe import MessageStream, Subscription, drive, subscribe
from ..runtime.ws.transport import TransportConfig, WebSocketTransport

logger = logging.getLogger(__name__)


class TradeUpdatesClassifier:
    """Decoding and classification rules of the trade update channel."""

    def __init__(self, update_type: type[Any] = TradeUpdate) -> None:
        if not isinstance(update_type, WireDecodable):
            raise TypeError(f"{update_type!r} cannot be decoded from the wire (no model_validate)")
        self._update_type = update_type

    def parse(self, raw: Any) -> Any:
        stream = tag_of(raw, "stream")
        data = raw.get("data")
        if stream == StreamType.TRADE_UPDATES.value:
            return self._update_type.model_validate(data)
        if stream == "authorization":
            return AuthorizationMessage.model_validate(data)
        if stream == "listening":
            return ListeningMessage.model_validate(data)
        raise DecodeError(f"unknown stream {stream!r}", payload=raw)

    def classify(self, item: Any) -> Classified:
        if isinstance(item, (AuthorizationMessage, ListeningMessage)):
            return ControlMessage(item)
        return UserMessage(item)

    def is_error(self, value: Any) -> bool:
        return is_error(value)

    def surface_unsolicited(self, control: Any) -> bool:
        return False


class TradeUpdatesSubscription:
    """Control handle of a trade update connection."""

    def __init__(self, subscription: Subscription) -> None:
        self._subscription = subscription

    async def authenticate(self, key_id: str, secret: str) -> None:
        """Authenticate the connection.

        Raises:
            AuthenticationError: If the server reports ``unauthorized``
            ProtocolError: If the server answers with an unexpected message
            TransportError: If the connection ends before an answer arrives
        """
        request = {"action": "authenticate", "data": {"key_id": key_id, "secret_key": secret}}
        response = await self._subscription.send(request)
        if response is None:
            raise TransportError("stream was closed before authorization message was received")
        if not isinstance(response, AuthorizationMessage):
            raise ProtocolError(f"server responded with an unexpected message: {response!r}")
        if not response.authorized:
            raise AuthenticationError("authentication not successful")

    async def listen(self) -> None:
        """Subscribe to the ``trade_updates`` stream."""
        request = {"action": "listen", "data": {"streams": [StreamType.TRADE_UPDATES.value]}}
        response = await self._subscription.send(request)
        if response is None:
            raise TransportError("stream was closed before listen message was received")
        if not isinstance(response, ListeningMessage):
            raise ProtocolError(f"server responded with an unexpected message: {response!r}")
        if not response.includes(StreamType.TRADE_UPDATES):
            raise ProtocolError("server did not subscribe us to trade update stream")

    async def close(self) -> None:
        await self._subscription.close()


@dataclass(frozen=True)
class TradeUpdates:
    """Order/trade lifecycle updates of the account."""

    update_type: type[Any] = TradeUpdate
    transport: Any = None
    transport_config: TransportConfig | None = None

    def classifier(self) -> TradeUpdatesClassifier:
        return TradeUpdatesClassifier(self.update_type)

    async def connect(self, api_info: ApiInfo) -> tuple[MessageStream[Any], TradeUpdatesSubscription]:
        """Connect, authenticate and listen to trade updates.

        Raises:
            TransportError: If the connection cannot be established or breaks
            AuthenticationError: If the credentials are rejected
            ProtocolError: If the server deviates from the handshake
            DecodeError: If a handshake message cannot be decoded
        """
        url = api_info.api_stream_url
        transport = self.transport or WebSocketTransport(self.transport_config)
        connection = await transport.connect(url)

        stream, inner = subscribe(connection, self.classifier())
        subscription = TradeUpdatesSubscription(inner)
        try:
            await drive(subscription.authenticate(api_info.key_id, api_info.secret), stream)
            await drive(subscription.listen(), stream)
        except asyncio.CancelledError:
            await connection.close()
            raise
        except Exception as e:
            logger.warning(f"Trade update handshake with {url} failed: {e}")
            await connection.close()
            raise

        logger.debug(f"Trade update stream {url} ready")
        return stream, subscription
