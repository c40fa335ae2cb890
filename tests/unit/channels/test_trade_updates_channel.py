"""Unit tests for the trade update channel."""

from __future__ import annotations

import pytest

from apca.stream.channels import TradeUpdates
from apca.stream.core import AuthenticationError, ProtocolError, TradeEvent, TransportError
from apca.stream.models import TradeUpdate

AUTHORIZED = {"stream": "authorization", "data": {"status": "authorized", "action": "authenticate"}}
LISTENING = {"stream": "listening", "data": {"streams": ["trade_updates"]}}


@pytest.fixture
def channel(transport):
    return TradeUpdates(transport=transport)


class TestTradeUpdates:
    """Test TradeUpdates.connect() and streaming."""

    @pytest.mark.asyncio
    async def test_handshake(self, channel, connection, transport, api_info):
        connection.respond("authenticate", AUTHORIZED)
        connection.respond("listen", LISTENING)

        stream, _ = await channel.connect(api_info)

        assert transport.urls == ["wss://paper-api.example.com/stream"]
        assert connection.sent == [
            {"action": "authenticate", "data": {"key_id": "KEY", "secret_key": "SECRET"}},
            {"action": "listen", "data": {"streams": ["trade_updates"]}},
        ]
        assert not connection.closed

    @pytest.mark.asyncio
    async def test_updates_after_handshake(self, channel, connection, api_info, order_payload):
        connection.respond("authenticate", AUTHORIZED)
        connection.respond("listen", LISTENING)
        stream, subscription = await channel.connect(api_info)

        connection.push({"stream": "trade_updates", "data": {"event": "new", "order": order_payload}})
        update = await stream.__anext__()

        assert isinstance(update, TradeUpdate)
        assert update.event is TradeEvent.NEW
        assert update.order.symbol == "AAPL"

        await subscription.close()
        assert connection.closed

    @pytest.mark.asyncio
    async def test_unauthorized(self, channel, connection, api_info):
        connection.respond(
            "authenticate", {"stream": "authorization", "data": {"status": "unauthorized", "action": "authenticate"}}
        )

        with pytest.raises(AuthenticationError, match="authentication not successful"):
            await channel.connect(api_info)
        assert connection.closed

    @pytest.mark.asyncio
    async def test_not_listening(self, channel, connection, api_info):
        connection.respond("authenticate", AUTHORIZED)
        connection.respond("listen", {"stream": "listening", "data": {"streams": []}})

        with pytest.raises(ProtocolError, match="did not subscribe us"):
            await channel.connect(api_info)
        assert connection.closed

    @pytest.mark.asyncio
    async def test_closed_before_authorization(self, channel, connection, api_info):
        connection.push_close()

        with pytest.raises(TransportError):
            await channel.connect(api_info)
