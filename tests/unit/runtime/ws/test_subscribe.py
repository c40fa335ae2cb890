"""Unit tests for the request driver and message stream.

Tests focus on ordering guarantees while a request is in flight and on how
connection failures reach both the request and the application.
"""

from __future__ import annotations

import asyncio

import pytest

from apca.stream.channels import MarketDataClassifier
from apca.stream.core import DecodeError, TransportError
from apca.stream.models import Bar, ErrorMessage, SubscriptionMessage, SuccessMessage, Trade
from apca.stream.runtime.ws import drive, subscribe


def _trade(symbol: str, trade_id: int) -> dict:
    return {"T": "t", "S": symbol, "i": trade_id, "p": 1.5, "s": 1, "t": "2024-03-01T14:30:00Z"}


@pytest.fixture
def pair(connection):
    return subscribe(connection, MarketDataClassifier())


class TestDrive:
    """Test drive() with a pending request."""

    @pytest.mark.asyncio
    async def test_response_routed_to_request(self, connection, pair):
        stream, subscription = pair
        connection.respond("ping", [{"T": "success", "msg": "pong"}])

        response = await drive(subscription.send({"action": "ping"}), stream)

        assert response == SuccessMessage(msg="pong")
        assert connection.sent == [{"action": "ping"}]

    @pytest.mark.asyncio
    async def test_user_messages_during_request_are_kept_in_order(self, connection, pair):
        stream, subscription = pair
        connection.respond(
            "subscribe",
            [_trade("AAPL", 1), _trade("AAPL", 2)],
            [_trade("SPY", 3), {"T": "subscription", "trades": ["AAPL", "SPY"]}, _trade("SPY", 4)],
        )

        response = await drive(subscription.send({"action": "subscribe", "trades": ["AAPL", "SPY"]}), stream)
        assert isinstance(response, SubscriptionMessage)

        connection.push([_trade("XLK", 5)])
        ids = []
        for _ in range(5):
            item = await stream.__anext__()
            assert isinstance(item, Trade)
            ids.append(item.trade_id)
        assert ids == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_unsolicited_error_is_surfaced(self, connection, pair):
        stream, _ = pair
        connection.push([{"T": "error", "code": 407, "msg": "slow client"}, _trade("AAPL", 1)])

        first = await stream.__anext__()
        assert isinstance(first, ErrorMessage)
        assert first.code == 407
        assert isinstance(await stream.__anext__(), Trade)

    @pytest.mark.asyncio
    async def test_unsolicited_success_is_dropped(self, connection, pair):
        stream, _ = pair
        connection.push([{"T": "success", "msg": "connected"}, _trade("AAPL", 1)])

        item = await stream.__anext__()
        assert isinstance(item, Trade)

    @pytest.mark.asyncio
    async def test_transport_error_fails_request_and_stream(self, connection, pair):
        stream, subscription = pair
        connection.push_error(TransportError("connection reset"))

        with pytest.raises(TransportError):
            await drive(subscription.send({"action": "ping"}), stream)
        with pytest.raises(TransportError):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_decode_error_fails_request(self, connection, pair):
        stream, subscription = pair
        connection.respond("ping", "this is not json")

        with pytest.raises(DecodeError):
            await drive(subscription.send({"action": "ping"}), stream)

    @pytest.mark.asyncio
    async def test_end_of_stream_resolves_request_with_none(self, connection, pair):
        stream, subscription = pair
        connection.push_close()

        assert await drive(subscription.send({"action": "ping"}), stream) is None
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_requests_on_ended_stream_resolve_immediately(self, connection, pair):
        stream, subscription = pair
        connection.push([_trade("AAPL", 1)])
        connection.push_close()

        assert isinstance(await stream.__anext__(), Trade)
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
        assert await drive(subscription.read(), stream) is None

    @pytest.mark.asyncio
    async def test_read_waits_for_unprompted_control(self, connection, pair):
        stream, subscription = pair
        connection.push([{"T": "success", "msg": "connected"}])

        assert await drive(subscription.read(), stream) == SuccessMessage(msg="connected")
        assert connection.sent == []

    @pytest.mark.asyncio
    async def test_only_one_request_at_a_time(self, connection, pair):
        stream, subscription = pair
        first = asyncio.ensure_future(subscription.send({"action": "ping"}))
        await asyncio.sleep(0)

        with pytest.raises(RuntimeError):
            await subscription.send({"action": "ping"})

        first.cancel()
        await asyncio.gather(first, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_slot_free_after_response(self, connection, pair):
        stream, subscription = pair
        connection.respond("ping", [{"T": "success", "msg": "one"}])
        connection.respond("ping", [{"T": "success", "msg": "two"}])

        assert (await drive(subscription.send({"action": "ping"}), stream)).msg == "one"
        assert (await drive(subscription.send({"action": "ping"}), stream)).msg == "two"


class TestMessageStream:
    """Test MessageStream iteration."""

    @pytest.mark.asyncio
    async def test_pump_until_queues_user_messages(self, connection, pair):
        stream, subscription = pair
        connection.respond("ping", [_trade("AAPL", 1), {"T": "success", "msg": "pong"}])
        request = asyncio.ensure_future(subscription.send({"action": "ping"}))
        await asyncio.sleep(0)

        await stream.pump_until(request)

        assert request.result() == SuccessMessage(msg="pong")
        item = await stream.__anext__()
        assert isinstance(item, Trade)
        assert item.trade_id == 1

    @pytest.mark.asyncio
    async def test_pump_until_returns_once_stream_ended(self, connection, pair):
        stream, subscription = pair
        connection.push_close()
        request = asyncio.ensure_future(subscription.send({"action": "ping"}))
        await asyncio.sleep(0)

        await stream.pump_until(request)

        assert request.result() is None
        assert stream.exhausted

    @pytest.mark.asyncio
    async def test_yields_decode_errors_and_continues(self, connection, pair, bar_payload):
        stream, _ = pair
        connection.push("garbage", [bar_payload])
        connection.push_close()

        items = [item async for item in stream]
        assert isinstance(items[0], DecodeError)
        assert isinstance(items[1], Bar)
        assert len(items) == 2

    @pytest.mark.asyncio
    async def test_close_closes_connection(self, connection, pair):
        stream, _ = pair
        await stream.close()
        assert connection.closed
