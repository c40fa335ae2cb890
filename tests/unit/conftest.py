"""Shared fixtures for unit tests: in-memory connection and transport."""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict, deque
from typing import Any

import pytest

from apca.stream.core import ApiInfo, TransportError

_CLOSE = object()


class FakeConnection:
    """Scriptable stand-in for ``WebSocketConnection``.

    Frames queued with ``push`` are returned by iteration in order. Replies
    registered with ``respond`` are queued when a command with the matching
    ``action`` is sent, one registration per send.
    """

    def __init__(self) -> None:
        self._frames: asyncio.Queue[Any] = asyncio.Queue()
        self._replies: dict[str, deque[tuple[Any, ...]]] = defaultdict(deque)
        self.sent: list[dict[str, Any]] = []
        self.closed = False

    def push(self, *frames: Any) -> None:
        for frame in frames:
            if not isinstance(frame, (str, bytes)):
                frame = json.dumps(frame)
            self._frames.put_nowait(frame)

    def push_error(self, error: BaseException) -> None:
        self._frames.put_nowait(error)

    def push_close(self) -> None:
        self._frames.put_nowait(_CLOSE)

    def respond(self, action: str, *frames: Any) -> None:
        self._replies[action].append(frames)

    def __aiter__(self) -> FakeConnection:
        return self

    async def __anext__(self) -> Any:
        item = await self._frames.get()
        if item is _CLOSE:
            self._frames.put_nowait(_CLOSE)
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._frames.put_nowait(item)
            raise item
        return item

    async def send(self, frame: str) -> None:
        if self.closed:
            raise TransportError("connection is closed")
        payload = json.loads(frame)
        self.sent.append(payload)
        replies = self._replies.get(payload.get("action"))
        if replies:
            self.push(*replies.popleft())

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.push_close()


class FakeTransport:
    """Transport handing out one prepared ``FakeConnection``."""

    def __init__(self, connection: FakeConnection, error: BaseException | None = None) -> None:
        self.connection = connection
        self.error = error
        self.urls: list[str] = []

    async def connect(self, url: str) -> FakeConnection:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.connection


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def transport(connection: FakeConnection) -> FakeTransport:
    return FakeTransport(connection)


@pytest.fixture
def api_info() -> ApiInfo:
    return ApiInfo.from_parts("https://paper-api.example.com", "KEY", "SECRET")


@pytest.fixture
def bar_payload() -> dict[str, Any]:
    return {
        "T": "b",
        "S": "AAPL",
        "o": 174.5,
        "h": 175.1,
        "l": 174.2,
        "c": 175.0,
        "v": 1200,
        "t": "2024-03-01T14:30:00Z",
        "n": 42,
        "vw": 174.8,
    }


@pytest.fixture
def trade_payload() -> dict[str, Any]:
    return {
        "T": "t",
        "S": "SPY",
        "i": 96921,
        "x": "V",
        "p": 512.34,
        "s": 100,
        "t": "2024-03-01T14:30:01.123456789Z",
        "c": ["@"],
        "z": "B",
    }


@pytest.fixture
def order_payload() -> dict[str, Any]:
    return {
        "id": "61e69015-8549-4bfd-b9c3-01e75843f47d",
        "client_order_id": "eb9e2aaa-f71a-4f51-b5b4-52a6c565dad4",
        "status": "filled",
        "created_at": "2024-03-01T14:30:00.000000Z",
        "updated_at": "2024-03-01T14:30:02.000000Z",
        "submitted_at": "2024-03-01T14:30:00.100000Z",
        "filled_at": "2024-03-01T14:30:02.000000Z",
        "expired_at": None,
        "canceled_at": None,
        "asset_class": "us_equity",
        "asset_id": "b0b6dd9d-8b9b-48a9-ba46-b9d54906e415",
        "symbol": "AAPL",
        "qty": "10",
        "notional": None,
        "filled_qty": "10",
        "filled_avg_price": "175.02",
        "type": "market",
        "side": "buy",
        "time_in_force": "day",
        "limit_price": None,
        "stop_price": None,
        "extended_hours": False,
    }
