"""WebSocket frame transport.

Opens a connection and exposes it as one object with two halves: an async
iterator of frames (the source) and ``send`` (the sink). Liveness pings are
answered by ``websockets`` itself and never show up as frames.

A clean close ends the frame iteration; anything else surfaces as a
``TransportError``. There is no reconnect logic: once the connection is gone
every user of it sees the failure.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, InvalidHandshake, InvalidURI

from ...core.exceptions import TransportError

logger = logging.getLogger(__name__)

Frame = str | bytes


class FrameConnection(Protocol):
    """Bidirectional frame channel consumed by the streaming engine."""

    def __aiter__(self) -> FrameConnection: ...

    async def __anext__(self) -> Frame: ...

    async def send(self, frame: str) -> None: ...

    async def close(self) -> None: ...


@dataclass
class TransportConfig:
    ping_interval: float | None = 30
    ping_timeout: float | None = 10
    open_timeout: float | None = 10
    close_timeout: float | None = 10
    max_size: int | None = None  # bytes; None = websockets default
    max_queue: int | None = None  # number of frames; None = websockets default


class WebSocketConnection:
    """A connected WebSocket, wrapped so failures map onto ``TransportError``."""

    def __init__(self, websocket: Any, url: str) -> None:
        self._ws = websocket
        self.url = url

    def __aiter__(self) -> WebSocketConnection:
        return self

    async def __anext__(self) -> Frame:
        try:
            frame = await self._ws.recv()
        except ConnectionClosedOK:
            logger.debug(f"Connection to {self.url} closed")
            raise StopAsyncIteration
        except ConnectionClosed as e:
            raise TransportError(f"connection to {self.url} lost: {e}", url=self.url) from e
        return frame

    async def send(self, frame: str) -> None:
        try:
            await self._ws.send(frame)
        except ConnectionClosed as e:
            raise TransportError(f"failed to send to {self.url}: {e}", url=self.url) from e

    async def close(self) -> None:
        """Close both halves of the connection."""
        await self._ws.close()

    async def __aenter__(self) -> WebSocketConnection:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class WebSocketTransport:
    """Factory for ``WebSocketConnection`` objects with shared tuning."""

    def __init__(self, config: TransportConfig | None = None) -> None:
        self._conf = config or TransportConfig()

    def _connect_kwargs(self) -> dict[str, Any]:
        conf = self._conf
        kwargs: dict[str, Any] = {
            "ping_interval": conf.ping_interval,
            "ping_timeout": conf.ping_timeout,
            "open_timeout": conf.open_timeout,
            "close_timeout": conf.close_timeout,
        }
        # Only include size/queue if not None to keep library defaults
        if conf.max_size is not None:
            kwargs["max_size"] = conf.max_size
        if conf.max_queue is not None:
            kwargs["max_queue"] = conf.max_queue
        return kwargs

    async def connect(self, url: str) -> WebSocketConnection:
        """Open a connection to ``url``.

        Raises:
            TransportError: If the TCP, TLS, or WebSocket handshake fails
        """
        logger.debug(f"Connecting to {url}")
        try:
            websocket = await websockets.connect(url, **self._connect_kwargs())
        except (OSError, InvalidHandshake, InvalidURI, asyncio.TimeoutError) as e:
            raise TransportError(f"failed to connect to {url}: {e}", url=url) from e
        logger.debug(f"Connected to {url}")
        return WebSocketConnection(websocket, url)
