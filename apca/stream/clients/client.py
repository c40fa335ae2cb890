"""High-level client bundling credentials, HTTP access and stream channels.

A channel is anything implementing ``Subscribable``: ``RealtimeData`` and
``TradeUpdates`` ship with the library. ``subscribe`` returns the connected
``(stream, subscription)`` pair; the stream is consumed by the application
and the subscription handle issues further requests through ``drive``.

Example:
    async with Client(ApiInfo.from_env()) as client:
        stream, subscription = await client.subscribe(RealtimeData(feed=Feed.IEX))
        await drive(subscription.subscribe(MarketData(bars=["AAPL"])), stream)
        async for event in stream:
            ...
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from ..core.config import ApiInfo
from ..runtime.ws.subscribe import MessageStream
from ..utils.http import HTTPClient

logger = logging.getLogger(__name__)


@runtime_checkable
class Subscribable(Protocol):
    """A stream channel that can be connected with an ``ApiInfo``."""

    async def connect(self, api_info: ApiInfo) -> tuple[MessageStream[Any], Any]: ...


class Client:
    """Entry point for working with the broker API."""

    def __init__(self, api_info: ApiInfo, timeout: float = 30.0) -> None:
        self._api_info = api_info
        self._http = HTTPClient(api_info, timeout=timeout)

    @classmethod
    def from_env(cls, timeout: float = 30.0) -> Client:
        """Create a client from ``APCA_API_*`` environment variables."""
        return cls(ApiInfo.from_env(), timeout=timeout)

    @property
    def api_info(self) -> ApiInfo:
        return self._api_info

    @property
    def http(self) -> HTTPClient:
        """HTTP issuing primitive sharing this client's credentials."""
        return self._http

    async def subscribe(self, channel: Subscribable, **kwargs: Any) -> tuple[MessageStream[Any], Any]:
        """Connect to ``channel`` and complete its handshake.

        Extra keyword arguments are passed to the channel's ``connect``
        (e.g. initial ``subscriptions`` for ``RealtimeData``).
        """
        if not isinstance(channel, Subscribable):
            raise TypeError(f"{channel!r} is not a stream channel (no connect method)")
        logger.debug(f"Subscribing to {type(channel).__name__}")
        return await channel.connect(self._api_info, **kwargs)

    async def issue(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        base_url: str | None = None,
    ) -> Any:
        """Issue an HTTP request, see ``HTTPClient.request``."""
        return await self._http.request(method, path, params=params, json=json, base_url=base_url)

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
