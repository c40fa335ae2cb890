"""Request/response exchanges on top of a connection that never stops talking.

Architecture:
    ``subscribe`` splits one connection into two cooperating objects:

    - ``MessageStream``: the application's async iterator of user messages.
      Pulling from it is what moves the connection forward.
    - ``Subscription``: sends commands and waits for the control message
      that answers them.

    They share a ``_ControlSlot`` holding at most one pending request.
    Whenever the stream pulls a control message it hands it to the slot;
    user messages go to the application. ``drive`` runs one request to
    completion while pulling from the stream on the caller's behalf, queueing
    the user messages it sees so the application still receives every one of
    them, in order.

Design Decisions:
    - One pending request per connection; a second one is a usage error
    - A pull that is still in flight when a request completes is kept and
      reused by the next consumer, so no frame is ever dropped by ``drive``
    - Source failure resolves the pending request with the same error, and
      a clean end resolves it with ``None``

Usage:
    stream, subscription = subscribe(connection, classifier)
    response = await drive(subscription.send({"action": "..."}), stream)
    async for item in stream:
        ...
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable
from typing import Any, Generic, TypeVar

from ...core.exceptions import TransportError
from .classify import ControlMessage, MessageClassifier
from .transport import FrameConnection
from .unfold import FrameDecoder, Unfold

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

# Sentinels produced while routing a pulled item
_END = object()
_CONSUMED = object()


class _ControlSlot:
    """Hand-off point between the message pump and the pending request."""

    def __init__(self) -> None:
        self._waiter: asyncio.Future[Any] | None = None
        self._closed = False
        self._error: BaseException | None = None

    @property
    def pending(self) -> bool:
        return self._waiter is not None and not self._waiter.done()

    def arm(self) -> asyncio.Future[Any]:
        if self.pending:
            raise RuntimeError("another request is already in flight on this subscription")
        waiter: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        if self._error is not None:
            waiter.set_exception(self._error)
        elif self._closed:
            waiter.set_result(None)
        else:
            self._waiter = waiter
        return waiter

    def disarm(self, waiter: asyncio.Future[Any]) -> None:
        if self._waiter is waiter:
            self._waiter = None
        if not waiter.done():
            waiter.cancel()
        elif not waiter.cancelled():
            # Mark the exception as retrieved; the request may have been cancelled.
            waiter.exception()

    def deliver(self, control: Any) -> bool:
        if not self.pending:
            return False
        assert self._waiter is not None
        self._waiter.set_result(control)
        return True

    def finish(self) -> None:
        self._closed = True
        if self.pending:
            assert self._waiter is not None
            self._waiter.set_result(None)

    def fail(self, error: BaseException) -> None:
        self._closed = True
        self._error = error
        if self.pending:
            assert self._waiter is not None
            self._waiter.set_exception(error)


class MessageStream(Generic[U]):
    """Async iterator over the user messages of a connection.

    Yields domain events, ``DecodeError`` items and unsolicited server error
    payloads in the order the server sent them. Raises ``TransportError`` if
    the connection fails, and stops once the server closes it.
    """

    def __init__(
        self,
        items: AsyncIterator[Any],
        classifier: MessageClassifier,
        slot: _ControlSlot,
        connection: FrameConnection,
    ) -> None:
        self._items = items
        self._classifier = classifier
        self._slot = slot
        self._connection = connection
        # User messages pulled by pump_until() and not yet handed to the application
        self._pending: deque[Any] = deque()
        self._inflight: asyncio.Task[Any] | None = None
        self._exhausted = False
        self._error: BaseException | None = None

    @property
    def classifier(self) -> MessageClassifier:
        return self._classifier

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __aiter__(self) -> MessageStream[U]:
        return self

    async def __anext__(self) -> U:
        while True:
            if self._pending:
                return self._pending.popleft()
            if self._error is not None:
                raise self._error
            if self._exhausted:
                raise StopAsyncIteration
            value = await self._step()
            if value is _END:
                raise StopAsyncIteration
            if value is _CONSUMED:
                continue
            return value

    async def _fetch(self) -> Any:
        try:
            return await self._items.__anext__()
        except StopAsyncIteration:
            return _END

    def _fetch_task(self) -> asyncio.Task[Any]:
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch())
        return self._inflight

    async def _step(self) -> Any:
        """Pull one item from the connection and route it.

        Returns:
            A user value, ``_CONSUMED`` for control messages, or ``_END``
        """
        try:
            if self._inflight is not None:
                task, self._inflight = self._inflight, None
                item = await task
            else:
                item = await self._fetch()
        except TransportError as e:
            self._exhausted = True
            self._error = e
            self._slot.fail(e)
            raise

        if item is _END:
            self._exhausted = True
            self._slot.finish()
            return _END

        message = self._classifier.classify(item)
        if not isinstance(message, ControlMessage):
            return message.value

        control = message.value
        if self._slot.deliver(control):
            return _CONSUMED
        if self._classifier.surface_unsolicited(control):
            return control
        logger.debug(f"Dropping unsolicited control message: {control!r}")
        return _CONSUMED

    async def pump_until(self, task: asyncio.Future[Any]) -> None:
        """Pull from the connection until ``task`` is done.

        Control messages go to the pending request; user messages are queued
        and yielded later by this stream, in order. A pull still in flight
        when ``task`` finishes is kept for the next consumer.

        Raises:
            TransportError: If the connection fails first
            DecodeError: If an item the classifier treats as an error is pulled
        """
        while not task.done():
            if self._exhausted:
                await asyncio.wait({task})
                return
            fetch = self._fetch_task()
            await asyncio.wait({task, fetch}, return_when=asyncio.FIRST_COMPLETED)
            if not fetch.done():
                continue
            value = await self._step()
            if value is _CONSUMED or value is _END:
                continue
            if self._classifier.is_error(value):
                raise value
            self._pending.append(value)

    async def close(self) -> None:
        """Close the underlying connection (both halves)."""
        if self._inflight is not None:
            task, self._inflight = self._inflight, None
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        await self._connection.close()

    async def __aenter__(self) -> MessageStream[U]:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class Subscription:
    """Command half of a connection.

    Only one request may be outstanding at a time.
    """

    def __init__(self, connection: FrameConnection, slot: _ControlSlot) -> None:
        self._connection = connection
        self._slot = slot

    async def send(self, payload: dict[str, Any]) -> Any | None:
        """Send a JSON command and wait for the next control message.

        Returns:
            The control message, or None if the connection ended first

        Raises:
            TransportError: If sending fails or the connection breaks
            RuntimeError: If another request is already pending
        """
        waiter = self._slot.arm()
        try:
            logger.debug(f"Sending {payload.get('action', 'unknown')!r} request")
            await self._connection.send(json.dumps(payload))
            return await waiter
        finally:
            self._slot.disarm(waiter)

    async def read(self) -> Any | None:
        """Wait for the next control message without sending anything."""
        waiter = self._slot.arm()
        try:
            return await waiter
        finally:
            self._slot.disarm(waiter)

    async def close(self) -> None:
        """Close the underlying connection (both halves)."""
        await self._connection.close()


def subscribe(
    connection: FrameConnection, classifier: MessageClassifier
) -> tuple[MessageStream[Any], Subscription]:
    """Split a connection into its message stream and its command handle."""
    slot = _ControlSlot()
    items: Unfold[Any] = Unfold(FrameDecoder(connection, classifier.parse))
    stream: MessageStream[Any] = MessageStream(items, classifier, slot, connection)
    return stream, Subscription(connection, slot)


async def drive(request: Awaitable[T], stream: MessageStream[Any]) -> T:
    """Run ``request`` to completion while pumping ``stream``.

    Control messages pulled in the meantime are routed to the request; user
    messages are queued on the stream and yielded by it later, in order.

    Raises:
        TransportError: If the connection fails before the request resolves
        DecodeError: If a payload fails to decode before the request resolves
        Exception: Whatever the request itself raises
    """
    task = asyncio.ensure_future(request)
    try:
        # Let the request register itself before anything is routed.
        await asyncio.sleep(0)
        await stream.pump_until(task)
        return task.result()
    finally:
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
