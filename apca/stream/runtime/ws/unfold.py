"""Frame decoding and batch unfolding.

A single frame may carry several logical messages (the market data channel
sends JSON arrays). ``FrameDecoder`` turns every frame into a batch of parsed
items, and ``Unfold`` flattens those batches into one item at a time while
keeping the server's delivery order across frame boundaries.

Items are either parsed payloads or ``DecodeError`` instances. Decode errors
travel as values so they reach the application without ending the stream;
transport errors are raised.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from collections.abc import AsyncIterator, Callable
from decimal import Decimal
from typing import Any, Generic, TypeVar

from ...core.exceptions import DecodeError
from .transport import Frame

logger = logging.getLogger(__name__)

T = TypeVar("T")

ParseItem = Callable[[Any], Any]


def _parse_one(raw: Any, parse_item: ParseItem) -> Any:
    try:
        return parse_item(raw)
    except DecodeError as e:
        return e
    except (ValueError, TypeError, KeyError) as e:
        # pydantic.ValidationError is a ValueError
        return DecodeError(f"failed to decode message: {e}", payload=raw, cause=e)


def decode_frame(frame: Frame, parse_item: ParseItem) -> list[Any] | DecodeError:
    """Decode one frame into a batch of parsed items.

    A JSON array yields one item per element, a JSON object yields a single
    item. Elements are parsed individually so one malformed element does not
    take its neighbours down with it. Numbers with a fraction are decoded as
    ``Decimal``.

    Returns:
        The batch, or a ``DecodeError`` if the frame is not JSON at all
    """
    try:
        data = json.loads(frame, parse_float=Decimal)
    except (ValueError, UnicodeDecodeError) as e:
        return DecodeError(f"frame is not valid JSON: {e}", payload=frame, cause=e)

    if isinstance(data, list):
        return [_parse_one(raw, parse_item) for raw in data]
    return [_parse_one(data, parse_item)]


class FrameDecoder:
    """Async iterator of decoded batches read from a frame source."""

    def __init__(self, frames: AsyncIterator[Frame], parse_item: ParseItem) -> None:
        self._frames = frames
        self._parse_item = parse_item

    def __aiter__(self) -> FrameDecoder:
        return self

    async def __anext__(self) -> list[Any] | DecodeError:
        frame = await self._frames.__anext__()
        logger.debug(f"Received frame: {frame!r:.200}")
        return decode_frame(frame, self._parse_item)


class Unfold(Generic[T]):
    """Flatten a source of batches into a source of single items.

    Buffers at most one batch. An empty batch is legal and simply causes the
    next batch to be pulled. Error items pass straight through; exceptions
    raised by the source propagate. Once the source is exhausted, iteration
    ends as soon as the buffer is drained.
    """

    def __init__(self, source: AsyncIterator[list[T] | DecodeError]) -> None:
        self._source = source
        self._buffer: deque[T] = deque()

    def __aiter__(self) -> Unfold[T]:
        return self

    async def __anext__(self) -> T | DecodeError:
        while not self._buffer:
            batch = await self._source.__anext__()
            if isinstance(batch, DecodeError):
                return batch
            self._buffer.extend(batch)
        return self._buffer.popleft()
