"""Classification of decoded items into user and control messages.

Architecture:
    Every item leaving the unfolder is tagged as either a ``UserMessage``
    (something the application consumes: a domain event, a decode error, or a
    server error nobody asked for) or a ``ControlMessage`` (a handshake or
    subscription acknowledgment that only the engine consumes).

    Channels implement ``MessageClassifier`` once against the
    ``WireDecodable`` capability, so callers can substitute their own payload
    classes for the default event models.

Design Decisions:
    - Protocol-based classifier: the engine never inspects payloads itself
    - ``is_error`` separates "the connection or a payload broke" (stops a
      pending ``drive``) from "the server said no" (ordinary content)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from ...core.exceptions import DecodeError, TransportError

U = TypeVar("U")
C = TypeVar("C")


@runtime_checkable
class WireDecodable(Protocol):
    """Something that can be built from a decoded wire payload.

    Pydantic models satisfy this out of the box.
    """

    @classmethod
    def model_validate(cls, obj: Any) -> Any: ...


@dataclass(frozen=True)
class UserMessage(Generic[U]):
    """An item destined for the application."""

    value: U


@dataclass(frozen=True)
class ControlMessage(Generic[C]):
    """An item consumed by the engine's request/response exchanges."""

    value: C


Classified = UserMessage[Any] | ControlMessage[Any]


class MessageClassifier(Protocol):
    """Channel-specific decoding and classification rules."""

    def parse(self, raw: Any) -> Any:
        """Parse one raw JSON element into a typed item.

        Raises:
            DecodeError, ValueError, TypeError, KeyError: If the element is malformed
        """
        ...

    def classify(self, item: Any) -> Classified: ...

    def is_error(self, value: Any) -> bool: ...

    def surface_unsolicited(self, control: Any) -> bool:
        """Whether a control message arriving with no pending request reaches the application."""
        ...


def is_error(value: Any) -> bool:
    """Default error predicate: wire failures and decode failures.

    Server-reported error payloads are not errors in this sense.
    """
    return isinstance(value, (DecodeError, TransportError))


def tag_of(raw: Any, key: str) -> str:
    """Return the discriminant ``raw[key]`` of a JSON object.

    Raises:
        DecodeError: If ``raw`` is not an object or has no string discriminant
    """
    if not isinstance(raw, dict):
        raise DecodeError(f"expected a JSON object, got {type(raw).__name__}", payload=raw)
    tag = raw.get(key)
    if not isinstance(tag, str):
        raise DecodeError(f"message has no {key!r} discriminant", payload=raw)
    return tag
