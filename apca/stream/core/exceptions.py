"""Custom exception hierarchy.

Architecture:
    Errors fall into three families that callers handle differently:
    - Transport errors: the connection is gone; every pending operation fails.
    - Decode errors: one payload was malformed; the stream carries on and the
      error is delivered to the application as an ordinary item.
    - Protocol errors: the server answered a command with something other
      than the expected acknowledgment (including explicit rejections).

    Provider errors belong to the HTTP issuing primitive and mirror the way
    HTTP status codes are classified there.
"""

from __future__ import annotations

from typing import Any


class StreamError(Exception):
    """Base exception for all library errors."""

    pass


class ConfigurationError(StreamError):
    """Invalid or missing client configuration (URLs, credentials)."""

    pass


class TransportError(StreamError):
    """The underlying connection failed or was closed unexpectedly.

    Fatal to the connection it was raised for.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class DecodeError(StreamError):
    """A payload could not be decoded into a known message.

    Instances are usually not raised but handed to the application as items
    of the event stream, so a single bad frame does not end the stream.
    """

    def __init__(self, message: str, payload: Any = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.payload = payload
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ProtocolError(StreamError):
    """The server violated the expected request/response exchange.

    Also used for explicit error messages reported by the server in response
    to a command, in which case ``code`` carries the server's error code.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class AuthenticationError(ProtocolError):
    """The server rejected the supplied credentials."""

    pass


class ProviderError(StreamError):
    """Error response from the HTTP API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ProviderError):
    """HTTP API rate limit exceeded."""

    def __init__(self, message: str, retry_after: int = 60) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class UnauthorizedError(ProviderError):
    """HTTP API rejected the request's credentials (401/403)."""

    pass
