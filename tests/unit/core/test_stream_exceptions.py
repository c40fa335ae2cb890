"""Unit tests for the exception hierarchy."""

from apca.stream.core import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    ProtocolError,
    ProviderError,
    RateLimitError,
    StreamError,
    TransportError,
    UnauthorizedError,
)


def test_rate_limit_error_with_retry_after():
    """Test RateLimitError with retry_after."""
    error = RateLimitError("rate limit", retry_after=120)
    assert error.status_code == 429
    assert error.retry_after == 120
    assert isinstance(error, ProviderError)
    assert isinstance(error, StreamError)


def test_unauthorized_error_keeps_status():
    error = UnauthorizedError("forbidden", status_code=403)
    assert error.status_code == 403
    assert isinstance(error, ProviderError)


def test_authentication_error_is_protocol_error():
    error = AuthenticationError("auth failed", code=402)
    assert error.code == 402
    assert isinstance(error, ProtocolError)


def test_decode_error_chains_cause():
    cause = ValueError("bad number")
    error = DecodeError("failed", payload={"T": "b"}, cause=cause)
    assert error.payload == {"T": "b"}
    assert error.cause is cause
    assert error.__cause__ is cause


def test_transport_error_carries_url():
    error = TransportError("lost", url="wss://example.com")
    assert error.url == "wss://example.com"
    assert str(error) == "lost"


def test_all_errors_share_base():
    for cls in (ConfigurationError, TransportError, DecodeError, ProtocolError, ProviderError):
        assert issubclass(cls, StreamError)
