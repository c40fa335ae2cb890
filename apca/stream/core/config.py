"""Shared API constants and the credential/URL configuration object.

This module centralizes the URLs used by the streaming channels and the HTTP
issuing primitive so both can be built from one ``ApiInfo``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit, urlunsplit

from .enums import Feed
from .exceptions import ConfigurationError

# Paper trading is the default so nothing touches a live account by accident.
API_BASE_URL = "https://paper-api.alpaca.markets"
LIVE_API_BASE_URL = "https://api.alpaca.markets"
DATA_BASE_URL = "https://data.alpaca.markets"
DATA_STREAM_BASE_URL = "wss://stream.data.alpaca.markets"

# Environment variables honored by ApiInfo.from_env()
ENV_API_URL = "APCA_API_BASE_URL"
ENV_API_STREAM_URL = "APCA_API_STREAM_URL"
ENV_KEY_ID = "APCA_API_KEY_ID"
ENV_SECRET = "APCA_API_SECRET_KEY"

# Header names used for HTTP authentication
HDR_KEY_ID = "APCA-API-KEY-ID"
HDR_SECRET = "APCA-API-SECRET-KEY"


def _parse_url(url: str, *, schemes: tuple[str, ...]) -> str:
    parts = urlsplit(url)
    if parts.scheme not in schemes or not parts.netloc:
        raise ConfigurationError(f"invalid URL {url!r}: expected scheme in {schemes} and a host")
    return url.rstrip("/")


def stream_url_from_base(base_url: str) -> str:
    """Derive the trade-update stream URL from an HTTP API base URL.

    Examples:
        >>> stream_url_from_base("https://paper-api.alpaca.markets")
        'wss://paper-api.alpaca.markets/stream'
        >>> stream_url_from_base("http://127.0.0.1:8080")
        'ws://127.0.0.1:8080/stream'
    """
    parts = urlsplit(_parse_url(base_url, schemes=("http", "https")))
    scheme = "wss" if parts.scheme == "https" else "ws"
    return urlunsplit((scheme, parts.netloc, "/stream", "", ""))


@dataclass(frozen=True)
class ApiInfo:
    """Credentials and endpoints for working with the broker API.

    Only the credential pair and the URLs are consumed by the streaming
    engine; the HTTP primitive additionally uses ``api_base_url`` and
    ``data_base_url``.
    """

    api_base_url: str
    api_stream_url: str
    key_id: str
    secret: str = field(repr=False)
    data_base_url: str = DATA_BASE_URL
    data_stream_base_url: str = DATA_STREAM_BASE_URL

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_base_url", _parse_url(self.api_base_url, schemes=("http", "https")))
        object.__setattr__(self, "api_stream_url", _parse_url(self.api_stream_url, schemes=("ws", "wss")))
        object.__setattr__(self, "data_base_url", _parse_url(self.data_base_url, schemes=("http", "https")))
        object.__setattr__(
            self, "data_stream_base_url", _parse_url(self.data_stream_base_url, schemes=("ws", "wss"))
        )

    @classmethod
    def from_parts(
        cls,
        api_base_url: str,
        key_id: str,
        secret: str,
        *,
        data_base_url: str = DATA_BASE_URL,
        data_stream_base_url: str = DATA_STREAM_BASE_URL,
    ) -> ApiInfo:
        """Create an ``ApiInfo`` from the required data.

        The trade-update stream URL is derived from ``api_base_url``.

        Raises:
            ConfigurationError: If a URL cannot be parsed
        """
        return cls(
            api_base_url=api_base_url,
            api_stream_url=stream_url_from_base(api_base_url),
            key_id=key_id,
            secret=secret,
            data_base_url=data_base_url,
            data_stream_base_url=data_stream_base_url,
        )

    @classmethod
    def from_env(cls) -> ApiInfo:
        """Create an ``ApiInfo`` object with information from the environment.

        The following variables are used:
        - APCA_API_BASE_URL: API base URL (defaults to the paper trading URL)
        - APCA_API_STREAM_URL: optional override for the trade-update stream URL
        - APCA_API_KEY_ID: account key ID (required)
        - APCA_API_SECRET_KEY: account secret (required)

        Raises:
            ConfigurationError: If a required variable is missing or a URL is invalid
        """
        base_url = os.environ.get(ENV_API_URL) or API_BASE_URL
        key_id = os.environ.get(ENV_KEY_ID)
        if not key_id:
            raise ConfigurationError(f"{ENV_KEY_ID} environment variable not found")
        secret = os.environ.get(ENV_SECRET)
        if not secret:
            raise ConfigurationError(f"{ENV_SECRET} environment variable not found")

        stream_url = os.environ.get(ENV_API_STREAM_URL) or stream_url_from_base(base_url)
        return cls(
            api_base_url=base_url,
            api_stream_url=stream_url,
            key_id=key_id,
            secret=secret,
        )

    def data_stream_url(self, feed: Feed) -> str:
        """Realtime market data URL for a feed, e.g. ``wss://.../v2/iex``."""
        return f"{self.data_stream_base_url}/v2/{feed.value}"
