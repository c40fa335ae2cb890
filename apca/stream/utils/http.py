"""HTTP client helper for issuing authenticated API requests."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..core.config import HDR_KEY_ID, HDR_SECRET, ApiInfo
from ..core.exceptions import ProviderError, RateLimitError, UnauthorizedError

logger = logging.getLogger(__name__)


def _retry_after(value: str | None, default: int = 60) -> int:
    if not value:
        return default
    try:
        return max(int(float(value)), 0)
    except (ValueError, OverflowError):
        return default


class HTTPClient:
    """Async HTTP client wrapper bound to one ``ApiInfo``.

    Relative paths are resolved against ``api_info.api_base_url`` unless a
    different ``base_url`` is passed per request (e.g. the data API).
    """

    def __init__(self, api_info: ApiInfo, timeout: float = 30.0) -> None:
        self.api_info = api_info
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout, headers=self._headers())
        return self._session

    def _headers(self) -> dict[str, str]:
        return {
            HDR_KEY_ID: self.api_info.key_id,
            HDR_SECRET: self.api_info.secret,
            "Accept-Encoding": "gzip",
        }

    def _url(self, path: str, base_url: str | None) -> str:
        if path.startswith("http"):
            return path
        base = base_url or self.api_info.api_base_url
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        base_url: str | None = None,
    ) -> Any:
        """Issue a request and return the decoded JSON body.

        Returns:
            Decoded JSON, or None for ``204 No Content``

        Raises:
            RateLimitError: On 429
            UnauthorizedError: On 401 and 403
            ProviderError: On any other non-2xx status
        """
        url = self._url(path, base_url)
        logger.debug(f"{method} {url}")
        async with self.session.request(method, url, params=params, json=json) as response:
            status = response.status
            if 200 <= status < 300:
                if status == 204:
                    return None
                return await response.json()

            body = await response.text()
            message = f"{method} {url} failed with status {status}: {body}"
            if status == 429:
                raise RateLimitError(message, retry_after=_retry_after(response.headers.get("Retry-After")))
            if status in (401, 403):
                raise UnauthorizedError(message, status_code=status)
            raise ProviderError(message, status_code=status)

    async def get(self, path: str, params: dict[str, Any] | None = None, base_url: str | None = None) -> Any:
        """GET request."""
        return await self.request("GET", path, params=params, base_url=base_url)

    async def post(self, path: str, json: Any = None, base_url: str | None = None) -> Any:
        """POST request."""
        return await self.request("POST", path, json=json, base_url=base_url)

    async def patch(self, path: str, json: Any = None, base_url: str | None = None) -> Any:
        """PATCH request."""
        return await self.request("PATCH", path, json=json, base_url=base_url)

    async def delete(self, path: str, params: dict[str, Any] | None = None, base_url: str | None = None) -> Any:
        """DELETE request."""
        return await self.request("DELETE", path, params=params, base_url=base_url)

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> HTTPClient:
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
