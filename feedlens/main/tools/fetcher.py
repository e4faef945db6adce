"""Retrieve raw feed documents over HTTP.

Every request goes through a relay prefix (``<relay><feed url>``) so the engine
can run behind the same CORS relay the browser dashboard uses.  The fetcher does
not retry and does not cache; both belong to the caller and the registry.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from feedlens.main import config

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Network or HTTP failure while retrieving a feed document."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.reason = reason
        self.cause = cause


def validate_url(url: str) -> bool:
    """Return ``True`` when *url* is an absolute URL with scheme and host."""
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return bool(result.scheme and result.netloc)


class Fetcher:
    """Async HTTP fetcher bound to one relay prefix.

    ``client`` may be supplied by the caller (tests pass one built on
    ``httpx.MockTransport``); otherwise a client is created on first use and
    released by :meth:`aclose`.
    """

    def __init__(
        self,
        relay_prefix: str | None = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float | None = None,
    ) -> None:
        self.relay_prefix = config.RELAY_PREFIX if relay_prefix is None else relay_prefix
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self._client = client
        self._owns_client = client is None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client used for all fetches."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    def relay_url(self, url: str) -> str:
        return f"{self.relay_prefix}{url}"

    async def fetch(self, url: str) -> str:
        """Return the body of *url* as text.

        Raises ``FetchError`` for malformed URLs, non-2xx responses and transport
        failures.  ``status_code``/``reason`` are set for HTTP errors, ``cause``
        for transport errors.
        """
        if not validate_url(url):
            logger.error("Invalid URL format: %s", url)
            raise FetchError(f"invalid URL: {url}", url=url)

        client = self._get_http_client()
        logger.info("Fetching feed %s", url)
        try:
            response = await client.get(self.relay_url(url))
        except httpx.HTTPError as exc:
            logger.error("Error fetching feed %s: %s", url, exc)
            raise FetchError(f"error fetching {url}: {exc}", url=url, cause=exc) from exc

        if not response.is_success:
            logger.error(
                "Error fetching feed %s: %s %s", url, response.status_code, response.reason_phrase
            )
            raise FetchError(
                f"error fetching {url}: {response.status_code} {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )
        return response.text

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
