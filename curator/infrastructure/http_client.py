"""HTTP Client for shared connection management.

This module provides a managed httpx.AsyncClient for reusing
HTTP connections across sources. GET requests are retried with
exponential waits on 5xx responses and transport errors; 4xx responses
are returned immediately.
"""

import asyncio
from typing import Any

import httpx

from curator.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "Curator-Content-Bot/1.0"

RETRIABLE_STATUS_CODES = frozenset({500, 502, 503, 504})


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Designed for DI injection. Create once at application startup,
    inject where needed, close at shutdown.

    Example:
        # In container setup
        http_client = HTTPClient()

        # In a source
        response = await http_client.get("https://api.example.com")

        # At shutdown
        await http_client.close()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        max_retries: int = 2,
        retry_backoff: float = 1.0,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            user_agent: User-Agent header sent with every request
            max_retries: Extra GET attempts after a transient failure
            retry_backoff: Base wait in seconds, doubled on every retry
        """
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )
        logger.info(
            "HTTP client initialized",
            timeout=timeout,
            max_connections=max_connections,
            max_keepalive=max_keepalive_connections,
            max_retries=max_retries,
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send GET request, retrying transient failures.

        Returns:
            The first non-5xx response, or the last 5xx response once
            retries are exhausted

        Raises:
            httpx.TransportError: If every attempt failed at the transport level
        """
        retry_count = 0
        while True:
            try:
                response = await self._client.get(url, **kwargs)
            except httpx.TransportError as e:
                if retry_count >= self.max_retries:
                    raise
                reason = type(e).__name__
            else:
                if (
                    response.status_code not in RETRIABLE_STATUS_CODES
                    or retry_count >= self.max_retries
                ):
                    return response
                reason = str(response.status_code)

            retry_count += 1
            wait_time = self.retry_backoff * 2 ** (retry_count - 1)
            logger.warning(
                "Retrying request",
                url=url,
                reason=reason,
                retry=retry_count,
                wait_seconds=wait_time,
            )
            await asyncio.sleep(wait_time)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send POST request."""
        return await self._client.post(url, **kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient", "DEFAULT_USER_AGENT", "RETRIABLE_STATUS_CODES"]
