"""Common plumbing for the catalog HTTP clients."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Self

import httpx

from tunescout.domain.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Retry-After values above this are not worth waiting for inside a search that
# is bounded by the per-provider timeout anyway.
MAX_RETRY_AFTER_SECONDS = 5.0
DEFAULT_RETRY_AFTER_SECONDS = 1.0


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given in seconds."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        return None


class BaseHttpClient:
    """Base class for catalog API clients.

    The HTTP client is either injected (shared pool, tests) or created lazily
    on first use. Only a lazily created client is owned - and closed - by us.
    """

    SERVICE_NAME = "catalog"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        max_rate_limit_retries: int = 1,
    ) -> None:
        self._client = http_client
        self._owns_client = http_client is None
        self._max_rate_limit_retries = max_rate_limit_retries

    # Hey future me, don't create the AsyncClient in __init__ - clients get built during wiring,
    # sometimes before an event loop exists. Lazy creation keeps us loop-friendly.
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.DEFAULT_TIMEOUT)
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close HTTP client if we created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _api_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying on HTTP 429.

        Waits for Retry-After (capped) between attempts. Any other status is
        returned as-is; callers decide via raise_for_status().

        Raises:
            RateLimitExceededError: Still 429 after all retries
            httpx.HTTPError: Network-level failure
        """
        client = await self._get_client()

        for attempt in range(self._max_rate_limit_retries + 1):
            response = await client.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                data=data,
            )

            if response.status_code != 429:
                return response

            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if attempt >= self._max_rate_limit_retries:
                raise RateLimitExceededError(
                    f"{self.SERVICE_NAME} rate limited (429) after "
                    f"{self._max_rate_limit_retries} retries",
                    retry_after=retry_after,
                )

            wait_time = min(
                retry_after if retry_after is not None else DEFAULT_RETRY_AFTER_SECONDS,
                MAX_RETRY_AFTER_SECONDS,
            )
            logger.warning(
                "%s 429 rate limit (attempt %d/%d): waiting %.1fs before retrying %s",
                self.SERVICE_NAME,
                attempt + 1,
                self._max_rate_limit_retries,
                wait_time,
                url,
            )
            await asyncio.sleep(wait_time)

        # Loop always returns or raises
        raise RateLimitExceededError(f"{self.SERVICE_NAME} rate limited (429)")

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
