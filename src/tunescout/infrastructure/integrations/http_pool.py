"""Shared HTTP client pool for connection reuse across provider clients.

Hey future me - every search fans out to three catalogs at once. Instead of each
integration client opening its own httpx.AsyncClient (separate pools, no shared
keep-alive), search_lifespan() takes ONE client from here and injects it into
all of them. The pool manages connection limits, keep-alive, and cleanup.

Usage:
    from tunescout.infrastructure.integrations.http_pool import HttpClientPool

    client = await HttpClientPool.get_client()
    response = await client.get("https://api.example.com/data")

Call HttpClientPool.close() at shutdown (search_lifespan does this for you).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, ClassVar

import httpx

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Singleton HTTP client pool for connection reuse.

    Features:
    - Lazy initialization (created on first use)
    - Initialization guarded by an asyncio.Lock
    - Configurable limits (connections, timeouts)
    - Proper cleanup at shutdown
    """

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    # Three providers per search, a handful of concurrent searches - these limits
    # are plenty. Lower max_connections if a provider starts answering 429.
    DEFAULT_TIMEOUT: ClassVar[float] = 10.0
    DEFAULT_MAX_KEEPALIVE: ClassVar[int] = 20
    DEFAULT_MAX_CONNECTIONS: ClassVar[int] = 50
    USER_AGENT: ClassVar[str] = "TuneScout/0.1 (+https://github.com/tunescout)"

    @classmethod
    def _ensure_lock(cls) -> asyncio.Lock:
        """Create the lock lazily so it binds to the running event loop."""
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(
        cls,
        timeout: float | None = None,
        max_keepalive: int | None = None,
        max_connections: int | None = None,
    ) -> httpx.AsyncClient:
        """Get the shared HTTP client instance.

        Creates the client on first call with the provided configuration.
        Subsequent calls return the same instance (ignoring new config values).

        Args:
            timeout: Request timeout in seconds (default: 10.0)
            max_keepalive: Max idle connections to keep open (default: 20)
            max_connections: Max total concurrent connections (default: 50)

        Returns:
            Shared httpx.AsyncClient instance
        """
        async with cls._ensure_lock():
            if cls._client is None:
                effective_timeout = timeout or cls.DEFAULT_TIMEOUT
                effective_keepalive = max_keepalive or cls.DEFAULT_MAX_KEEPALIVE
                effective_max_conn = max_connections or cls.DEFAULT_MAX_CONNECTIONS

                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(effective_timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=effective_keepalive,
                        max_connections=effective_max_conn,
                    ),
                    headers={"User-Agent": cls.USER_AGENT},
                    # Google and Spotify both speak HTTP/2 - better multiplexing
                    http2=True,
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    effective_timeout,
                    effective_keepalive,
                    effective_max_conn,
                )

            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared HTTP client and release all connections.

        After calling close(), get_client() will create a new client instance.
        """
        async with cls._ensure_lock():
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")
        # Next event loop gets a fresh lock
        cls._lock = None

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if the client pool has been initialized."""
        return cls._client is not None

    @classmethod
    def get_pool_stats(cls) -> dict[str, Any]:
        """Get current connection pool configuration for debugging."""
        if not cls.is_initialized():
            return {"initialized": False}

        assert cls._client is not None
        return {
            "initialized": True,
            "timeout": cls._client.timeout.read,
            "max_connections": cls.DEFAULT_MAX_CONNECTIONS,
            "max_keepalive": cls.DEFAULT_MAX_KEEPALIVE,
        }
