"""Search core lifecycle: wiring at startup, cleanup at shutdown."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx

from tunescout.application.services.search_aggregator import SearchAggregator
from tunescout.application.services.search_cache import SearchCache
from tunescout.config import Settings, get_settings
from tunescout.domain.exceptions import ConfigurationError
from tunescout.infrastructure.integrations.http_pool import HttpClientPool
from tunescout.infrastructure.integrations.jiosaavn_client import JioSaavnClient
from tunescout.infrastructure.integrations.spotify_client import SpotifyClient
from tunescout.infrastructure.integrations.token_cache import TokenCache
from tunescout.infrastructure.integrations.youtube_client import YouTubeClient
from tunescout.infrastructure.observability.logging import configure_logging
from tunescout.infrastructure.providers.jiosaavn_provider import JioSaavnSongProvider
from tunescout.infrastructure.providers.registry import SongProviderRegistry
from tunescout.infrastructure.providers.spotify_provider import SpotifySongProvider
from tunescout.infrastructure.providers.youtube_provider import YouTubeSongProvider

logger = logging.getLogger(__name__)


def build_provider_registry(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    token_cache: TokenCache | None = None,
) -> SongProviderRegistry:
    """Create the providers that settings enable and have credentials for.

    A provider without credentials is skipped with a warning instead of
    failing every search at request time. JioSaavn needs no credentials.

    Args:
        settings: Application settings
        http_client: Shared HTTP client injected into every integration client
        token_cache: Token cache for credential-exchange providers

    Returns:
        Registry holding the enabled providers (may be empty)
    """
    registry = SongProviderRegistry()
    retries = settings.search.max_rate_limit_retries

    if settings.youtube.enabled:
        if settings.youtube.is_configured:
            registry.register(
                YouTubeSongProvider(
                    YouTubeClient(
                        settings.youtube.api_key,
                        http_client=http_client,
                        max_rate_limit_retries=retries,
                    )
                )
            )
        else:
            logger.warning("YouTube disabled: YOUTUBE_API_KEY is not set")

    if settings.spotify.enabled:
        if settings.spotify.is_configured:
            registry.register(
                SpotifySongProvider(
                    SpotifyClient(
                        settings.spotify.client_id,
                        settings.spotify.client_secret,
                        http_client=http_client,
                        max_rate_limit_retries=retries,
                    ),
                    token_cache if token_cache is not None else TokenCache(),
                )
            )
        else:
            logger.warning(
                "Spotify disabled: SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are required"
            )

    if settings.jiosaavn.enabled:
        registry.register(
            JioSaavnSongProvider(
                JioSaavnClient(
                    country_code=settings.jiosaavn.country_code,
                    http_client=http_client,
                    max_rate_limit_retries=retries,
                )
            )
        )

    return registry


def build_search_aggregator(
    settings: Settings, registry: SongProviderRegistry
) -> SearchAggregator:
    """Create the aggregator (and its result cache when enabled)."""
    cache = None
    if settings.search.cache_enabled:
        cache = SearchCache(
            ttl_seconds=settings.search.cache_ttl_seconds,
            max_entries=settings.search.cache_max_entries,
        )
    return SearchAggregator(
        registry,
        timeout_seconds=settings.search.provider_timeout_seconds,
        limit=settings.search.default_limit,
        cache=cache,
    )


# Hey future me - everything before `yield` is STARTUP, everything after is SHUTDOWN.
# The try/finally makes sure the shared HTTP pool is closed even if the caller blows
# up mid-search. An HTTP layer (excluded here) would call this from its own lifespan
# and keep the yielded aggregator on its app state.
@asynccontextmanager
async def search_lifespan(
    settings: Settings | None = None,
    configure_logs: bool = True,
) -> AsyncGenerator[SearchAggregator, None]:
    """Wire the search core and tear it down afterwards.

    Usage:
        async with search_lifespan() as aggregator:
            songs = await aggregator.aggregate("daft punk")

    Args:
        settings: Settings to use (default: get_settings())
        configure_logs: Install the logging configuration from settings

    Yields:
        Ready-to-use SearchAggregator

    Raises:
        ConfigurationError: No provider could be enabled
    """
    settings = settings or get_settings()

    if configure_logs:
        configure_logging(
            log_level=settings.observability.level,
            json_format=settings.observability.json_format,
            app_name=settings.app_name,
        )
    logger.info("Starting search core: %s", settings.app_name)

    registry: SongProviderRegistry | None = None
    try:
        http_client = await HttpClientPool.get_client()
        registry = build_provider_registry(settings, http_client, TokenCache())
        if not len(registry):
            raise ConfigurationError(
                "No song providers enabled. Configure credentials or enable JioSaavn."
            )
        logger.info(
            "Search providers enabled: %s",
            ", ".join(p.display_name for p in registry.platforms),
        )
        logger.debug("HTTP client pool: %s", HttpClientPool.get_pool_stats())

        yield build_search_aggregator(settings, registry)
    finally:
        if registry is not None:
            await registry.close_all()
        await HttpClientPool.close()
        logger.info("Search core stopped")
