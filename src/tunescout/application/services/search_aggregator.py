# Hey future me - SearchAggregator is THE entry point of the whole search core!
# Callers (an HTTP handler, a CLI, a bot) hand in a query; we fan it out to every
# enabled provider at once and merge what comes back.
#
# RULES (don't break these, clients depend on them):
# - One call per enabled provider, all in flight at the same time. Latency is the
#   SLOWEST provider, never the sum.
# - Merge order is PLATFORM_ORDER (youtube, spotify, jiosaavn), never completion
#   order. Same query in, same order out.
# - A failing or slow provider only loses its own songs. Only when EVERY selected
#   provider fails do we raise AllProvidersFailedError.
# - Blank queries are rejected before any provider is touched.
# - No early exit: a fast provider never cancels a slow one. Each provider is
#   bounded by its own timeout instead.
"""Multi-provider song search with fan-out, timeouts and deterministic merge."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tunescout.application.services.search_cache import SearchCache
from tunescout.domain.entities import Platform, Song
from tunescout.domain.exceptions import (
    AllProvidersFailedError,
    ConfigurationError,
    InvalidQueryError,
    ProviderError,
)
from tunescout.domain.ports import DEFAULT_SEARCH_LIMIT, ISongProvider, ProviderResult
from tunescout.infrastructure.observability.log_messages import LogMessages
from tunescout.infrastructure.observability.logging import correlation_scope
from tunescout.infrastructure.providers.registry import SongProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 8.0

PlatformSelection = Iterable[Platform | str] | None


@dataclass
class AggregatedSearchResult:
    """Merged search result plus per-platform metadata.

    Shows callers where songs came from ("10 from YouTube, 0 from Spotify")
    and which platforms were left out because they failed.
    """

    query: str
    songs: list[Song] = field(default_factory=list)
    source_counts: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)  # platform -> error
    from_cache: bool = False

    @property
    def total(self) -> int:
        """Number of merged songs."""
        return len(self.songs)

    @property
    def partial(self) -> bool:
        """True when at least one selected platform failed."""
        return bool(self.errors)

    @property
    def failed_platforms(self) -> list[str]:
        """Platforms that failed, in merge order."""
        return list(self.errors)


class SearchAggregator:
    """Fans a query out to all enabled song providers and merges the results.

    Pattern:
    ```
    aggregator = SearchAggregator(registry, timeout_seconds=8.0)
    songs = await aggregator.aggregate("daft punk")
    result = await aggregator.search("daft punk", platforms=["spotify"])
    # result.source_counts = {"spotify": 10}
    ```
    """

    def __init__(
        self,
        registry: SongProviderRegistry,
        timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        limit: int = DEFAULT_SEARCH_LIMIT,
        cache: SearchCache | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            registry: Enabled song providers
            timeout_seconds: Upper bound for ONE provider call
            limit: Songs requested from each provider
            cache: Optional result cache (None = always fan out)
        """
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._registry = registry
        self._timeout = timeout_seconds
        self._limit = limit
        self._cache = cache

    @property
    def enabled_platforms(self) -> list[Platform]:
        """Platforms a search can fan out to, in merge order."""
        return self._registry.platforms

    async def aggregate(self, query: str, platforms: PlatformSelection = None) -> list[Song]:
        """Search all (or the selected) providers and return the merged songs.

        Args:
            query: Search string (must contain non-whitespace)
            platforms: Optional subset of enabled platforms

        Returns:
            Songs in platform order; failed platforms contribute nothing

        Raises:
            InvalidQueryError: Blank query or unknown/disabled platform
            AllProvidersFailedError: Every selected provider failed
        """
        result = await self.search(query, platforms)
        return result.songs

    async def search(
        self, query: str, platforms: PlatformSelection = None
    ) -> AggregatedSearchResult:
        """Like aggregate(), but also reports source counts and per-platform errors.

        Raises:
            InvalidQueryError: Blank query or unknown/disabled platform
            ConfigurationError: No provider is enabled at all
            AllProvidersFailedError: Every selected provider failed
        """
        cleaned = self._validate_query(query)
        providers = self._select_providers(platforms)

        # One correlation ID for this search; provider tasks inherit it
        with correlation_scope():
            return await self._fan_out(cleaned, providers)

    async def _fan_out(
        self, cleaned: str, providers: list[ISongProvider]
    ) -> AggregatedSearchResult:
        selected = [provider.platform for provider in providers]

        if self._cache is not None:
            cached = await self._cache.get(cleaned, selected)
            if cached is not None:
                return AggregatedSearchResult(
                    query=cleaned,
                    songs=cached,
                    source_counts=self._count_sources(selected, cached),
                    from_cache=True,
                )

        # _run_provider never raises (except cancellation), so gather sees no errors.
        # Cancelling this coroutine cancels every in-flight provider call.
        results: list[ProviderResult] = await asyncio.gather(
            *(self._run_provider(provider, cleaned) for provider in providers)
        )

        failures = [r.error for r in results if r.error is not None]
        if len(failures) == len(results):
            logger.error(
                LogMessages.all_providers_failed(
                    cleaned, {e.platform.value: e.detail for e in failures}
                )
            )
            raise AllProvidersFailedError(failures)

        songs: list[Song] = []
        for result in results:
            songs.extend(result.songs)

        aggregated = AggregatedSearchResult(
            query=cleaned,
            songs=songs,
            source_counts={r.platform.value: len(r.songs) for r in results if r.ok},
            errors={e.platform.value: e.detail for e in failures},
        )

        logger.info(
            LogMessages.search_completed(
                cleaned, aggregated.source_counts, aggregated.failed_platforms
            )
        )

        if self._cache is not None and not failures:
            await self._cache.put(cleaned, selected, songs)

        return aggregated

    async def search_platform(self, query: str, platform: Platform | str) -> list[Song]:
        """Search ONE provider with the same validation and timeout policy.

        Unlike search(), the failure is not absorbed.

        Raises:
            InvalidQueryError: Blank query or unknown/disabled platform
            ProviderError: The provider failed or timed out
        """
        cleaned = self._validate_query(query)
        (provider,) = self._select_providers([platform])
        with correlation_scope():
            result = await self._run_provider(provider, cleaned)
        if result.error is not None:
            raise result.error
        return result.songs

    @staticmethod
    def _validate_query(query: str) -> str:
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError()
        return query.strip()

    def _select_providers(self, platforms: PlatformSelection) -> list[ISongProvider]:
        all_providers = self._registry.get_all_providers()
        if not all_providers:
            raise ConfigurationError("No song providers are enabled")

        if platforms is None:
            return all_providers

        requested: set[Platform] = set()
        for value in platforms:
            try:
                requested.add(Platform(value))
            except ValueError:
                raise InvalidQueryError(f"Unknown platform: {value!r}") from None

        if not requested:
            raise InvalidQueryError("At least one platform must be selected")

        disabled = requested - set(self._registry.platforms)
        if disabled:
            names = ", ".join(sorted(p.value for p in disabled))
            raise InvalidQueryError(f"Platform not enabled: {names}")

        return [p for p in all_providers if p.platform in requested]

    async def _run_provider(self, provider: ISongProvider, query: str) -> ProviderResult:
        """Run one provider call under the timeout; always returns a ProviderResult."""
        platform = provider.platform
        try:
            return await asyncio.wait_for(
                provider.search(query, self._limit), timeout=self._timeout
            )
        except TimeoutError as e:
            logger.warning(
                LogMessages.provider_timeout(platform.display_name, query, self._timeout)
            )
            error = ProviderError(
                platform, e, detail=f"timed out after {self._timeout:g}s"
            )
        except Exception as e:
            # Providers are supposed to return errors, not raise them. Still one
            # provider's bug must not take the siblings down.
            logger.warning(
                LogMessages.provider_failed(
                    provider=platform.display_name,
                    query=query,
                    error=f"{e.__class__.__name__}: {e}",
                    hint="Unexpected exception escaped the provider adapter",
                ),
                exc_info=True,
            )
            error = ProviderError(platform, e)
        return ProviderResult.failure(platform, error)

    @staticmethod
    def _count_sources(platforms: list[Platform], songs: list[Song]) -> dict[str, int]:
        counts = {platform.value: 0 for platform in platforms}
        for song in songs:
            counts[song.platform.value] = counts.get(song.platform.value, 0) + 1
        return counts
