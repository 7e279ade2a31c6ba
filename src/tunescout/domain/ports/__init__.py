"""Song Provider Interface - abstraction over external search catalogs.

Hey future me - this is the PORT every catalog adapter implements!

FLOW:
    SearchAggregator
        │
        └─► ISongProvider.search(query, limit)   (one call per platform, in parallel)
                │
                ├─► YouTubeSongProvider   → YouTubeClient
                ├─► SpotifySongProvider   → SpotifyClient + TokenCache
                └─► JioSaavnSongProvider  → JioSaavnClient

The aggregator only knows this interface. search() NEVER raises for upstream
problems - it returns a ProviderResult carrying either songs or a ProviderError.
That's what keeps one broken provider from taking its siblings down.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from tunescout.domain.entities import Platform, Song
from tunescout.domain.exceptions import ProviderError

DEFAULT_SEARCH_LIMIT = 10


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one provider search: songs on success, error on failure."""

    platform: Platform
    songs: list[Song] = field(default_factory=list)
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        """True when the provider answered (possibly with zero songs)."""
        return self.error is None

    @classmethod
    def success(cls, platform: Platform, songs: list[Song]) -> "ProviderResult":
        """Build a successful result."""
        return cls(platform=platform, songs=list(songs))

    @classmethod
    def failure(cls, platform: Platform, error: ProviderError) -> "ProviderResult":
        """Build a failed result (always with an empty song list)."""
        return cls(platform=platform, songs=[], error=error)


class ISongProvider(ABC):
    """Port for one external music catalog."""

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Platform this provider searches."""
        ...

    @abstractmethod
    async def search(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> ProviderResult:
        """Search the catalog and map hits to canonical Songs.

        Args:
            query: Non-empty search string
            limit: Maximum number of songs to return

        Returns:
            ProviderResult with songs, or with a ProviderError on failure
        """
        ...

    async def close(self) -> None:
        """Release resources held by the provider."""
        return None


__all__ = [
    "DEFAULT_SEARCH_LIMIT",
    "ISongProvider",
    "ProviderResult",
]
