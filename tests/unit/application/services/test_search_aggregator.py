"""Tests for SearchAggregator fan-out, merge order and failure policy."""

import asyncio
import time

import pytest

from tunescout.application.services.search_aggregator import SearchAggregator
from tunescout.application.services.search_cache import SearchCache
from tunescout.domain.entities import Platform, Song
from tunescout.domain.exceptions import (
    AllProvidersFailedError,
    ConfigurationError,
    InvalidQueryError,
    ProviderError,
)
from tunescout.domain.ports import ISongProvider, ProviderResult
from tunescout.infrastructure.observability.logging import (
    correlation_scope,
    get_correlation_id,
)
from tunescout.infrastructure.providers.registry import SongProviderRegistry

# Hey future me - FakeProvider stands in for the real adapters. Each one can wait
# before answering, fail, or raise, and records every call it gets.


class FakeProvider(ISongProvider):
    def __init__(
        self,
        platform: Platform,
        count: int = 2,
        delay: float = 0.0,
        fail: bool = False,
        raises: Exception | None = None,
    ) -> None:
        self._platform = platform
        self.count = count
        self.delay = delay
        self.fail = fail
        self.raises = raises
        self.calls: list[tuple[str, int]] = []
        self.correlation_ids: list[str] = []

    @property
    def platform(self) -> Platform:
        return self._platform

    async def search(self, query: str, limit: int = 10) -> ProviderResult:
        self.calls.append((query, limit))
        self.correlation_ids.append(get_correlation_id())
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        if self.fail:
            return ProviderResult.failure(
                self._platform, ProviderError(self._platform, "HTTP 500 from upstream")
            )
        songs = [
            Song(
                external_id=f"{self._platform.value}-{i}",
                title=f"{query} {i}",
                platform=self._platform,
                canonical_url=f"https://example.com/{self._platform.value}/{i}",
            )
            for i in range(self.count)
        ]
        return ProviderResult.success(self._platform, songs)


def build(*providers: FakeProvider, **kwargs: object) -> SearchAggregator:
    registry = SongProviderRegistry()
    for provider in providers:
        registry.register(provider)
    return SearchAggregator(registry, **kwargs)  # type: ignore[arg-type]


@pytest.fixture
def youtube() -> FakeProvider:
    return FakeProvider(Platform.YOUTUBE)


@pytest.fixture
def spotify() -> FakeProvider:
    return FakeProvider(Platform.SPOTIFY)


@pytest.fixture
def jiosaavn() -> FakeProvider:
    return FakeProvider(Platform.JIOSAAVN)


class TestFanOut:
    async def test_one_call_per_provider(
        self, youtube: FakeProvider, spotify: FakeProvider, jiosaavn: FakeProvider
    ) -> None:
        aggregator = build(youtube, spotify, jiosaavn, limit=7)

        await aggregator.aggregate("daft punk")

        for provider in (youtube, spotify, jiosaavn):
            assert provider.calls == [("daft punk", 7)]

    async def test_latency_is_slowest_provider_not_sum(self) -> None:
        aggregator = build(
            FakeProvider(Platform.YOUTUBE, delay=0.2),
            FakeProvider(Platform.SPOTIFY, delay=0.2),
            FakeProvider(Platform.JIOSAAVN, delay=0.2),
        )

        started = time.perf_counter()
        await aggregator.aggregate("x")
        elapsed = time.perf_counter() - started

        assert elapsed < 0.45

    async def test_order_is_platform_order_not_completion_order(self) -> None:
        aggregator = build(
            FakeProvider(Platform.JIOSAAVN, delay=0.0),
            FakeProvider(Platform.SPOTIFY, delay=0.03),
            FakeProvider(Platform.YOUTUBE, delay=0.06),
        )

        songs = await aggregator.aggregate("x")

        platforms = [s.platform for s in songs]
        assert platforms == [Platform.YOUTUBE] * 2 + [Platform.SPOTIFY] * 2 + [
            Platform.JIOSAAVN
        ] * 2

    async def test_query_is_stripped(self, youtube: FakeProvider) -> None:
        await build(youtube).aggregate("  daft punk  ")
        assert youtube.calls[0][0] == "daft punk"


class TestValidation:
    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    async def test_blank_query_makes_no_calls(
        self,
        query: str,
        youtube: FakeProvider,
        spotify: FakeProvider,
        jiosaavn: FakeProvider,
    ) -> None:
        aggregator = build(youtube, spotify, jiosaavn)

        with pytest.raises(InvalidQueryError):
            await aggregator.aggregate(query)

        assert youtube.calls == spotify.calls == jiosaavn.calls == []

    async def test_none_query(self, youtube: FakeProvider) -> None:
        with pytest.raises(InvalidQueryError):
            await build(youtube).aggregate(None)  # type: ignore[arg-type]

    async def test_no_providers(self) -> None:
        with pytest.raises(ConfigurationError):
            await build().aggregate("x")


class TestFailures:
    async def test_one_failure_keeps_the_others(
        self, youtube: FakeProvider, jiosaavn: FakeProvider
    ) -> None:
        broken = FakeProvider(Platform.SPOTIFY, fail=True)
        aggregator = build(youtube, broken, jiosaavn)

        result = await aggregator.search("x")

        assert [s.platform for s in result.songs] == [Platform.YOUTUBE] * 2 + [
            Platform.JIOSAAVN
        ] * 2
        assert result.partial
        assert result.errors == {"spotify": "HTTP 500 from upstream"}
        assert result.source_counts == {"youtube": 2, "jiosaavn": 2}

    async def test_all_fail(self) -> None:
        aggregator = build(
            FakeProvider(Platform.YOUTUBE, fail=True),
            FakeProvider(Platform.SPOTIFY, fail=True),
            FakeProvider(Platform.JIOSAAVN, fail=True),
        )

        with pytest.raises(AllProvidersFailedError) as exc_info:
            await aggregator.aggregate("x")

        assert exc_info.value.platforms == [
            Platform.YOUTUBE,
            Platform.SPOTIFY,
            Platform.JIOSAAVN,
        ]

    async def test_empty_success_is_not_failure(self) -> None:
        aggregator = build(
            FakeProvider(Platform.YOUTUBE, count=0),
            FakeProvider(Platform.SPOTIFY, fail=True),
        )

        result = await aggregator.search("x")

        assert result.songs == []
        assert result.source_counts == {"youtube": 0}

    async def test_slow_provider_times_out(self, youtube: FakeProvider) -> None:
        slow = FakeProvider(Platform.SPOTIFY, delay=1.0)
        aggregator = build(youtube, slow, timeout_seconds=0.05)

        started = time.perf_counter()
        result = await aggregator.search("x")

        assert time.perf_counter() - started < 0.5
        assert [s.platform for s in result.songs] == [Platform.YOUTUBE] * 2
        assert "timed out" in result.errors["spotify"]

    async def test_unexpected_exception_is_contained(self, youtube: FakeProvider) -> None:
        buggy = FakeProvider(Platform.JIOSAAVN, raises=RuntimeError("adapter bug"))

        result = await build(youtube, buggy).search("x")

        assert result.total == 2
        assert result.errors == {"jiosaavn": "adapter bug"}

    async def test_cancellation_is_not_swallowed(self) -> None:
        aggregator = build(FakeProvider(Platform.YOUTUBE, delay=1.0))

        task = asyncio.create_task(aggregator.aggregate("x"))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestPlatformSelection:
    async def test_subset(
        self, youtube: FakeProvider, spotify: FakeProvider, jiosaavn: FakeProvider
    ) -> None:
        aggregator = build(youtube, spotify, jiosaavn)

        result = await aggregator.search("x", platforms=["jiosaavn", Platform.YOUTUBE])

        assert [s.platform for s in result.songs] == [Platform.YOUTUBE] * 2 + [
            Platform.JIOSAAVN
        ] * 2
        assert spotify.calls == []

    async def test_unknown_platform(self, youtube: FakeProvider) -> None:
        with pytest.raises(InvalidQueryError, match="Unknown platform"):
            await build(youtube).search("x", platforms=["soundcloud"])
        assert youtube.calls == []

    async def test_disabled_platform(self, youtube: FakeProvider) -> None:
        with pytest.raises(InvalidQueryError, match="not enabled"):
            await build(youtube).search("x", platforms=[Platform.SPOTIFY])

    async def test_empty_selection(self, youtube: FakeProvider) -> None:
        with pytest.raises(InvalidQueryError):
            await build(youtube).search("x", platforms=[])

    def test_enabled_platforms(self, jiosaavn: FakeProvider, youtube: FakeProvider) -> None:
        assert build(jiosaavn, youtube).enabled_platforms == [
            Platform.YOUTUBE,
            Platform.JIOSAAVN,
        ]


class TestSearchPlatform:
    async def test_returns_songs(self, spotify: FakeProvider) -> None:
        songs = await build(spotify).search_platform("x", "spotify")
        assert len(songs) == 2

    async def test_raises_provider_error(self) -> None:
        aggregator = build(FakeProvider(Platform.YOUTUBE, fail=True))

        with pytest.raises(ProviderError) as exc_info:
            await aggregator.search_platform("x", Platform.YOUTUBE)

        assert exc_info.value.platform is Platform.YOUTUBE

    async def test_blank_query(self, spotify: FakeProvider) -> None:
        with pytest.raises(InvalidQueryError):
            await build(spotify).search_platform(" ", Platform.SPOTIFY)
        assert spotify.calls == []


class TestCaching:
    async def test_second_search_served_from_cache(
        self, youtube: FakeProvider, spotify: FakeProvider
    ) -> None:
        aggregator = build(youtube, spotify, cache=SearchCache())

        first = await aggregator.search("Daft Punk")
        second = await aggregator.search("  daft   punk ")

        assert not first.from_cache
        assert second.from_cache
        assert second.songs == first.songs
        assert second.source_counts == {"youtube": 2, "spotify": 2}
        assert len(youtube.calls) == 1

    async def test_partial_result_not_cached(self, youtube: FakeProvider) -> None:
        broken = FakeProvider(Platform.SPOTIFY, fail=True)
        aggregator = build(youtube, broken, cache=SearchCache())

        await aggregator.search("x")
        await aggregator.search("x")

        assert len(youtube.calls) == 2

    async def test_cache_keyed_by_platform_set(
        self, youtube: FakeProvider, spotify: FakeProvider
    ) -> None:
        aggregator = build(youtube, spotify, cache=SearchCache())

        await aggregator.search("x", platforms=["youtube"])
        result = await aggregator.search("x")

        assert not result.from_cache
        assert len(spotify.calls) == 1


class TestCorrelation:
    async def test_providers_share_one_id_per_search(
        self, youtube: FakeProvider, spotify: FakeProvider, jiosaavn: FakeProvider
    ) -> None:
        aggregator = build(youtube, spotify, jiosaavn)

        await aggregator.search("first")
        await aggregator.search("second")

        first = {p.correlation_ids[0] for p in (youtube, spotify, jiosaavn)}
        second = {p.correlation_ids[1] for p in (youtube, spotify, jiosaavn)}
        assert len(first) == 1
        assert len(second) == 1
        assert first != second
        assert "" not in first
        assert get_correlation_id() == ""

    async def test_keeps_callers_id(self, youtube: FakeProvider) -> None:
        with correlation_scope("request-42"):
            await build(youtube).search("x")
            await build(youtube).search_platform("y", Platform.YOUTUBE)

        assert youtube.correlation_ids == ["request-42", "request-42"]


class TestConstruction:
    def test_rejects_bad_timeout(self) -> None:
        with pytest.raises(ValueError):
            build(timeout_seconds=0)

    def test_rejects_bad_limit(self) -> None:
        with pytest.raises(ValueError):
            build(limit=0)
