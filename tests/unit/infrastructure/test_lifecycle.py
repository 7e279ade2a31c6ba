"""Tests for search core wiring."""

import logging
import re

import pytest
from pytest_httpx import HTTPXMock

from tunescout.application.services.search_aggregator import SearchAggregator
from tunescout.config import (
    JioSaavnSettings,
    SearchSettings,
    Settings,
    SpotifySettings,
    YouTubeSettings,
)
from tunescout.domain.entities import Platform
from tunescout.domain.exceptions import ConfigurationError
from tunescout.infrastructure.integrations.http_pool import HttpClientPool
from tunescout.infrastructure.integrations.token_cache import TokenCache
from tunescout.infrastructure.lifecycle import (
    build_provider_registry,
    build_search_aggregator,
    search_lifespan,
)


def make_settings(
    youtube_key: str = "",
    spotify_id: str = "",
    spotify_secret: str = "",
    jiosaavn_enabled: bool = True,
    cache_enabled: bool = True,
) -> Settings:
    return Settings(
        youtube=YouTubeSettings(api_key=youtube_key),
        spotify=SpotifySettings(client_id=spotify_id, client_secret=spotify_secret),
        jiosaavn=JioSaavnSettings(enabled=jiosaavn_enabled),
        search=SearchSettings(cache_enabled=cache_enabled),
    )


class TestBuildProviderRegistry:
    def test_all_configured(self) -> None:
        registry = build_provider_registry(make_settings("key", "id", "secret"))
        assert registry.platforms == [Platform.YOUTUBE, Platform.SPOTIFY, Platform.JIOSAAVN]

    def test_missing_credentials_disable_providers(self) -> None:
        registry = build_provider_registry(make_settings(spotify_id="id"))
        assert registry.platforms == [Platform.JIOSAAVN]

    def test_disabled_flag_wins(self) -> None:
        settings = make_settings("key")
        settings.youtube.enabled = False
        assert Platform.YOUTUBE not in build_provider_registry(settings)

    def test_spotify_registers_on_given_token_cache(self) -> None:
        token_cache = TokenCache()
        build_provider_registry(make_settings(spotify_id="id", spotify_secret="s"), None, token_cache)
        assert token_cache.is_registered(Platform.SPOTIFY)


def test_build_search_aggregator_without_cache() -> None:
    settings = make_settings(cache_enabled=False)
    aggregator = build_search_aggregator(settings, build_provider_registry(settings))
    assert isinstance(aggregator, SearchAggregator)
    assert aggregator.enabled_platforms == [Platform.JIOSAAVN]


class TestSearchLifespan:
    async def test_yields_working_aggregator_and_closes_pool(
        self, httpx_mock: HTTPXMock
    ) -> None:
        httpx_mock.add_response(
            url=re.compile(r"https://www\.jiosaavn\.com/api\.php\?.*"),
            json={"songs": {"data": [{"id": "a1", "title": "Kesariya", "duration": "268"}]}},
        )

        async with search_lifespan(make_settings(), configure_logs=False) as aggregator:
            songs = await aggregator.aggregate("kesariya")
            assert HttpClientPool.is_initialized()

        assert [s.title for s in songs] == ["Kesariya"]
        assert not HttpClientPool.is_initialized()

    async def test_logs_pool_stats_at_startup(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="tunescout.infrastructure.lifecycle"):
            async with search_lifespan(make_settings(), configure_logs=False):
                pass

        assert any(
            "HTTP client pool" in r.getMessage() and "'initialized': True" in r.getMessage()
            for r in caplog.records
        )

    async def test_no_providers_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            async with search_lifespan(
                make_settings(jiosaavn_enabled=False), configure_logs=False
            ):
                pass

        assert not HttpClientPool.is_initialized()
