"""Spotify song provider - client-credentials token + track search."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tunescout.domain.entities import Platform, Song
from tunescout.domain.value_objects import (
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
    first_non_empty,
    format_duration_ms,
    join_artist_names,
)
from tunescout.infrastructure.integrations.spotify_client import SpotifyClient
from tunescout.infrastructure.integrations.token_cache import TokenCache
from tunescout.infrastructure.providers.base import (
    BaseSongProvider,
    as_dict,
    require_list,
)

logger = logging.getLogger(__name__)

TRACK_URL = "https://open.spotify.com/track/{track_id}"


def parse_spotify_track(item: dict[str, Any]) -> Song | None:
    """Map one track object to a Song.

    Duration keeps the unpadded "M:S" display ("2:5" for 125000 ms).

    Args:
        item: One entry of "tracks.items"

    Returns:
        Song, or None when the track has no ID
    """
    track_id = item.get("id")
    if not isinstance(track_id, str) or not track_id.strip():
        return None

    artists = item.get("artists")
    names = [as_dict(a).get("name") for a in artists] if isinstance(artists, list) else []

    images = as_dict(item.get("album")).get("images")
    thumbnail = None
    if isinstance(images, list) and images:
        thumbnail = first_non_empty(as_dict(images[0]).get("url"))

    duration_ms = item.get("duration_ms")
    if isinstance(duration_ms, bool) or not isinstance(duration_ms, int | float):
        duration_ms = None

    return Song(
        external_id=track_id,
        title=first_non_empty(item.get("name")) or UNKNOWN_TITLE,
        platform=Platform.SPOTIFY,
        canonical_url=first_non_empty(as_dict(item.get("external_urls")).get("spotify"))
        or TRACK_URL.format(track_id=track_id),
        artist=join_artist_names(names) or UNKNOWN_ARTIST,
        duration_display=format_duration_ms(duration_ms),
        thumbnail_url=thumbnail,
    )


class SpotifySongProvider(BaseSongProvider):
    """Song provider backed by the Spotify Web API.

    Hey future me - the bearer token comes from the shared TokenCache, never from
    this class. A 401 on search means Spotify revoked the token before its
    expires_in ran out; we drop it so the NEXT search exchanges a fresh one, and
    still report this search as failed (no in-search retry).
    """

    def __init__(self, client: SpotifyClient, token_cache: TokenCache) -> None:
        self._client = client
        self._token_cache = token_cache
        if not token_cache.is_registered(Platform.SPOTIFY):
            token_cache.register(
                Platform.SPOTIFY, client.request_client_credentials_token
            )

    @property
    def platform(self) -> Platform:
        return Platform.SPOTIFY

    async def _fetch(self, query: str, limit: int) -> Any:
        access_token = await self._token_cache.get_token(Platform.SPOTIFY)
        try:
            return await self._client.search_tracks(query, access_token, limit=limit)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                self._token_cache.invalidate(Platform.SPOTIFY)
            raise

    def _extract_items(self, payload: Any) -> list[Any]:
        return require_list(payload["tracks"]["items"], "tracks.items")

    @staticmethod
    def parse_item(item: dict[str, Any]) -> Song | None:
        return parse_spotify_track(item)

    async def close(self) -> None:
        await self._client.close()
