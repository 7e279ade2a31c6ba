"""JioSaavn song provider - keyless autocomplete search."""

from __future__ import annotations

import logging
from typing import Any

from tunescout.domain.entities import Platform, Song
from tunescout.domain.value_objects import (
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
    first_non_empty,
    format_duration_seconds,
    join_artist_names,
    upgrade_thumbnail_url,
)
from tunescout.infrastructure.integrations.jiosaavn_client import JioSaavnClient
from tunescout.infrastructure.providers.base import (
    BaseSongProvider,
    as_dict,
    require_list,
)

logger = logging.getLogger(__name__)

SONG_URL = "https://www.jiosaavn.com/song/{song_id}"


def _resolve_artist(item: dict[str, Any]) -> str:
    # Order matters: primary artists, then the singers credit, then the subtitle line
    more_info = as_dict(item.get("more_info"))
    primary = as_dict(more_info.get("artistMap")).get("primary_artists")
    joined = (
        join_artist_names(as_dict(a).get("name") for a in primary)
        if isinstance(primary, list)
        else ""
    )
    return (
        first_non_empty(joined, more_info.get("singers"), item.get("subtitle"))
        or UNKNOWN_ARTIST
    )


def parse_jiosaavn_song(item: dict[str, Any]) -> Song | None:
    """Map one autocomplete song entry to a Song.

    Args:
        item: One entry of "songs.data"

    Returns:
        Song, or None when the entry has no ID
    """
    raw_id = item.get("id")
    song_id = str(raw_id).strip() if raw_id is not None else ""
    if not song_id:
        return None

    image = first_non_empty(item.get("image"))
    more_info = as_dict(item.get("more_info"))
    # Missing or non-numeric durations render as "0:00", not "Unknown"
    duration = item.get("duration") or more_info.get("duration") or 0

    return Song(
        external_id=song_id,
        title=first_non_empty(item.get("title"), item.get("song")) or UNKNOWN_TITLE,
        platform=Platform.JIOSAAVN,
        canonical_url=first_non_empty(item.get("perma_url"))
        or SONG_URL.format(song_id=song_id),
        artist=_resolve_artist(item),
        duration_display=format_duration_seconds(duration),
        thumbnail_url=upgrade_thumbnail_url(image),
    )


class JioSaavnSongProvider(BaseSongProvider):
    """Song provider backed by the JioSaavn autocomplete endpoint."""

    def __init__(self, client: JioSaavnClient) -> None:
        self._client = client

    @property
    def platform(self) -> Platform:
        return Platform.JIOSAAVN

    async def _fetch(self, query: str, limit: int) -> Any:
        # No upstream limit parameter; _parse_items trims to `limit`
        return await self._client.autocomplete(query)

    def _extract_items(self, payload: Any) -> list[Any]:
        if not isinstance(payload, dict):
            raise TypeError("malformed payload: response is not an object")
        # No "songs" block just means nothing matched
        data = as_dict(payload.get("songs")).get("data")
        if data is None:
            return []
        return require_list(data, "songs.data")

    @staticmethod
    def parse_item(item: dict[str, Any]) -> Song | None:
        return parse_jiosaavn_song(item)

    async def close(self) -> None:
        await self._client.close()
