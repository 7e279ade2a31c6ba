"""YouTube song provider - maps YouTube search hits to canonical Songs."""

import logging
from typing import Any

from tunescout.domain.entities import Platform, Song
from tunescout.domain.value_objects import (
    UNKNOWN_ARTIST,
    UNKNOWN_DURATION,
    UNKNOWN_TITLE,
    first_non_empty,
)
from tunescout.infrastructure.integrations.youtube_client import YouTubeClient
from tunescout.infrastructure.providers.base import (
    BaseSongProvider,
    as_dict,
    require_list,
)

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def parse_youtube_item(item: dict[str, Any]) -> Song | None:
    """Map one search hit to a Song.

    Hits without id.videoId (channels, playlists that slipped through the
    type=video filter) are skipped.

    Args:
        item: One entry of the search response "items" list

    Returns:
        Song, or None when the hit has no video ID
    """
    video_id = as_dict(item.get("id")).get("videoId")
    if not isinstance(video_id, str) or not video_id.strip():
        return None

    snippet = as_dict(item.get("snippet"))
    thumbnail = as_dict(as_dict(snippet.get("thumbnails")).get("default")).get("url")

    return Song(
        external_id=video_id,
        title=first_non_empty(snippet.get("title")) or UNKNOWN_TITLE,
        platform=Platform.YOUTUBE,
        canonical_url=WATCH_URL.format(video_id=video_id),
        artist=first_non_empty(snippet.get("channelTitle")) or UNKNOWN_ARTIST,
        # The search endpoint carries no duration
        duration_display=UNKNOWN_DURATION,
        thumbnail_url=thumbnail if isinstance(thumbnail, str) and thumbnail else None,
    )


class YouTubeSongProvider(BaseSongProvider):
    """Song provider backed by the YouTube Data API."""

    def __init__(self, client: YouTubeClient) -> None:
        self._client = client

    @property
    def platform(self) -> Platform:
        return Platform.YOUTUBE

    async def _fetch(self, query: str, limit: int) -> Any:
        return await self._client.search_videos(query, max_results=limit)

    def _extract_items(self, payload: Any) -> list[Any]:
        return require_list(payload["items"], "items")

    @staticmethod
    def parse_item(item: dict[str, Any]) -> Song | None:
        return parse_youtube_item(item)

    async def close(self) -> None:
        await self._client.close()
