"""Song provider adapters - one per external catalog."""

from tunescout.infrastructure.providers.base import BaseSongProvider
from tunescout.infrastructure.providers.jiosaavn_provider import (
    JioSaavnSongProvider,
    parse_jiosaavn_song,
)
from tunescout.infrastructure.providers.registry import SongProviderRegistry
from tunescout.infrastructure.providers.spotify_provider import (
    SpotifySongProvider,
    parse_spotify_track,
)
from tunescout.infrastructure.providers.youtube_provider import (
    YouTubeSongProvider,
    parse_youtube_item,
)

__all__ = [
    "BaseSongProvider",
    "JioSaavnSongProvider",
    "SongProviderRegistry",
    "SpotifySongProvider",
    "YouTubeSongProvider",
    "parse_jiosaavn_song",
    "parse_spotify_track",
    "parse_youtube_item",
]
