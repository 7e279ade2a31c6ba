"""External integration client implementations."""

from tunescout.infrastructure.integrations.base_client import BaseHttpClient
from tunescout.infrastructure.integrations.http_pool import HttpClientPool
from tunescout.infrastructure.integrations.jiosaavn_client import JioSaavnClient
from tunescout.infrastructure.integrations.spotify_client import SpotifyClient
from tunescout.infrastructure.integrations.token_cache import TokenCache
from tunescout.infrastructure.integrations.youtube_client import YouTubeClient

__all__ = [
    "BaseHttpClient",
    "HttpClientPool",
    "JioSaavnClient",
    "SpotifyClient",
    "TokenCache",
    "YouTubeClient",
]
