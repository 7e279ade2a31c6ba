"""YouTube Data API v3 client (API key auth)."""

import logging
from typing import Any, cast

import httpx

from tunescout.domain.exceptions import ConfigurationError
from tunescout.infrastructure.integrations.base_client import BaseHttpClient

logger = logging.getLogger(__name__)


class YouTubeClient(BaseHttpClient):
    """HTTP client for the YouTube search endpoint.

    Hey future me - the search endpoint does NOT return video durations. Getting them
    needs a second call to /videos?part=contentDetails per batch of IDs, which we
    deliberately don't make. Songs from YouTube report duration "Unknown".
    """

    SERVICE_NAME = "YouTube"
    API_BASE_URL = "https://www.googleapis.com/youtube/v3"
    SEARCH_URL = f"{API_BASE_URL}/search"
    MAX_RESULTS_LIMIT = 50

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        max_rate_limit_retries: int = 1,
    ) -> None:
        """Initialize YouTube client.

        Args:
            api_key: YouTube Data API v3 key
            http_client: Shared HTTP client (optional)
            max_rate_limit_retries: Retries after HTTP 429
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "YouTube API key not configured. Set YOUTUBE_API_KEY."
            )
        super().__init__(http_client, max_rate_limit_retries)
        self._api_key = api_key

    async def search_videos(self, query: str, max_results: int = 10) -> dict[str, Any]:
        """Search videos (raw JSON).

        Args:
            query: Search query
            max_results: Maximum number of items (1-50)

        Returns:
            Raw search response with an "items" list

        Raises:
            httpx.HTTPError: If the request fails or returns non-2xx
        """
        params: dict[str, str | int] = {
            "key": self._api_key,
            "q": query,
            "part": "snippet",
            "type": "video",
            "maxResults": max(1, min(max_results, self.MAX_RESULTS_LIMIT)),
        }

        response = await self._api_request("GET", self.SEARCH_URL, params=params)
        response.raise_for_status()
        return cast(dict[str, Any], response.json())
