"""JioSaavn autocomplete client.

Hey future me - JioSaavn has no official public API. The website's own
api.php endpoint works WITHOUT authentication; the __call parameter picks the
operation. We use "autocomplete.get" because it returns structured song entries
(artistMap, singers, perma_url) in one request. There's also "search.getResults"
with a different field layout - we don't use it, one mapping per provider.

Response shape (trimmed):
    {"songs": {"data": [{"id": "...", "title": "...", "image": ".../150x150.jpg",
                          "duration": "245", "perma_url": "...",
                          "more_info": {"singers": "...",
                                        "artistMap": {"primary_artists": [{"name": "..."}]}}}]},
     "albums": {...}, "artists": {...}}
"""

import logging
from typing import Any, cast

import httpx

from tunescout.infrastructure.integrations.base_client import BaseHttpClient

logger = logging.getLogger(__name__)


class JioSaavnClient(BaseHttpClient):
    """HTTP client for the JioSaavn autocomplete endpoint."""

    SERVICE_NAME = "JioSaavn"
    API_URL = "https://www.jiosaavn.com/api.php"

    def __init__(
        self,
        country_code: str = "in",
        http_client: httpx.AsyncClient | None = None,
        max_rate_limit_retries: int = 1,
    ) -> None:
        """Initialize JioSaavn client.

        Args:
            country_code: Catalog country code (default "in")
            http_client: Shared HTTP client (optional)
            max_rate_limit_retries: Retries after HTTP 429
        """
        super().__init__(http_client, max_rate_limit_retries)
        self._country_code = country_code

    async def autocomplete(self, query: str) -> dict[str, Any]:
        """Run an autocomplete search (raw JSON).

        The endpoint has no caller-controlled limit; trimming happens in the provider.

        Args:
            query: Search query

        Returns:
            Raw autocomplete response

        Raises:
            httpx.HTTPError: If the request fails or returns non-2xx
        """
        params = {
            "__call": "autocomplete.get",
            "_format": "json",
            "_marker": "0",
            "cc": self._country_code,
            "includeMetaTags": "1",
            "query": query,
        }

        response = await self._api_request("GET", self.API_URL, params=params)
        response.raise_for_status()
        return cast(dict[str, Any], response.json())
