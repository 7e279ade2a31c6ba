"""Base class for song provider adapters.

Hey future me - this is where "one provider failing never aborts the others" lives.
Subclasses implement two small steps:

    _fetch(query, limit)  → raw JSON from the integration client (may raise)
    parse_item(item)      → Song | None for one raw hit (pure mapping)

search() glues them together and converts every upstream failure into a
ProviderResult carrying a ProviderError. Malformed ITEMS (missing optional fields)
are not failures - parse_item fills in sentinels or skips the hit. A malformed
PAYLOAD (wrong top-level shape) is a failure.
"""

from __future__ import annotations

import logging
from abc import abstractmethod
from typing import Any

import httpx

from tunescout.domain.entities import Song
from tunescout.domain.exceptions import (
    ExternalServiceError,
    ProviderError,
)
from tunescout.domain.ports import DEFAULT_SEARCH_LIMIT, ISongProvider, ProviderResult
from tunescout.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

# Everything that counts as "this provider failed" rather than a bug in the caller.
# JSON decode errors are ValueErrors; KeyError/TypeError/AttributeError come from
# payloads whose top-level shape isn't what the provider documents.
PROVIDER_FAILURES: tuple[type[Exception], ...] = (
    httpx.HTTPError,
    ExternalServiceError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
)


def describe_failure(error: Exception) -> str:
    """Short, log-friendly description of an upstream failure."""
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code} from {error.request.url.host}"
    if isinstance(error, httpx.TimeoutException):
        return f"request timed out ({error.__class__.__name__})"
    if isinstance(error, KeyError):
        return f"malformed payload: missing {error}"
    return str(error) or error.__class__.__name__


class BaseSongProvider(ISongProvider):
    """Template for providers that fetch a JSON payload and map its hits."""

    @abstractmethod
    async def _fetch(self, query: str, limit: int) -> Any:
        """Fetch the raw search payload."""
        ...

    @abstractmethod
    def _extract_items(self, payload: Any) -> list[Any]:
        """Pull the list of raw hits out of the payload.

        Raises KeyError/TypeError/ValueError when the payload shape is wrong.
        """
        ...

    @staticmethod
    @abstractmethod
    def parse_item(item: dict[str, Any]) -> Song | None:
        """Map one raw hit to a Song (None = skip this hit)."""
        ...

    async def search(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> ProviderResult:
        """Search the catalog; upstream failures come back as ProviderResult errors."""
        try:
            payload = await self._fetch(query, limit)
            items = self._extract_items(payload)
        except PROVIDER_FAILURES as e:
            error = ProviderError(self.platform, e, detail=describe_failure(e))
            logger.warning(
                LogMessages.provider_failed(
                    provider=self.platform.display_name,
                    query=query,
                    error=error.detail,
                )
            )
            return ProviderResult.failure(self.platform, error)

        songs = self._parse_items(items, limit)
        logger.debug(
            "%s returned %d songs for %r", self.platform.display_name, len(songs), query
        )
        return ProviderResult.success(self.platform, songs)

    def _parse_items(self, items: list[Any], limit: int) -> list[Song]:
        songs: list[Song] = []
        for item in items:
            if len(songs) >= limit:
                break
            if not isinstance(item, dict):
                logger.debug("Skipping non-object %s hit: %r", self.platform.value, item)
                continue
            try:
                song = self.parse_item(item)
            except (
                KeyError, TypeError, ValueError, AttributeError, OverflowError
            ) as e:
                logger.debug("Skipping unparseable %s hit: %s", self.platform.value, e)
                continue
            if song is not None:
                songs.append(song)
        return songs


def require_list(value: Any, what: str) -> list[Any]:
    """Return value if it is a list, else raise TypeError naming the field."""
    if not isinstance(value, list):
        raise TypeError(f"malformed payload: {what} is not a list")
    return value


def as_dict(value: Any) -> dict[str, Any]:
    """Treat None and non-objects as an empty mapping for optional sub-objects."""
    return value if isinstance(value, dict) else {}


__all__ = [
    "BaseSongProvider",
    "PROVIDER_FAILURES",
    "as_dict",
    "describe_failure",
    "require_list",
]
