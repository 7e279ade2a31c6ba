"""Domain entities for search aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from tunescout.domain.value_objects.formatting import UNKNOWN_ARTIST, UNKNOWN_DURATION


class Platform(str, Enum):
    """External catalog a Song comes from.

    The value doubles as the namespace for Song.external_id: IDs are only
    unique within one platform.
    """

    YOUTUBE = "youtube"
    SPOTIFY = "spotify"
    JIOSAAVN = "jiosaavn"

    @property
    def display_name(self) -> str:
        """Human-readable platform name for logs and UI."""
        return _DISPLAY_NAMES[self]

    @property
    def priority(self) -> int:
        """Position of this platform in merged search results (0 = first)."""
        return PLATFORM_ORDER.index(self)


_DISPLAY_NAMES: dict[Platform, str] = {
    Platform.YOUTUBE: "YouTube",
    Platform.SPOTIFY: "Spotify",
    Platform.JIOSAAVN: "JioSaavn",
}

# Hey future me - THIS is the merge order of aggregated results. There is no
# cross-platform relevance score, so we never interleave; completion order of
# the provider calls must not leak into the output either.
PLATFORM_ORDER: tuple[Platform, ...] = (
    Platform.YOUTUBE,
    Platform.SPOTIFY,
    Platform.JIOSAAVN,
)


# Yo, Song is the CANONICAL search result - every provider adapter maps its own JSON into this.
# Frozen because results get shared between the aggregator, the result cache and callers; nobody
# should be able to mutate a cached Song in place. We do NOT deduplicate across platforms - the
# same title on Spotify and JioSaavn is two Songs with different (platform, external_id) keys.
@dataclass(frozen=True)
class Song:
    """Provider-agnostic song search result."""

    external_id: str
    title: str
    platform: Platform
    canonical_url: str
    artist: str = UNKNOWN_ARTIST
    duration_display: str = UNKNOWN_DURATION
    thumbnail_url: str | None = None

    def __post_init__(self) -> None:
        """Validate song data."""
        if not self.external_id or not self.external_id.strip():
            raise ValueError("Song external_id cannot be empty")
        if not self.title or not self.title.strip():
            raise ValueError("Song title cannot be empty")
        if not isinstance(self.platform, Platform):
            raise ValueError(f"Unknown platform: {self.platform!r}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the response shape the search endpoint returns."""
        return {
            "id": self.external_id,
            "title": self.title,
            "artist": self.artist,
            "platform": self.platform.value,
            "duration": self.duration_display,
            "thumbnail": self.thumbnail_url,
            "url": self.canonical_url,
        }


# Hey future me - ProviderToken is EPHEMERAL. It lives in the TokenCache only, is never persisted,
# and can be thrown away at any time (next get_token() just exchanges a fresh one). Expiry is in
# epoch MILLISECONDS to match the clock the TokenCache uses.
@dataclass(frozen=True)
class ProviderToken:
    """Bearer token obtained through a credential exchange."""

    value: str
    expires_at_epoch_millis: int

    def is_expired(self, now_epoch_millis: int) -> bool:
        """Check whether the token is no longer usable at the given time."""
        return now_epoch_millis >= self.expires_at_epoch_millis


__all__ = [
    "PLATFORM_ORDER",
    "Platform",
    "ProviderToken",
    "Song",
]
