"""Domain value objects."""

from tunescout.domain.value_objects.formatting import (
    UNKNOWN_ARTIST,
    UNKNOWN_DURATION,
    UNKNOWN_TITLE,
    first_non_empty,
    format_duration_ms,
    format_duration_seconds,
    join_artist_names,
    upgrade_thumbnail_url,
)

__all__ = [
    "UNKNOWN_ARTIST",
    "UNKNOWN_DURATION",
    "UNKNOWN_TITLE",
    "first_non_empty",
    "format_duration_ms",
    "format_duration_seconds",
    "join_artist_names",
    "upgrade_thumbnail_url",
]
