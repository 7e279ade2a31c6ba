"""Normalization helpers shared by all provider adapters.

Hey future me - every provider reports durations, artists and artwork in its
own way. These helpers turn them into the display strings a Song carries.
They're pure functions on purpose: no I/O, no logging, trivially testable.

Two duration formats exist and BOTH are intentional:
- format_duration_ms()      → "2:5"  (Spotify, seconds NOT padded)
- format_duration_seconds() → "2:05" (JioSaavn, seconds padded)
Clients already render Spotify durations unpadded, so don't "fix" it.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_DURATION = "Unknown"
UNKNOWN_TITLE = "Unknown Title"

THUMBNAIL_SMALL_SEGMENT = "150x150"
THUMBNAIL_LARGE_SEGMENT = "500x500"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def format_duration_ms(duration_ms: int | float | None) -> str:
    """Format a millisecond duration as ``M:S`` (seconds not zero-padded).

    Args:
        duration_ms: Duration in milliseconds, or None when unknown

    Returns:
        Display string like "2:5" for 125000 ms, or "Unknown" (also for NaN/inf)
    """
    if duration_ms is None or not math.isfinite(duration_ms):
        return UNKNOWN_DURATION

    total_ms = max(int(duration_ms), 0)
    minutes = total_ms // 60000
    seconds = (total_ms % 60000) // 1000
    return f"{minutes}:{seconds}"


def format_duration_seconds(duration_seconds: int | str | None) -> str:
    """Format a second count as ``M:SS`` (seconds zero-padded).

    JioSaavn sends durations as numeric strings. Only the leading integer
    counts ("245.0" and "245s" are both 245); no leading digits means zero.

    Args:
        duration_seconds: Duration in seconds (int or numeric string), or None

    Returns:
        Display string like "2:05" for 125 seconds, or "Unknown"
    """
    if duration_seconds is None:
        return UNKNOWN_DURATION

    if isinstance(duration_seconds, str):
        match = _LEADING_INT.match(duration_seconds)
        total = int(match.group(1)) if match else 0
    else:
        try:
            total = int(duration_seconds)
        except (TypeError, ValueError, OverflowError):
            total = 0

    total = max(total, 0)
    return f"{total // 60}:{total % 60:02d}"


def join_artist_names(names: Iterable[Any]) -> str:
    """Join artist names with ", " preserving upstream order.

    Blank and non-string entries are skipped. Returns "" when nothing is left,
    so callers decide which fallback applies.
    """
    return ", ".join(name for name in names if isinstance(name, str) and name.strip())


def upgrade_thumbnail_url(url: str | None) -> str | None:
    """Swap the 150x150 size segment for 500x500 when present.

    URLs without the segment pass through unchanged.
    """
    if not url:
        return None
    return url.replace(THUMBNAIL_SMALL_SEGMENT, THUMBNAIL_LARGE_SEGMENT)


def first_non_empty(*candidates: Any) -> str | None:
    """Return the first candidate that is a non-blank string."""
    for candidate in candidates:
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    return None
