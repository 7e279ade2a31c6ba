"""Configuration module for TuneScout."""

from .settings import (
    JioSaavnSettings,
    ObservabilitySettings,
    SearchSettings,
    Settings,
    SpotifySettings,
    YouTubeSettings,
    get_settings,
)

__all__ = [
    "JioSaavnSettings",
    "ObservabilitySettings",
    "SearchSettings",
    "Settings",
    "SpotifySettings",
    "YouTubeSettings",
    "get_settings",
]
