"""Application settings loaded from environment variables and ``.env``.

Each provider gets its own settings group with its own env prefix, so the
familiar variable names work unchanged:

    YOUTUBE_API_KEY=...
    SPOTIFY_CLIENT_ID=...
    SPOTIFY_CLIENT_SECRET=...
    SEARCH_PROVIDER_TIMEOUT_SECONDS=8
    LOG_LEVEL=DEBUG
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class YouTubeSettings(BaseSettings):
    """YouTube Data API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="YOUTUBE_", env_file=".env", extra="ignore"
    )

    api_key: str = Field(default="", description="YouTube Data API v3 key")
    enabled: bool = Field(default=True, description="Include YouTube in searches")

    @property
    def is_configured(self) -> bool:
        """Check whether an API key is present."""
        return bool(self.api_key.strip())


class SpotifySettings(BaseSettings):
    """Spotify Web API configuration (client-credentials flow)."""

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=".env", extra="ignore"
    )

    client_id: str = Field(default="", description="Spotify application client ID")
    client_secret: str = Field(
        default="", description="Spotify application client secret"
    )
    enabled: bool = Field(default=True, description="Include Spotify in searches")

    # Hey future me - BOTH values are needed for the client-credentials grant.
    # A half-configured app gets a 400 from the token endpoint on every search,
    # so we'd rather not enable the provider at all.
    @property
    def is_configured(self) -> bool:
        """Check whether client ID and secret are present."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class JioSaavnSettings(BaseSettings):
    """JioSaavn autocomplete configuration (no credentials needed)."""

    model_config = SettingsConfigDict(
        env_prefix="JIOSAAVN_", env_file=".env", extra="ignore"
    )

    enabled: bool = Field(default=True, description="Include JioSaavn in searches")
    country_code: str = Field(default="in", description="Catalog country code")


class SearchSettings(BaseSettings):
    """Aggregation, timeout and result-cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_", env_file=".env", extra="ignore"
    )

    provider_timeout_seconds: float = Field(
        default=8.0, description="Upper bound for a single provider search"
    )
    default_limit: int = Field(
        default=10, ge=1, le=50, description="Results requested per provider"
    )
    cache_enabled: bool = Field(default=True, description="Cache merged results")
    cache_ttl_seconds: int = Field(
        default=60, ge=1, description="Max age of a cached search result"
    )
    cache_max_entries: int = Field(
        default=256, ge=1, description="Cached queries kept before LRU eviction"
    )
    max_rate_limit_retries: int = Field(
        default=1, ge=0, le=5, description="Retries after an HTTP 429"
    )

    @field_validator("provider_timeout_seconds")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0 or value > 60:
            raise ValueError("provider_timeout_seconds must be in (0, 60]")
        return value


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", extra="ignore"
    )

    level: str = Field(default="INFO", description="Root log level")
    json_format: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized


class Settings(BaseSettings):
    """Top-level settings container."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="tunescout")
    youtube: YouTubeSettings = Field(default_factory=YouTubeSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    jiosaavn: JioSaavnSettings = Field(default_factory=JioSaavnSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance (cached after first call)."""
    return Settings()
