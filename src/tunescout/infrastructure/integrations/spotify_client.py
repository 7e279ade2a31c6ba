"""Spotify Web API client using the OAuth client-credentials flow."""

from __future__ import annotations

import base64
import logging
from typing import Any, cast

import httpx

from tunescout.domain.exceptions import ConfigurationError, TokenExchangeError
from tunescout.infrastructure.integrations.base_client import BaseHttpClient

logger = logging.getLogger(__name__)


class SpotifyClient(BaseHttpClient):
    """HTTP client for Spotify search with app-level (client-credentials) auth.

    No user is involved: the app trades its client ID + secret for a short-lived
    bearer token. Caching that token is the TokenCache's job, not ours - this class
    only knows how to perform ONE exchange and ONE search.
    """

    SERVICE_NAME = "Spotify"
    TOKEN_URL = "https://accounts.spotify.com/api/token"  # nosec B105 - public endpoint URL, not a password
    API_BASE_URL = "https://api.spotify.com/v1"
    SEARCH_LIMIT_MAX = 50

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
        max_rate_limit_retries: int = 1,
    ) -> None:
        """Initialize Spotify client.

        Args:
            client_id: Spotify application client ID
            client_secret: Spotify application client secret
            http_client: Shared HTTP client (optional)
            max_rate_limit_retries: Retries after HTTP 429

        Raises:
            ConfigurationError: If either credential is missing
        """
        if not client_id or not client_id.strip():
            raise ConfigurationError(
                "Spotify client_id not configured. Set SPOTIFY_CLIENT_ID."
            )
        if not client_secret or not client_secret.strip():
            raise ConfigurationError(
                "Spotify client_secret not configured. Set SPOTIFY_CLIENT_SECRET."
            )
        super().__init__(http_client, max_rate_limit_retries)
        self._client_id = client_id
        self._client_secret = client_secret

    def _basic_auth_header(self) -> str:
        credentials = f"{self._client_id}:{self._client_secret}".encode()
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    # Hey future me, this is the client-credentials grant: Basic auth with base64(id:secret) and a
    # form body grant_type=client_credentials. Spotify answers {access_token, token_type, expires_in}
    # (expires_in is usually 3600). 400 invalid_client means the credentials are wrong - retrying
    # won't help, so we surface it as TokenExchangeError with the error code attached.
    async def request_client_credentials_token(self) -> dict[str, Any]:
        """Exchange client credentials for an access token.

        Returns:
            Token response with access_token and expires_in (seconds)

        Raises:
            TokenExchangeError: On network failure, non-2xx, or malformed response
        """
        try:
            response = await self._api_request(
                "POST",
                self.TOKEN_URL,
                headers={
                    "Authorization": self._basic_auth_header(),
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials"},
            )
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Spotify token endpoint unreachable: {e}") from e

        if response.is_error:
            error_code: str | None = None
            description = response.reason_phrase
            try:
                error_data = response.json()
                error_code = error_data.get("error")
                description = error_data.get("error_description", description)
            except (ValueError, AttributeError):
                pass
            raise TokenExchangeError(
                f"Spotify token exchange failed ({response.status_code}): {description}",
                error_code=error_code,
                http_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TokenExchangeError(
                "Spotify token response is not valid JSON",
                http_status=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise TokenExchangeError("Spotify token response is not an object")
        return cast(dict[str, Any], payload)

    async def search_tracks(
        self, query: str, access_token: str, limit: int = 10
    ) -> dict[str, Any]:
        """Search for tracks (raw JSON).

        Args:
            query: Search query
            access_token: Bearer token from the client-credentials exchange
            limit: Maximum number of results (1-50)

        Returns:
            Raw search response with "tracks.items"

        Raises:
            httpx.HTTPError: If the request fails or returns non-2xx
        """
        params: dict[str, str | int] = {
            "q": query,
            "type": "track",
            "limit": max(1, min(limit, self.SEARCH_LIMIT_MAX)),
        }

        response = await self._api_request(
            "GET",
            f"{self.API_BASE_URL}/search",
            params=params,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        response.raise_for_status()
        return cast(dict[str, Any], response.json())
