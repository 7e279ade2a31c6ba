"""Process-wide bearer token cache for credential-exchange providers.

Hey future me - this replaces the old "module-level SPOTIFY_TOKEN + expiry globals" pattern.
One TokenCache instance is created at startup and INJECTED into the providers that need it,
so tests can hand in their own instance (with a fake clock and a pre-seeded token).

LIFECYCLE of one slot:
    register(platform, exchange)     → empty slot, no network
    get_token(platform)  (1st call)  → exchange() → store token, expiry = now + expires_in*1000
    get_token(platform)  (valid)     → cached value, no network
    get_token(platform)  (now >= expiry) → exchange() again
    invalidate(platform)             → next get_token() exchanges

CONCURRENCY:
Three providers run in parallel per search, and many searches can run at once. Without
coordination, every search that hits an expired token would start its own exchange. That's
harmless (the last one wins, every token is valid), but wasteful - so refresh is single-flight:
one asyncio.Lock per slot, and the token is checked again after acquiring it. The fast path
(valid token) never touches the lock.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from tunescout.domain.entities import Platform, ProviderToken
from tunescout.domain.exceptions import ConfigurationError, TokenExchangeError
from tunescout.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)

TokenExchange = Callable[[], Awaitable[dict[str, Any]]]
Clock = Callable[[], int]


def current_epoch_millis() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class _TokenSlot:
    """Single-slot cache entry for one provider."""

    exchange: TokenExchange
    token: ProviderToken | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    exchange_count: int = 0


class TokenCache:
    """Caches one bearer token per credential-based provider."""

    def __init__(self, clock: Clock = current_epoch_millis) -> None:
        """Initialize empty cache.

        Args:
            clock: Returns "now" in epoch milliseconds (injectable for tests)
        """
        self._clock = clock
        self._slots: dict[Platform, _TokenSlot] = {}

    def register(self, platform: Platform, exchange: TokenExchange) -> None:
        """Register the credential exchange for a provider.

        Re-registering replaces the exchange and drops any cached token.

        Args:
            platform: Provider the token belongs to
            exchange: Coroutine function returning {"access_token", "expires_in"}
        """
        self._slots[platform] = _TokenSlot(exchange=exchange)
        logger.debug("Registered token exchange for %s", platform.display_name)

    def is_registered(self, platform: Platform) -> bool:
        """Check whether an exchange is registered for the provider."""
        return platform in self._slots

    def _slot(self, platform: Platform) -> _TokenSlot:
        slot = self._slots.get(platform)
        if slot is None:
            raise ConfigurationError(
                f"No token exchange registered for {platform.display_name}"
            )
        return slot

    async def get_token(self, platform: Platform) -> str:
        """Get a valid bearer token, exchanging credentials if needed.

        Args:
            platform: Provider to get the token for

        Returns:
            Access token string

        Raises:
            ConfigurationError: No exchange registered for the platform
            TokenExchangeError: Exchange failed or returned a malformed response
        """
        slot = self._slot(platform)

        token = slot.token
        if token is not None and not token.is_expired(self._clock()):
            return token.value

        async with slot.lock:
            # Another task may have refreshed while we waited for the lock
            token = slot.token
            if token is not None and not token.is_expired(self._clock()):
                return token.value

            try:
                response = await slot.exchange()
            except TokenExchangeError as e:
                # Wrong credentials fail every search until someone fixes the config
                level = logging.ERROR if e.is_credentials_problem else logging.WARNING
                logger.log(
                    level,
                    LogMessages.token_exchange_failed(platform.display_name, e.message),
                )
                raise

            token = self._build_token(platform, response)
            slot.token = token
            slot.exchange_count += 1
            logger.info(
                LogMessages.token_refreshed(
                    platform.display_name,
                    (token.expires_at_epoch_millis - self._clock()) // 1000,
                )
            )
            return token.value

    def _build_token(self, platform: Platform, response: dict[str, Any]) -> ProviderToken:
        access_token = response.get("access_token")
        expires_in = response.get("expires_in")

        if not isinstance(access_token, str) or not access_token:
            raise TokenExchangeError(
                f"{platform.display_name} token response has no access_token"
            )
        # bool is an int subclass - reject it explicitly
        if isinstance(expires_in, bool) or not isinstance(expires_in, int | float):
            raise TokenExchangeError(
                f"{platform.display_name} token response has no numeric expires_in"
            )

        return ProviderToken(
            value=access_token,
            expires_at_epoch_millis=self._clock() + int(expires_in * 1000),
        )

    def put(self, platform: Platform, token: ProviderToken) -> None:
        """Store a token directly (e.g. restored or pre-seeded)."""
        self._slot(platform).token = token

    def peek(self, platform: Platform) -> ProviderToken | None:
        """Return the cached token without refreshing (may be expired)."""
        slot = self._slots.get(platform)
        return slot.token if slot else None

    def invalidate(self, platform: Platform) -> None:
        """Drop the cached token so the next get_token() exchanges again."""
        slot = self._slots.get(platform)
        if slot is not None and slot.token is not None:
            slot.token = None
            logger.debug("Invalidated cached %s token", platform.display_name)

    def exchange_count(self, platform: Platform) -> int:
        """Number of successful exchanges performed for the provider."""
        slot = self._slots.get(platform)
        return slot.exchange_count if slot else 0
