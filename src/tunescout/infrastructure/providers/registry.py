"""Song Provider Registry implementation.

Holds the enabled song providers and hands them out in merge order.
"""

import logging

from tunescout.domain.entities import Platform
from tunescout.domain.ports import ISongProvider

logger = logging.getLogger(__name__)


class SongProviderRegistry:
    """Registry for the enabled song providers.

    Providers are registered at startup (see lifecycle.build_provider_registry);
    only platforms with usable credentials ever end up in here.
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._providers: dict[Platform, ISongProvider] = {}

    def register(self, provider: ISongProvider) -> None:
        """Register a song provider, replacing any previous one for its platform.

        Args:
            provider: Provider implementation to register
        """
        self._providers[provider.platform] = provider
        logger.info("Registered song provider: %s", provider.platform.display_name)

    def unregister(self, platform: Platform) -> ISongProvider | None:
        """Unregister the provider for a platform.

        Args:
            platform: Platform whose provider should be removed

        Returns:
            The removed provider, or None if none was registered
        """
        provider = self._providers.pop(platform, None)
        if provider is not None:
            logger.info("Unregistered song provider: %s", platform.display_name)
        return provider

    def get_provider(self, platform: Platform) -> ISongProvider | None:
        """Get the provider for a platform."""
        return self._providers.get(platform)

    def get_all_providers(self) -> list[ISongProvider]:
        """Get all registered providers in merge order (youtube, spotify, jiosaavn)."""
        return sorted(self._providers.values(), key=lambda p: p.platform.priority)

    @property
    def platforms(self) -> list[Platform]:
        """Enabled platforms in merge order."""
        return sorted(self._providers, key=lambda platform: platform.priority)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, platform: object) -> bool:
        return platform in self._providers

    async def close_all(self) -> None:
        """Close every provider; one failing close doesn't stop the rest."""
        for provider in self.get_all_providers():
            try:
                await provider.close()
            except Exception as e:
                logger.warning(
                    "Error closing %s provider: %s", provider.platform.display_name, e
                )
