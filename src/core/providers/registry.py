#!/usr/bin/env python3
"""
News provider registry for dynamic provider management.

Maps short provider keys (``newsapi``, ``guardian``, ``nyt``) to adapter
classes, in registration order.
"""

import logging
from typing import Dict, List, Optional, Type

from .base import NewsProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for news provider classes."""

    def __init__(self):
        """Initialize empty registry."""
        self._providers: Dict[str, Type[NewsProvider]] = {}

    def register_provider(self, provider_class: Type[NewsProvider], key: Optional[str] = None):
        """
        Register a news provider class.

        Args:
            provider_class: NewsProvider subclass to register
            key: Optional custom key (uses class name if not provided)
        """
        if key is None:
            key = provider_class.__name__.lower().replace('provider', '')

        self._providers[key] = provider_class
        logger.debug(f"Registered news provider: {key}")

    def get_provider(self, key: str, database, config, session=None) -> NewsProvider:
        """
        Build a provider instance.

        Args:
            key: Provider key
            database: Persistence facade handed to the provider
            config: ``ProviderConfig`` with credentials and timeouts
            session: Optional HTTP session

        Returns:
            NewsProvider instance

        Raises:
            KeyError: If provider not found
        """
        if key not in self._providers:
            available = list(self._providers.keys())
            raise KeyError(f"Provider '{key}' not found. Available: {available}")

        return self._providers[key].from_config(database, config, session=session)

    def get_all_providers(self, database, config, keys: Optional[List[str]] = None) -> List[NewsProvider]:
        """Build providers for the given keys (all registered when omitted), in order."""
        return [self.get_provider(key, database, config) for key in (keys or self.list_available_providers())]

    def list_available_providers(self) -> List[str]:
        """Get list of available provider keys."""
        return list(self._providers.keys())


# Global registry instance
_global_registry = ProviderRegistry()


def register_provider(provider_class: Type[NewsProvider], key: Optional[str] = None):
    """Register a provider in the global registry."""
    _global_registry.register_provider(provider_class, key)


def get_provider(key: str, database, config, session=None) -> NewsProvider:
    """Get a provider from the global registry."""
    return _global_registry.get_provider(key, database, config, session=session)


def get_all_providers(database, config, keys: Optional[List[str]] = None) -> List[NewsProvider]:
    """Get providers from the global registry."""
    return _global_registry.get_all_providers(database, config, keys)


def list_available_providers() -> List[str]:
    """List available providers in the global registry."""
    return _global_registry.list_available_providers()
