#!/usr/bin/env python3
"""
Auto-registration of all available news providers.

Import this module to automatically register all built-in providers.
Registration order is the order the aggregator fans out in.
"""

import logging
from .registry import register_provider
from .newsapi import NewsApiProvider
from .guardian import GuardianProvider
from .nyt import NytProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = [
    (NewsApiProvider, 'newsapi'),
    (GuardianProvider, 'guardian'),
    (NytProvider, 'nyt'),
]


def register_all_providers():
    """Register all built-in news providers."""
    for provider_class, key in DEFAULT_PROVIDERS:
        register_provider(provider_class, key)
    logger.debug(f"Registered providers: {', '.join(key for _, key in DEFAULT_PROVIDERS)}")


# Auto-register on import
register_all_providers()
