#!/usr/bin/env python3
"""
News provider adapters for external news APIs.

Each adapter fetches from one provider, maps records into canonical
articles and sources, and persists them through the database facade.
"""

from .registry import (ProviderRegistry, register_provider, get_provider, get_all_providers,
                       list_available_providers)
from .base import NewsProvider
from .newsapi import NewsApiProvider
from .guardian import GuardianProvider
from .nyt import NytProvider

# Import to trigger auto-registration
from . import auto_register

__all__ = [
    'ProviderRegistry', 'register_provider', 'get_provider', 'get_all_providers',
    'list_available_providers', 'NewsProvider', 'NewsApiProvider', 'GuardianProvider', 'NytProvider'
]
