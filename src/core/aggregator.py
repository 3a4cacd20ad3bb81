#!/usr/bin/env python3
"""
News Aggregator

Fans fetch, source-listing and search calls out to every registered
provider and merges the results in registration order. A provider that
fails is logged and skipped; its siblings still run.
"""

import concurrent.futures
import logging
from typing import Any, Callable, Dict, List, Optional

from core.models import Article, Source
from core.providers import NewsProvider, get_all_providers

logger = logging.getLogger(__name__)


class NewsAggregator:
    """Ordered collection of news providers with per-provider failure isolation."""

    def __init__(self, providers: Optional[List[NewsProvider]] = None, max_workers: int = 1):
        """
        Initialize aggregator.

        Args:
            providers: Initial providers, in fan-out order
            max_workers: Providers run concurrently when greater than 1
        """
        self._providers: List[NewsProvider] = list(providers or [])
        self.max_workers = max(1, max_workers)

    @property
    def providers(self) -> List[NewsProvider]:
        return list(self._providers)

    def add_provider(self, provider: NewsProvider) -> 'NewsAggregator':
        """Append a provider; later providers' results come after earlier ones."""
        self._providers.append(provider)
        return self

    def get_articles(self, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        """Fetch top articles from every provider."""
        return self._fan_out('fetching articles', lambda provider: provider.fetch_top_articles(params))

    def get_sources(self, params: Optional[Dict[str, Any]] = None) -> List[Source]:
        """Fetch and upsert the source listing of every provider."""
        return self._fan_out('fetching sources', lambda provider: provider.fetch_sources(params))

    def search_articles(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        """Search every provider."""
        return self._fan_out('searching articles', lambda provider: provider.search_articles(query, params))

    def _fan_out(self, operation: str, call: Callable[[NewsProvider], List[Any]]) -> List[Any]:
        if self.max_workers > 1 and len(self._providers) > 1:
            outcomes = self._run_concurrently(operation, call)
        else:
            outcomes = [self._run_one(operation, provider, call) for provider in self._providers]

        merged: List[Any] = []
        for outcome in outcomes:
            merged.extend(outcome)

        logger.info(f"Finished {operation}: {len(merged)} items from {len(self._providers)} providers")
        return merged

    def _run_concurrently(self, operation: str, call: Callable[[NewsProvider], List[Any]]) -> List[List[Any]]:
        workers = min(self.max_workers, len(self._providers))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._run_in_worker, operation, provider, call)
                for provider in self._providers
            ]
            # Collected in submission order so output matches registration order
            return [future.result() for future in futures]

    @classmethod
    def _run_in_worker(cls, operation: str, provider: NewsProvider,
                       call: Callable[[NewsProvider], List[Any]]) -> List[Any]:
        try:
            return cls._run_one(operation, provider, call)
        finally:
            # Worker threads end with the executor; their connections go with them
            provider.release_thread_resources()

    @staticmethod
    def _run_one(operation: str, provider: NewsProvider, call: Callable[[NewsProvider], List[Any]]) -> List[Any]:
        try:
            return list(call(provider) or [])
        except Exception as e:
            logger.error(f"Error {operation} from {provider.name}: {e}", exc_info=True)
            return []

    @classmethod
    def create_with_default_providers(cls, config, database, keys: Optional[List[str]] = None) -> 'NewsAggregator':
        """
        Build an aggregator over the registered providers.

        Args:
            config: Application configuration (``Config``)
            database: Persistence facade shared by all providers
            keys: Provider keys to include (all registered when omitted)
        """
        providers = get_all_providers(database, config.providers, keys)
        return cls(providers, max_workers=config.app.max_concurrent_providers)

    def close(self) -> None:
        """Close every provider's HTTP session."""
        for provider in self._providers:
            provider.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
