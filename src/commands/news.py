#!/usr/bin/env python3
"""
News command endpoints for ingesting articles and sources from providers.
"""

import logging
from argparse import Namespace

from .base import BaseCommand, parse_key_values
from core.aggregator import NewsAggregator
from core.formatters import format_article

logger = logging.getLogger(__name__)


class NewsCommand(BaseCommand):
    """Fetch, search and list sources from the external news providers."""

    subcommands = ['fetch', 'sources', 'search']

    def dispatch(self, subcommand: str, args: Namespace) -> int:
        if subcommand == "fetch":
            return self.fetch(args)
        elif subcommand == "sources":
            return self.sources(args)
        return self.search(args)

    def _aggregator(self, args: Namespace) -> NewsAggregator:
        selected = getattr(args, 'source', None)
        if not selected or selected == 'all':
            return self.create_aggregator()
        return NewsAggregator.create_with_default_providers(self.config, self.database, keys=[selected])

    def fetch(self, args: Namespace) -> int:
        """Fetch top articles from the selected providers and store new ones."""
        params = parse_key_values(getattr(args, 'param', None))
        with self._aggregator(args) as aggregator:
            articles = aggregator.get_articles(params)

        stored = sum(1 for article in articles if article.id is not None)
        print(f"📰 Fetched {len(articles)} articles ({stored} new)")
        if getattr(args, 'verbose', False):
            for article in articles:
                print(format_article(article))
        return 0

    def sources(self, args: Namespace) -> int:
        """Fetch provider source listings and upsert them."""
        params = parse_key_values(getattr(args, 'param', None))
        with self._aggregator(args) as aggregator:
            sources = aggregator.get_sources(params)

        print(f"🗞️  Fetched {len(sources)} sources")
        if getattr(args, 'verbose', False):
            for source in sources:
                print(f"  • {source.name} [{source.provider}]")
        return 0

    def search(self, args: Namespace) -> int:
        """Search providers for a query and store matching articles."""
        params = parse_key_values(getattr(args, 'param', None))
        with self._aggregator(args) as aggregator:
            articles = aggregator.search_articles(args.query, params)

        stored = sum(1 for article in articles if article.id is not None)
        print(f"🔍 Found {len(articles)} articles for '{args.query}' ({stored} new)")
        if getattr(args, 'verbose', False):
            for article in articles:
                print(format_article(article))
        return 0
