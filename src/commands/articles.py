#!/usr/bin/env python3
"""
Article command endpoints: filtered listings, personalized feeds and catalogs.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.formatters import format_page, format_source, to_json
from core.models import Page, UserPreference

logger = logging.getLogger(__name__)


class ArticlesCommand(BaseCommand):
    """Query stored articles and their catalogs."""

    subcommands = ['list', 'search', 'personalized', 'categories', 'authors', 'sources', 'source']

    def dispatch(self, subcommand: str, args: Namespace) -> int:
        if subcommand == "list":
            return self.list(args)
        elif subcommand == "search":
            return self.search(args)
        elif subcommand == "personalized":
            return self.personalized(args)
        elif subcommand == "categories":
            return self.categories(args)
        elif subcommand == "authors":
            return self.authors(args)
        elif subcommand == "sources":
            return self.sources(args)
        return self.source(args)

    def _print_page(self, page: Page, args: Namespace) -> int:
        if getattr(args, 'json', False):
            print(to_json(page.to_dict()))
        else:
            print(format_page(page))
        return 0

    def list(self, args: Namespace) -> int:
        """List stored articles, newest first."""
        return self._print_page(self.database.paginate_articles(self.filters_from_args(args)), args)

    def search(self, args: Namespace) -> int:
        """Search stored articles by keyword."""
        args.search = args.query
        return self._print_page(self.database.paginate_articles(self.filters_from_args(args)), args)

    def personalized(self, args: Namespace) -> int:
        """List articles scoped to the given preferences."""
        preference = UserPreference(
            preferred_sources=args.pref_sources or [],
            preferred_categories=args.pref_categories or [],
            preferred_authors=args.pref_authors or []
        )
        if preference.is_empty():
            self.logger.info("No preferences given, nothing personalized to show")
            preference = None

        page = self.database.personalized_articles(preference, self.filters_from_args(args))
        return self._print_page(page, args)

    def categories(self, args: Namespace) -> int:
        """List distinct article categories."""
        categories = self.database.list_categories()
        if getattr(args, 'json', False):
            print(to_json(categories))
        else:
            for category in categories:
                print(category)
        return 0

    def authors(self, args: Namespace) -> int:
        """List distinct article authors."""
        authors = self.database.list_authors()
        if getattr(args, 'json', False):
            print(to_json(authors))
        else:
            for author in authors:
                print(author)
        return 0

    def sources(self, args: Namespace) -> int:
        """List stored sources."""
        sources = self.database.list_sources()
        if getattr(args, 'json', False):
            print(to_json([source.to_dict() for source in sources]))
        else:
            for source in sources:
                print(format_source(source))
        return 0

    def source(self, args: Namespace) -> int:
        """List articles of one source."""
        page = self.database.articles_for_source(args.id, self.filters_from_args(args))
        return self._print_page(page, args)
