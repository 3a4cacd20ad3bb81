#!/usr/bin/env python3
"""
CLI Router for the News Aggregator.

Parses ``<command> <subcommand> [options]`` and hands off to the command
classes registered in ``commands.COMMANDS``.
"""

import argparse
import logging
import sys
from typing import Optional, List

# Load environment variables first
import core.env_loader  # Auto-loads .env file

from commands import get_command, COMMANDS
from core.providers import list_available_providers

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


class CLIRouter:
    """
    CLI router for news aggregation commands.

    Command structure:
    - python run.py news fetch --source guardian
    - python run.py articles list --category technology --per-page 20
    - python run.py articles personalized --pref-categories technology sports
    - python run.py db init
    """

    def __init__(self, container=None):
        """Initialize CLI router."""
        self.container = container
        self._command_parsers = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Multi-source news aggregator",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_news_parser(subparsers)
        self._add_articles_parser(subparsers)
        self._add_db_parser(subparsers)

        return parser

    def _add_provider_options(self, parser: argparse.ArgumentParser):
        parser.add_argument('--source', choices=list_available_providers() + ['all'], default='all',
                            help='Provider to use (default: all)')
        parser.add_argument('--param', action='append', metavar='KEY=VALUE',
                            help='Provider request parameter, overrides defaults (repeatable)')
        parser.add_argument('--verbose', action='store_true', help='Verbose output')

    def _add_filter_options(self, parser: argparse.ArgumentParser, with_source: bool = True):
        parser.add_argument('--category', help='Exact category')
        parser.add_argument('--author', help='Author name fragment (case-insensitive)')
        if with_source:
            parser.add_argument('--source-id', type=int, help='Source id')
        parser.add_argument('--date-from', help='Earliest publication day (YYYY-MM-DD, inclusive)')
        parser.add_argument('--date-to', help='Latest publication day (YYYY-MM-DD, inclusive)')
        parser.add_argument('--per-page', type=_positive_int, help='Articles per page (default: 15, max: 100)')
        parser.add_argument('--page', type=_positive_int, default=1, help='Page number (default: 1)')
        parser.add_argument('--json', action='store_true', help='Print JSON instead of text')

    def _add_news_parser(self, subparsers):
        """Add news command parser."""
        news_parser = subparsers.add_parser(
            'news',
            help='Ingest articles and sources from the news providers'
        )
        self._command_parsers['news'] = news_parser

        news_subparsers = news_parser.add_subparsers(
            dest='subcommand',
            help='News operations',
            metavar='{fetch,sources,search}'
        )

        fetch_parser = news_subparsers.add_parser('fetch', help='Fetch top articles and store new ones')
        self._add_provider_options(fetch_parser)

        sources_parser = news_subparsers.add_parser('sources', help='Fetch provider source listings')
        self._add_provider_options(sources_parser)

        search_parser = news_subparsers.add_parser('search', help='Search providers and store matching articles')
        search_parser.add_argument('query', help='Search query')
        self._add_provider_options(search_parser)

    def _add_articles_parser(self, subparsers):
        """Add articles command parser."""
        articles_parser = subparsers.add_parser(
            'articles',
            help='Query stored articles'
        )
        self._command_parsers['articles'] = articles_parser

        articles_subparsers = articles_parser.add_subparsers(
            dest='subcommand',
            help='Article queries',
            metavar='{list,search,personalized,categories,authors,sources,source}'
        )

        list_parser = articles_subparsers.add_parser('list', help='List articles, newest first')
        list_parser.add_argument('--search', help='Keyword search over title and description')
        self._add_filter_options(list_parser)

        search_parser = articles_subparsers.add_parser('search', help='Keyword search over stored articles')
        search_parser.add_argument('query', help='Search keywords')
        self._add_filter_options(search_parser)

        personalized_parser = articles_subparsers.add_parser('personalized',
                                                             help='Articles matching user preferences')
        personalized_parser.add_argument('--pref-sources', nargs='+', type=int, metavar='ID',
                                         help='Preferred source ids')
        personalized_parser.add_argument('--pref-categories', nargs='+', metavar='CATEGORY',
                                         help='Preferred categories')
        personalized_parser.add_argument('--pref-authors', nargs='+', metavar='AUTHOR',
                                         help='Preferred author name fragments')
        personalized_parser.add_argument('--search', help='Keyword search over title and description')
        self._add_filter_options(personalized_parser)

        for name, help_text in (('categories', 'List distinct categories'),
                                ('authors', 'List distinct authors'),
                                ('sources', 'List stored sources')):
            catalog_parser = articles_subparsers.add_parser(name, help=help_text)
            catalog_parser.add_argument('--json', action='store_true', help='Print JSON instead of text')

        source_parser = articles_subparsers.add_parser('source', help='Articles of one source')
        source_parser.add_argument('id', type=int, help='Source id')
        source_parser.add_argument('--search', help='Keyword search over title and description')
        self._add_filter_options(source_parser, with_source=False)

    def _add_db_parser(self, subparsers):
        """Add db command parser."""
        db_parser = subparsers.add_parser(
            'db',
            help='Database schema and health'
        )
        self._command_parsers['db'] = db_parser

        db_subparsers = db_parser.add_subparsers(
            dest='subcommand',
            help='Database operations',
            metavar='{init,health}'
        )

        db_subparsers.add_parser('init', help='Create tables and indexes if missing')
        db_subparsers.add_parser('health', help='Check database connection and table counts')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Ingestion
  python run.py db init
  python run.py news fetch
  python run.py news fetch --source nyt --param section=technology
  python run.py news search "climate" --source guardian
  python run.py news sources

  # Queries
  python run.py articles list --category technology --per-page 20
  python run.py articles search "election" --date-from 2024-01-01
  python run.py articles personalized --pref-categories technology sports
  python run.py articles source 3 --json
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self._command_parsers[args.command].print_help()
            return 1

        command = get_command(args.command, self.container)
        return command.execute(subcommand, args)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    router = CLIRouter()
    try:
        return router.route_command(args)
    finally:
        from core.container import reset_container
        reset_container()


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
