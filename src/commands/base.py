#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import Any, Dict, List, Optional

from core.container import get_container
from core.exceptions import NewsAggregatorError
from core.models import ArticleFilters

logger = logging.getLogger(__name__)


def parse_key_values(pairs: Optional[List[str]]) -> Dict[str, Any]:
    """
    Turn ``KEY=VALUE`` strings into a provider parameter dict.

    Raises:
        ValueError: If an entry has no ``=``
    """
    params: Dict[str, Any] = {}
    for pair in pairs or []:
        if '=' not in pair:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        key, value = pair.split('=', 1)
        params[key.strip()] = value.strip()
    return params


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Resolves configuration, the database facade and the aggregator through
    the dependency injection container and maps errors to exit codes.
    """

    #: Subcommand names dispatched by ``execute``
    subcommands: List[str] = []

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def database(self):
        """Get database facade from container."""
        return self._container.get('database')

    def create_aggregator(self):
        """Create a new aggregator over all registered providers."""
        return self._container.get('aggregator')

    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if subcommand not in self.subcommands:
            available = ", ".join(self.get_available_subcommands())
            self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
            return 1

        try:
            return self.dispatch(subcommand, args)
        except (NewsAggregatorError, ValueError, KeyboardInterrupt) as e:
            return self.handle_error(e, f"{self.name} {subcommand}")

    @property
    def name(self) -> str:
        return self.__class__.__name__.lower().replace('command', '')

    @abstractmethod
    def dispatch(self, subcommand: str, args: Namespace) -> int:
        """Run a validated subcommand."""

    def get_available_subcommands(self) -> List[str]:
        """Get list of available subcommands for this command."""
        return list(self.subcommands)

    def filters_from_args(self, args: Namespace) -> ArticleFilters:
        """Build article filters from the shared filter options."""
        return ArticleFilters.from_params({
            'search': getattr(args, 'search', None),
            'source_id': getattr(args, 'source_id', None),
            'category': getattr(args, 'category', None),
            'author': getattr(args, 'author', None),
            'date_from': getattr(args, 'date_from', None),
            'date_to': getattr(args, 'date_to', None),
            'per_page': getattr(args, 'per_page', None),
            'page': getattr(args, 'page', None)
        }, default_per_page=self.config.app.default_per_page)

    def handle_error(self, error: BaseException, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130

        error_msg = f"{context}: {error}" if context else str(error)
        if isinstance(error, NewsAggregatorError):
            self.logger.error(f"{error_msg} {error.to_dict()['context']}")
        else:
            self.logger.error(error_msg, exc_info=True)

        if isinstance(error, ValueError):
            return 22
        return 1
