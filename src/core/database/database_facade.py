#!/usr/bin/env python3
"""
Database Facade

Single entry point to the persistence layer used by providers, the
aggregator and CLI commands.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg

from core.exceptions import DatabaseError, SourceNotFoundError
from core.models import Article, ArticleFilters, Page, Source, UserPreference
from .connection_manager import ConnectionManager
from .article_service import ArticleService
from .source_service import SourceService
from .query_builder import ArticleQueryBuilder
from .schema import ensure_schema

logger = logging.getLogger(__name__)

TABLE_COUNTS_SQL = """
    SELECT
        (SELECT COUNT(*) FROM sources) AS sources,
        (SELECT COUNT(*) FROM articles) AS articles
"""


class NewsDatabase:
    """
    Unified database interface over the source and article services.

    Write path: ``resolve_source`` then ``save_articles``/``save_sources``.
    Read path: filtered pages and catalog listings.
    """

    def __init__(self, config, connection_manager: Optional[ConnectionManager] = None):
        """
        Initialize database facade with configuration.

        Args:
            config: Application configuration (``Config``)
            connection_manager: Pre-built connection manager (tests inject fakes)
        """
        self.config = config
        self.connection_manager = connection_manager or ConnectionManager(config.database)

        query_builder = ArticleQueryBuilder(
            search_mode=config.app.search_mode,
            default_per_page=config.app.default_per_page,
            max_per_page=config.app.max_per_page
        )

        # Initialize services
        self.sources = SourceService(self.connection_manager)
        self.articles = ArticleService(self.connection_manager, query_builder)

    # Write path

    def resolve_source(self, source: Source) -> Source:
        """Find or create the persisted counterpart of a source descriptor."""
        return self.sources.resolve_descriptor(source)

    def save_articles(self, articles: List[Article], source: Source) -> int:
        """Insert-or-skip articles for a resolved source."""
        return self.articles.save_articles(articles, source)

    def save_sources(self, sources: List[Source], provider: Optional[str] = None) -> int:
        """Upsert source descriptors by natural key."""
        return self.sources.save_sources(sources, provider)

    # Read path

    def paginate_articles(self, filters: ArticleFilters) -> Page:
        return self.articles.paginate(filters)

    def personalized_articles(self, preference: Optional[UserPreference], filters: ArticleFilters) -> Page:
        return self.articles.personalized(preference, filters)

    def get_source(self, source_id: int) -> Optional[Source]:
        return self.sources.get_source(source_id)

    def articles_for_source(self, source_id: int, filters: ArticleFilters) -> Page:
        """
        Articles of one source with the remaining filters applied.

        Raises:
            SourceNotFoundError: If no source has this id
        """
        if self.sources.get_source(source_id) is None:
            raise SourceNotFoundError(source_id)
        return self.articles.paginate(filters.with_source(source_id))

    def list_categories(self) -> List[str]:
        return self.articles.list_categories()

    def list_authors(self) -> List[str]:
        return self.articles.list_authors()

    def list_sources(self) -> List[Source]:
        return self.sources.list_sources()

    # Maintenance

    def ensure_schema(self) -> None:
        """Create tables and indexes when missing."""
        ensure_schema(self.connection_manager)

    def health_check(self) -> Dict[str, Any]:
        """Check database connection and return status with table counts."""
        health_info = self.connection_manager.health_check()
        if not health_info.get('connected', False):
            return health_info

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(TABLE_COUNTS_SQL)
                counts = cursor.fetchone()
            health_info['tables'] = {
                'sources': counts['sources'],
                'articles': counts['articles']
            }
        except (psycopg.Error, DatabaseError) as e:
            logger.warning(f"Could not get table counts: {e}")
            health_info['tables'] = {'error': str(e)}

        health_info['timestamp'] = datetime.now(timezone.utc).isoformat()
        return health_info

    # Connection Management

    def release_thread_connection(self):
        """Close the calling thread's connection (worker threads call this before exiting)."""
        self.connection_manager.release_thread_connection()

    def close(self):
        """Close database connections."""
        self.connection_manager.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
