#!/usr/bin/env python3
"""
Article Database Service

Handles all database operations related to news articles: insert-or-skip
persistence, filtered pagination and the article catalog queries.
"""

import logging
from typing import Any, Dict, List, Optional

import psycopg
from psycopg.types.json import Jsonb

from core.exceptions import DatabaseOperationError
from core.models import Article, ArticleFilters, Page, Source, UserPreference
from .query_builder import ArticleQueryBuilder

logger = logging.getLogger(__name__)

# A NULL external_id never compares equal, so only the url is matched for articles without one
ARTICLE_EXISTS_SQL = """
    SELECT id
    FROM articles
    WHERE url = %(url)s OR external_id = %(external_id)s
    LIMIT 1
"""

ARTICLE_INSERT_SQL = """
    INSERT INTO articles (source_id, title, description, content, author, url, url_to_image,
                          category, published_at, external_id, raw_data)
    VALUES (%(source_id)s, %(title)s, %(description)s, %(content)s, %(author)s, %(url)s,
            %(url_to_image)s, %(category)s, %(published_at)s, %(external_id)s, %(raw_data)s)
    ON CONFLICT DO NOTHING
    RETURNING id
"""

CATEGORIES_SQL = """
    SELECT DISTINCT category
    FROM articles
    WHERE category IS NOT NULL
    ORDER BY category
"""

AUTHORS_SQL = """
    SELECT DISTINCT author
    FROM articles
    WHERE author IS NOT NULL
    ORDER BY author
"""


class ArticleService:
    """Service for article-related database operations."""

    def __init__(self, connection_manager, query_builder: Optional[ArticleQueryBuilder] = None):
        """
        Initialize article service.

        Args:
            connection_manager: Database connection manager instance
            query_builder: Builder for filtered queries (defaults to full-text search)
        """
        self.connection_manager = connection_manager
        self.query_builder = query_builder or ArticleQueryBuilder()

    def save_articles(self, articles: List[Article], source: Source) -> int:
        """
        Store articles for a source, skipping any already known by url or external id.

        The whole batch runs in one transaction: a storage failure rolls every
        insert of the call back and is re-raised.

        Args:
            articles: Normalized articles
            source: Persisted source owning the articles

        Returns:
            Number of new articles stored
        """
        if not articles:
            return 0
        if source.id is None:
            raise ValueError(f"Source '{source.name}' must be resolved before saving articles")

        stored_count = 0
        current = None

        try:
            with self.connection_manager.transaction() as cursor:
                for current in articles:
                    if not current.title or not current.url:
                        logger.warning(f"Skipping article without title or url from {source.name}")
                        continue

                    cursor.execute(ARTICLE_EXISTS_SQL, {'url': current.url, 'external_id': current.external_id})
                    if cursor.fetchone():
                        logger.debug(f"Article already stored: {current.url}")
                        continue

                    cursor.execute(ARTICLE_INSERT_SQL, self._insert_params(current, source))
                    row = cursor.fetchone()
                    if row:
                        current.id = row['id']
                        current.source_id = source.id
                        stored_count += 1

        except psycopg.Error as e:
            title = current.title if current else None
            logger.error(f"Failed to store article '{title}' from {source.name}: {e}")
            raise DatabaseOperationError('insert', 'articles', e,
                                         details={'source': source.name, 'title': title}) from e

        logger.info(f"Stored {stored_count} new articles out of {len(articles)} provided for {source.name}")
        return stored_count

    def paginate(self, filters: ArticleFilters, preference: Optional[UserPreference] = None) -> Page:
        """
        Get one page of articles matching the filters, newest first.

        Args:
            filters: Ad-hoc filters and pagination
            preference: Optional preference scope AND'd with the filters

        Returns:
            Page with items and total match count
        """
        query = self.query_builder.build(filters, preference)

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(query.count_sql, query.count_params)
                row = cursor.fetchone()
                total = row['total'] if row else 0

                items: List[Article] = []
                if total > query.offset:
                    cursor.execute(query.select_sql, query.select_params)
                    items = [Article.from_row(r) for r in cursor.fetchall()]

        except psycopg.Error as e:
            logger.error(f"Failed to query articles: {e}")
            raise DatabaseOperationError('select', 'articles', e) from e

        return Page(items=items, total=total, page=query.page, per_page=query.per_page)

    def personalized(self, preference: Optional[UserPreference], filters: ArticleFilters) -> Page:
        """
        Get articles scoped to a user's preferences.

        A missing preference record yields an empty page.
        """
        if preference is None:
            page, per_page = self.query_builder.clamp(filters)
            return Page.empty(page=page, per_page=per_page)
        return self.paginate(filters, preference)

    def list_categories(self) -> List[str]:
        """Distinct article categories, sorted."""
        return self._distinct(CATEGORIES_SQL, 'category')

    def list_authors(self) -> List[str]:
        """Distinct article authors, sorted."""
        return self._distinct(AUTHORS_SQL, 'author')

    def _distinct(self, sql: str, column: str) -> List[str]:
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(sql)
                return [row[column] for row in cursor.fetchall()]
        except psycopg.Error as e:
            logger.error(f"Failed to list {column} values: {e}")
            raise DatabaseOperationError('select', 'articles', e) from e

    @staticmethod
    def _insert_params(article: Article, source: Source) -> Dict[str, Any]:
        return {
            'source_id': source.id,
            'title': article.title,
            'description': article.description,
            'content': article.content,
            'author': article.author,
            'url': article.url,
            'url_to_image': article.url_to_image,
            'category': article.category,
            'published_at': article.published_at,
            'external_id': article.external_id,
            'raw_data': Jsonb(article.raw_data) if article.raw_data is not None else None
        }
