#!/usr/bin/env python3
"""
Source Database Service

Find-or-create resolution of publications by natural key, batch upserts of
provider source listings and the read queries over persisted sources.
"""

import logging
from typing import Any, Dict, List, Optional

import psycopg

from core.exceptions import DatabaseOperationError
from core.models import Source
from core.models.source import DESCRIPTIVE_FIELDS

logger = logging.getLogger(__name__)

SOURCE_COLUMNS = "id, name, slug, provider, provider_source_id, description, url, category, language, country"

RESOLVE_INSERT_SQL = f"""
    INSERT INTO sources (name, slug, provider, provider_source_id, description, url, category, language, country)
    VALUES (%(name)s, %(slug)s, %(provider)s, %(provider_source_id)s, %(description)s,
            %(url)s, %(category)s, %(language)s, %(country)s)
    ON CONFLICT (slug, provider) DO NOTHING
    RETURNING {SOURCE_COLUMNS}
"""

SELECT_BY_KEY_SQL = f"""
    SELECT {SOURCE_COLUMNS}
    FROM sources
    WHERE slug = %(slug)s AND provider = %(provider)s
"""

UPSERT_SQL = f"""
    INSERT INTO sources (name, slug, provider, provider_source_id, description, url, category, language, country)
    VALUES (%(name)s, %(slug)s, %(provider)s, %(provider_source_id)s, %(description)s,
            %(url)s, %(category)s, %(language)s, %(country)s)
    ON CONFLICT (slug, provider) DO UPDATE SET
        name = EXCLUDED.name,
        provider_source_id = EXCLUDED.provider_source_id,
        description = EXCLUDED.description,
        url = EXCLUDED.url,
        category = EXCLUDED.category,
        language = EXCLUDED.language,
        country = EXCLUDED.country,
        updated_at = now()
    RETURNING {SOURCE_COLUMNS}
"""

SELECT_BY_ID_SQL = f"""
    SELECT {SOURCE_COLUMNS}
    FROM sources
    WHERE id = %(id)s
"""

LIST_SQL = f"""
    SELECT {SOURCE_COLUMNS}
    FROM sources
    ORDER BY name, id
"""


def _source_params(source: Source, provider: Optional[str] = None) -> Dict[str, Any]:
    params = source.defaults()
    params['slug'] = source.slug
    params['provider'] = provider or source.provider
    return params


class SourceService:
    """Service for source-related database operations."""

    def __init__(self, connection_manager):
        """
        Initialize source service.

        Args:
            connection_manager: Database connection manager instance
        """
        self.connection_manager = connection_manager

    def resolve(self, slug: str, provider: str, defaults: Optional[Dict[str, Any]] = None) -> Source:
        """
        Return the source identified by ``(slug, provider)``, creating it if needed.

        ``defaults`` only apply when the row is created; an existing source is
        returned as stored. Concurrent callers with the same key end up with the
        same row because the insert yields to the unique constraint.

        Args:
            slug: Source slug
            provider: Provider identifier
            defaults: Descriptive fields for a newly created source

        Returns:
            Persisted source (with id)
        """
        defaults = defaults or {}
        params = {name: defaults.get(name) for name in DESCRIPTIVE_FIELDS}
        params.update(name=params['name'] or slug, slug=slug, provider=provider)

        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(RESOLVE_INSERT_SQL, params)
                row = cursor.fetchone()
                if row is None:
                    cursor.execute(SELECT_BY_KEY_SQL, {'slug': slug, 'provider': provider})
                    row = cursor.fetchone()
                else:
                    logger.info(f"Created source '{row['name']}' ({provider}/{slug})")
        except psycopg.Error as e:
            logger.error(f"Failed to resolve source {provider}/{slug}: {e}")
            raise DatabaseOperationError('resolve', 'sources', e,
                                         details={'slug': slug, 'provider': provider}) from e

        if row is None:
            # Only reachable if the row was deleted between the two statements
            raise DatabaseOperationError('resolve', 'sources', LookupError(f"{provider}/{slug} vanished"),
                                         details={'slug': slug, 'provider': provider})
        return Source.from_row(row)

    def resolve_descriptor(self, source: Source) -> Source:
        """Resolve an unsaved source descriptor."""
        return self.resolve(source.slug, source.provider, source.defaults())

    def save_sources(self, sources: List[Source], provider: Optional[str] = None) -> int:
        """
        Upsert sources by natural key in a single transaction.

        Args:
            sources: Source descriptors
            provider: Provider identifier overriding each descriptor's own

        Returns:
            Number of sources written (inserted or refreshed)
        """
        if not sources:
            return 0

        saved = 0
        current = None
        try:
            with self.connection_manager.transaction() as cursor:
                for current in sources:
                    cursor.execute(UPSERT_SQL, _source_params(current, provider))
                    if cursor.fetchone():
                        saved += 1
        except psycopg.Error as e:
            name = current.name if current else None
            logger.error(f"Failed to save source '{name}': {e}")
            raise DatabaseOperationError('upsert', 'sources', e, details={'source': name}) from e

        logger.info(f"Saved {saved} sources for {provider or 'mixed providers'}")
        return saved

    def get_source(self, source_id: int) -> Optional[Source]:
        """Get a source by id, or None when it does not exist."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(SELECT_BY_ID_SQL, {'id': source_id})
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error(f"Failed to load source {source_id}: {e}")
            raise DatabaseOperationError('select', 'sources', e) from e
        return Source.from_row(row) if row else None

    def list_sources(self) -> List[Source]:
        """All persisted sources ordered by name."""
        try:
            with self.connection_manager.get_cursor() as cursor:
                cursor.execute(LIST_SQL)
                return [Source.from_row(row) for row in cursor.fetchall()]
        except psycopg.Error as e:
            logger.error(f"Failed to list sources: {e}")
            raise DatabaseOperationError('select', 'sources', e) from e
