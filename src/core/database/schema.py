#!/usr/bin/env python3
"""
Schema bootstrap for sources and articles.

Idempotent DDL executed by ``db init``. Uniqueness that the ingestion
pipeline relies on lives here as constraints, not in application code.
"""

import logging
from typing import Tuple

import psycopg

from core.exceptions import DatabaseOperationError

logger = logging.getLogger(__name__)

# Must match the document expression in query_builder (there with alias-qualified columns)
SEARCH_DOCUMENT_SQL = "to_tsvector('english', coalesce(title, '') || ' ' || coalesce(description, ''))"

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS sources (
        id BIGSERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        slug TEXT NOT NULL,
        provider TEXT NOT NULL,
        provider_source_id TEXT,
        description TEXT,
        url TEXT,
        category TEXT,
        language TEXT,
        country TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        CONSTRAINT sources_slug_provider_key UNIQUE (slug, provider)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS articles (
        id BIGSERIAL PRIMARY KEY,
        source_id BIGINT NOT NULL REFERENCES sources (id) ON DELETE CASCADE,
        title TEXT NOT NULL CHECK (title <> ''),
        description TEXT,
        content TEXT,
        author TEXT,
        url TEXT NOT NULL CHECK (url <> ''),
        url_to_image TEXT,
        category TEXT,
        published_at TIMESTAMPTZ NOT NULL,
        external_id TEXT,
        raw_data JSONB,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS articles_url_key ON articles (url)",
    """
    CREATE UNIQUE INDEX IF NOT EXISTS articles_external_id_key
        ON articles (external_id) WHERE external_id IS NOT NULL
    """,
    "CREATE INDEX IF NOT EXISTS articles_published_at_source_idx ON articles (published_at DESC, source_id)",
    "CREATE INDEX IF NOT EXISTS articles_category_idx ON articles (category)",
    f"CREATE INDEX IF NOT EXISTS articles_search_idx ON articles USING GIN ({SEARCH_DOCUMENT_SQL})",
)

DROP_STATEMENTS: Tuple[str, ...] = (
    "DROP TABLE IF EXISTS articles",
    "DROP TABLE IF EXISTS sources",
)


def ensure_schema(connection_manager) -> None:
    """Create tables and indexes if they do not exist yet."""
    try:
        with connection_manager.transaction() as cursor:
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
    except psycopg.Error as e:
        raise DatabaseOperationError('create', 'schema', e) from e
    logger.info("Database schema is up to date")


def drop_schema(connection_manager) -> None:
    """Drop all tables (used by integration tests)."""
    with connection_manager.transaction() as cursor:
        for statement in DROP_STATEMENTS:
            cursor.execute(statement)
    logger.warning("Dropped articles and sources tables")
