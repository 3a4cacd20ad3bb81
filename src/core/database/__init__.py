#!/usr/bin/env python3
"""
Database package for news aggregator.

Provides modular database services with proper separation of concerns.
"""

from .connection_manager import ConnectionManager
from .query_builder import ArticleQuery, ArticleQueryBuilder
from .source_service import SourceService
from .article_service import ArticleService
from .schema import ensure_schema, drop_schema
from .database_facade import NewsDatabase

__all__ = [
    'ConnectionManager',
    'ArticleQuery',
    'ArticleQueryBuilder',
    'SourceService',
    'ArticleService',
    'ensure_schema',
    'drop_schema',
    'NewsDatabase'
]
