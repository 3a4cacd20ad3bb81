#!/usr/bin/env python3
"""
Core data models for news aggregation.

Contains all data structures used throughout the application.
"""

from .article import Article, parse_published_date
from .source import Source
from .query import ArticleFilters, UserPreference, Page

__all__ = ['Article', 'parse_published_date', 'Source', 'ArticleFilters', 'UserPreference', 'Page']
