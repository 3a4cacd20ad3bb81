#!/usr/bin/env python3
"""
Read-side models: article filters, user preferences and result pages.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from dateutil import parser as date_parser

from core.models.article import Article

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100


def _to_date(value: Any) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.parse(str(value)).date()


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class ArticleFilters:
    """
    Recognized filter set for article queries.

    Values are expected to be validated upstream; ``per_page`` and ``page``
    are still clamped by the query builder.
    """
    search: Optional[str] = None
    source_id: Optional[int] = None
    category: Optional[str] = None
    author: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    per_page: int = DEFAULT_PER_PAGE
    page: int = 1

    @classmethod
    def from_params(cls, params: Mapping[str, Any], default_per_page: int = DEFAULT_PER_PAGE) -> 'ArticleFilters':
        """Build filters from a plain parameter bag (strings allowed)."""
        per_page = _to_int(params.get('per_page'))
        page = _to_int(params.get('page'))
        return cls(
            search=_to_text(params.get('search')),
            source_id=_to_int(params.get('source_id')),
            category=_to_text(params.get('category')),
            author=_to_text(params.get('author')),
            date_from=_to_date(params.get('date_from')),
            date_to=_to_date(params.get('date_to')),
            per_page=per_page if per_page is not None else default_per_page,
            page=page if page is not None else 1
        )

    def with_source(self, source_id: int) -> 'ArticleFilters':
        return replace(self, source_id=source_id)


@dataclass
class UserPreference:
    """A user's content preferences, supplied by the caller."""
    preferred_sources: List[int] = field(default_factory=list)
    preferred_categories: List[str] = field(default_factory=list)
    preferred_authors: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.preferred_sources = [int(s) for s in self.preferred_sources or []]
        self.preferred_categories = [c.strip() for c in self.preferred_categories or [] if c and c.strip()]
        self.preferred_authors = [a.strip() for a in self.preferred_authors or [] if a and a.strip()]

    def is_empty(self) -> bool:
        return not (self.preferred_sources or self.preferred_categories or self.preferred_authors)


@dataclass
class Page:
    """One page of an ordered article query plus total-count metadata."""
    items: List[Article]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @classmethod
    def empty(cls, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> 'Page':
        return cls(items=[], total=0, page=page, per_page=per_page)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'data': [article.to_dict() for article in self.items],
            'meta': {
                'total': self.total,
                'page': self.page,
                'per_page': self.per_page,
                'last_page': self.last_page
            }
        }
