#!/usr/bin/env python3
"""
Article query builder.

Turns ``ArticleFilters`` and an optional ``UserPreference`` into a pair of
parameterized statements: a page of articles and the matching total count.
Building is pure; nothing here touches a connection.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional, Tuple

from core.models.query import ArticleFilters, UserPreference, DEFAULT_PER_PAGE, MAX_PER_PAGE
from core.text_sanitizer import contains_pattern

SEARCH_FULLTEXT = 'fulltext'
SEARCH_SUBSTRING = 'substring'

SEARCH_DOCUMENT_SQL = "to_tsvector('english', coalesce(a.title, '') || ' ' || coalesce(a.description, ''))"
ILIKE_SQL = "{column} ILIKE %s ESCAPE '\\'"

ARTICLE_COLUMNS = (
    "a.id, a.source_id, a.title, a.description, a.content, a.author, a.url, a.url_to_image, "
    "a.category, a.published_at, a.external_id, a.created_at, s.name AS source_name"
)
ORDER_BY_SQL = "ORDER BY a.published_at DESC, a.id DESC"


@dataclass
class ArticleQuery:
    """Statements and parameters for one page of results."""
    select_sql: str
    select_params: List[Any]
    count_sql: str
    count_params: List[Any]
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class ArticleQueryBuilder:
    """
    Composes conjunctive WHERE clauses over the ``articles`` table (alias ``a``).

    Ad-hoc filters each add one clause. Preference dimensions are OR'd
    internally, AND'd with one another and with the filters.
    """

    def __init__(self, search_mode: str = SEARCH_FULLTEXT, default_per_page: int = DEFAULT_PER_PAGE,
                 max_per_page: int = MAX_PER_PAGE):
        if search_mode not in (SEARCH_FULLTEXT, SEARCH_SUBSTRING):
            raise ValueError(f"Unknown search mode: {search_mode}")
        self.search_mode = search_mode
        self.default_per_page = default_per_page
        self.max_per_page = max_per_page

    def clamp(self, filters: ArticleFilters) -> Tuple[int, int]:
        """Return ``(page, per_page)`` forced into their valid ranges."""
        per_page = filters.per_page if filters.per_page else self.default_per_page
        per_page = min(max(int(per_page), 1), self.max_per_page)
        page = max(int(filters.page or 1), 1)
        return page, per_page

    def filter_clauses(self, filters: ArticleFilters) -> Tuple[List[str], List[Any]]:
        """WHERE clauses and positional parameters for ad-hoc filters."""
        clauses: List[str] = []
        params: List[Any] = []

        if filters.search:
            if self.search_mode == SEARCH_FULLTEXT:
                clauses.append(f"{SEARCH_DOCUMENT_SQL} @@ plainto_tsquery('english', %s)")
                params.append(filters.search)
            else:
                pattern = contains_pattern(filters.search)
                clauses.append(
                    f"({ILIKE_SQL.format(column='a.title')} OR {ILIKE_SQL.format(column='a.description')})"
                )
                params.extend([pattern, pattern])

        if filters.source_id is not None:
            clauses.append("a.source_id = %s")
            params.append(filters.source_id)

        if filters.category:
            clauses.append("a.category = %s")
            params.append(filters.category)

        if filters.author:
            clauses.append(ILIKE_SQL.format(column='a.author'))
            params.append(contains_pattern(filters.author))

        if filters.date_from:
            clauses.append("a.published_at >= %s")
            params.append(_day_start(filters.date_from))

        if filters.date_to:
            clauses.append("a.published_at < %s")
            params.append(_day_start(filters.date_to + timedelta(days=1)))

        return clauses, params

    def preference_clauses(self, preference: UserPreference) -> Tuple[List[str], List[Any]]:
        """WHERE clauses for the non-empty preference dimensions."""
        clauses: List[str] = []
        params: List[Any] = []

        if preference.preferred_sources:
            clauses.append("a.source_id = ANY(%s)")
            params.append(list(preference.preferred_sources))

        if preference.preferred_categories:
            clauses.append("a.category = ANY(%s)")
            params.append(list(preference.preferred_categories))

        if preference.preferred_authors:
            terms = [ILIKE_SQL.format(column='a.author')] * len(preference.preferred_authors)
            clauses.append(f"({' OR '.join(terms)})")
            params.extend(contains_pattern(author) for author in preference.preferred_authors)

        return clauses, params

    def build(self, filters: ArticleFilters, preference: Optional[UserPreference] = None) -> ArticleQuery:
        """Build the page and count statements."""
        clauses: List[str] = []
        params: List[Any] = []

        if preference is not None:
            clauses, params = self.preference_clauses(preference)

        filter_sql, filter_params = self.filter_clauses(filters)
        clauses.extend(filter_sql)
        params.extend(filter_params)

        where = ' AND '.join(clauses) if clauses else 'TRUE'
        page, per_page = self.clamp(filters)

        select_sql = (
            f"SELECT {ARTICLE_COLUMNS} "
            f"FROM articles a JOIN sources s ON s.id = a.source_id "
            f"WHERE {where} {ORDER_BY_SQL} LIMIT %s OFFSET %s"
        )
        count_sql = f"SELECT COUNT(*) AS total FROM articles a WHERE {where}"

        return ArticleQuery(
            select_sql=select_sql,
            select_params=params + [per_page, (page - 1) * per_page],
            count_sql=count_sql,
            count_params=list(params),
            page=page,
            per_page=per_page
        )
