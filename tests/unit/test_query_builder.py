from datetime import date, datetime, timezone

import pytest

from core.database.query_builder import (ArticleQueryBuilder, ORDER_BY_SQL, SEARCH_DOCUMENT_SQL,
                                         SEARCH_SUBSTRING)
from core.models import ArticleFilters, UserPreference


@pytest.fixture
def builder():
    return ArticleQueryBuilder()


def test_no_filters_matches_everything(builder):
    query = builder.build(ArticleFilters())

    assert "WHERE TRUE" in query.select_sql
    assert query.count_sql == "SELECT COUNT(*) AS total FROM articles a WHERE TRUE"
    assert query.select_sql.endswith(f"{ORDER_BY_SQL} LIMIT %s OFFSET %s")
    assert query.select_params == [15, 0]
    assert query.count_params == []


def test_filters_are_anded_in_order(builder):
    filters = ArticleFilters(source_id=3, category="technology", author="smith",
                             date_from=date(2024, 1, 1), date_to=date(2024, 1, 31), per_page=10, page=3)
    query = builder.build(filters)

    where = query.count_sql.split(" WHERE ", 1)[1]
    assert where == (
        "a.source_id = %s AND a.category = %s AND a.author ILIKE %s ESCAPE '\\' "
        "AND a.published_at >= %s AND a.published_at < %s"
    )
    assert query.count_params == [
        3, "technology", "%smith%",
        datetime(2024, 1, 1, tzinfo=timezone.utc),
        datetime(2024, 2, 1, tzinfo=timezone.utc),
    ]
    assert query.select_params == query.count_params + [10, 20]
    assert query.offset == 20


def test_date_to_includes_the_whole_day(builder):
    query = builder.build(ArticleFilters(date_to=date(2024, 2, 29)))
    assert query.count_params == [datetime(2024, 3, 1, tzinfo=timezone.utc)]
    assert "a.published_at < %s" in query.count_sql


def test_fulltext_search(builder):
    query = builder.build(ArticleFilters(search="climate change"))
    assert f"{SEARCH_DOCUMENT_SQL} @@ plainto_tsquery('english', %s)" in query.count_sql
    assert query.count_params == ["climate change"]


def test_substring_search_escapes_wildcards():
    builder = ArticleQueryBuilder(search_mode=SEARCH_SUBSTRING)
    query = builder.build(ArticleFilters(search="100%"))

    assert "(a.title ILIKE %s ESCAPE '\\' OR a.description ILIKE %s ESCAPE '\\')" in query.count_sql
    assert query.count_params == ["%100\\%%", "%100\\%%"]


def test_unknown_search_mode_rejected():
    with pytest.raises(ValueError):
        ArticleQueryBuilder(search_mode="regex")


@pytest.mark.parametrize("per_page,page,expected", [
    (0, 1, (1, 15)),
    (-5, 1, (1, 1)),
    (500, 1, (1, 100)),
    (20, 0, (1, 20)),
    (20, -3, (1, 20)),
    (20, 4, (4, 20)),
])
def test_clamp(builder, per_page, page, expected):
    assert builder.clamp(ArticleFilters(per_page=per_page, page=page)) == expected


def test_custom_page_limits():
    builder = ArticleQueryBuilder(default_per_page=5, max_per_page=10)
    assert builder.clamp(ArticleFilters(per_page=None)) == (1, 5)
    assert builder.clamp(ArticleFilters(per_page=50)) == (1, 10)


def test_preference_dimensions(builder):
    preference = UserPreference(preferred_sources=[1, 2], preferred_categories=["technology", "sports"],
                                preferred_authors=["smith", "o_brien"])
    query = builder.build(ArticleFilters(category="sports"), preference)

    where = query.count_sql.split(" WHERE ", 1)[1]
    assert where == (
        "a.source_id = ANY(%s) AND a.category = ANY(%s) "
        "AND (a.author ILIKE %s ESCAPE '\\' OR a.author ILIKE %s ESCAPE '\\') "
        "AND a.category = %s"
    )
    assert query.count_params == [[1, 2], ["technology", "sports"], "%smith%", "%o\\_brien%", "sports"]


def test_partial_preference_only_constrains_non_empty_dimensions(builder):
    query = builder.build(ArticleFilters(), UserPreference(preferred_categories=["world"]))
    assert query.count_sql.endswith("WHERE a.category = ANY(%s)")
    assert query.count_params == [["world"]]


def test_empty_preference_applies_filters_only(builder):
    query = builder.build(ArticleFilters(author="doe"), UserPreference())
    assert query.count_params == ["%doe%"]
    assert "ANY" not in query.count_sql


def test_select_joins_source_name(builder):
    query = builder.build(ArticleFilters())
    assert "s.name AS source_name" in query.select_sql
    assert "JOIN sources s ON s.id = a.source_id" in query.select_sql
