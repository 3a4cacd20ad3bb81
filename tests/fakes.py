"""In-memory stand-ins for PostgreSQL, the HTTP session, the database facade and providers."""

import copy
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

import psycopg

from core.database import article_service, source_service
from core.database.database_facade import TABLE_COUNTS_SQL
from core.exceptions import DatabaseOperationError
from core.models import Article, Source
SOURCE_FIELDS = ('name', 'provider_source_id', 'description', 'url', 'category', 'language', 'country')


class InMemoryStore:
    """
    Tables for sources and articles that answer the services' SQL statements.

    Unique constraints behave like the real schema: ``(slug, provider)`` on
    sources, ``url`` and non-null ``external_id`` on articles.
    """

    def __init__(self) -> None:
        self.sources: List[Dict[str, Any]] = []
        self.articles: List[Dict[str, Any]] = []
        self._next_ids = {'sources': 1, 'articles': 1}
        self.fail_insert_urls: set = set()
        self.statements: List[str] = []
        self.handlers: Dict[str, Callable[[Any], List[Dict[str, Any]]]] = {
            source_service.RESOLVE_INSERT_SQL: self._resolve_insert,
            source_service.SELECT_BY_KEY_SQL: self._select_by_key,
            source_service.UPSERT_SQL: self._upsert_source,
            source_service.SELECT_BY_ID_SQL: self._select_source_by_id,
            source_service.LIST_SQL: self._list_sources,
            article_service.ARTICLE_EXISTS_SQL: self._article_exists,
            article_service.ARTICLE_INSERT_SQL: self._insert_article,
            article_service.CATEGORIES_SQL: lambda _: self._distinct('category'),
            article_service.AUTHORS_SQL: lambda _: self._distinct('author'),
            TABLE_COUNTS_SQL: lambda _: [{'sources': len(self.sources), 'articles': len(self.articles)}],
        }

    def snapshot(self):
        return copy.deepcopy((self.sources, self.articles, self._next_ids))

    def restore(self, state) -> None:
        self.sources, self.articles, self._next_ids = state

    def execute(self, sql: str, params: Any) -> List[Dict[str, Any]]:
        handler = self.handlers.get(sql)
        if handler is None:
            raise AssertionError(f"Unexpected SQL: {sql}")
        self.statements.append(sql)
        return handler(params)

    def _new_id(self, table: str) -> int:
        new_id = self._next_ids[table]
        self._next_ids[table] += 1
        return new_id

    def _find_source(self, slug: str, provider: str) -> Optional[Dict[str, Any]]:
        for row in self.sources:
            if row['slug'] == slug and row['provider'] == provider:
                return row
        return None

    def _resolve_insert(self, params):
        if self._find_source(params['slug'], params['provider']):
            return []
        row = dict(params, id=self._new_id('sources'))
        self.sources.append(row)
        return [dict(row)]

    def _select_by_key(self, params):
        row = self._find_source(params['slug'], params['provider'])
        return [dict(row)] if row else []

    def _upsert_source(self, params):
        row = self._find_source(params['slug'], params['provider'])
        if row is None:
            row = dict(params, id=self._new_id('sources'))
            self.sources.append(row)
        else:
            row.update({field: params[field] for field in SOURCE_FIELDS})
        return [dict(row)]

    def _select_source_by_id(self, params):
        return [dict(row) for row in self.sources if row['id'] == params['id']]

    def _list_sources(self, _params):
        return [dict(row) for row in sorted(self.sources, key=lambda r: (r['name'], r['id']))]

    def _article_exists(self, params):
        for row in self.articles:
            if row['url'] == params['url']:
                return [{'id': row['id']}]
            if params['external_id'] is not None and row['external_id'] == params['external_id']:
                return [{'id': row['id']}]
        return []

    def _insert_article(self, params):
        if params['url'] in self.fail_insert_urls:
            raise psycopg.DataError(f"invalid input for {params['url']}")
        if self._article_exists(params):
            return []
        raw = params['raw_data']
        row = dict(params, id=self._new_id('articles'), raw_data=getattr(raw, 'obj', raw),
                   created_at=datetime.now(timezone.utc))
        self.articles.append(row)
        return [{'id': row['id']}]

    def _distinct(self, column: str):
        values = sorted({row[column] for row in self.articles if row[column] is not None})
        return [{column: value} for value in values]


class FakeCursor:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._rows: List[Dict[str, Any]] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self._rows = self.store.execute(sql, params)

    def fetchone(self) -> Optional[Dict[str, Any]]:
        return self._rows[0] if self._rows else None

    def fetchall(self) -> List[Dict[str, Any]]:
        return list(self._rows)


class FakeConnectionManager:
    """Stands in for ConnectionManager; transactions roll the store back on error."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.transactions = 0
        self.rollbacks = 0
        self.closed = False

    @contextmanager
    def get_cursor(self):
        yield FakeCursor(self.store)

    @contextmanager
    def transaction(self):
        self.transactions += 1
        state = self.store.snapshot()
        try:
            yield FakeCursor(self.store)
        except BaseException:
            self.rollbacks += 1
            self.store.restore(state)
            raise

    def health_check(self) -> Dict[str, Any]:
        return {'connected': True, 'test_query': True, 'version': 'PostgreSQL (fake)'}

    def release_thread_connection(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class ScriptedCursor:
    """Returns queued result sets in order and records every statement."""

    def __init__(self, results: List[List[Dict[str, Any]]], calls: List) -> None:
        self.results = results
        self.calls = calls
        self._rows: List[Dict[str, Any]] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self.calls.append((sql, params))
        self._rows = self.results.pop(0) if self.results else []

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class ScriptedConnectionManager:
    def __init__(self, results: Optional[List[List[Dict[str, Any]]]] = None) -> None:
        self.results = list(results or [])
        self.calls: List = []

    @contextmanager
    def get_cursor(self):
        yield ScriptedCursor(self.results, self.calls)

    @contextmanager
    def transaction(self):
        yield ScriptedCursor(self.results, self.calls)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "",
                 json_error: bool = False) -> None:
        self.status_code = status_code
        self.payload = payload
        self.text = text
        self.json_error = json_error

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


class FakeSession:
    """requests.Session stand-in keyed by URL path suffix."""

    def __init__(self, responses: Optional[Dict[str, FakeResponse]] = None,
                 error: Optional[Exception] = None) -> None:
        self.responses = responses or {}
        self.error = error
        self.headers: Dict[str, str] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'params': dict(params or {}), 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                return response
        return FakeResponse(404, text="not found")

    def close(self) -> None:
        self.closed = True


class RecordingDatabase:
    """Facade stand-in recording write calls; optionally fails on the n-th save."""

    def __init__(self, fail_on_save: Optional[int] = None) -> None:
        self.resolved: List[Source] = []
        self.saved: List[List[Article]] = []
        self.saved_sources: List[tuple] = []
        self.fail_on_save = fail_on_save
        self._ids = 0
        self.released = 0

    def resolve_source(self, descriptor: Source) -> Source:
        self.resolved.append(descriptor)
        self._ids += 1
        return Source(id=self._ids, name=descriptor.name, slug=descriptor.slug, provider=descriptor.provider)

    def save_articles(self, articles: List[Article], source: Source) -> int:
        if self.fail_on_save is not None and len(self.saved) + 1 == self.fail_on_save:
            raise DatabaseOperationError('insert', 'articles', psycopg.OperationalError("connection lost"))
        self.saved.append(list(articles))
        return len(articles)

    def save_sources(self, sources: List[Source], provider: Optional[str] = None) -> int:
        self.saved_sources.append((list(sources), provider))
        return len(sources)

    def release_thread_connection(self) -> None:
        self.released += 1


class FakeProvider:
    """Provider stand-in for aggregator tests."""

    def __init__(self, name: str, articles: Sequence = (), sources: Sequence = (),
                 error: Optional[Exception] = None, delay: float = 0.0) -> None:
        self.name = name
        self.articles = list(articles)
        self.sources = list(sources)
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []
        self.released_threads: List[str] = []
        self.closed = False

    def _respond(self, result):
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(result)

    def fetch_top_articles(self, params=None):
        self.calls.append(('fetch_top_articles', params))
        return self._respond(self.articles)

    def search_articles(self, query, params=None):
        self.calls.append(('search_articles', query, params))
        return self._respond(self.articles)

    def fetch_sources(self, params=None):
        self.calls.append(('fetch_sources', params))
        return self._respond(self.sources)

    def release_thread_resources(self):
        self.released_threads.append(threading.current_thread().name)

    def close(self):
        self.closed = True


def make_article(title: str = "Title", url: str = "https://example.com/1", **fields) -> Article:
    fields.setdefault('published_at', datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
    return Article(title=title, url=url, **fields)


