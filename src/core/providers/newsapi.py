#!/usr/bin/env python3
"""
NewsAPI provider implementation.

Generic headlines aggregator: every article names its own publication, which
becomes a separate source under the NewsAPI provider.
"""

import hashlib
import logging
from typing import Any, Dict, List, Optional, Tuple

from core.models import Article, Source, parse_published_date
from .base import MALFORMED_RECORD_ERRORS, NewsProvider, merge_params, require_text

logger = logging.getLogger(__name__)

UNKNOWN_PUBLICATION = 'Unknown'


def map_article(record: Dict[str, Any]) -> Tuple[Article, Source]:
    """Map a NewsAPI article record to an article and its publication."""
    publication = record.get('source') or {}
    publication_name = (publication.get('name') or '').strip() or UNKNOWN_PUBLICATION
    url = require_text(record.get('url'), 'url')

    article = Article(
        title=require_text(record.get('title'), 'title'),
        description=record.get('description'),
        content=record.get('content'),
        author=record.get('author'),
        url=url,
        url_to_image=record.get('urlToImage'),
        published_at=parse_published_date(record.get('publishedAt')),
        external_id=hashlib.md5(url.encode('utf-8')).hexdigest(),
        raw_data=record
    )
    source = Source.describe(
        publication_name,
        NewsApiProvider.name,
        provider_source_id=publication.get('id')
    )
    return article, source


def map_source(record: Dict[str, Any]) -> Source:
    """Map a NewsAPI ``/sources`` entry to a source descriptor."""
    return Source.describe(
        require_text(record.get('name'), 'name'),
        NewsApiProvider.name,
        provider_source_id=record.get('id'),
        description=record.get('description'),
        url=record.get('url'),
        category=record.get('category'),
        language=record.get('language'),
        country=record.get('country')
    )


class NewsApiProvider(NewsProvider):
    """NewsAPI (newsapi.org) top headlines, search and source listing."""

    name = 'NewsAPI'
    base_url = 'https://newsapi.org/v2'

    TOP_HEADLINES_DEFAULTS = {'country': 'us', 'pageSize': 100}
    SEARCH_DEFAULTS = {'pageSize': 100, 'sortBy': 'publishedAt'}

    @classmethod
    def from_config(cls, database, config, session=None) -> 'NewsApiProvider':
        return cls(database, api_key=config.newsapi_key, timeout=config.request_timeout,
                   session=session, user_agent=config.user_agent)

    def _headers(self) -> Dict[str, str]:
        return {'X-Api-Key': self.api_key or ''}

    def fetch_top_articles(self, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        return self._ingest_listing(
            'top headlines', '/top-headlines',
            merge_params(self.TOP_HEADLINES_DEFAULTS, params),
            lambda payload: payload['articles'],
            map_article,
            headers=self._headers()
        )

    def search_articles(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        defaults = dict(self.SEARCH_DEFAULTS, q=query)
        return self._ingest_listing(
            'search', '/everything',
            merge_params(defaults, params),
            lambda payload: payload['articles'],
            map_article,
            headers=self._headers()
        )

    def fetch_sources(self, params: Optional[Dict[str, Any]] = None) -> List[Source]:
        records = self._fetch_records('sources', '/sources', dict(params or {}),
                                      lambda payload: payload['sources'], headers=self._headers())
        if records is None:
            return []

        sources = []
        for record in records:
            try:
                sources.append(map_source(record))
            except MALFORMED_RECORD_ERRORS as e:
                logger.warning(f"Skipping malformed NewsAPI source: {e}")
        return self._save_sources(sources)
