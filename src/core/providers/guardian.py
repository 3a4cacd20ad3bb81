#!/usr/bin/env python3
"""
The Guardian provider implementation.

Content search API. Every article belongs to the single Guardian publication.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from core.models import Article, Source, parse_published_date
from .base import NewsProvider, merge_params, require_text

logger = logging.getLogger(__name__)

SHOW_FIELDS = 'headline,trailText,body,thumbnail,byline,publication,lastModified,shortUrl'


def publication() -> Source:
    """Source descriptor for The Guardian (the API has no publication listing)."""
    return Source.describe(
        GuardianProvider.name,
        GuardianProvider.name,
        provider_source_id='the-guardian',
        description='The Guardian is a British daily newspaper.',
        url='https://www.theguardian.com',
        category='general',
        language='en',
        country='gb'
    )


def map_article(record: Dict[str, Any]) -> Tuple[Article, Source]:
    """Map a Guardian search result to an article."""
    fields = record.get('fields') or {}
    article = Article(
        title=require_text(fields.get('headline') or record.get('webTitle'), 'headline'),
        description=fields.get('trailText'),
        content=fields.get('body'),
        author=fields.get('byline'),
        url=require_text(record.get('webUrl'), 'webUrl'),
        url_to_image=fields.get('thumbnail'),
        category=record.get('sectionName'),
        published_at=parse_published_date(record.get('webPublicationDate')),
        external_id=require_text(record.get('id'), 'id'),
        raw_data=record
    )
    return article, publication()


class GuardianProvider(NewsProvider):
    """The Guardian open platform content API."""

    name = 'The Guardian'
    base_url = 'https://content.guardianapis.com'

    LATEST_DEFAULTS = {'page-size': 50, 'show-fields': SHOW_FIELDS, 'order-by': 'newest'}
    SEARCH_DEFAULTS = {'page-size': 50, 'show-fields': SHOW_FIELDS, 'order-by': 'relevance'}

    @classmethod
    def from_config(cls, database, config, session=None) -> 'GuardianProvider':
        return cls(database, api_key=config.guardian_api_key, timeout=config.request_timeout,
                   session=session, user_agent=config.user_agent)

    @staticmethod
    def _results(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        return payload['response']['results']

    def fetch_top_articles(self, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        defaults = dict(self.LATEST_DEFAULTS, **{'api-key': self.api_key})
        return self._ingest_listing('latest articles', '/search', merge_params(defaults, params),
                                    self._results, map_article)

    def search_articles(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        defaults = dict(self.SEARCH_DEFAULTS, q=query, **{'api-key': self.api_key})
        return self._ingest_listing('search', '/search', merge_params(defaults, params),
                                    self._results, map_article)

    def fetch_sources(self, params: Optional[Dict[str, Any]] = None) -> List[Source]:
        return self._save_sources([publication()])
