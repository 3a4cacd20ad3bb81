#!/usr/bin/env python3
"""
New York Times provider implementation.

Curated editorial content: Top Stories for headlines, Article Search for
queries. Every article belongs to the single New York Times publication.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from core.models import Article, Source, parse_published_date
from .base import NewsProvider, merge_params, require_text

logger = logging.getLogger(__name__)

IMAGE_FORMAT = 'mediumThreeByTwo440'
SITE_URL = 'https://www.nytimes.com'
DEFAULT_SECTION = 'home'


def publication() -> Source:
    """Source descriptor for the New York Times."""
    return Source.describe(
        NytProvider.name,
        NytProvider.name,
        provider_source_id='new-york-times',
        description='The New York Times is an American daily newspaper.',
        url=SITE_URL,
        category='general',
        language='en',
        country='us'
    )


def _top_story_image(multimedia: Optional[List[Dict[str, Any]]]) -> Optional[str]:
    for media in multimedia or []:
        if media.get('format') == IMAGE_FORMAT:
            return media.get('url')
    return None


def _search_doc_image(multimedia: Any) -> Optional[str]:
    # Article Search returns a list of renditions with site-relative urls
    if not isinstance(multimedia, list):
        return None
    for media in multimedia:
        if media.get('subtype') == IMAGE_FORMAT and media.get('url'):
            return f"{SITE_URL}/{media['url'].lstrip('/')}"
    return None


def map_top_story(record: Dict[str, Any]) -> Tuple[Article, Source]:
    """Map a Top Stories result; the API carries no body, so the abstract doubles as content."""
    abstract = record.get('abstract')
    article = Article(
        title=require_text(record.get('title'), 'title'),
        description=abstract,
        content=abstract,
        author=record.get('byline'),
        url=require_text(record.get('url'), 'url'),
        url_to_image=_top_story_image(record.get('multimedia')),
        category=record.get('section'),
        published_at=parse_published_date(record.get('published_date')),
        external_id=record.get('uri'),
        raw_data=record
    )
    return article, publication()


def map_search_doc(record: Dict[str, Any]) -> Tuple[Article, Source]:
    """Map an Article Search document."""
    headline = record.get('headline') or {}
    byline = record.get('byline') or {}
    article = Article(
        title=require_text(headline.get('main'), 'headline.main'),
        description=record.get('abstract') or record.get('snippet'),
        content=record.get('lead_paragraph'),
        author=byline.get('original') or None,
        url=require_text(record.get('web_url'), 'web_url'),
        url_to_image=_search_doc_image(record.get('multimedia')),
        category=record.get('section_name'),
        published_at=parse_published_date(record.get('pub_date')),
        external_id=record.get('_id'),
        raw_data=record
    )
    return article, publication()


class NytProvider(NewsProvider):
    """New York Times developer APIs."""

    name = 'New York Times'
    base_url = 'https://api.nytimes.com/svc'

    def __init__(self, database, api_key: Optional[str] = None, api_secret: Optional[str] = None, **kwargs):
        super().__init__(database, api_key=api_key, **kwargs)
        self.api_secret = api_secret

    @classmethod
    def from_config(cls, database, config, session=None) -> 'NytProvider':
        return cls(database, api_key=config.nyt_api_key, api_secret=config.nyt_api_secret,
                   timeout=config.request_timeout, session=session, user_agent=config.user_agent)

    def _credentials(self) -> Dict[str, Any]:
        return {'api-key': self.api_key, 'api-secret': self.api_secret}

    def fetch_top_articles(self, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        params = dict(params or {})
        section = params.pop('section', None) or DEFAULT_SECTION
        return self._ingest_listing(
            'top stories', f"/topstories/v2/{section}.json",
            merge_params(self._credentials(), params),
            lambda payload: payload['results'],
            map_top_story
        )

    def search_articles(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        defaults = dict(self._credentials(), q=query, sort='newest')
        return self._ingest_listing(
            'search', '/search/v2/articlesearch.json',
            merge_params(defaults, params),
            lambda payload: payload['response']['docs'],
            map_search_doc
        )

    def fetch_sources(self, params: Optional[Dict[str, Any]] = None) -> List[Source]:
        return self._save_sources([publication()])
