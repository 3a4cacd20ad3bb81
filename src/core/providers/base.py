#!/usr/bin/env python3
"""
Base classes for news providers.

Defines the abstract interface every external news API adapter implements,
plus the shared request handling and per-article ingestion loop.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import requests

from core.exceptions import ProviderError, ProviderRequestError, ProviderResponseError
from core.models import Article, Source
from core.text_sanitizer import excerpt

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; NewsAggregator/1.0)"

# Raised by mapping functions for records missing required fields
MALFORMED_RECORD_ERRORS = (KeyError, TypeError, ValueError, AttributeError)

ArticleMapper = Callable[[Dict[str, Any]], Tuple[Article, Source]]


def require_text(value: Any, field_name: str) -> str:
    """Return a stripped required string field or raise ValueError."""
    if value is None or not str(value).strip():
        raise ValueError(f"missing required field '{field_name}'")
    return str(value).strip()


def merge_params(defaults: Dict[str, Any], params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Provider defaults overridden by caller-supplied parameters."""
    merged = dict(defaults)
    merged.update(params or {})
    return merged


class NewsProvider(ABC):
    """
    Abstract base class for all news providers.

    Subclasses map one external API into canonical articles and sources.
    External-call failures (network, HTTP status, undecodable payloads) are
    logged and turned into empty results. Storage failures propagate.
    """

    #: Provider identifier stored on every source this adapter creates
    name: str = ''
    base_url: str = ''

    def __init__(self, database, api_key: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize news provider.

        Args:
            database: Persistence facade (``NewsDatabase``)
            api_key: Provider API key
            timeout: Request timeout in seconds
            session: HTTP session (tests inject fakes)
            user_agent: User-Agent header sent with every request
        """
        self.database = database
        self.api_key = api_key
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': user_agent})

    @classmethod
    @abstractmethod
    def from_config(cls, database, config, session: Optional[requests.Session] = None) -> 'NewsProvider':
        """Build the provider from a ``ProviderConfig``."""

    @abstractmethod
    def fetch_top_articles(self, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        """
        Fetch and persist the provider's current headline articles.

        Args:
            params: Request parameters overriding provider defaults

        Returns:
            Mapped articles (already persisted where new)
        """

    @abstractmethod
    def search_articles(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Article]:
        """Search the provider and persist the matching articles."""

    @abstractmethod
    def fetch_sources(self, params: Optional[Dict[str, Any]] = None) -> List[Source]:
        """Fetch the provider's publication listing and upsert it."""

    def _request(self, path: str, params: Dict[str, Any],
                 headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Issue a GET request and decode the JSON body.

        Raises:
            ProviderRequestError: Network failure, timeout or non-2xx status
            ProviderResponseError: Body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderRequestError(self.name, url, str(e)) from e

        if not response.ok:
            logger.error(f"{self.name} request failed with status {response.status_code}: {excerpt(response.text)}")
            raise ProviderRequestError(self.name, url, f"HTTP {response.status_code}",
                                       status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderResponseError(self.name, 'json', e) from e

        if not isinstance(payload, dict):
            raise ProviderResponseError(self.name, 'json', TypeError(f"expected object, got {type(payload).__name__}"))
        return payload

    def _fetch_records(self, operation: str, path: str, params: Dict[str, Any],
                       extract: Callable[[Dict[str, Any]], Iterable[Dict[str, Any]]],
                       headers: Optional[Dict[str, str]] = None) -> Optional[List[Dict[str, Any]]]:
        """Request a listing and pull its records out, or None when the call failed."""
        try:
            payload = self._request(path, params, headers)
            try:
                records = list(extract(payload))
            except MALFORMED_RECORD_ERRORS as e:
                raise ProviderResponseError(self.name, operation, e) from e
        except ProviderError as e:
            logger.error(f"Error during {operation} from {self.name}: {e}")
            return None
        return records

    def _ingest(self, records: Iterable[Dict[str, Any]], mapper: ArticleMapper) -> List[Article]:
        """
        Map records and persist each article as soon as it is mapped.

        Malformed records are skipped. Storage errors propagate to the caller,
        leaving earlier articles of the response persisted.
        """
        articles: List[Article] = []
        resolved: Dict[str, Source] = {}
        stored = 0

        for record in records:
            try:
                article, descriptor = mapper(record)
            except MALFORMED_RECORD_ERRORS as e:
                logger.warning(f"Skipping malformed {self.name} record: {e}")
                continue

            source = resolved.get(descriptor.slug)
            if source is None:
                source = self.database.resolve_source(descriptor)
                resolved[descriptor.slug] = source

            stored += self.database.save_articles([article], source)
            article.source_id = source.id
            article.source_name = source.name
            articles.append(article)

        logger.info(f"{self.name}: mapped {len(articles)} articles, {stored} new")
        return articles

    def _ingest_listing(self, operation: str, path: str, params: Dict[str, Any],
                        extract: Callable[[Dict[str, Any]], Iterable[Dict[str, Any]]],
                        mapper: ArticleMapper, headers: Optional[Dict[str, str]] = None) -> List[Article]:
        records = self._fetch_records(operation, path, params, extract, headers)
        if records is None:
            return []
        return self._ingest(records, mapper)

    def _save_sources(self, sources: List[Source]) -> List[Source]:
        """Upsert source descriptors under this provider."""
        if sources:
            self.database.save_sources(sources, self.name)
        return sources

    def release_thread_resources(self) -> None:
        """Release per-thread storage resources held by the calling thread."""
        self.database.release_thread_connection()

    def close(self) -> None:
        """Close the HTTP session when this provider created it."""
        if self._owns_session:
            self.session.close()

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name}')"
