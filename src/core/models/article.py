#!/usr/bin/env python3
"""
Article data model.

Represents a news article in the canonical shape shared by all providers.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        return None


def parse_published_date(value: Any, now: Optional[datetime] = None) -> datetime:
    """
    Normalize a provider date into a timezone-aware UTC timestamp.

    Unparseable or missing values fall back to ``now`` (ingestion time) so an
    article never lacks a publication timestamp.
    """
    parsed = _parse_datetime_safe(value)
    if parsed is None:
        fallback = now or datetime.now(timezone.utc)
        logger.warning(f"Could not parse published date {value!r}, using ingestion time")
        return fallback
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass
class Article:
    """
    A normalized news item.

    ``source_id`` and ``id`` are only populated once the article has been
    resolved against, or loaded from, storage.
    """
    title: str
    url: str
    published_at: datetime
    description: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    url_to_image: Optional[str] = None
    category: Optional[str] = None
    external_id: Optional[str] = None
    raw_data: Optional[Dict[str, Any]] = field(default=None, repr=False)
    source_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    source_name: Optional[str] = None

    def __post_init__(self):
        """Clean data after initialization."""
        self.title = (self.title or "").strip()
        self.url = (self.url or "").strip()
        self.description = _blank_to_none(self.description)
        self.content = _blank_to_none(self.content)
        self.author = _blank_to_none(self.author)
        self.category = _blank_to_none(self.category)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'source_id': self.source_id,
            'title': self.title,
            'description': self.description,
            'content': self.content,
            'author': self.author,
            'url': self.url,
            'url_to_image': self.url_to_image,
            'category': self.category,
            'published_at': self.published_at.isoformat() if self.published_at else None,
            'external_id': self.external_id,
            'source': self.source_name,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Article':
        """Create Article from a database row."""
        return cls(
            id=row.get('id'),
            source_id=row.get('source_id'),
            title=row.get('title', ''),
            description=row.get('description'),
            content=row.get('content'),
            author=row.get('author'),
            url=row.get('url', ''),
            url_to_image=row.get('url_to_image'),
            category=row.get('category'),
            published_at=_parse_datetime_safe(row.get('published_at')),
            external_id=row.get('external_id'),
            raw_data=row.get('raw_data'),
            created_at=_parse_datetime_safe(row.get('created_at')),
            source_name=row.get('source_name')
        )

    def __repr__(self):
        return f"Article(title='{self.title[:50]}...', url='{self.url}', source_id={self.source_id})"


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
