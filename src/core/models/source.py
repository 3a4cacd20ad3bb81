#!/usr/bin/env python3
"""
Source data model.

A publication or provider that owns articles, identified by the
``(slug, provider)`` natural key.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional

from core.text_sanitizer import source_slug

# Descriptive fields refreshed by a source upsert
DESCRIPTIVE_FIELDS = ('name', 'provider_source_id', 'description', 'url', 'category', 'language', 'country')


@dataclass
class Source:
    """Canonical publication record."""
    name: str
    slug: str
    provider: str
    provider_source_id: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    language: Optional[str] = None
    country: Optional[str] = None
    id: Optional[int] = None

    @classmethod
    def describe(cls, name: str, provider: str, **fields: Any) -> 'Source':
        """Build an unsaved descriptor whose slug is derived from the display name."""
        return cls(name=name, slug=source_slug(name), provider=provider, **fields)

    def defaults(self) -> Dict[str, Any]:
        """Descriptive fields used when creating this source for the first time."""
        return {name: getattr(self, name) for name in DESCRIPTIVE_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'provider': self.provider,
            'provider_source_id': self.provider_source_id,
            'description': self.description,
            'url': self.url,
            'category': self.category,
            'language': self.language,
            'country': self.country
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Source':
        return cls(
            id=row.get('id'),
            name=row['name'],
            slug=row['slug'],
            provider=row['provider'],
            provider_source_id=row.get('provider_source_id'),
            description=row.get('description'),
            url=row.get('url'),
            category=row.get('category'),
            language=row.get('language'),
            country=row.get('country')
        )
