#!/usr/bin/env python3
"""
Text utilities for provider content and query input.

Slug generation for source natural keys and escaping of user input used in
SQL LIKE patterns.
"""

import hashlib
import re
import unicodedata
from typing import Optional

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9\s_-]')
_SLUG_SEPARATORS = re.compile(r'[\s_-]+')

LIKE_ESCAPE_CHAR = '\\'


def slugify(text: Optional[str], separator: str = '-') -> str:
    """
    Convert a display name to a URL-friendly slug.

    Accented characters are folded to ASCII, everything else that is not a
    letter, digit, space, underscore or dash is dropped.

    Examples:
        >>> slugify("The Guardian")
        'the-guardian'
        >>> slugify("  Le Monde (FR) ")
        'le-monde-fr'
    """
    if not text:
        return ''

    normalized = unicodedata.normalize('NFKD', str(text))
    ascii_text = normalized.encode('ascii', 'ignore').decode('ascii').lower()
    ascii_text = ascii_text.replace('@', ' at ').replace('&', ' and ')
    ascii_text = _NON_SLUG_CHARS.sub('', ascii_text)
    return _SLUG_SEPARATORS.sub(separator, ascii_text).strip(separator)


def source_slug(name: Optional[str]) -> str:
    """
    Slug used as a source natural key.

    Names that fold to nothing (non-Latin scripts, pure punctuation) get a
    digest of the normalized name instead, so distinct publications keep
    distinct keys.

    Examples:
        >>> source_slug("BBC News")
        'bbc-news'
        >>> source_slug("新浪新闻").startswith('source-')
        True
    """
    slug = slugify(name)
    if slug:
        return slug
    normalized = ' '.join(unicodedata.normalize('NFKC', str(name or '')).casefold().split())
    return f"source-{hashlib.md5(normalized.encode('utf-8')).hexdigest()[:10]}"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    if not value:
        return value
    return (
        value.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace('%', LIKE_ESCAPE_CHAR + '%')
        .replace('_', LIKE_ESCAPE_CHAR + '_')
    )


def contains_pattern(value: str) -> str:
    """Build a ``%value%`` pattern for substring matching."""
    return f"%{escape_like(value.strip())}%"


def excerpt(text: Optional[str], limit: int = 200) -> str:
    """Shorten text for log messages."""
    if not text:
        return ''
    text = ' '.join(str(text).split())
    if len(text) <= limit:
        return text
    return text[:limit - 3] + '...'
