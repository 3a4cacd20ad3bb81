#!/usr/bin/env python3
"""
Formatting utilities for CLI display of articles, sources and pages.
"""

import json

from core.models import Article, Page, Source


def format_article(article: Article) -> str:
    """Format a single article for display."""
    timestamp = ""
    if article.published_at:
        timestamp = article.published_at.strftime("%Y-%m-%d %H:%M")

    source = (article.source_name or "unknown").upper()
    line = f"[{timestamp}] [{source}] {article.title}\n    {article.url}\n"
    if article.category or article.author:
        details = " | ".join(part for part in (article.category, article.author) if part)
        line += f"    {details}\n"
    return line


def format_source(source: Source) -> str:
    """Format a source as one line: id, name and provider."""
    location = "/".join(part for part in (source.language, source.country) if part)
    suffix = f" ({location})" if location else ""
    source_id = source.id if source.id is not None else '-'
    return f"{source_id:>5}  {source.name} [{source.provider}]{suffix}"


def format_page(page: Page) -> str:
    """Format a result page with a pagination footer."""
    if not page.items:
        body = "No articles found.\n"
    else:
        body = "\n".join(format_article(article) for article in page.items)
    footer = f"Page {page.page} of {page.last_page} ({page.total} articles, {page.per_page} per page)"
    return f"{body}\n{footer}"


def to_json(data) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2)
