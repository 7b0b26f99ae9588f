"""Pipelines package for the standards hub.

Provides markdown normalization and HTTP fetching used by the document sources.
"""

from .markdown import (
    normalize_markdown,
    parse_front_matter,
    generate_id,
    is_valid_markdown,
    is_markdown_path
)
from .fetcher import HttpFetcher, FetchResult

__all__ = [
    # Markdown
    'normalize_markdown',
    'parse_front_matter',
    'generate_id',
    'is_valid_markdown',
    'is_markdown_path',

    # Fetching
    'HttpFetcher',
    'FetchResult'
]
