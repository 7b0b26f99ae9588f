"""Server package for the standards hub.

Provides the TTL cache, the standards manager, relevance search and the
caller-facing query helpers.
"""

from .cache import TTLCache, CacheEntry
from .manager import StandardsManager, ManagerState, ALL_DOCUMENTS_KEY
from .search import search_documents, score_document, extract_snippet, highlight_matches
from .tools import ResolveResult, resolve_standard, get_standard_docs, list_standards

__all__ = [
    # Cache
    'TTLCache',
    'CacheEntry',

    # Manager
    'StandardsManager',
    'ManagerState',
    'ALL_DOCUMENTS_KEY',

    # Search
    'search_documents',
    'score_document',
    'extract_snippet',
    'highlight_matches',

    # Tools
    'ResolveResult',
    'resolve_standard',
    'get_standard_docs',
    'list_standards'
]
