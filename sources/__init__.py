"""Sources package for the standards hub.

Provides the document model and the local, remote and git source adapters.
"""

from indexer.source_schema import SourceType, StandardDocument, StandardMetadata, SearchResult
from .local import LocalSource
from .remote import RemoteSource
from .git import GitSource
from .loader import DocumentSource, create_source, create_sources

__all__ = [
    'SourceType',
    'StandardDocument',
    'StandardMetadata',
    'SearchResult',
    'LocalSource',
    'RemoteSource',
    'GitSource',
    'DocumentSource',
    'create_source',
    'create_sources'
]
