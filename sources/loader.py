"""Source construction for the standards hub.

Maps validated source configurations onto document source adapters.
"""

import logging
from typing import List, Protocol, Sequence, runtime_checkable

from config.settings import (
    GitSourceConfig,
    LocalSourceConfig,
    RemoteSourceConfig,
    SourceConfig,
)
from .git import GitSource
from .local import LocalSource
from .remote import RemoteSource
from indexer.source_schema import StandardDocument

logger = logging.getLogger(__name__)

@runtime_checkable
class DocumentSource(Protocol):
    """Anything that can produce standards documents.

    ``load`` must not raise for ordinary I/O failures; a source that cannot be
    reached contributes an empty list.
    """

    async def load(self) -> List[StandardDocument]:
        ...

def create_source(config: SourceConfig) -> DocumentSource:
    """Create the source adapter described by a configuration entry.

    Raises:
        ValueError: If the configuration type is unknown
    """
    if isinstance(config, LocalSourceConfig):
        return LocalSource(config.path)
    if isinstance(config, RemoteSourceConfig):
        return RemoteSource(config.url, headers=config.headers, docs=config.docs)
    if isinstance(config, GitSourceConfig):
        return GitSource(
            config.repo,
            branch=config.branch,
            path=config.path,
            token=config.token,
            api_base=config.api_base,
        )
    raise ValueError(f"Unsupported source configuration: {config!r}")

def create_sources(configs: Sequence[SourceConfig]) -> List[DocumentSource]:
    """Create source adapters in declared order."""
    sources = [create_source(config) for config in configs]
    logger.info(f"Configured {len(sources)} document sources")
    return sources
