"""Standards manager: aggregates sources, caches the corpus and answers queries.

The corpus is rebuilt off to the side and published with a single reference
assignment, so readers never observe a partially loaded corpus.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from config.settings import StandardsConfig
from indexer.source_schema import SearchResult, StandardDocument, StandardMetadata
from sources.loader import DocumentSource, create_sources
from .cache import TTLCache
from .search import search_documents

logger = logging.getLogger(__name__)

ALL_DOCUMENTS_KEY = "all-documents"


class ManagerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


def merge_documents(batches: Sequence[Sequence[StandardDocument]]) -> List[StandardDocument]:
    """Concatenate per-source results, letting later duplicates win.

    When two documents share an id, the earlier one is dropped and the later
    one keeps its own position in the merged order.
    """
    merged = [doc for batch in batches for doc in batch]
    last_index: Dict[str, int] = {}
    for index, doc in enumerate(merged):
        if doc.id in last_index:
            logger.warning(f"Duplicate standard id '{doc.id}': {doc.path} replaces {merged[last_index[doc.id]].path}")
        last_index[doc.id] = index

    return [doc for index, doc in enumerate(merged) if last_index[doc.id] == index]


class StandardsManager:
    """Loads, caches and searches standards documents."""

    def __init__(self,
                 config: StandardsConfig,
                 sources: Optional[Sequence[DocumentSource]] = None,
                 cache: Optional[TTLCache[Tuple[StandardDocument, ...]]] = None):
        """Initialize manager.

        Args:
            config: Validated configuration
            sources: Source adapters to use instead of building them from ``config.sources``
            cache: Corpus cache; defaults to one using ``config.cache_timeout``
        """
        self.config = config
        self.cache = cache if cache is not None else TTLCache(default_ttl=config.cache_timeout)
        self._sources: Optional[List[DocumentSource]] = list(sources) if sources is not None else None
        self._documents: Tuple[StandardDocument, ...] = ()
        self._state = ManagerState.UNINITIALIZED

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def documents(self) -> Tuple[StandardDocument, ...]:
        """Snapshot of the current corpus."""
        return self._documents

    @property
    def sources(self) -> List[DocumentSource]:
        if self._sources is None:
            self._sources = create_sources(self.config.sources)
        return self._sources

    def get_config(self) -> StandardsConfig:
        return self.config

    async def initialize(self) -> None:
        """Load all sources once; later calls are no-ops."""
        if self._state is ManagerState.READY:
            return

        self._state = ManagerState.LOADING
        try:
            await self.load_documents()
        except BaseException:
            # Cancelled mid-load; allow a later initialize() to retry
            self._state = ManagerState.UNINITIALIZED
            raise
        self._state = ManagerState.READY

    async def load_documents(self) -> None:
        """Populate the corpus from the cache, or from every source on a miss."""
        cached = self.cache.get(ALL_DOCUMENTS_KEY)
        if cached is not None:
            self._documents = cached
            logger.debug(f"Using cached corpus of {len(cached)} documents")
            return

        sources = self.sources
        results = await asyncio.gather(
            *(source.load() for source in sources),
            return_exceptions=True
        )

        batches: List[Sequence[StandardDocument]] = []
        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error(f"Failed to load documents: {result!r}", extra={'source': repr(source)})
                batches.append([])
            else:
                batches.append(result)

        documents = tuple(merge_documents(batches))
        self._documents = documents
        self.cache.set(ALL_DOCUMENTS_KEY, documents, self.config.cache_timeout)
        logger.info(f"Loaded {len(documents)} standards from {len(sources)} sources")

    async def refresh(self) -> None:
        """Drop every cached entry and reload from the sources."""
        self.cache.clear()
        await self.load_documents()

    async def get_all_standards(self) -> List[StandardMetadata]:
        return [doc.metadata() for doc in self._documents]

    async def get_standard_by_id(self, standard_id: str) -> Optional[StandardDocument]:
        for doc in self._documents:
            if doc.id == standard_id:
                return doc
        return None

    async def get_standards_by_category(self, category: str) -> List[StandardMetadata]:
        return [doc.metadata() for doc in self._documents if doc.category == category]

    async def get_categories(self) -> List[str]:
        """Distinct categories in first-seen corpus order."""
        return list(dict.fromkeys(doc.category for doc in self._documents))

    async def search_standards(self, query: str) -> List[SearchResult]:
        """Rank the corpus against a keyword query. See ``server.search``."""
        return search_documents(self._documents, query)
