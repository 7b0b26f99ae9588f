"""Remote HTTP source for standards documents.

Supports three modes, tried in this order:

1. ``docs`` lists individual raw markdown files to fetch
2. ``url`` itself points at a single markdown file
3. ``url`` is a JSON API returning ``{"standards": [...]}`` or ``{"data": [...]}``
"""

import asyncio
import dataclasses
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse, unquote

from observability.logging import get_logger
from pipelines.fetcher import HttpFetcher
from pipelines.markdown import (
    DEFAULT_CATEGORY,
    has_front_matter,
    is_markdown_path,
    is_valid_markdown,
    normalize_markdown,
    normalize_tags,
)
from config.settings import RemoteDocConfig
from indexer.source_schema import SourceType, StandardDocument

MARKDOWN_ACCEPT = 'text/plain, text/markdown, */*'
JSON_ACCEPT = 'application/json'


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RemoteSource:
    """Loads standards from a remote JSON API or raw markdown URLs."""

    def __init__(self,
                 url: str,
                 headers: Optional[Dict[str, str]] = None,
                 docs: Optional[Sequence[RemoteDocConfig]] = None,
                 request_timeout: float = 30):
        self.url = url
        self.headers = dict(headers or {})
        self.docs = list(docs or [])
        self.request_timeout = request_timeout
        self.log = get_logger(__name__, source=repr(self))

    def __repr__(self) -> str:
        return f"RemoteSource({self.url!r})"

    def _headers(self, accept: str) -> Dict[str, str]:
        return {'Accept': accept, **self.headers}

    async def load(self) -> List[StandardDocument]:
        """Load documents from the remote endpoint."""
        async with HttpFetcher(request_timeout=self.request_timeout) as fetcher:
            if self.docs:
                documents = await self._load_markdown_files(fetcher, self.docs)
            elif is_markdown_path(urlparse(self.url).path):
                documents = await self._load_markdown_files(fetcher, [RemoteDocConfig(url=self.url)])
            else:
                documents = await self._load_from_api(fetcher)

        self.log.info(f"Loaded {len(documents)} documents from {self.url}")
        return documents

    async def _load_markdown_files(self, fetcher: HttpFetcher,
                                   configs: Sequence[RemoteDocConfig]) -> List[StandardDocument]:
        """Fetch raw markdown files concurrently, dropping the ones that fail."""
        results = await asyncio.gather(
            *(self._load_markdown_file(fetcher, config) for config in configs),
            return_exceptions=True
        )

        documents: List[StandardDocument] = []
        for config, outcome in zip(configs, results):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self.log.error(f"Failed to load remote markdown: {outcome!r}", extra={'url': config.url})
            elif outcome is not None:
                documents.append(outcome)
        return documents

    async def _load_markdown_file(self, fetcher: HttpFetcher, config: RemoteDocConfig) -> Optional[StandardDocument]:
        """Fetch one raw markdown file and normalize it."""
        self.log.debug("Fetching remote markdown", extra={'url': config.url})
        result = await fetcher.fetch_text(config.url, headers=self._headers(MARKDOWN_ACCEPT))

        if not result.ok:
            self.log.error(f"Failed to fetch remote markdown: {result.error}", extra={'url': config.url})
            return None

        if not is_valid_markdown(result.content):
            self.log.warning("Remote markdown is empty", extra={'url': config.url})
            return None

        file_name = unquote(urlparse(config.url).path.rstrip('/').split('/')[-1]) or 'remote.md'
        category = config.category or DEFAULT_CATEGORY
        if config.subcategory:
            logical_path = f"{category}/{config.subcategory}/{file_name}"
        else:
            logical_path = f"{category}/{file_name}"

        doc = normalize_markdown(result.content, logical_path, SourceType.REMOTE)
        if doc is None:
            self.log.warning("Remote markdown has no body", extra={'url': config.url})
            return None

        self.log.debug(f"Loaded remote markdown {doc.title}", extra={'url': config.url, 'standard_id': doc.id})
        return dataclasses.replace(doc, path=config.url)

    async def _load_from_api(self, fetcher: HttpFetcher) -> List[StandardDocument]:
        """Fetch the document list from a JSON API."""
        result = await fetcher.fetch_json(self.url, headers=self._headers(JSON_ACCEPT))

        if not result.ok:
            self.log.error(f"Failed to load standards from API: {result.error}", extra={'url': self.url})
            return []

        payload = result.data
        if not isinstance(payload, dict):
            self.log.error("Unexpected API response: expected an object", extra={'url': self.url})
            return []

        records = payload.get('standards') or payload.get('data') or []
        if not isinstance(records, list):
            self.log.error("Unexpected API response: standards is not a list", extra={'url': self.url})
            return []

        return self._transform_records(records)

    def _transform_records(self, records: List[Any]) -> List[StandardDocument]:
        documents: List[StandardDocument] = []

        for index, record in enumerate(records):
            unit = f"record #{index}"
            if not isinstance(record, dict):
                self.log.warning("Skipping non-object record", extra={'unit': unit})
                continue

            content = record.get('content')
            if not is_valid_markdown(content):
                self.log.warning("Skipping record without content", extra={'unit': unit})
                continue

            try:
                doc = self._transform_record(record, content)
            except Exception as e:
                self.log.error(f"Failed to transform record: {e!r}", extra={'unit': unit})
                continue

            if doc is None:
                self.log.warning("Skipping malformed record", extra={'unit': unit})
                continue
            documents.append(doc)

        return documents

    def _transform_record(self, record: Dict[str, Any], content: str) -> Optional[StandardDocument]:
        record_id = _optional_text(record.get('id'))
        category = _optional_text(record.get('category')) or DEFAULT_CATEGORY

        # Records carrying front matter are full markdown files
        if has_front_matter(content):
            return normalize_markdown(content, f"{category}/{record_id or 'remote'}.md", SourceType.REMOTE)

        title = _optional_text(record.get('title'))
        if not record_id or not title:
            return None

        return StandardDocument(
            id=record_id,
            title=title,
            description=_optional_text(record.get('description')),
            category=category,
            subcategory=_optional_text(record.get('subcategory')),
            tags=normalize_tags(record.get('tags')),
            version=_optional_text(record.get('version')),
            last_updated=_optional_text(record.get('lastUpdated') or record.get('last_updated')),
            source=SourceType.REMOTE,
            path=f"{self.url.rstrip('/')}/{record_id}",
            content=content.strip(),
            frontmatter={},
        )
