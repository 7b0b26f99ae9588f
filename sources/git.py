"""Git repository source for standards documents.

Lists a repository tree through the GitHub REST API and fetches every
markdown blob under an optional path prefix.
"""

import asyncio
import base64
import binascii
from typing import Any, Dict, List, Optional

from observability.logging import get_logger
from pipelines.fetcher import HttpFetcher
from pipelines.markdown import is_markdown_path, is_valid_markdown, normalize_markdown
from indexer.source_schema import SourceType, StandardDocument

GITHUB_API_BASE = "https://api.github.com"
GITHUB_ACCEPT = "application/vnd.github.v3+json"


def decode_blob(blob: Dict[str, Any]) -> str:
    """Decode the content of a blob API response.

    Raises:
        ValueError: If the content is missing or cannot be decoded as UTF-8
    """
    content = blob.get('content')
    if not isinstance(content, str):
        raise ValueError("blob has no content")

    if blob.get('encoding') == 'base64':
        try:
            # The API wraps base64 payloads at 60 columns
            raw = base64.b64decode(''.join(content.split()), validate=True)
        except binascii.Error as e:
            raise ValueError(f"invalid base64 content: {e}") from e
        return raw.decode('utf-8')

    return content


class GitSource:
    """Loads markdown standards from a GitHub-hosted repository."""

    def __init__(self,
                 repo: str,
                 branch: str = "main",
                 path: Optional[str] = None,
                 token: Optional[str] = None,
                 api_base: str = GITHUB_API_BASE,
                 request_timeout: float = 30,
                 max_concurrent: int = 8):
        self.repo = repo
        self.branch = branch
        self.path = (path or '').strip('/')
        self.token = token
        self.api_base = api_base.rstrip('/')
        self.request_timeout = request_timeout
        self.max_concurrent = max_concurrent
        self.log = get_logger(__name__, source=repr(self))

    def __repr__(self) -> str:
        return f"GitSource({self.repo!r}, branch={self.branch!r})"

    @property
    def tree_url(self) -> str:
        return f"{self.api_base}/repos/{self.repo}/git/trees/{self.branch}?recursive=1"

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': GITHUB_ACCEPT}
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _is_in_path(self, file_path: str) -> bool:
        if not self.path:
            return True
        return file_path.startswith(self.path + '/')

    def _relative_path(self, file_path: str) -> str:
        if self.path and file_path.startswith(self.path + '/'):
            return file_path[len(self.path) + 1:]
        return file_path

    async def load(self) -> List[StandardDocument]:
        """Load every markdown blob under the configured path."""
        async with HttpFetcher(request_timeout=self.request_timeout,
                               max_concurrent=self.max_concurrent) as fetcher:
            result = await fetcher.fetch_json(self.tree_url, headers=self._headers())

            if not result.ok:
                self.log.error(f"Failed to list repository tree: {result.error}", extra={'url': self.tree_url})
                return []

            tree = result.data.get('tree') if isinstance(result.data, dict) else None
            if not isinstance(tree, list):
                self.log.error("Unexpected tree response", extra={'url': self.tree_url})
                return []

            if result.data.get('truncated'):
                self.log.warning("Repository tree is truncated; some files will be missing",
                                 extra={'url': self.tree_url})

            items = [
                item for item in tree
                if isinstance(item, dict)
                and item.get('type') == 'blob'
                and isinstance(item.get('path'), str)
                and isinstance(item.get('url'), str)
                and is_markdown_path(item['path'])
                and self._is_in_path(item['path'])
            ]

            loaded = await asyncio.gather(
                *(self._load_blob(fetcher, item) for item in items),
                return_exceptions=True
            )

        documents: List[StandardDocument] = []
        for item, outcome in zip(items, loaded):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self.log.error(f"Failed to load blob: {outcome!r}", extra={'unit': item['path']})
            elif outcome is not None:
                documents.append(outcome)

        self.log.info(f"Loaded {len(documents)} documents from {self.repo}@{self.branch}")
        return documents

    async def _load_blob(self, fetcher: HttpFetcher, item: Dict[str, Any]) -> Optional[StandardDocument]:
        file_path = item['path']
        result = await fetcher.fetch_json(item['url'], headers=self._headers())

        if not result.ok or not isinstance(result.data, dict):
            self.log.error(f"Failed to fetch blob: {result.error or 'unexpected blob response'}",
                           extra={'unit': file_path, 'url': item['url']})
            return None

        try:
            content = decode_blob(result.data)
        except (ValueError, UnicodeDecodeError) as e:
            self.log.error(f"Failed to decode blob: {e}", extra={'unit': file_path})
            return None

        if not is_valid_markdown(content):
            self.log.debug("Skipping empty markdown blob", extra={'unit': file_path})
            return None

        return normalize_markdown(content, self._relative_path(file_path), SourceType.GIT)
