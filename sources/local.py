"""Local filesystem source for standards documents."""

import asyncio
import os
from pathlib import Path
from typing import List, Optional, Union

from observability.logging import get_logger
from pipelines.markdown import is_markdown_path, normalize_markdown
from indexer.source_schema import SourceType, StandardDocument

# Dependency and tooling directories that never hold standards
SKIPPED_DIRECTORIES = {'node_modules', '__pycache__', 'venv', 'site-packages'}


class LocalSource:
    """Recursively reads markdown files below a base directory."""

    def __init__(self, base_path: Union[str, Path]):
        self.base_path = Path(base_path)
        self.log = get_logger(__name__, source=repr(self))

    def __repr__(self) -> str:
        return f"LocalSource({str(self.base_path)!r})"

    async def load(self) -> List[StandardDocument]:
        """Load every markdown document under the base directory."""
        if not self.base_path.is_dir():
            self.log.warning(f"Local standards directory not found: {self.base_path}")
            return []

        files = await asyncio.to_thread(self._find_markdown_files)

        documents: List[StandardDocument] = []
        for file_path in files:
            doc = await self._load_file(file_path)
            if doc is not None:
                documents.append(doc)

        self.log.info(f"Loaded {len(documents)} documents from {self.base_path}")
        return documents

    def _find_markdown_files(self) -> List[Path]:
        """Walk the tree in sorted order, pruning hidden and dependency directories."""
        files: List[Path] = []

        def on_error(error: OSError) -> None:
            self.log.error(f"Failed to scan directory: {error}", extra={'unit': error.filename})

        for root, dirs, names in os.walk(self.base_path, onerror=on_error):
            dirs[:] = sorted(
                d for d in dirs
                if not d.startswith('.') and d not in SKIPPED_DIRECTORIES
            )
            for name in sorted(names):
                if is_markdown_path(name):
                    files.append(Path(root) / name)

        return files

    async def _load_file(self, file_path: Path) -> Optional[StandardDocument]:
        relative_path = file_path.relative_to(self.base_path).as_posix()
        try:
            content = await asyncio.to_thread(file_path.read_text, encoding='utf-8')
            doc = normalize_markdown(content, relative_path, SourceType.LOCAL)
        except (OSError, UnicodeDecodeError) as e:
            self.log.error(f"Failed to read file: {e}", extra={'unit': relative_path})
            return None
        except Exception as e:
            self.log.error(f"Failed to normalize file: {e!r}", extra={'unit': relative_path})
            return None

        if doc is None:
            self.log.debug("Skipping empty markdown file", extra={'unit': relative_path})
        return doc
