"""Markdown normalization for standards documents.

Turns raw markdown (with optional YAML front matter) plus a logical path into
a ``StandardDocument``. Everything here is pure: no I/O, no logging, and no
exceptions escape ``normalize_markdown``.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

import yaml

from indexer.source_schema import SourceType, StandardDocument

MARKDOWN_EXTENSIONS = ('.md', '.markdown')
DEFAULT_CATEGORY = "custom"
MAX_DESCRIPTION_LENGTH = 200

_FRONT_MATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*\r?(?:\n|\Z)(.*)\Z",
    re.MULTILINE | re.DOTALL,
)
_TITLE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_EXTENSION_RE = re.compile(r"\.(md|markdown)$", re.IGNORECASE)


def is_markdown_path(path: str) -> bool:
    """Check whether a path or URL points at a markdown file."""
    return path.lower().endswith(MARKDOWN_EXTENSIONS)


def is_valid_markdown(content: Any) -> bool:
    """Markdown is usable when it is a string with non-whitespace text."""
    return isinstance(content, str) and bool(content.strip())


def has_front_matter(content: str) -> bool:
    return content.lstrip('\ufeff').startswith('---')


def parse_front_matter(content: str) -> Tuple[Dict[str, Any], str]:
    """Split a leading YAML front-matter block from the body.

    Returns:
        (front_matter, body). Front matter that is not valid YAML or is not a
        mapping yields an empty dict; the block is still removed from the body.
    """
    match = _FRONT_MATTER_RE.match(content)
    if not match:
        return {}, content

    raw_meta, body = match.group(1), match.group(2)
    try:
        data = yaml.safe_load(raw_meta) if raw_meta.strip() else None
    except (yaml.YAMLError, ValueError, IndexError, TypeError, RecursionError):
        # PyYAML constructors raise plain Python errors for impossible dates,
        # empty typed scalars (!!int "") and very deep nesting
        data = None

    if not isinstance(data, dict):
        return {}, body
    return {str(k): v for k, v in data.items()}, body


def _as_text(value: Any) -> Optional[str]:
    """Render a scalar front-matter value as a stripped string."""
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def _clean_path(file_path: str) -> str:
    normalized = file_path.replace('\\', '/')
    return re.sub(r"^\.?/", "", normalized)


def extract_path_info(file_path: str) -> Tuple[str, Optional[str], str]:
    """Derive (category, subcategory, filename) from a logical path."""
    parts = [p for p in _clean_path(file_path).split('/') if p]
    if parts and parts[0] == 'standards':
        parts = parts[1:]

    filename = _EXTENSION_RE.sub('', parts[-1]) if parts else ''
    filename = filename or 'unknown'

    category = parts[0] if len(parts) > 1 else DEFAULT_CATEGORY
    subcategory = parts[1] if len(parts) > 2 else None
    return category, subcategory, filename


def generate_id(file_path: str) -> str:
    """Build a deterministic document id from its logical path.

    ``standards/frontend/vue/components.md`` -> ``frontend-vue-components``
    """
    clean = _clean_path(file_path)
    clean = re.sub(r"^standards/", "", clean)
    clean = _EXTENSION_RE.sub('', clean)
    return clean.replace('/', '-').lower()


def extract_title(body: str) -> Optional[str]:
    """Return the first level-1 heading of the body, if any."""
    match = _TITLE_RE.search(body)
    if match:
        return match.group(1).strip() or None
    return None


def extract_description(body: str, max_length: int = MAX_DESCRIPTION_LENGTH) -> Optional[str]:
    """Return the first plain paragraph line, truncated to ``max_length``."""
    for line in body.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(('#', '```', '-', '*')):
            continue
        if len(stripped) > max_length:
            return stripped[:max_length] + '...'
        return stripped
    return None


def normalize_tags(tags: Any) -> List[str]:
    """Accept a YAML list or a comma-separated string of tags."""
    if not tags:
        return []
    if isinstance(tags, (list, tuple)):
        return [str(t).strip() for t in tags if t is not None and str(t).strip()]
    if isinstance(tags, str):
        return [t.strip() for t in tags.split(',') if t.strip()]
    return []


def normalize_markdown(content: str, file_path: str, source: SourceType) -> Optional[StandardDocument]:
    """Normalize raw markdown into a StandardDocument.

    Args:
        content: Raw markdown text, optionally starting with YAML front matter
        file_path: Logical path used to derive id, category and title
        source: Origin of the document

    Returns:
        The normalized document, or None when there is no markdown body.
    """
    if not is_valid_markdown(content):
        return None

    frontmatter, body = parse_front_matter(content)
    body = body.strip()
    if not body:
        return None

    category, subcategory, filename = extract_path_info(file_path)

    return StandardDocument(
        id=_as_text(frontmatter.get('id')) or generate_id(file_path),
        title=_as_text(frontmatter.get('title')) or extract_title(body) or filename,
        description=_as_text(frontmatter.get('description')) or extract_description(body),
        category=_as_text(frontmatter.get('category')) or category,
        subcategory=_as_text(frontmatter.get('subcategory')) or subcategory,
        tags=normalize_tags(frontmatter.get('tags')),
        version=_as_text(frontmatter.get('version')),
        last_updated=_as_text(frontmatter.get('lastUpdated') or frontmatter.get('last_updated')),
        source=SourceType(source),
        path=file_path,
        content=body,
        frontmatter=frontmatter,
    )
