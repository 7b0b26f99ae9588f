"""Caller-facing query helpers built on the standards manager.

These produce the payloads the tool layer renders: ranked search results with
a total count, rendered documents, and category-grouped listings.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from indexer.source_schema import StandardDocument, StandardMetadata
from .manager import StandardsManager
from .search import extract_snippet, split_query

logger = logging.getLogger(__name__)

MAX_RESULTS = 10
MAX_SUGGESTIONS = 3
CHARS_PER_TOKEN = 4

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


@dataclass
class ResolveResult:
    """Search response: a message, the top results and the untruncated total."""
    message: str
    results: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'results': self.results,
            'total_count': self.total_count,
        }


async def resolve_standard(manager: StandardsManager, query: str) -> ResolveResult:
    """Search the corpus and return at most ``MAX_RESULTS`` hits plus the total."""
    if not query or not query.strip():
        return ResolveResult(message="Please provide search keywords")

    query = query.strip()
    results = await manager.search_standards(query)

    if not results:
        categories = await manager.get_categories()
        return ResolveResult(
            message=f'No standards found matching "{query}". Available categories: {", ".join(categories)}'
        )

    terms = split_query(query)
    top_results = []
    for result in results[:MAX_RESULTS]:
        item = result.to_dict()
        doc = await manager.get_standard_by_id(result.id)
        if doc is not None:
            item['snippet'] = extract_snippet(doc.content, terms)
        top_results.append(item)

    return ResolveResult(
        message=f"Found {len(results)} matching standards",
        results=top_results,
        total_count=len(results),
    )


def build_header(document: StandardDocument) -> str:
    """Render the metadata block shown above a document's content."""
    lines = [f"# {document.title}", ""]

    if document.description:
        lines.append(f"> {document.description}")
        lines.append("")

    category = document.category
    if document.subcategory:
        category = f"{category} / {document.subcategory}"
    meta = [f"**Category**: {category}"]

    if document.tags:
        meta.append(f"**Tags**: {', '.join(document.tags)}")
    if document.version:
        meta.append(f"**Version**: {document.version}")
    if document.last_updated:
        meta.append(f"**Last updated**: {document.last_updated}")

    lines.append(" | ".join(meta))
    lines.append("")
    lines.append("---")
    return "\n".join(lines)


def extract_topic_content(content: str, topic: str) -> str:
    """Keep only the heading-delimited sections that mention ``topic``.

    A section is relevant when its heading or any of its lines contains the
    topic (case-insensitive). If no section matches, the whole content is
    returned with a notice.
    """
    topic_lower = topic.lower()
    sections: List[str] = []
    current: List[str] = []
    relevant = False

    for line in content.split("\n"):
        heading = _HEADING_RE.match(line)
        if heading:
            if relevant and current:
                sections.append("\n".join(current))
            current = [line]
            relevant = topic_lower in heading.group(2).lower()
        else:
            current.append(line)
            if not relevant and topic_lower in line.lower():
                relevant = True

    if relevant and current:
        sections.append("\n".join(current))

    if not sections:
        return f'No content related to "{topic}" was found.\n\nFull document:\n\n{content}'
    return "\n\n".join(sections)


async def get_standard_docs(manager: StandardsManager,
                            standard_id: str,
                            topic: Optional[str] = None,
                            max_tokens: Optional[int] = None) -> str:
    """Render a standard by id.

    Args:
        manager: Initialized standards manager
        standard_id: Id of the standard to render
        topic: Optional topic used to keep only relevant sections
        max_tokens: Optional budget; content is cut at roughly 4 characters per token

    Returns:
        The rendered document, or a not-found message with suggestions.
    """
    document = await manager.get_standard_by_id(standard_id)

    if document is None:
        suggestions = (await manager.search_standards(standard_id))[:MAX_SUGGESTIONS]
        logger.info(f"Standard not found: {standard_id} ({len(suggestions)} suggestions)")
        if suggestions:
            listing = "\n".join(f"- {s.id}: {s.title}" for s in suggestions)
            return f"Standard not found: {standard_id}\n\nDid you mean:\n{listing}"
        return f"Standard not found: {standard_id}"

    content = document.content
    if topic:
        content = extract_topic_content(content, topic)

    if max_tokens and max_tokens > 0:
        max_chars = max_tokens * CHARS_PER_TOKEN
        if len(content) > max_chars:
            content = content[:max_chars] + "\n\n... (content truncated)"

    return f"{build_header(document)}\n\n{content}"


def _category_sort_key(category: str, preferred: List[str]):
    if category in preferred:
        return (0, preferred.index(category), category)
    return (1, 0, category)


def group_by_category(standards: List[StandardMetadata], preferred: List[str]) -> List[Dict[str, Any]]:
    """Group metadata by category; preferred categories first, then alphabetical."""
    groups: Dict[str, List[StandardMetadata]] = {}
    for standard in standards:
        groups.setdefault(standard.category, []).append(standard)

    result = []
    for category in sorted(groups, key=lambda c: _category_sort_key(c, preferred)):
        items = sorted(groups[category], key=lambda s: s.title)
        result.append({
            'category': category,
            'count': len(items),
            'standards': [
                {
                    'id': s.id,
                    'title': s.title,
                    'description': s.description,
                    'subcategory': s.subcategory,
                    'tags': list(s.tags),
                }
                for s in items
            ],
        })
    return result


async def list_standards(manager: StandardsManager, category: Optional[str] = None) -> Dict[str, Any]:
    """List standards grouped by category, optionally restricted to one category."""
    config = manager.get_config()
    if category:
        standards = await manager.get_standards_by_category(category)
    else:
        standards = await manager.get_all_standards()

    return {
        'project_title': config.project_title,
        'total_count': len(standards),
        'categories': group_by_category(standards, list(config.categories)),
    }
