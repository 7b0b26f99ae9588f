"""Keyword relevance search over the standards corpus.

Scoring is additive per query term and per matching field:

    title +10, description +5, each matching tag +7, category +3, content +1

There is no index; every search is a linear scan of the corpus.
"""

import re
from typing import Iterable, List, Sequence

from indexer.source_schema import SearchResult, StandardDocument

TITLE_WEIGHT = 10
DESCRIPTION_WEIGHT = 5
TAG_WEIGHT = 7
CATEGORY_WEIGHT = 3
CONTENT_WEIGHT = 1


def split_query(query: str) -> List[str]:
    """Split a query into lowercase whitespace-separated terms."""
    return [term for term in query.lower().split() if term]


def score_document(document: StandardDocument, terms: Sequence[str]) -> int:
    """Compute the relevance of one document for the given lowercase terms."""
    title = document.title.lower()
    description = (document.description or '').lower()
    tags = [tag.lower() for tag in document.tags]
    category = document.category.lower()
    content = document.content.lower()

    relevance = 0
    for term in terms:
        if term in title:
            relevance += TITLE_WEIGHT
        if description and term in description:
            relevance += DESCRIPTION_WEIGHT
        relevance += TAG_WEIGHT * sum(1 for tag in tags if term in tag)
        if term in category:
            relevance += CATEGORY_WEIGHT
        if term in content:
            relevance += CONTENT_WEIGHT
    return relevance


def search_documents(documents: Iterable[StandardDocument], query: str) -> List[SearchResult]:
    """Rank documents by relevance to the query.

    Documents scoring zero are dropped. The sort is stable, so documents with
    equal relevance keep their corpus order.
    """
    terms = split_query(query)
    if not terms:
        return []

    results = []
    for document in documents:
        relevance = score_document(document, terms)
        if relevance > 0:
            results.append(SearchResult(
                id=document.id,
                title=document.title,
                description=document.description,
                category=document.category,
                relevance=relevance,
            ))

    return sorted(results, key=lambda result: result.relevance, reverse=True)


def highlight_matches(text: str, keywords: Iterable[str], wrapper: str = '**') -> str:
    """Wrap case-insensitive keyword occurrences in ``wrapper``."""
    result = text
    for keyword in keywords:
        if not keyword:
            continue
        pattern = re.compile(f"({re.escape(keyword)})", re.IGNORECASE)
        result = pattern.sub(lambda m: f"{wrapper}{m.group(1)}{wrapper}", result)
    return result


def extract_snippet(content: str, keywords: Iterable[str], max_length: int = 200) -> str:
    """Return a window of ``content`` around the earliest keyword match.

    Falls back to the start of the content when nothing matches. Ellipses mark
    truncation on either side.
    """
    content_lower = content.lower()
    positions = [
        content_lower.find(keyword.lower())
        for keyword in keywords
        if keyword
    ]
    positions = [p for p in positions if p != -1]

    if not positions:
        return content[:max_length] + ('...' if len(content) > max_length else '')

    start = max(0, min(positions) - max_length // 3)
    end = min(len(content), start + max_length)

    snippet = content[start:end]
    if start > 0:
        snippet = '...' + snippet
    if end < len(content):
        snippet = snippet + '...'
    return snippet
