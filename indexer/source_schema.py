from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum

class SourceType(str, Enum):
    """Origins a standard document can be loaded from."""
    LOCAL = "local"
    REMOTE = "remote"
    GIT = "git"

@dataclass(frozen=True)
class StandardMetadata:
    """Metadata of a standard document (everything except its body)."""
    id: str
    title: str
    category: str
    source: SourceType
    path: str
    description: Optional[str] = None
    subcategory: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    version: Optional[str] = None
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {}
        for key, value in self.__dict__.items():
            if isinstance(value, SourceType):
                result[key] = value.value
            elif isinstance(value, list):
                result[key] = list(value)
            else:
                result[key] = value
        return result

@dataclass(frozen=True)
class StandardDocument:
    """A normalized standard document with its markdown body."""
    id: str
    title: str
    category: str
    source: SourceType
    path: str
    content: str
    description: Optional[str] = None
    subcategory: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    version: Optional[str] = None
    last_updated: Optional[str] = None
    frontmatter: Dict[str, Any] = field(default_factory=dict)

    def metadata(self) -> StandardMetadata:
        """Project the document onto its metadata, dropping content and front matter."""
        return StandardMetadata(
            id=self.id,
            title=self.title,
            category=self.category,
            source=self.source,
            path=self.path,
            description=self.description,
            subcategory=self.subcategory,
            tags=list(self.tags),
            version=self.version,
            last_updated=self.last_updated,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = self.metadata().to_dict()
        result['content'] = self.content
        result['frontmatter'] = dict(self.frontmatter)
        return result

@dataclass(frozen=True)
class SearchResult:
    """One ranked hit returned by a keyword search."""
    id: str
    title: str
    category: str
    relevance: int
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'relevance': self.relevance,
        }
