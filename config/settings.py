"""Standards hub configuration.

The core only reads ``sources`` and ``cache_timeout``; the remaining fields
are carried for the presentation layer. Validation happens once, here, when
the configuration object is built.
"""

import logging
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class LocalSourceConfig(BaseModel):
    """Markdown files under a local directory."""
    model_config = ConfigDict(frozen=True)

    type: Literal["local"] = "local"
    path: str = Field(description="Directory scanned recursively for markdown files")


class RemoteDocConfig(BaseModel):
    """One raw markdown file served over HTTP."""
    model_config = ConfigDict(frozen=True)

    url: str
    category: Optional[str] = None
    subcategory: Optional[str] = None


class RemoteSourceConfig(BaseModel):
    """HTTP endpoint serving either a JSON API or raw markdown files."""
    model_config = ConfigDict(frozen=True)

    type: Literal["remote"] = "remote"
    url: str = Field(description="JSON API endpoint or a single markdown file")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    docs: List[RemoteDocConfig] = Field(default_factory=list, description="Explicit markdown files to fetch")


class GitSourceConfig(BaseModel):
    """Markdown blobs of a GitHub-hosted repository."""
    model_config = ConfigDict(frozen=True)

    type: Literal["git"] = "git"
    repo: str = Field(description="Repository as owner/name")
    branch: str = Field(default="main", description="Branch or tree-ish to list")
    path: Optional[str] = Field(default=None, description="Only include files under this prefix")
    token: Optional[str] = Field(default=None, description="Bearer token for the API")
    api_base: str = Field(default="https://api.github.com", description="REST API base URL")


SourceConfig = Annotated[
    Union[LocalSourceConfig, RemoteSourceConfig, GitSourceConfig],
    Field(discriminator="type"),
]


class StandardsConfig(BaseModel):
    """Top-level configuration consumed by the standards manager."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_title: str = Field(default="Standards Hub", alias="projectTitle")
    description: Optional[str] = None
    sources: List[SourceConfig] = Field(
        default_factory=lambda: [LocalSourceConfig(path="./standards")]
    )
    categories: List[str] = Field(default_factory=lambda: ["frontend", "backend", "custom"])
    cache_timeout: float = Field(default=3600, gt=0, alias="cacheTimeout", description="Corpus cache TTL in seconds")
    rules: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StandardsConfig':
        """Create a validated configuration from a plain dictionary.

        Raises:
            pydantic.ValidationError: If the data does not describe a valid configuration
        """
        config = cls.model_validate(data)
        logger.debug(f"Loaded configuration with {len(config.sources)} sources")
        return config
