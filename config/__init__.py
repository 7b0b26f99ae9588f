"""Configuration module for the standards hub.

Provides the validated configuration objects consumed by the standards manager.
"""

from .settings import (
    StandardsConfig,
    SourceConfig,
    LocalSourceConfig,
    RemoteSourceConfig,
    RemoteDocConfig,
    GitSourceConfig
)

__all__ = [
    'StandardsConfig',
    'SourceConfig',
    'LocalSourceConfig',
    'RemoteSourceConfig',
    'RemoteDocConfig',
    'GitSourceConfig'
]
