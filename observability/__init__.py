"""Observability package for the standards hub."""

from .logging import setup_logging, get_logger, SourceLogger, JSONFormatter, ColoredFormatter

__all__ = [
    'setup_logging',
    'get_logger',
    'SourceLogger',
    'JSONFormatter',
    'ColoredFormatter'
]
