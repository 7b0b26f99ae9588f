"""Logging setup for the standards hub.

Source adapters log through ``get_logger(name, source=...)``, which binds the
adapter's identity to every record. Per-unit failures add ``url`` or ``unit``
via ``extra``. Both formatters render these context fields.
"""

from __future__ import annotations
import logging
import sys
import json
from typing import Any, Dict, MutableMapping, Optional, Tuple, Union
from datetime import datetime, timezone
from pathlib import Path

# Record attributes carrying source context, in render order
CONTEXT_FIELDS = ('source', 'unit', 'url', 'standard_id')


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Collect the context fields set on a record."""
    return {
        key: getattr(record, key)
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class SourceLogger(logging.LoggerAdapter):
    """Logger adapter binding source context to every record.

    Unlike the stock adapter, per-call ``extra`` is merged over the bound
    context instead of being discarded.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs['extra'] = {**self.extra, **(kwargs.get('extra') or {})}
        return msg, kwargs


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with source context under ``context``."""

    def __init__(self, service_name: str = "standards-hub"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": timestamp.isoformat().replace("+00:00", "Z"),
            "service": self.service_name,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Single-line console output, colored by level."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        line = f"{timestamp} {record.levelname:<7} {record.name}: {record.getMessage()}"

        context = record_context(record)
        if context:
            line += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"

        if self.use_colors and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.RESET}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    service_name: str = "standards-hub",
    log_file: Optional[str] = None,
    use_json: bool = False,
    use_colors: bool = True
) -> None:
    """Configure the root logger.

    Console output goes to stderr so stdout stays free for a request/response
    transport. The optional file log is always JSON.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(JSONFormatter(service_name) if use_json else ColoredFormatter(use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    # Retry warnings from the fetcher are enough; aiohttp's own are noise
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> Union[logging.Logger, SourceLogger]:
    """Get a logger, bound to ``context`` when any is given."""
    logger = logging.getLogger(name)
    if context:
        return SourceLogger(logger, context)
    return logger
