import json
import logging

import pytest

from observability.logging import ColoredFormatter, JSONFormatter, SourceLogger, get_logger, setup_logging


def make_record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("sources.git", level, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_groups_source_context():
    record = make_record(source="GitSource('acme/standards')", unit="docs/a.md", request_id="ignored")
    payload = json.loads(JSONFormatter("hub").format(record))

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["service"] == "hub"
    assert payload["logger"] == "sources.git"
    assert payload["context"] == {"source": "GitSource('acme/standards')", "unit": "docs/a.md"}
    assert "request_id" not in payload
    assert payload["timestamp"].endswith("Z")


def test_json_formatter_without_context():
    payload = json.loads(JSONFormatter().format(make_record()))
    assert "context" not in payload
    assert payload["service"] == "standards-hub"


def test_colored_formatter_appends_context():
    record = make_record(level=logging.WARNING, url="https://example.com/a.md")
    line = ColoredFormatter(use_colors=False).format(record)

    assert line.endswith("WARNING sources.git: hello [url=https://example.com/a.md]")
    assert "\033[" not in line


def test_colored_formatter_colors_by_level():
    line = ColoredFormatter().format(make_record(level=logging.ERROR))
    assert line.startswith("\033[31m")
    assert line.endswith("\033[0m")


def test_bound_logger_merges_call_extra(caplog):
    log = get_logger("sources.remote", source="RemoteSource('https://example.com')")
    assert isinstance(log, SourceLogger)

    with caplog.at_level(logging.ERROR, logger="sources.remote"):
        log.error("Failed to fetch", extra={"url": "https://example.com/a.md"})

    record = caplog.records[0]
    assert record.source == "RemoteSource('https://example.com')"
    assert record.url == "https://example.com/a.md"


def test_get_logger_without_context_is_plain():
    assert get_logger("server.manager") is logging.getLogger("server.manager")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_writes_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "hub.log"
    setup_logging(level="debug", log_file=str(log_file), use_colors=False)

    get_logger("sources.local", source="LocalSource('./standards')").debug("written", extra={"unit": "a.md"})
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("aiohttp").level == logging.WARNING
    entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert entry["message"] == "written"
    assert entry["context"] == {"source": "LocalSource('./standards')", "unit": "a.md"}
