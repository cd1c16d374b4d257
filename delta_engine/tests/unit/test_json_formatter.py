"""Tests for delta_engine.telemetry.json_formatter."""

from __future__ import annotations

import json
import logging
import sys

import pytest
from delta_engine.config import Settings
from delta_engine.telemetry.json_formatter import JSONFormatter, configure_logging


@pytest.fixture
def formatter() -> JSONFormatter:
    return JSONFormatter()


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg: str = "test message", level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="delta_engine.test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_basic_format(self, formatter: JSONFormatter) -> None:
        data = json.loads(formatter.format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "delta_engine.test"
        assert data["message"] == "test message"
        assert data["timestamp"].endswith("+00:00")

    def test_single_line_output(self, formatter: JSONFormatter) -> None:
        output = formatter.format(_record("line one\nline two"))
        assert "\n" not in output
        assert json.loads(output)["message"] == "line one\nline two"

    def test_path_included(self, formatter: JSONFormatter) -> None:
        data = json.loads(formatter.format(_record(path="Foo.Bar[2]")))
        assert data["path"] == "Foo.Bar[2]"

    def test_path_omitted_when_absent(self, formatter: JSONFormatter) -> None:
        assert "path" not in json.loads(formatter.format(_record()))

    def test_exception_info_included(self, formatter: JSONFormatter) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()
        data = json.loads(formatter.format(record))
        assert "ValueError: boom" in data["exc_info"]


class TestConfigureLogging:
    def test_structured(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(Settings(structured_logging=True, log_level="INFO"))
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
        assert restore_root_logger.level == logging.INFO

    def test_plain_text(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(Settings(structured_logging=False))
        formatter = restore_root_logger.handlers[0].formatter
        assert not isinstance(formatter, JSONFormatter)
        assert restore_root_logger.level == logging.WARNING

    def test_debug_overrides_level(self, restore_root_logger: logging.Logger) -> None:
        configure_logging(Settings(debug=True, log_level="ERROR"))
        assert restore_root_logger.level == logging.DEBUG
