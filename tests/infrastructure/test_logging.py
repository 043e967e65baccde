"""Tests for centralized logging."""

import json
import logging
import sys

from kubepromote.infrastructure.logging import (
    JSONFormatter,
    configure_logging,
    level_from_name,
)


class TestConfigureLogging:
    def test_default_level(self):
        configure_logging(level=logging.INFO)
        logger = logging.getLogger("kubepromote")
        assert logger.level == logging.INFO

    def test_debug_level(self):
        configure_logging(level=logging.DEBUG)
        logger = logging.getLogger("kubepromote")
        assert logger.level == logging.DEBUG

    def test_json_format(self):
        configure_logging(level=logging.INFO, json_format=True)
        logger = logging.getLogger("kubepromote")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_human_format(self):
        configure_logging(level=logging.INFO, json_format=False)
        logger = logging.getLogger("kubepromote")
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_replaces_handlers(self):
        configure_logging(level=logging.INFO)
        configure_logging(level=logging.DEBUG)
        logger = logging.getLogger("kubepromote")
        assert len(logger.handlers) == 1


class TestLevelFromName:
    def test_known_names(self):
        assert level_from_name("debug") == logging.DEBUG
        assert level_from_name("INFO") == logging.INFO

    def test_unknown_name_uses_default(self):
        assert level_from_name("chatty") == logging.WARNING
        assert level_from_name("", default=logging.ERROR) == logging.ERROR


class TestJSONFormatter:
    def test_format_basic(self):
        formatter = JSONFormatter()
        record = logging.LogRecord(
            name="kubepromote.audit",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg="promoted %s",
            args=("web",),
            exc_info=None,
        )
        data = json.loads(formatter.format(record))
        assert data["message"] == "promoted web"
        assert data["level"] == "INFO"
        assert data["logger"] == "kubepromote.audit"
        assert "timestamp" in data

    def test_format_exception(self):
        formatter = JSONFormatter()
        try:
            raise ValueError("bad pin")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            name="test", level=logging.ERROR, pathname="test.py", lineno=1,
            msg="failed", args=(), exc_info=exc_info,
        )
        data = json.loads(formatter.format(record))
        assert "ValueError: bad pin" in data["exception"]
