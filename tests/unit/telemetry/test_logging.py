"""
Unit tests for structured logging setup.
"""

from __future__ import annotations

import io
import json
import logging

import pytest
import structlog

from siglineage.config import LoggingConfig
from siglineage.telemetry.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def last_record(stream: io.StringIO) -> dict:
    return json.loads(stream.getvalue().strip().splitlines()[-1])


class TestSetupLogging:
    def test_json_to_stderr(self, capsys):
        setup_logging(LoggingConfig(level="DEBUG", format="json"))
        structlog.get_logger("siglineage.test").bind(component="tester").info("sample_event", answer=42)

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "sample_event"
        assert record["component"] == "tester"
        assert record["answer"] == 42
        assert record["level"] == "info"
        assert record["logger"] == "siglineage.test"

    def test_custom_stream(self):
        stream = io.StringIO()
        setup_logging(LoggingConfig(level="INFO", format="json"), stream=stream)
        structlog.get_logger("siglineage.test").warning("stream_event")
        assert last_record(stream)["event"] == "stream_event"

    def test_level_filters(self):
        stream = io.StringIO()
        setup_logging(LoggingConfig(level="WARNING", format="json"), stream=stream)
        structlog.get_logger("siglineage.test").debug("lineage_decision")
        structlog.get_logger("siglineage.test").info("hidden_event")
        assert stream.getvalue() == ""
        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(LoggingConfig(level="chatty", format="json"), stream=io.StringIO())
        assert logging.getLogger().level == logging.INFO

    def test_stdlib_records_share_the_format(self):
        stream = io.StringIO()
        setup_logging(LoggingConfig(level="INFO", format="json"), stream=stream)
        logging.getLogger("thirdparty").warning("plain %s", "record")
        record = last_record(stream)
        assert record["event"] == "plain record"
        assert record["level"] == "warning"

    def test_repeated_setup_does_not_duplicate_output(self):
        stream = io.StringIO()
        config = LoggingConfig(level="INFO", format="json")
        setup_logging(config, stream=stream)
        setup_logging(config, stream=stream)
        structlog.get_logger("siglineage.test").info("once")
        assert len(stream.getvalue().strip().splitlines()) == 1

    def test_console_renderer(self, capsys):
        setup_logging(LoggingConfig(level="INFO", format="console"))
        structlog.get_logger("siglineage.test").info("console_event")
        assert "console_event" in capsys.readouterr().err
