"""
Unit Tests: Structured Logging

Tests:
    - JSON output with extras and context fields
    - Child loggers with default fields
    - Root logger setup
"""

import io
import json
import logging

import pytest

from socket_session.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
)


@pytest.fixture
def captured():
    """A StructuredLogger writing JSON lines into a buffer."""
    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(JsonFormatter())
    inner = logging.getLogger("socket_session.tests.captured")
    inner.addHandler(handler)
    inner.setLevel(logging.DEBUG)
    inner.propagate = False

    def lines():
        return [json.loads(line) for line in buffer.getvalue().splitlines()]

    yield StructuredLogger(inner.name), lines
    inner.removeHandler(handler)


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJsonOutput:

    def test_extras(self, captured):
        logger, lines = captured
        logger.info("Connected", session_id="s1")

        record = lines()[0]
        assert record["message"] == "Connected"
        assert record["level"] == "INFO"
        assert record["logger"] == "socket_session.tests.captured"
        assert record["session_id"] == "s1"
        assert "@timestamp" in record

    def test_context(self, captured):
        logger, lines = captured
        with logger.context(session_url="ws://a"):
            logger.debug("inside")
        logger.debug("outside")

        inside, outside = lines()
        assert inside["session_url"] == "ws://a"
        assert "session_url" not in outside

    def test_with_extra(self, captured):
        logger, lines = captured
        child = logger.with_extra(component="pump")
        child.warning("slow", queued=3)

        record = lines()[0]
        assert record["component"] == "pump"
        assert record["queued"] == 3
        assert child.name == logger.name

    def test_exception(self, captured):
        logger, lines = captured
        try:
            raise ValueError("bad payload")
        except ValueError:
            logger.exception("Handler failed")

        record = lines()[0]
        assert record["level"] == "ERROR"
        assert "ValueError: bad payload" in record["exception"]


class TestSetup:

    def test_level_from_name(self):
        assert LogLevel.from_name("debug") is LogLevel.DEBUG
        with pytest.raises(KeyError):
            LogLevel.from_name("LOUD")

    def test_setup_logging_json(self, restore_root):
        stream = io.StringIO()
        setup_logging(LogLevel.WARNING, json_output=True, stream=stream)
        logging.getLogger("socket_session.tests.setup").info("hidden")
        logging.getLogger("socket_session.tests.setup").warning("shown")

        output = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [record["message"] for record in output] == ["shown"]
        assert logging.getLogger("engineio").level == logging.WARNING

    def test_setup_logging_plain(self, restore_root):
        stream = io.StringIO()
        setup_logging(LogLevel.INFO, json_output=False, stream=stream)
        logging.getLogger("socket_session.tests.setup").info("plain line")
        assert "| INFO     | socket_session.tests.setup | plain line" in stream.getvalue()
