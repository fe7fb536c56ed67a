"""
Tests for structured logging.

Reference Documents:
- GUIDELINES pp. 2309-2319: structured logging
"""

import io
import json

import pytest

from langgraph_bridge.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    reset_logging,
    set_correlation_id,
)


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging(level="DEBUG", stream=stream, force=True)
    yield stream
    reset_logging()
    configure_logging(force=True)


def read_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestCorrelationId:
    """Tests for correlation ID context handling."""

    def test_set_and_clear(self) -> None:
        set_correlation_id("conv-1")
        assert get_correlation_id() == "conv-1"
        clear_correlation_id()
        assert get_correlation_id() is None

    def test_context_manager_restores_previous(self) -> None:
        with correlation_id_context("outer"):
            with correlation_id_context("inner"):
                assert get_correlation_id() == "inner"
            assert get_correlation_id() == "outer"
        assert get_correlation_id() is None


class TestStructuredOutput:
    """Tests for the JSON log format."""

    def test_json_fields(self, log_stream) -> None:
        get_logger("tests.logging").info("session created", session_id="sess-1")

        [entry] = read_lines(log_stream)
        assert entry["event"] == "session created"
        assert entry["session_id"] == "sess-1"
        assert entry["level"] == "info"
        assert entry["logger"] == "tests.logging"
        assert "timestamp" in entry

    def test_correlation_id_included(self, log_stream) -> None:
        with correlation_id_context("conv-7"):
            get_logger("tests.logging").info("turn processed")

        [entry] = read_lines(log_stream)
        assert entry["correlation_id"] == "conv-7"

    def test_service_name_included(self) -> None:
        stream = io.StringIO()
        configure_logging(stream=stream, force=True, service_name="langgraph-bridge")
        try:
            get_logger("tests.logging").info("started")
        finally:
            reset_logging()
            configure_logging(force=True)

        [entry] = read_lines(stream)
        assert entry["service"] == "langgraph-bridge"

    def test_level_filtering(self) -> None:
        stream = io.StringIO()
        configure_logging(level="WARNING", stream=stream, force=True)
        try:
            logger = get_logger("tests.logging")
            logger.info("dropped")
            logger.warning("kept")
        finally:
            reset_logging()
            configure_logging(force=True)

        assert [entry["event"] for entry in read_lines(stream)] == ["kept"]

    def test_configure_is_idempotent_without_force(self, log_stream) -> None:
        other = io.StringIO()
        configure_logging(level="DEBUG", stream=other)

        get_logger("tests.logging").info("still first stream")

        assert other.getvalue() == ""
        assert read_lines(log_stream)[0]["event"] == "still first stream"

    def test_module_level_logger_follows_reconfiguration(self) -> None:
        """Loggers bound at import time write to the stream configured later."""
        from langgraph_bridge.clients import langgraph

        stream = io.StringIO()
        configure_logging(stream=stream, force=True)
        try:
            langgraph.logger.info("remote call", path="/api/v1/health")
        finally:
            reset_logging()
            configure_logging(force=True)

        [entry] = read_lines(stream)
        assert entry["logger"] == "langgraph_bridge.clients.langgraph"
        assert entry["path"] == "/api/v1/health"
        assert "logger_name" not in entry
