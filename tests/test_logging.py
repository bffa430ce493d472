"""Tests for structured JSON logging."""

import io
import json
import logging
import sys

from rwexporter.utils.logging import (
    ExporterContextFilter,
    JSONFormatter,
    LogContext,
    get_logger,
    setup_logging,
)


def make_record(msg="Test message", args=(), level=logging.INFO, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_basic_format(self):
        """Test basic JSON formatting."""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["message"] == "Test message"
        assert data["level"] == "INFO"
        assert data["logger"] == "test"
        assert data["timestamp"].endswith("Z")

    def test_format_with_args(self):
        """Test formatting with message arguments."""
        data = json.loads(JSONFormatter().format(make_record("Queue size: %d", (42,))))

        assert data["message"] == "Queue size: 42"

    def test_format_with_extra_fields(self):
        """Test formatting with static extra fields."""
        formatter = JSONFormatter(extra_fields={"service": "rwexporter", "version": "0.1.0"})
        data = json.loads(formatter.format(make_record()))

        assert data["service"] == "rwexporter"
        assert data["version"] == "0.1.0"

    def test_format_with_location(self):
        """Test formatting with source location."""
        record = make_record()
        record.funcName = "load_config"

        data = json.loads(JSONFormatter(include_location=True).format(record))

        assert data["location"] == {"file": "test.py", "line": 10, "function": "load_config"}

    def test_format_without_optional_fields(self):
        """Test formatting without optional fields."""
        formatter = JSONFormatter(
            include_timestamp=False,
            include_level=False,
            include_logger=False,
        )
        data = json.loads(formatter.format(make_record("Test")))

        assert "timestamp" not in data
        assert "level" not in data
        assert "logger" not in data
        assert data["message"] == "Test"

    def test_format_with_exception(self):
        """Test formatting with exception info."""
        try:
            raise ValueError("bad queue_size")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(make_record("Error occurred", level=logging.ERROR, exc_info=exc_info)))

        assert "ValueError" in data["exception"]
        assert "bad queue_size" in data["exception"]

    def test_non_serializable_extra_is_stringified(self):
        """Record attributes that aren't JSON-serializable are stringified."""
        record = make_record()
        record.config_path = object()

        data = json.loads(JSONFormatter().format(record))

        assert data["config_path"].startswith("<object object")


class TestExporterContextFilter:
    """Tests for logging context filter."""

    def setup_method(self):
        """Clear context before each test."""
        ExporterContextFilter.clear_context()

    def test_set_and_get_context(self):
        """Test setting and getting context."""
        ExporterContextFilter.set_context(config_path="a.yaml", component="loader")
        context = ExporterContextFilter.get_context()

        assert context == {"config_path": "a.yaml", "component": "loader"}

    def test_clear_context(self):
        """Test clearing context."""
        ExporterContextFilter.set_context(config_path="a.yaml")
        ExporterContextFilter.clear_context()

        assert ExporterContextFilter.get_context() == {}

    def test_filter_adds_context_to_record(self):
        """Test that filter adds context to log records."""
        ExporterContextFilter.set_context(config_path="b.yaml")
        record = make_record()

        assert ExporterContextFilter().filter(record) is True
        assert record.config_path == "b.yaml"


class TestLogContext:
    """Tests for LogContext context manager."""

    def setup_method(self):
        """Clear context before each test."""
        ExporterContextFilter.clear_context()

    def test_context_manager_sets_and_clears(self):
        """Context is set inside the block and cleared on exit."""
        with LogContext(config_path="c.yaml"):
            assert ExporterContextFilter.get_context()["config_path"] == "c.yaml"

        assert "config_path" not in ExporterContextFilter.get_context()

    def test_context_manager_restores_previous(self):
        """Test that previous context is restored."""
        ExporterContextFilter.set_context(config_path="outer.yaml")

        with LogContext(config_path="inner.yaml"):
            assert ExporterContextFilter.get_context()["config_path"] == "inner.yaml"

        assert ExporterContextFilter.get_context()["config_path"] == "outer.yaml"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_basic(self):
        """Test basic logging setup."""
        logger = setup_logging(level="DEBUG", stream=io.StringIO())

        assert logger.name == "rwexporter"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logging_replaces_handlers(self):
        """Calling setup twice doesn't duplicate handlers."""
        setup_logging(stream=io.StringIO())
        logger = setup_logging(stream=io.StringIO())

        assert len(logger.handlers) == 1

    def test_json_output_includes_context(self):
        """Child loggers emit JSON carrying the current context."""
        stream = io.StringIO()
        setup_logging(level="INFO", json_format=True, stream=stream)

        with LogContext(config_path="exporter.yaml"):
            get_logger("config").info("Loaded")

        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "Loaded"
        assert data["logger"] == "rwexporter.config"
        assert data["config_path"] == "exporter.yaml"

    def test_json_output_includes_location_and_service(self):
        """JSON logs carry source location and the service name."""
        stream = io.StringIO()
        setup_logging(level="INFO", json_format=True, stream=stream)

        get_logger("cli").warning("Config warning")

        data = json.loads(stream.getvalue().strip())
        assert data["service"] == "rwexporter"
        assert data["location"]["function"] == "test_json_output_includes_location_and_service"
        assert data["location"]["file"].endswith("test_logging.py")

    def test_get_logger(self):
        """Test get_logger function."""
        assert get_logger("cli").name == "rwexporter.cli"
