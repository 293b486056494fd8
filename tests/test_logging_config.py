"""Tests for logging configuration, filters and formatters."""

import json
import logging

import pytest

from jobfeed.logging import ComponentLoggerAdapter, get_logger
from jobfeed.logging.config import (
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    SensitiveDataFilter,
    configure_logging,
)
from jobfeed.logging.context import clear_log_context, log_context


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep configure_logging() from leaking handlers into other tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def logger():
    """Create a test logger."""
    test_logger = logging.getLogger("test_logger")
    test_logger.setLevel(logging.DEBUG)
    test_logger.handlers.clear()
    yield test_logger
    test_logger.handlers.clear()


def make_record(logger, message="Test message", **extra):
    return logger.makeRecord("test", logging.INFO, "test.py", 1, message, (), None, extra=extra)


def test_json_formatter_basic(logger):
    """Test JSONFormatter produces valid JSON with mandatory fields."""
    log_obj = json.loads(JSONFormatter().format(make_record(logger)))

    assert log_obj["level"] == "INFO"
    assert log_obj["message"] == "Test message"
    assert log_obj["logger"] == "test"
    assert log_obj["timestamp"].endswith("Z")


def test_json_formatter_with_extra_fields(logger):
    """Test JSONFormatter includes extra fields."""
    record = make_record(logger, event="import.feed.completed", imported=5, flag=True)
    log_obj = json.loads(JSONFormatter().format(record))

    assert log_obj["event"] == "import.feed.completed"
    assert log_obj["imported"] == 5
    assert log_obj["flag"] is True


def test_key_value_formatter_with_extras(logger):
    """Test KeyValueFormatter appends sorted key=value pairs."""
    formatter = KeyValueFormatter("[%(levelname)s] %(message)s")
    record = make_record(logger, event="import.run.completed", feeds_processed=2, note="two words")

    output = formatter.format(record)

    assert output == (
        '[INFO] Test message event=import.run.completed feeds_processed=2 note="two words"'
    )


def test_key_value_formatter_hides_service_labels(logger):
    """Test service and environment labels are left out of key-value lines."""
    formatter = KeyValueFormatter("%(message)s")
    record = make_record(logger, service="job-feed-importer", environment="local")
    assert formatter.format(record) == "Test message"


def test_contextual_filter_adds_static_fields(logger):
    """Test ContextualFilter adds service and environment fields."""
    record = make_record(logger)
    ContextualFilter(service="test-service", environment="test").filter(record)

    assert record.service == "test-service"
    assert record.environment == "test"


def test_contextual_filter_adds_context_fields(logger):
    """Test ContextualFilter copies log_context() fields without overriding extras."""
    record = make_record(logger, feed_id=99)
    with log_context(run_id="abc123", feed_id=1):
        ContextualFilter().filter(record)

    assert record.run_id == "abc123"
    assert record.feed_id == 99


def test_sensitive_data_filter_masks_identity(logger):
    """Test caller identity and credentials are masked."""
    record = make_record(
        logger,
        user_ip="34.12.56.78",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        publisher_id="ab12345",
        url="https://api.whatjobs.com/api/v1/jobs.xml?publisher=ab12345&user_ip=34.12.56.78",
        auth={"publisher_id": "ab12345"},
    )

    SensitiveDataFilter().filter(record)

    assert record.user_ip == "34.12.xxx.xxx"
    assert record.user_agent == "Mozilla/5.0 (Windows..."
    assert record.publisher_id == "ab***"
    assert "34.12.56.78" not in record.url
    assert "ab12345" not in record.url
    assert record.auth == {"publisher_id": "***"}


def test_sensitive_data_filter_leaves_masked_values(logger):
    """Test already-masked values are not masked twice."""
    record = make_record(logger, user_ip="34.12.xxx.xxx", publisher="ab***")
    SensitiveDataFilter().filter(record)

    assert record.user_ip == "34.12.xxx.xxx"
    assert record.publisher == "ab***"


def test_component_adapter_merges_extra():
    """Test get_logger tags records with the component and keeps call extras."""
    adapter = get_logger("jobfeed.test", component="importer")
    assert isinstance(adapter, ComponentLoggerAdapter)

    msg, kwargs = adapter.process("hello", {"extra": {"event": "test.event"}})
    assert kwargs["extra"] == {"component": "importer", "event": "test.event"}


def test_get_logger_without_component():
    """Test get_logger returns a plain logger when no component is given."""
    assert isinstance(get_logger("jobfeed.test"), logging.Logger)


def test_configure_logging_invalid_level():
    """Test configure_logging rejects unknown levels."""
    with pytest.raises(ValueError, match="Invalid log level"):
        configure_logging(level="LOUD")


def test_configure_logging_invalid_format():
    """Test configure_logging rejects unknown formats."""
    with pytest.raises(ValueError, match="Invalid log format"):
        configure_logging(format_type="xml")


def test_configure_logging_json_format(capsys):
    """Test JSON output end to end, including filters."""
    configure_logging(level="INFO", format_type="json", environment="test")
    capsys.readouterr()

    logging.getLogger("jobfeed.test").info(
        "Fetched feed", extra={"event": "provider.fetch.succeeded", "user_ip": "34.12.56.78"}
    )

    log_obj = json.loads(capsys.readouterr().out.strip())
    assert log_obj["event"] == "provider.fetch.succeeded"
    assert log_obj["service"] == "job-feed-importer"
    assert log_obj["environment"] == "test"
    assert log_obj["user_ip"] == "34.12.xxx.xxx"


def test_configure_logging_sets_level(capsys):
    """Test records below the configured level are dropped."""
    configure_logging(level="WARNING", format_type="key-value")
    logging.getLogger("jobfeed.test").info("hidden")

    assert "hidden" not in capsys.readouterr().out
