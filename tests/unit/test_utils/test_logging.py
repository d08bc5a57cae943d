"""Tests for logging utilities."""

import logging
import pytest
from datetime import datetime
from pythonjsonlogger.json import JsonFormatter
from tasktrack.utils.logging import (
    correlation_context,
    get_correlation_id,
    get_structured_logger,
    log_timing,
    sanitize_text,
    setup_logging,
)
from tasktrack.utils.logging_config import LoggingConfig


@pytest.fixture
def restore_root_logger():
    """Keep handler changes made by setup_logging out of other tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
@pytest.mark.parametrize("log_format,formatter_type", [
    ("json", JsonFormatter),
    ("text", logging.Formatter),
])
def test_setup_logging_formats(monkeypatch, restore_root_logger, log_format, formatter_type):
    """Test LOG_FORMAT selects the formatter."""
    monkeypatch.setattr(LoggingConfig, "LOG_FORMAT", log_format)
    monkeypatch.setattr(LoggingConfig, "LOG_LEVEL", "DEBUG")
    
    logger = setup_logging()
    
    assert logger.name == "tasktrack"
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, formatter_type)
    assert restore_root_logger.level == logging.DEBUG


@pytest.mark.unit
def test_correlation_context():
    """Test correlation ids are scoped to the context."""
    assert get_correlation_id() is None
    
    with correlation_context(prefix="refresh") as correlation_id:
        assert correlation_id.startswith("refresh_")
        assert get_correlation_id() == correlation_id
        with correlation_context("inner"):
            assert get_correlation_id() == "inner"
        assert get_correlation_id() == correlation_id
    
    assert get_correlation_id() is None


@pytest.mark.unit
def test_structured_logger_fields(caplog):
    """Test keyword arguments become record attributes."""
    logger = get_structured_logger("tasktrack.test")
    
    with caplog.at_level(logging.INFO, logger="tasktrack.test"):
        with correlation_context("op_123"):
            logger.info("Task added", task_id="abc", status="PENDING")
    
    record = caplog.records[-1]
    assert record.getMessage() == "Task added"
    assert datetime.fromisoformat(record.timestamp).tzinfo is not None
    assert record.task_id == "abc"
    assert record.correlation_id == "op_123"


@pytest.mark.unit
def test_sanitize_text(monkeypatch):
    """Test truncation and the content switch."""
    assert sanitize_text("a" * 100, max_length=10) == "a" * 10 + "..."
    assert sanitize_text("") is None
    
    monkeypatch.setattr(LoggingConfig, "LOG_TASK_CONTENT", False)
    assert sanitize_text("secret plans") is None


@pytest.mark.unit
def test_log_timing_warns_on_slow_operation(monkeypatch, caplog):
    """Test slow operations are flagged."""
    monkeypatch.setattr(LoggingConfig, "LOG_SLOW_OPERATION_THRESHOLD_MS", -1)
    logger = get_structured_logger("tasktrack.test")
    
    with caplog.at_level(logging.DEBUG, logger="tasktrack.test"):
        with log_timing("refresh_statuses", logger=logger, trigger="timer"):
            pass
    
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert warnings[0].operation == "refresh_statuses"
    assert warnings[0].trigger == "timer"
