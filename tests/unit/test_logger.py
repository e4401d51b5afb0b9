"""
Binary File Importer - Logger Unit Tests

Tests structured JSON logging functionality:
- Logger setup and configuration
- Import logging (start, complete, error)
- Entry skip and batch commit logging
- Database error logging
"""

import pytest
import logging
import json
from io import StringIO
from pythonjsonlogger import jsonlogger
from utils.logger import (
    setup_logger,
    logger,
    log_import_start,
    log_import_complete,
    log_import_error,
    log_entry_skipped,
    log_batch_committed,
    log_database_error
)


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def records():
    """
    Records emitted by the global logger.

    The global logger does not propagate, so caplog cannot see it.
    """
    handler = RecordingHandler()
    logger.addHandler(handler)
    yield handler.records
    logger.removeHandler(handler)


class TestSetupLogger:
    """Test logger setup and configuration."""

    def test_setup_logger_returns_logger_instance(self):
        """setup_logger() should return a logging.Logger instance."""
        test_logger = setup_logger("test_logger")

        assert isinstance(test_logger, logging.Logger)
        assert test_logger.name == "test_logger"
        assert test_logger.propagate is False

    def test_setup_logger_prevents_duplicate_handlers(self):
        """setup_logger() should not add duplicate handlers."""
        test_logger = setup_logger("test_duplicate")
        handler_count_1 = len(test_logger.handlers)

        test_logger = setup_logger("test_duplicate")
        handler_count_2 = len(test_logger.handlers)

        assert handler_count_1 == handler_count_2 == 1

    def test_output_is_json(self):
        """Messages and extra fields are rendered as one JSON object per line."""
        test_logger = setup_logger("test_json_output")
        stream = StringIO()
        test_logger.handlers[0].setStream(stream)

        test_logger.info("Import completed", extra={"import_id": "imp_0123456789abcdef"})

        payload = json.loads(stream.getvalue().strip())
        assert payload["message"] == "Import completed"
        assert payload["import_id"] == "imp_0123456789abcdef"
        assert payload["levelname"] == "INFO"
        assert isinstance(test_logger.handlers[0].formatter, jsonlogger.JsonFormatter)

    def test_global_logger_exists(self):
        """Global logger instance should be initialized."""
        assert isinstance(logger, logging.Logger)
        assert logger.name == "binary_file_importer"


class TestImportLogging:
    """Test import run logging functions."""

    def test_log_import_start(self, records):
        log_import_start("imp_0123456789abcdef", archive_count=2)

        record = records[-1]
        assert record.getMessage() == "Import started"
        assert record.levelname == "INFO"
        assert record.event_type == "import_start"
        assert record.archive_count == 2

    def test_log_import_complete(self, records):
        log_import_complete("imp_0123456789abcdef", duration_seconds=12.5, records_imported=1247, errors=3)

        record = records[-1]
        assert record.getMessage() == "Import completed"
        assert record.records_imported == 1247
        assert record.errors_encountered == 3

    def test_log_import_error(self, records):
        try:
            raise RuntimeError("batch failed")
        except RuntimeError as e:
            log_import_error(e, "imp_0123456789abcdef", records_imported=100)

        record = records[-1]
        assert record.getMessage() == "Import failed"
        assert record.levelname == "ERROR"
        assert record.error_type == "RuntimeError"
        assert record.records_imported == 100
        assert record.exc_info is not None


class TestEntryLogging:
    """Test per-entry and per-batch logging functions."""

    def test_log_entry_skipped(self, records):
        log_entry_skipped("UNMATCHED", "9999.jpg", "No person with foreign id 9999", "imp_a")

        record = records[-1]
        assert record.levelname == "WARNING"
        assert record.event_type == "entry_skipped"
        assert record.issue_type == "UNMATCHED"
        assert record.entry_name == "9999.jpg"

    def test_log_batch_committed(self, records):
        log_batch_committed("imp_a", batch_size=100, records_imported=300)

        record = records[-1]
        assert record.getMessage() == "Batch committed"
        assert record.batch_size == 100
        assert record.records_imported == 300


class TestDatabaseErrorLogging:
    """Test database error logging."""

    def test_log_database_error(self, records):
        error = ConnectionError("Database connection lost")

        log_database_error(error, "Batch of 100 files rolled back")

        record = records[-1]
        assert record.getMessage() == "Database error"
        assert record.levelname == "ERROR"
        assert record.query_context == "Batch of 100 files rolled back"

    def test_log_database_error_without_context(self, records):
        log_database_error(ValueError("bad value"))

        assert records[-1].query_context is None
