"""
Binary File Importer - Structured Logging
Provides JSON-formatted logging for import runs.
"""

import logging
import sys
from pythonjsonlogger import jsonlogger

from .config import LOG_LEVEL, config


def setup_logger(name: str = __name__) -> logging.Logger:
    """
    Configure structured JSON logger.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Import completed", extra={
        ...     "import_id": "imp_0123456789abcdef",
        ...     "records_imported": 1247
        ... })
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        datefmt='%Y-%m-%dT%H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    return logger


# Global logger instance
logger = setup_logger('binary_file_importer')


def log_import_start(import_id: str, archive_count: int):
    """Log the start of an import run."""
    logger.info("Import started", extra={
        "event_type": "import_start",
        "import_id": import_id,
        "archive_count": archive_count,
        "environment": config.environment
    })


def log_import_complete(import_id: str, duration_seconds: float, records_imported: int, errors: int):
    """Log successful import completion."""
    logger.info("Import completed", extra={
        "event_type": "import_complete",
        "import_id": import_id,
        "duration_seconds": duration_seconds,
        "records_imported": records_imported,
        "errors_encountered": errors
    })


def log_import_error(error: Exception, import_id: str = None, records_imported: int = 0):
    """Log a fatal import error with context."""
    logger.error("Import failed", extra={
        "event_type": "import_error",
        "import_id": import_id,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "records_imported": records_imported
    }, exc_info=True)


def log_entry_skipped(issue_type: str, entry_name: str, reason: str, import_id: str = None):
    """Log a recoverable per-entry skip."""
    logger.warning("Archive entry skipped", extra={
        "event_type": "entry_skipped",
        "issue_type": issue_type,
        "entry_name": entry_name,
        "reason": reason,
        "import_id": import_id
    })


def log_batch_committed(import_id: str, batch_size: int, records_imported: int):
    """Log a committed batch."""
    logger.info("Batch committed", extra={
        "event_type": "batch_committed",
        "import_id": import_id,
        "batch_size": batch_size,
        "records_imported": records_imported
    })


def log_database_error(error: Exception, query_context: str = None):
    """Log database error with context."""
    logger.error("Database error", extra={
        "event_type": "database_error",
        "error_type": type(error).__name__,
        "error_message": str(error),
        "query_context": query_context
    }, exc_info=True)
