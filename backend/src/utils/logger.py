"""
Ride Tracker Transfer - Structured Logging
Provides JSON-formatted logging for export/import events.
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
        ...     "kind": "history",
        ...     "count": 12,
        ...     "strategy": "merge"
        ... })
    """
    logger = logging.getLogger(name)

    # Prevent duplicate handlers
    if logger.hasHandlers():
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
logger = setup_logger('ride_tracker')


def log_export(kind: str, count: int, payload_chars: int):
    """Log a completed export."""
    logger.info("Data exported", extra={
        "event_type": "export",
        "kind": kind,
        "count": count,
        "payload_chars": payload_chars,
        "environment": config.environment
    })


def log_import_complete(kind: str, count: int, strategy: str, total: int):
    """Log a successful import and the resulting store size."""
    logger.info("Data imported", extra={
        "event_type": "import_complete",
        "kind": kind,
        "count": count,
        "strategy": strategy,
        "total_after_import": total
    })


def log_import_failed(reason: str, data_type: str, error: Exception = None):
    """Log a rejected import with the user-facing reason."""
    logger.warning("Import failed", extra={
        "event_type": "import_failed",
        "reason": reason,
        "data_type": data_type,
        "error_type": type(error).__name__ if error else None,
        "error_message": str(error) if error else None
    })


def log_record_dropped(kind: str, index: int, problem: str):
    """Log a single wire record skipped during decode."""
    logger.warning("Record dropped", extra={
        "event_type": "record_dropped",
        "kind": kind,
        "index": index,
        "problem": problem
    })


def log_api_request(method: str, path: str, status_code: int, duration_ms: float):
    """Log API request metrics."""
    logger.info("API request", extra={
        "event_type": "api_request",
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms
    })


def log_database_error(error: Exception, query_context: str = None):
    """Log database error with context."""
    logger.error("Database error", extra={
        "event_type": "database_error",
        "error_type": type(error).__name__,
        "error_message": str(error),
        "query_context": query_context
    }, exc_info=True)
