# logging_config.py

import logging
import structlog
import sys
from typing import Any, Dict, List
from flask import has_request_context, request, g


def add_request_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add Flask request context to log entries"""
    if has_request_context():
        event_dict["request_id"] = getattr(g, 'request_id', None)
        event_dict["remote_addr"] = request.remote_addr
        event_dict["method"] = request.method
        event_dict["path"] = request.path
    return event_dict


def setup_logging(app_name: str = "syndic-manager", log_level: str = "INFO") -> None:
    """
    Configure structured logging

    Args:
        app_name: Application name for log identification
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_request_context,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    # Standard logging for third-party libraries
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    logging.getLogger(app_name).setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.WARNING)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """
    Get a structured logger instance

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog instance
    """
    return structlog.get_logger(name or __name__)


class ImportLogger:
    """Dedicated logger for resident import runs"""

    def __init__(self):
        self.logger = get_logger("resident_import")

    def log_import_started(self, filename: str, total_rows: int, import_id: int = None):
        self.logger.info(
            "Resident import started",
            filename=filename,
            total_rows=total_rows,
            import_id=import_id,
            event_type="import_started"
        )

    def log_import_finished(self, filename: str, successful: int, failed: int,
                            duration_ms: float, import_id: int = None):
        self.logger.info(
            "Resident import finished",
            filename=filename,
            successful=successful,
            failed=failed,
            duration_ms=duration_ms,
            import_id=import_id,
            event_type="import_finished"
        )

    def log_conflict_check_timeout(self, timeout: float, resolved: int, pending: int):
        self.logger.warning(
            "Conflict check timed out",
            timeout_seconds=timeout,
            resolved=resolved,
            pending=pending,
            event_type="conflict_check_timeout"
        )

    def log_apartments_created(self, block_name: str, numbers: List[str]):
        self.logger.info(
            "Missing apartments created",
            block_name=block_name,
            count=len(numbers),
            numbers=numbers,
            event_type="apartments_created"
        )


# Global logger instance
import_logger = ImportLogger()
