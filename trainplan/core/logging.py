"""
Structured logging configuration.

Provides JSON-formatted logs for better parsing and aggregation, plus
an adjustment helper so every clamp, floor and cap leaves an audit record.
"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from trainplan.core.config import settings


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


def setup_logging(stream=None):
    """
    Configure application-wide logging.

    Uses JSON format in production, text format in development.
    Records go to stdout unless another stream is given.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Create formatter
    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers
    root_logger.handlers.clear()

    # Console handler
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Quiet the YAML loader
    logging.getLogger("yaml").setLevel(logging.WARNING)

    return root_logger


def log_adjustment(
    logger: logging.Logger,
    event: str,
    before: Any,
    after: Any,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Record a clamp, floor or cap applied to a computed value.

    The before/after pair always lands in the message and in extra_fields,
    so both text and JSON output keep the audit trail.
    """
    details = " ".join(f"{k}={v}" for k, v in context.items())
    message = f"{event}: {before} -> {after}"
    if details:
        message = f"{message} ({details})"
    logger.log(
        level,
        message,
        extra={"extra_fields": {"event": event, "before": before, "after": after, **context}},
    )
