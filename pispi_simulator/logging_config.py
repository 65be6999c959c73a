"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for the simulator. Every domain
operation logs through ``log_action`` so events carry an action name, the
resource touched and the request correlation id.
"""

import logging
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional


# Correlation id of the HTTP request being served, if any
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', None) or correlation_id_var.get(),
            "action": getattr(record, 'action', None),
            "resource": getattr(record, 'resource', None),
            "extra": getattr(record, 'extra', None)
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", log_format: str = "json",
                  log_file: Optional[str] = None,
                  logger_name: str = "pispi") -> logging.Logger:
    """
    Setup structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured output, "text" for human-readable lines
        log_file: Optional file path; stdout/stderr stream when omitted
        logger_name: Name of the root application logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "pispi") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               correlation_id: Optional[str] = None, extra: Optional[dict] = None,
               exc_info: bool = False):
    """
    Log an action with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        action: Action being performed
        resource: Resource being acted upon
        correlation_id: Correlation ID for request tracing (defaults to the current request's)
        extra: Additional structured data
        exc_info: Attach the exception currently being handled
    """
    fields = {}
    if action:
        fields["action"] = action
    if resource:
        fields["resource"] = resource
    if correlation_id:
        fields["correlation_id"] = correlation_id
    if extra:
        fields["extra"] = extra

    logger.log(getattr(logging, level.upper()), message, extra=fields, exc_info=exc_info)
