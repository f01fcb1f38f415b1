"""
Structured Logging Module for the Fuel Ledger engine

Provides JSON-formatted logging for production and a readable console format
for development.

Features:
- JSON format for log aggregation
- Correlation IDs to follow one delivery order through the engine
- Timing decorator
- structlog loggers routed through the same stdlib handlers

Usage:
    from fuel_ledger.structured_logging import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)

    logger.info("Opening journey", extra={"truck_no": "T664 ECQ", "do_number": "6449"})
"""

import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Optional

import structlog

from .settings import LoggingSettings

# Context variable for correlation ID (thread-safe)
correlation_id_var: ContextVar[Optional[str]] = ContextVar(
    "correlation_id", default=None
)

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "taskName",
    "message",
    "asctime",
}


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Output format:
    {
        "timestamp": "2025-12-04T12:00:00.000Z",
        "level": "INFO",
        "logger": "fuel_ledger.services.fuel_record_lifecycle",
        "message": "Return order applied",
        "correlation_id": "abc-123",
        "truck_no": "T664 ECQ",
        "additional_fuel": 180.0
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = correlation_id_var.get()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        log_entry["source"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = self._serialize_value(value)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": (
                    traceback.format_exception(*record.exc_info)
                    if record.exc_info[0]
                    else None
                ),
            }

        return json.dumps(log_entry, default=str, ensure_ascii=False)

    def _serialize_value(self, value: Any) -> Any:
        """Serialize value for JSON"""
        if isinstance(value, (str, int, float, bool, type(None))):
            return value
        elif isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        elif isinstance(value, dict):
            return {str(k): self._serialize_value(v) for k, v in value.items()}
        elif isinstance(value, datetime):
            return value.isoformat()
        else:
            return str(value)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for development.
    Uses colors if terminal supports it.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = correlation_id_var.get()
        prefix = f"[{correlation_id[:8]}] " if correlation_id else ""

        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        message = f"{timestamp} {color}{record.levelname:8}{reset} {prefix}{record.getMessage()}"

        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        ]
        if extras:
            message += f" | {' '.join(extras)}"

        if record.exc_info:
            message += "\n" + "".join(traceback.format_exception(*record.exc_info))

        return message


def configure_structlog() -> None:
    """Route structlog loggers through stdlib logging (and our formatters)."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(
    level: str = None,
    format_type: str = None,
    log_file: str = None,
    settings: LoggingSettings = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" for structured or "console" for human-readable
        log_file: Optional file path for logging
        settings: Fallback for the arguments left as None; defaults to
            LoggingSettings() built from the environment

    Environment variables (via LoggingSettings):
        LOG_LEVEL: Set log level
        LOG_FORMAT: Set format (json or console)
        LOG_FILE: Optional log file
    """
    if settings is None:
        settings = LoggingSettings()
    level = (level or settings.level).upper()
    format_type = (format_type or settings.format).lower()
    log_file = log_file or settings.file

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    root_logger.handlers.clear()

    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = ConsoleFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())  # Always JSON for files
        root_logger.addHandler(file_handler)

    logging.getLogger("yaml").setLevel(logging.WARNING)

    configure_structlog()


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)


def generate_correlation_id() -> str:
    """Generate a new correlation ID"""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str = None) -> str:
    """Set correlation ID for current context"""
    if correlation_id is None:
        correlation_id = generate_correlation_id()
    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> Optional[str]:
    """Get current correlation ID"""
    return correlation_id_var.get()


def log_execution(logger: logging.Logger = None, level: int = logging.DEBUG):
    """
    Decorator to log function execution with timing.

    Usage:
        @log_execution()
        def open_journey(order, loading_point):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            nonlocal logger
            if logger is None:
                logger = get_logger(func.__module__)

            start_time = time.time()
            func_name = func.__name__

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    f"Failed {func_name}",
                    extra={
                        "function": func_name,
                        "duration_ms": round(duration_ms, 2),
                        "success": False,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                raise

            duration_ms = (time.time() - start_time) * 1000
            logger.log(
                level,
                f"Completed {func_name}",
                extra={
                    "function": func_name,
                    "duration_ms": round(duration_ms, 2),
                    "success": True,
                },
            )
            return result

        return wrapper

    return decorator


__all__ = [
    "JSONFormatter",
    "ConsoleFormatter",
    "configure_structlog",
    "setup_logging",
    "get_logger",
    "generate_correlation_id",
    "set_correlation_id",
    "get_correlation_id",
    "correlation_id_var",
    "log_execution",
]
