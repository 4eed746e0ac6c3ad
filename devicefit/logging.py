"""
Structured Logging for devicefit

This module configures structlog on top of the standard library and provides
cycle correlation IDs so every log line emitted while one workload is being
scheduled can be grouped together.
"""

import json
import logging
import sys
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from functools import wraps
from typing import Any, Dict, Optional

import structlog

from .config import get_config

# Thread-local storage for correlation context
_correlation_context = threading.local()


class CorrelationContext:
    """Manages the scheduling cycle ID attached to log records."""

    @staticmethod
    def get_correlation_id() -> str:
        """Get the current correlation ID, creating one if needed."""
        if not hasattr(_correlation_context, "correlation_id"):
            _correlation_context.correlation_id = str(uuid.uuid4())[:8]
        return _correlation_context.correlation_id

    @staticmethod
    def set_correlation_id(correlation_id: str):
        """Set the correlation ID for the current thread."""
        _correlation_context.correlation_id = correlation_id

    @staticmethod
    def clear_correlation_id():
        """Clear the correlation ID for the current thread."""
        if hasattr(_correlation_context, "correlation_id"):
            delattr(_correlation_context, "correlation_id")

    @staticmethod
    def get_trace_context() -> Dict[str, Any]:
        """Get full tracing context."""
        return {
            "correlation_id": CorrelationContext.get_correlation_id(),
            "thread_id": threading.get_ident(),
        }


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None):
    """Bind a correlation ID for the duration of a block, restoring the previous one."""
    old_correlation_id = getattr(_correlation_context, "correlation_id", None)
    CorrelationContext.set_correlation_id(correlation_id or str(uuid.uuid4())[:8])
    try:
        yield CorrelationContext.get_correlation_id()
    finally:
        if old_correlation_id:
            CorrelationContext.set_correlation_id(old_correlation_id)
        else:
            CorrelationContext.clear_correlation_id()


def trace_operation(operation_name: str):
    """Decorator to log start, completion and failure of a function with its duration."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(f"devicefit.trace.{func.__module__}")
            trace_context = CorrelationContext.get_trace_context()
            start_time = time.time()

            logger.debug(
                f"Starting operation: {operation_name}",
                operation=operation_name,
                function=func.__name__,
                **trace_context,
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed operation: {operation_name}",
                    operation=operation_name,
                    function=func.__name__,
                    duration_seconds=time.time() - start_time,
                    success=False,
                    error=str(e),
                    **trace_context,
                )
                raise

            logger.debug(
                f"Completed operation: {operation_name}",
                operation=operation_name,
                function=func.__name__,
                duration_seconds=time.time() - start_time,
                success=True,
                **trace_context,
            )
            return result

        return wrapper

    return decorator


class CorrelationFormatter(logging.Formatter):
    """Formatter that stamps records with the current cycle correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        trace_context = CorrelationContext.get_trace_context()
        record.correlation_id = trace_context["correlation_id"]
        record.thread_id = trace_context["thread_id"]
        return super().format(record)


class JSONFormatter(CorrelationFormatter):
    """JSON formatter for structured logging with correlation IDs."""

    def format(self, record: logging.LogRecord) -> str:
        super().format(record)
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "correlation_id": getattr(record, "correlation_id", "unknown"),
            "thread_id": getattr(record, "thread_id", 0),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class ConsoleFormatter(CorrelationFormatter):
    """Console formatter with level colors and correlation IDs."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
        "GRAY": "\033[90m",
    }

    def format(self, record: logging.LogRecord) -> str:
        super().format(record)
        level_color = self.COLORS.get(record.levelname, "")
        reset_color = self.COLORS["RESET"]
        gray_color = self.COLORS["GRAY"]

        timestamp = datetime.utcnow().strftime("%H:%M:%S.%f")[:-3]
        correlation_id = getattr(record, "correlation_id", "unknown")

        message = record.getMessage()
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return (
            f"{gray_color}{timestamp}{reset_color} "
            f"{gray_color}[{correlation_id}]{reset_color} "
            f"{level_color}{record.levelname:8}{reset_color} "
            f"{record.name:28} "
            f"{message}"
        )


def setup_logging():
    """Setup structured logging for devicefit."""
    config = get_config()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (
                structlog.processors.JSONRenderer()
                if config.logging.log_format == "json"
                else structlog.dev.ConsoleRenderer(colors=False)
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    package_logger = logging.getLogger("devicefit")
    package_logger.setLevel(getattr(logging, config.logging.log_level))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    if config.logging.log_format == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())

    package_logger.addHandler(console_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Initialize logging on module import
setup_logging()
