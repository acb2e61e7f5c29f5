"""
Logging utilities for the geocells toolkit.

Provides structured logging with JSON formatting for machine consumption
and human-readable formatting for interactive use. Log records go to stderr
so that command output on stdout stays clean.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pythonjsonlogger.json import JsonFormatter

from .config import LoggingConfig, config


class StructuredFormatter(JsonFormatter):
    """Custom JSON formatter that adds common fields to all log records."""

    def __init__(self, *args, environment: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment or config.environment

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add common fields to log records."""
        super().add_fields(log_record, record, message_dict)

        # Add timestamp in ISO format
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        # Add environment and service info
        log_record["environment"] = self.environment
        log_record["service"] = "geocells"

        # Add level name if missing or empty
        if not log_record.get("level"):
            log_record["level"] = record.levelname


class StderrHandler(logging.StreamHandler):
    """StreamHandler that always writes to the current sys.stderr."""

    @property
    def stream(self):
        return sys.stderr

    @stream.setter
    def stream(self, value):
        pass


def setup_logging(
    logger_name: Optional[str] = None,
    level: Optional[str] = None,
    enable_structured: Optional[bool] = None,
    format_str: Optional[str] = None,
    environment: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging with configuration from environment.

    Args:
        logger_name: Name of the logger (defaults to root)
        level: Log level override
        enable_structured: Structured logging override
        format_str: Plain text format override
        environment: Environment name override for structured records

    Returns:
        Configured logger instance
    """

    # Use configuration values or provided overrides
    log_level = level or config.logging.level
    structured = (
        enable_structured
        if enable_structured is not None
        else config.logging.enable_structured_logging
    )

    # Get logger
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Create console handler
    handler = StderrHandler()
    handler.setLevel(getattr(logging, log_level.upper()))

    # Set up formatter
    if structured:
        formatter = StructuredFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s", environment=environment
        )
    else:
        formatter = logging.Formatter(format_str or config.logging.format_str)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent double logging
    logger.propagate = False

    return logger


def _geocells_logger_names() -> List[str]:
    return ["geocells"] + [
        name
        for name in logging.root.manager.loggerDict
        if name.startswith("geocells.")
    ]


def configure_logging(
    settings: LoggingConfig,
    level: Optional[str] = None,
    environment: Optional[str] = None,
) -> None:
    """
    Re-apply logging settings to every geocells logger.

    Loggers are created at import time from the process environment; this
    rebuilds their handlers from settings loaded later, e.g. from a .env file.
    """
    for name in _geocells_logger_names():
        setup_logging(
            name,
            level=level or settings.level,
            enable_structured=settings.enable_structured_logging,
            format_str=settings.format_str,
            environment=environment,
        )


def log_cell_operation(
    operation: str,
    grid: str,
    cells_in: int,
    cells_out: int,
    duration_ms: Optional[float] = None,
    **kwargs,
) -> Dict[str, Any]:
    """
    Create a structured log entry for cell set operations.

    Args:
        operation: Operation name (cover, cut, compact, uncompact)
        grid: Grid system name
        cells_in: Number of input cells (or candidate cells visited)
        cells_out: Number of output cells
        duration_ms: Operation duration in milliseconds
        **kwargs: Additional context

    Returns:
        Log entry dictionary
    """
    entry = {
        "event": "cell_operation",
        "operation": operation,
        "grid": grid,
        "cells_in": cells_in,
        "cells_out": cells_out,
    }

    if duration_ms is not None:
        entry["duration_ms"] = duration_ms

    entry.update(kwargs)
    return entry


class TimedLogger:
    """Context manager for timing operations and logging results."""

    def __init__(self, logger: logging.Logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now(timezone.utc)
        self.logger.debug(
            f"Starting {self.operation}",
            extra={
                "event": "operation_start",
                "operation": self.operation,
                **self.context,
            },
        )
        return self

    @property
    def elapsed_ms(self) -> float:
        return (datetime.now(timezone.utc) - self.start_time).total_seconds() * 1000

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = self.elapsed_ms

        if exc_type is None:
            self.logger.debug(
                f"Completed {self.operation}",
                extra={
                    "event": "operation_complete",
                    "operation": self.operation,
                    "duration_ms": duration_ms,
                    "success": True,
                    **self.context,
                },
            )
        else:
            self.logger.error(
                f"Failed {self.operation}: {exc_val}",
                extra={
                    "event": "operation_failed",
                    "operation": self.operation,
                    "duration_ms": duration_ms,
                    "success": False,
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val),
                    **self.context,
                },
            )


# Global logger instance
logger = setup_logging("geocells")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module or component."""
    return setup_logging(f"geocells.{name}")
