"""
Common utilities for the geocells toolkit.

This package provides shared configuration, logging, and error types
used across all geocells components.
"""

from .config import config, AppConfig, load_config
from .logging import (
    logger,
    get_logger,
    setup_logging,
    configure_logging,
    TimedLogger,
    log_cell_operation,
)
from .exceptions import (
    GeoCellsError,
    InvalidLevel,
    NoParent,
    LevelMismatch,
    DegeneratePolygon,
    EmptyGeometry,
)

__all__ = [
    "config",
    "AppConfig",
    "load_config",
    "logger",
    "get_logger",
    "setup_logging",
    "configure_logging",
    "TimedLogger",
    "log_cell_operation",
    "GeoCellsError",
    "InvalidLevel",
    "NoParent",
    "LevelMismatch",
    "DegeneratePolygon",
    "EmptyGeometry",
]
