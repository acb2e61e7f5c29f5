from __future__ import annotations

import json
import logging

import pytest

from geocells.common.config import LoggingConfig
from geocells.common.logging import (
    StructuredFormatter,
    TimedLogger,
    get_logger,
    log_cell_operation,
    configure_logging,
)


def test_get_logger_is_namespaced() -> None:
    assert get_logger("cover.coverer").name == "geocells.cover.coverer"


def test_log_cell_operation_entry() -> None:
    entry = log_cell_operation("compact", "h3", cells_in=49, cells_out=1, merges=8)

    assert entry == {
        "event": "cell_operation",
        "operation": "compact",
        "grid": "h3",
        "cells_in": 49,
        "cells_out": 1,
        "merges": 8,
    }


def test_log_cell_operation_keeps_duration() -> None:
    entry = log_cell_operation("cover", "s2", 6, 10, duration_ms=1.5)
    assert entry["duration_ms"] == 1.5


def test_structured_formatter_adds_service_fields() -> None:
    formatter = StructuredFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    record = logging.LogRecord(
        "geocells.test", logging.INFO, __file__, 1, "hello", None, None
    )

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "hello"
    assert payload["service"] == "geocells"
    assert payload["level"] == "INFO"
    assert "timestamp" in payload


def test_timed_logger_reports_completion(caplog) -> None:
    target = logging.getLogger("tests.timed")
    with caplog.at_level(logging.DEBUG, logger="tests.timed"):
        with TimedLogger(target, "demo", cell_level=3) as timer:
            pass

    assert timer.elapsed_ms >= 0
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Starting demo", "Completed demo"]
    assert caplog.records[-1].success is True
    assert caplog.records[-1].cell_level == 3


def test_timed_logger_reports_failure(caplog) -> None:
    target = logging.getLogger("tests.timed")
    with caplog.at_level(logging.DEBUG, logger="tests.timed"):
        with pytest.raises(ValueError):
            with TimedLogger(target, "demo"):
                raise ValueError("boom")

    failed = caplog.records[-1]
    assert failed.levelno == logging.ERROR
    assert failed.error_type == "ValueError"
    assert failed.success is False


def test_structured_level_survives_cell_level_context() -> None:
    formatter = StructuredFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s", environment="test"
    )
    record = logging.LogRecord(
        "geocells.test", logging.WARNING, __file__, 1, "covered", None, None
    )
    record.cell_level = 12

    payload = json.loads(formatter.format(record))

    assert payload["level"] == "WARNING"
    assert payload["cell_level"] == 12
    assert payload["environment"] == "test"


def test_configure_logging_updates_geocells_loggers() -> None:
    child = get_logger("tests.level")
    try:
        configure_logging(LoggingConfig(level="WARNING"), level="DEBUG")
        assert child.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in child.handlers)
    finally:
        configure_logging(LoggingConfig())
    assert child.level == logging.WARNING


def test_configure_logging_switches_to_structured(capsys) -> None:
    child = get_logger("tests.structured")
    try:
        configure_logging(
            LoggingConfig(level="INFO", enable_structured_logging=True),
            environment="staging",
        )
        child.info("hello")
    finally:
        configure_logging(LoggingConfig())

    payload = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["environment"] == "staging"


def test_configure_logging_applies_format_str(capsys) -> None:
    child = get_logger("tests.plain")
    try:
        configure_logging(
            LoggingConfig(level="INFO", format_str="%(levelname)s|%(message)s")
        )
        child.info("plain")
    finally:
        configure_logging(LoggingConfig())

    assert capsys.readouterr().err.strip().splitlines()[-1] == "INFO|plain"
