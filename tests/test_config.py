from __future__ import annotations

import pytest
from pydantic import ValidationError

from geocells.common.config import GridConfig, LoggingConfig, load_config


def test_load_config_defaults(monkeypatch) -> None:
    for name in (
        "S2_DEFAULT_LEVEL",
        "H3_DEFAULT_LEVEL",
        "COVER_MAX_WORKERS",
        "RANDOM_SEED",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_config()

    assert settings.grid.s2_default_level == 12
    assert settings.grid.h3_default_level == 9
    assert settings.grid.max_workers is None
    assert settings.sampling.seed == 0
    assert settings.logging.level == "WARNING"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("S2_DEFAULT_LEVEL", "14")
    monkeypatch.setenv("COVER_MAX_WORKERS", "4")
    monkeypatch.setenv("RANDOM_SEED", "42")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ENABLE_STRUCTURED_LOGGING", "TRUE")
    monkeypatch.setenv("LOG_FORMAT", "%(levelname)s %(message)s")

    settings = load_config()

    assert settings.grid.s2_default_level == 14
    assert settings.grid.max_workers == 4
    assert settings.sampling.seed == 42
    assert settings.logging.level == "DEBUG"
    assert settings.logging.enable_structured_logging is True
    assert settings.logging.format_str == "%(levelname)s %(message)s"


def test_blank_max_workers_means_sequential(monkeypatch) -> None:
    monkeypatch.setenv("COVER_MAX_WORKERS", " ")
    assert load_config().grid.max_workers is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"s2_default_level": 31},
        {"h3_default_level": -1},
        {"relative_tolerance": -1e-9},
        {"densify_step_deg": 0.0},
        {"h3_descent_margin": 0.5},
    ],
)
def test_grid_config_rejects_out_of_range(kwargs) -> None:
    with pytest.raises(ValidationError):
        GridConfig(**kwargs)


def test_logging_config_rejects_unknown_level() -> None:
    with pytest.raises(ValidationError):
        LoggingConfig(level="chatty")


def test_invalid_environment_value_fails_loading(monkeypatch) -> None:
    monkeypatch.setenv("H3_DEFAULT_LEVEL", "16")
    with pytest.raises(ValidationError):
        load_config()
