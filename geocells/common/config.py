"""
Configuration management for the geocells toolkit.

This module provides centralized configuration loading and validation using Pydantic.
All environment variables are loaded and validated at import time.
"""

import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class GridConfig(BaseModel):
    """Grid covering configuration."""

    s2_default_level: int = Field(default=12, description="Default S2 cell level")
    h3_default_level: int = Field(default=9, description="Default H3 resolution")
    relative_tolerance: float = Field(
        default=1e-9,
        description="Tolerance for boundary tests, relative to the geometry extent",
    )
    densify_step_deg: float = Field(
        default=1.0, description="Max great-circle step when densifying cell edges"
    )
    s2_descent_margin: float = Field(
        default=1.05, description="Scale applied to S2 cells when pruning descent"
    )
    h3_descent_margin: float = Field(
        default=1.5, description="Scale applied to H3 cells when pruning descent"
    )
    max_workers: Optional[int] = Field(
        None, description="Thread fan-out across root cells (None = sequential)"
    )

    @field_validator("s2_default_level")
    @classmethod
    def validate_s2_level(cls, v):
        """S2 levels run from 0 to 30."""
        if not (0 <= v <= 30):
            raise ValueError(f"S2 level must be between 0 and 30, got {v}")
        return v

    @field_validator("h3_default_level")
    @classmethod
    def validate_h3_level(cls, v):
        """H3 resolutions run from 0 to 15."""
        if not (0 <= v <= 15):
            raise ValueError(f"H3 resolution must be between 0 and 15, got {v}")
        return v

    @field_validator("relative_tolerance")
    @classmethod
    def validate_tolerance(cls, v):
        if v < 0 or v >= 1e-3:
            raise ValueError(f"Relative tolerance must be in [0, 1e-3), got {v}")
        return v

    @field_validator("densify_step_deg")
    @classmethod
    def validate_densify_step(cls, v):
        if v <= 0:
            raise ValueError(f"Densify step must be positive, got {v}")
        return v

    @field_validator("s2_descent_margin", "h3_descent_margin")
    @classmethod
    def validate_margin(cls, v):
        """Descent margins can only grow a cell region."""
        if v < 1.0:
            raise ValueError(f"Descent margin must be >= 1.0, got {v}")
        return v


class SamplingConfig(BaseModel):
    """Random sampling configuration."""

    seed: int = Field(default=0, description="Default random seed")
    num_samples: int = Field(default=1, description="Default number of samples")

    @field_validator("num_samples")
    @classmethod
    def validate_num_samples(cls, v):
        if v < 0:
            raise ValueError(f"Number of samples must be non-negative, got {v}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="WARNING", description="Logging level")
    format_str: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )
    enable_structured_logging: bool = Field(
        default=False, description="Enable structured JSON logging"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Only the standard logging level names are accepted."""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown logging level: {v}")
        return v.upper()


class AppConfig(BaseModel):
    """Main application configuration."""

    grid: GridConfig
    sampling: SamplingConfig
    logging: LoggingConfig

    # Environment
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


def load_config() -> AppConfig:
    """Load and validate configuration from environment variables."""

    config_dict = {
        "grid": {
            "s2_default_level": int(os.getenv("S2_DEFAULT_LEVEL", "12")),
            "h3_default_level": int(os.getenv("H3_DEFAULT_LEVEL", "9")),
            "relative_tolerance": float(
                os.getenv("COVER_RELATIVE_TOLERANCE", "1e-9")
            ),
            "densify_step_deg": float(os.getenv("DENSIFY_STEP_DEG", "1.0")),
            "s2_descent_margin": float(os.getenv("S2_DESCENT_MARGIN", "1.05")),
            "h3_descent_margin": float(os.getenv("H3_DESCENT_MARGIN", "1.5")),
            "max_workers": _optional_int("COVER_MAX_WORKERS"),
        },
        "sampling": {
            "seed": int(os.getenv("RANDOM_SEED", "0")),
            "num_samples": int(os.getenv("NUM_SAMPLES", "1")),
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL", "WARNING"),
            "format_str": os.getenv(
                "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            "enable_structured_logging": os.getenv(
                "ENABLE_STRUCTURED_LOGGING", "false"
            ).lower()
            == "true",
        },
        "environment": os.getenv("ENVIRONMENT", "development"),
        "debug": os.getenv("DEBUG", "false").lower() == "true",
    }

    return AppConfig(**config_dict)


# Global configuration instance
config = load_config()
