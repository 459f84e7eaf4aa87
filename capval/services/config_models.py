"""
Pydantic models for capval configuration.

Uses pydantic-settings for environment variable validation and type coercion.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "ValidationMode",
    "CapvalSettings",
]

ValidationMode = Literal["full", "partial"]


class CapvalSettings(BaseSettings):
    """
    Settings for validation runs.

    Usage:
        settings = CapvalSettings()
        print(settings.output_dir)

    Every field can be set through a CAPVAL_-prefixed environment variable
    or the .env file, e.g. CAPVAL_AMPERSAND_PATH=/opt/ampersand/ampersand.
    """

    model_config = SettingsConfigDict(env_prefix="CAPVAL_", env_file=".env", extra="ignore")

    # Output files
    output_dir: Path = Path("output")
    model_file: str = Field(default="model.adl", min_length=1)
    rules_file: str = Field(default="rules.adl", min_length=1)
    standalone_file: str = Field(default="standalone.adl", min_length=1)
    standalone_include: str = Field(default="model.archimate", min_length=1)

    # Checker
    ampersand_path: Path = Path("ampersand/ampersand")

    # Logging
    log_level: str = "INFO"
    logs_dir: Path = Path("output/logs")
    run_logs: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a standard logging level name."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in valid:
            raise ValueError(f"log_level must be one of {sorted(valid)}, got {v!r}")
        return level

    @field_validator("model_file", "rules_file", "standalone_file")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Output files live directly in the output directory."""
        if Path(v).name != v:
            raise ValueError(f"Expected a bare file name, got {v!r}")
        return v
