"""Tests for config_models module (pydantic-settings integration)."""

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from capval.services.config_models import CapvalSettings

# BaseSettings._env_file is not in the type signature
_CapvalSettings: Any = CapvalSettings


class TestCapvalSettings:
    """Tests for CapvalSettings."""

    def test_default_values(self):
        """Should have sensible defaults."""
        settings = _CapvalSettings(_env_file=None)
        assert settings.output_dir == Path("output")
        assert settings.model_file == "model.adl"
        assert settings.rules_file == "rules.adl"
        assert settings.standalone_file == "standalone.adl"
        assert settings.standalone_include == "model.archimate"
        assert settings.ampersand_path == Path("ampersand/ampersand")
        assert settings.log_level == "INFO"
        assert settings.run_logs is True

    def test_loads_from_env(self, monkeypatch):
        """Should load CAPVAL_-prefixed values from the environment."""
        monkeypatch.setenv("CAPVAL_OUTPUT_DIR", "/tmp/capval-out")
        monkeypatch.setenv("CAPVAL_AMPERSAND_PATH", "/opt/ampersand/ampersand")
        monkeypatch.setenv("CAPVAL_RUN_LOGS", "false")
        settings = _CapvalSettings(_env_file=None)

        assert settings.output_dir == Path("/tmp/capval-out")
        assert settings.ampersand_path == Path("/opt/ampersand/ampersand")
        assert settings.run_logs is False

    def test_log_level_normalized(self, monkeypatch):
        """Log level should be upper-cased."""
        monkeypatch.setenv("CAPVAL_LOG_LEVEL", "debug")
        assert _CapvalSettings(_env_file=None).log_level == "DEBUG"

    def test_log_level_validation(self, monkeypatch):
        """Unknown log levels should be rejected."""
        monkeypatch.setenv("CAPVAL_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            _CapvalSettings(_env_file=None)

    def test_file_names_must_be_bare(self):
        """Output file names cannot contain directories."""
        with pytest.raises(ValidationError):
            _CapvalSettings(_env_file=None, rules_file="sub/rules.adl")

    def test_file_names_not_empty(self):
        """Output file names cannot be empty."""
        with pytest.raises(ValidationError):
            _CapvalSettings(_env_file=None, model_file="")
