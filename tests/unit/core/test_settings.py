"""Tests for tabedit settings."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from tabedit.core.settings import TabeditSettings, get_settings, reset_settings


class TestTabeditSettings:
    """Test settings configuration."""

    def test_default_settings(self) -> None:
        """Test default settings configuration."""
        with patch.dict(os.environ, {}, clear=True):
            settings = TabeditSettings()
        assert settings.history_capacity == 16
        assert settings.read_strict is False
        assert settings.viewer is None
        assert settings.schema_file_name == "tabedit_schema.csv"
        assert settings.preset_file.name == ".tabedit_preset.csv"
        assert settings.session_timeout == 3600

    def test_environment_variable_override(self) -> None:
        """Test that environment variables override defaults."""
        with patch.dict(
            os.environ,
            {
                "TABEDIT_HISTORY_CAPACITY": "4",
                "TABEDIT_READ_STRICT": "true",
                "TABEDIT_VIEWER": "column -t -s,",
            },
        ):
            settings = TabeditSettings()
            assert settings.history_capacity == 4
            assert settings.read_strict is True
            assert settings.viewer == "column -t -s,"

    def test_case_insensitive_env_var(self) -> None:
        """Test that environment variables are case insensitive."""
        with patch.dict(os.environ, {"tabedit_cache_dir": "/tmp/tabedit-cache"}):
            settings = TabeditSettings()
            assert settings.cache_dir == Path("/tmp/tabedit-cache")

    def test_history_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            TabeditSettings(history_capacity=0)


class TestSettingsSingleton:
    """Test the global settings instance."""

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_settings_reloads_environment(self) -> None:
        first = get_settings()
        with patch.dict(os.environ, {"TABEDIT_MAX_SESSIONS": "5"}):
            reset_settings()
            second = get_settings()
        assert second is not first
        assert second.max_sessions == 5
