"""
Unit tests for configuration management.
"""

import datetime as dt
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from timekeeper.config.settings import (
    DEFAULT_DATABASE_URL,
    TimekeeperConfig,
    get_config,
    reload_config,
)


class TestTimekeeperConfig:
    """Test cases for TimekeeperConfig."""

    def test_config_with_valid_env_vars(self, test_config):
        """Test configuration loads correctly with valid environment variables."""
        assert test_config.environment == "testing"
        assert test_config.debug is True
        assert test_config.log_level == "DEBUG"
        assert test_config.attendance_api_url == "https://attendance.test"
        assert test_config.attendance_api_key == "test-api-key"
        assert test_config.database_url.startswith("sqlite:///")

    def test_default_values(self, monkeypatch):
        """Test defaults when nothing is configured."""
        for key in ("DATABASE_URL", "ENVIRONMENT", "DEBUG", "LOG_LEVEL", "ATTENDANCE_API_URL"):
            monkeypatch.delenv(key, raising=False)

        config = TimekeeperConfig(_env_file=None)

        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.environment == "development"
        assert config.default_max_daily_hours == 16.0
        assert config.max_entry_hours == 12.0
        assert config.min_break_minutes == 30
        assert config.latest_start_time == dt.time(23, 0)
        assert config.job_poll_interval == 2.0
        assert config.job_poll_max_attempts == 120
        assert config.job_workers == 2
        assert config.max_retries == 3
        assert config.retry_delay == 1.0
        assert config.attendance_api_url is None

    def test_google_service_account_info(self, test_config):
        """Test Google service account info generation."""
        info = test_config.get_google_service_account_info()

        assert info["type"] == "service_account"
        assert info["project_id"] == "test-project"
        assert info["client_email"] == "test@test.com"
        assert info["token_uri"] == "https://oauth2.googleapis.com/token"
        assert test_config.has_google_credentials is True

    def test_google_scopes_are_read_only(self, test_config):
        """Test the sheet export is only ever read."""
        assert test_config.google_scopes == [
            "https://www.googleapis.com/auth/spreadsheets.readonly"
        ]

    @pytest.mark.parametrize(
        "invalid_key",
        [
            "not-a-private-key",
            "BEGIN PRIVATE KEY",
            "",
            "-----BEGIN PUBLIC KEY-----\ntest\n-----END PUBLIC KEY-----\n",
        ],
    )
    def test_invalid_private_key_validation(self, mock_env, invalid_key):
        """Test private key validation with invalid formats."""
        with patch.dict(os.environ, {"GOOGLE_PRIVATE_KEY": invalid_key}):
            with pytest.raises(ValidationError) as exc_info:
                TimekeeperConfig(_env_file=None)

        assert "Invalid private key format" in str(exc_info.value)

    def test_log_level_is_normalized(self, mock_env):
        """Test lowercase log levels are accepted and uppercased."""
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            config = TimekeeperConfig(_env_file=None)

        assert config.log_level == "WARNING"

    def test_invalid_log_level(self, mock_env):
        """Test unknown log levels are rejected."""
        with patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}):
            with pytest.raises(ValidationError, match="Log level must be one of"):
                TimekeeperConfig(_env_file=None)

    def test_invalid_log_format(self, mock_env):
        """Test unknown log formats are rejected."""
        with patch.dict(os.environ, {"LOG_FORMAT": "xml"}):
            with pytest.raises(ValidationError, match="Log format must be one of"):
                TimekeeperConfig(_env_file=None)

    def test_invalid_environment(self, mock_env):
        """Test unknown environments are rejected."""
        with patch.dict(os.environ, {"ENVIRONMENT": "staging"}):
            with pytest.raises(ValidationError, match="Environment must be one of"):
                TimekeeperConfig(_env_file=None)

    def test_legacy_postgres_scheme_rewritten(self, mock_env):
        """Test postgres:// URLs are rewritten for SQLAlchemy."""
        with patch.dict(os.environ, {"DATABASE_URL": "postgres://u:p@db/timekeeper"}):
            config = TimekeeperConfig(_env_file=None)

        assert config.database_url == "postgresql://u:p@db/timekeeper"

    def test_production_refuses_sqlite_fallback(self, mock_env, monkeypatch):
        """Test production without DATABASE_URL fails fast."""
        monkeypatch.delenv("DATABASE_URL")
        monkeypatch.setenv("ENVIRONMENT", "production")

        with pytest.raises(ValidationError, match="refusing to start with SQLite"):
            TimekeeperConfig(_env_file=None)

    def test_production_with_database_url(self, mock_env, monkeypatch):
        """Test production starts when a database is configured."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/timekeeper")

        config = TimekeeperConfig(_env_file=None)

        assert config.environment == "production"

    def test_rule_overrides_from_env(self, mock_env, monkeypatch):
        """Test entry rule settings are read from the environment."""
        monkeypatch.setenv("LATEST_START_TIME", "22:30")
        monkeypatch.setenv("MAX_ENTRY_HOURS", "10")
        monkeypatch.setenv("DEFAULT_MAX_DAILY_HOURS", "8")

        config = TimekeeperConfig(_env_file=None)

        assert config.latest_start_time == dt.time(22, 30)
        assert config.max_entry_hours == 10.0
        assert config.default_max_daily_hours == 8.0

    @pytest.mark.parametrize("field", ["JOB_POLL_INTERVAL", "MAX_ENTRY_HOURS"])
    def test_non_positive_values_rejected(self, mock_env, monkeypatch, field):
        """Test durations and caps must be positive."""
        monkeypatch.setenv(field, "0")

        with pytest.raises(ValidationError, match="Value must be positive"):
            TimekeeperConfig(_env_file=None)


class TestConfigAccessors:
    """Test cases for the global configuration accessors."""

    def test_get_config_is_cached(self, mock_env):
        """Test get_config returns the same instance until reloaded."""
        first = get_config()

        assert get_config() is first

    def test_reload_config_replaces_instance(self, mock_env, monkeypatch):
        """Test reload_config picks up changed environment variables."""
        first = get_config()
        monkeypatch.setenv("MAX_RETRIES", "7")

        reloaded = reload_config()

        assert reloaded is not first
        assert reloaded.max_retries == 7
        assert get_config() is reloaded
