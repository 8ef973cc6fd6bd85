"""Tests for centralized logging configuration."""

import json
import logging
import os
from unittest.mock import patch

import pytest

from timekeeper.config.logging_config import (
    ContextFormatter,
    JSONFormatter,
    LoggingConfig,
    configure_logging,
    reset_logging,
)
from timekeeper.config.settings import TimekeeperConfig
from timekeeper.utils.logging_utils import LogContext


def _record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("timekeeper.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:
    """Test LoggingConfig class."""

    def test_default_configuration(self):
        """Test default logging configuration."""
        config = LoggingConfig()

        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert config.log_file is None
        assert config.enable_console is True
        assert config.enable_file is False
        assert config.max_file_size == 10 * 1024 * 1024
        assert config.backup_count == 5

    def test_environment_variable_override(self):
        """Test configuration from environment variables."""
        with patch.dict(
            os.environ,
            {"LOG_LEVEL": "debug", "LOG_FORMAT": "json", "LOG_FILE": "/tmp/timekeeper.log"},
        ):
            config = LoggingConfig.from_env()

        assert config.log_level == "DEBUG"
        assert config.log_format == "json"
        assert config.log_file == "/tmp/timekeeper.log"
        assert config.enable_file is True

    def test_from_settings_debug_forces_debug_level(self, test_config):
        """Test DEBUG=true in the settings turns on debug logging."""
        config = LoggingConfig.from_settings(test_config)

        assert config.log_level == "DEBUG"
        assert config.enable_file is False

    def test_from_settings_uses_level_and_format(self, mock_env, monkeypatch):
        """Test the settings' level and format are carried over."""
        monkeypatch.setenv("DEBUG", "false")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("LOG_FORMAT", "json")

        config = LoggingConfig.from_settings(TimekeeperConfig(_env_file=None), log_file="x.log")

        assert config.log_level == "ERROR"
        assert config.log_format == "json"
        assert config.enable_file is True

    def test_invalid_log_level(self):
        """Test invalid log level raises error."""
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(log_level="INVALID")

    def test_invalid_log_format(self):
        """Test invalid log format raises error."""
        with pytest.raises(ValueError, match="Invalid log format"):
            LoggingConfig(log_format="xml")

    def test_file_output_requires_path(self):
        """Test enabling file output without a path is rejected."""
        with pytest.raises(ValueError, match="log_file must be specified"):
            LoggingConfig(enable_file=True)


class TestFormatters:
    """Test the JSON and context formatters."""

    def test_json_formatter_outputs_single_json_line(self):
        """Test JSON output carries the standard fields."""
        payload = json.loads(JSONFormatter().format(_record("Imported %d rows")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "timekeeper.test"
        assert payload["message"] == "Imported %d rows"
        assert "timestamp" in payload

    def test_json_formatter_includes_context_fields(self):
        """Test fields set via extra or LogContext appear in the JSON."""
        payload = json.loads(JSONFormatter().format(_record(job_id=7, job_kind="external-sync")))

        assert payload["job_id"] == 7
        assert payload["job_kind"] == "external-sync"

    def test_context_formatter_appends_fields(self):
        """Test plain-text lines end with sorted key=value pairs."""
        formatter = ContextFormatter(fmt="%(message)s")

        line = formatter.format(_record("Job finished", job_kind="cleanup-duplicates", job_id=3))

        assert line == "Job finished [job_id=3 job_kind=cleanup-duplicates]"

    def test_context_formatter_without_fields(self):
        """Test lines without context are left untouched."""
        assert ContextFormatter(fmt="%(message)s").format(_record("plain")) == "plain"


class TestConfigureLogging:
    """Test configure_logging and reset_logging."""

    def test_configure_replaces_handlers(self):
        """Test repeated configuration does not duplicate handlers."""
        configure_logging(LoggingConfig(log_level="WARNING"))
        configure_logging(LoggingConfig(log_level="WARNING"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING

    def test_json_format_selected(self):
        """Test the JSON formatter is installed for json format."""
        configure_logging(LoggingConfig(log_format="json"))

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_file_handler_writes_context(self, tmp_path):
        """Test records written to the log file carry LogContext fields."""
        log_file = tmp_path / "logs" / "timekeeper.log"
        configure_logging(
            LoggingConfig(
                log_level="INFO",
                log_file=str(log_file),
                enable_console=False,
                enable_file=True,
            )
        )

        with LogContext(job_id=42):
            logging.getLogger("timekeeper.jobs").info("Progress line")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "Progress line" in content
        assert "job_id=42" in content

    def test_sqlalchemy_engine_logger_quieted(self):
        """Test SQLAlchemy's engine logger only surfaces warnings."""
        configure_logging(LoggingConfig(log_level="DEBUG"))

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_reset_logging(self):
        """Test reset removes handlers and restores WARNING."""
        configure_logging(LoggingConfig(log_level="DEBUG"))

        reset_logging()

        root = logging.getLogger()
        assert root.handlers == []
        assert root.level == logging.WARNING
