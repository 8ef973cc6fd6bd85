"""Fixtures for CLI command tests."""

import pytest
from click.testing import CliRunner

import timekeeper.config.settings
from timekeeper.config import get_config
from timekeeper.db.store import TimesheetStore


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(mock_env, monkeypatch):
    """Environment for commands: per-test database, fast polling, quiet logs."""
    monkeypatch.setenv("JOB_POLL_INTERVAL", "0.05")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    timekeeper.config.settings._config = None
    return get_config()


@pytest.fixture
def cli_store(cli_env):
    """Store on the database the CLI commands will open."""
    store = TimesheetStore.from_url(cli_env.database_url)
    yield store
    store.engine.dispose()
