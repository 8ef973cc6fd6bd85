"""Unit tests for the validate-entry command."""

import datetime as dt

import pytest

from timekeeper.cli import cli
from timekeeper.models import TimesheetEntry

MONDAY = dt.date(2024, 1, 15)


@pytest.fixture
def timesheet_id(cli_store):
    employee = cli_store.add_employee("Ada Lovelace", max_daily_hours=8)
    with cli_store.transaction() as session:
        timesheet = cli_store.create_timesheet_for_week(session, employee.id, MONDAY)
        entry = TimesheetEntry(
            timesheet_id=timesheet.id,
            date=MONDAY,
            start_time=dt.time(9, 0),
            end_time=dt.time(12, 0),
            company="Acme",
        )
        entry.recalculate_hours()
        session.add(entry)
    return timesheet.id


def _args(timesheet_id, *extra, date="2024-01-15"):
    return ["validate-entry", "--timesheet-id", str(timesheet_id), "--date", date, *extra]


class TestValidateEntryCommand:
    """Test suite for validate-entry command."""

    def test_valid_entry(self, runner, timesheet_id):
        """Test a clean entry exits with 0."""
        result = runner.invoke(
            cli, _args(timesheet_id, "--start", "13:00", "--end", "16:00", "--company", "Acme")
        )

        assert result.exit_code == 0, result.output
        assert "Entry is valid" in result.output

    def test_overlap_exits_with_3(self, runner, timesheet_id):
        """Test rule failures are listed and exit with 3."""
        result = runner.invoke(
            cli, _args(timesheet_id, "--start", "11:30", "--end", "13:00", "--company", "Acme")
        )

        assert result.exit_code == 3
        assert "11:30-13:00" in result.output
        assert "Entry failed validation with" in result.output

    def test_warnings_do_not_fail(self, runner, timesheet_id):
        """Test a weekend entry is valid with a warning."""
        result = runner.invoke(
            cli,
            _args(
                timesheet_id,
                "--start", "09:00", "--end", "10:00", "--company", "Acme",
                date="2024-01-20",
            ),
        )

        assert result.exit_code == 0, result.output
        assert "Entry is valid with 1 warning(s)" in result.output

    def test_excluded_entry_ignored(self, runner, timesheet_id):
        """Test the entry being edited does not overlap with itself."""
        result = runner.invoke(
            cli,
            _args(
                timesheet_id,
                "--start", "09:00", "--end", "12:30", "--company", "Acme",
                "--exclude-entry-id", "1",
            ),
        )

        assert result.exit_code == 0, result.output

    def test_bad_time_format(self, runner, timesheet_id):
        """Test malformed times are a data validation error."""
        result = runner.invoke(cli, _args(timesheet_id, "--start", "9am", "--end", "12:00"))

        assert result.exit_code == 3
        assert "HH:MM" in result.output

    def test_unknown_timesheet(self, runner, cli_store):
        """Test a missing timesheet exits with 7."""
        result = runner.invoke(cli, _args(99, "--start", "09:00", "--end", "10:00"))

        assert result.exit_code == 7
        assert "Timesheet 99 not found" in result.output
