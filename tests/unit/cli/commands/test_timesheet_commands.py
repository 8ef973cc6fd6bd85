"""Unit tests for the timesheet transition commands."""

import datetime as dt

import pytest

from timekeeper.cli import cli
from timekeeper.models import Timesheet, TimesheetEntry, TimesheetStatus

MONDAY = dt.date(2024, 1, 15)


@pytest.fixture
def seeded(cli_store):
    """An employee with one OPEN timesheet holding one entry."""
    employee = cli_store.add_employee("Ada Lovelace")
    with cli_store.transaction() as session:
        timesheet = cli_store.create_timesheet_for_week(session, employee.id, MONDAY)
        session.add(
            TimesheetEntry(
                timesheet_id=timesheet.id,
                date=MONDAY,
                start_time=dt.time(9, 0),
                end_time=dt.time(12, 0),
                hours=3.0,
            )
        )
    return employee.id, timesheet.id


def _status(store, timesheet_id):
    with store.session() as session:
        return session.get(Timesheet, timesheet_id).status


class TestTimesheetCommands:
    """Test suite for timesheet subcommands."""

    def test_full_lifecycle(self, runner, cli_store, seeded):
        """Test submit, approve, lock and unlock from the command line."""
        employee_id, timesheet_id = seeded
        steps = [
            (["submit", str(timesheet_id), "--as-employee", str(employee_id)], "submitted"),
            (["approve", str(timesheet_id)], "approved"),
            (["lock", str(timesheet_id)], "locked"),
            (["unlock", str(timesheet_id)], "unlocked"),
        ]

        for args, past_tense in steps:
            result = runner.invoke(cli, ["timesheet", *args])
            assert result.exit_code == 0, result.output
            assert f"Timesheet {timesheet_id} {past_tense}" in result.output

        assert _status(cli_store, timesheet_id) == TimesheetStatus.OPEN

    def test_invalid_transition_exits_with_4(self, runner, seeded):
        """Test approving an OPEN timesheet is refused."""
        _, timesheet_id = seeded

        result = runner.invoke(cli, ["timesheet", "approve", str(timesheet_id)])

        assert result.exit_code == 4
        assert "Invalid transition" in result.output

    def test_employee_cannot_approve(self, runner, seeded):
        """Test permission errors exit with 6."""
        employee_id, timesheet_id = seeded
        runner.invoke(
            cli, ["timesheet", "submit", str(timesheet_id), "--as-employee", str(employee_id)]
        )

        result = runner.invoke(
            cli, ["timesheet", "approve", str(timesheet_id), "--as-employee", str(employee_id)]
        )

        assert result.exit_code == 6
        assert "Permission Denied" in result.output

    def test_missing_timesheet_exits_with_7(self, runner, cli_store):
        """Test unknown ids exit with 7."""
        result = runner.invoke(cli, ["timesheet", "lock", "42"])

        assert result.exit_code == 7

    def test_delete_with_confirmation(self, runner, cli_store, seeded):
        """Test delete asks first and removes the entries."""
        _, timesheet_id = seeded

        result = runner.invoke(cli, ["timesheet", "delete", str(timesheet_id)], input="y\n")

        assert result.exit_code == 0, result.output
        assert f"Timesheet {timesheet_id} deleted (1 entries removed)" in result.output
        with cli_store.session() as session:
            assert session.get(Timesheet, timesheet_id) is None

    def test_delete_declined(self, runner, cli_store, seeded):
        """Test answering no cancels with exit code 130."""
        _, timesheet_id = seeded

        result = runner.invoke(cli, ["timesheet", "delete", str(timesheet_id)], input="n\n")

        assert result.exit_code == 130
        assert "Operation cancelled" in result.output
        assert _status(cli_store, timesheet_id) == TimesheetStatus.OPEN
