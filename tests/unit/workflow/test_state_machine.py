"""Tests for the timesheet status lifecycle."""

import datetime as dt

import pytest

from timekeeper.exceptions import (
    EmptyTimesheetError,
    NotFoundError,
    PermissionDeniedError,
    StateTransitionError,
)
from timekeeper.models import Actor, TimesheetEntry, TimesheetStatus
from timekeeper.workflow.state_machine import (
    APPROVE,
    LOCK,
    SUBMIT,
    UNLOCK,
    TimesheetStateMachine,
)


@pytest.fixture
def machine(store):
    return TimesheetStateMachine(store)


@pytest.fixture
def employee(make_employee):
    return make_employee()


@pytest.fixture
def owner(employee):
    return Actor.for_employee(employee.id)


def _statuses(store, timesheet_id):
    with store.session() as session:
        timesheet = store.get_timesheet(session, timesheet_id)
        entries = store.entries_for_timesheet(session, timesheet_id)
        return timesheet.status, [e.status for e in entries]


class TestTransitionTable:
    """Test the pure transition lookup."""

    @pytest.mark.parametrize(
        "current,action,expected",
        [
            (TimesheetStatus.OPEN, SUBMIT, TimesheetStatus.SUBMITTED),
            (TimesheetStatus.SUBMITTED, APPROVE, TimesheetStatus.APPROVED),
            (TimesheetStatus.APPROVED, LOCK, TimesheetStatus.LOCKED),
            (TimesheetStatus.SUBMITTED, UNLOCK, TimesheetStatus.OPEN),
            (TimesheetStatus.APPROVED, UNLOCK, TimesheetStatus.OPEN),
            (TimesheetStatus.LOCKED, UNLOCK, TimesheetStatus.OPEN),
        ],
    )
    def test_valid_edges(self, current, action, expected):
        """Test every defined edge."""
        assert TimesheetStateMachine.next_state(current, action) == expected

    @pytest.mark.parametrize(
        "current,action",
        [
            (TimesheetStatus.OPEN, APPROVE),
            (TimesheetStatus.OPEN, LOCK),
            (TimesheetStatus.OPEN, UNLOCK),
            (TimesheetStatus.SUBMITTED, LOCK),
            (TimesheetStatus.LOCKED, SUBMIT),
            (TimesheetStatus.APPROVED, SUBMIT),
        ],
    )
    def test_undefined_edges_rejected(self, current, action):
        """Test undefined edges raise StateTransitionError."""
        with pytest.raises(StateTransitionError) as exc_info:
            TimesheetStateMachine.next_state(current, action)

        assert exc_info.value.current_state == current.value
        assert exc_info.value.action == action


class TestTransitions:
    """Test transitions applied to stored timesheets."""

    def test_full_lifecycle_cascades_to_entries(
        self, store, machine, employee, owner, admin, make_timesheet, make_entry
    ):
        """Test each step rewrites the status of every entry."""
        timesheet = make_timesheet(employee.id)
        make_entry(timesheet)
        make_entry(timesheet, start=dt.time(13, 0), end=dt.time(15, 0))

        machine.submit(timesheet.id, owner)
        assert _statuses(store, timesheet.id) == (TimesheetStatus.SUBMITTED, [TimesheetStatus.SUBMITTED] * 2)

        approved = machine.approve(timesheet.id, admin)
        assert approved.approved_by == "test-admin"
        assert approved.approved_at is not None

        machine.lock(timesheet.id, admin)
        assert _statuses(store, timesheet.id) == (TimesheetStatus.LOCKED, [TimesheetStatus.LOCKED] * 2)

    def test_unlock_locked_timesheet_with_five_entries(
        self, store, machine, employee, admin, make_timesheet, make_entry
    ):
        """Test unlocking returns the timesheet and all five entries to OPEN."""
        timesheet = make_timesheet(employee.id, status=TimesheetStatus.LOCKED)
        for day in range(5):
            make_entry(timesheet, date=timesheet.week_starting + dt.timedelta(days=day))

        unlocked = machine.unlock(timesheet.id, admin)

        status, entry_statuses = _statuses(store, timesheet.id)
        assert status == TimesheetStatus.OPEN
        assert entry_statuses == [TimesheetStatus.OPEN] * 5
        assert unlocked.approved_at is None
        assert unlocked.submitted_at is None

    def test_submit_empty_timesheet_rejected(self, store, machine, employee, owner, make_timesheet):
        """Test an empty timesheet cannot be submitted."""
        timesheet = make_timesheet(employee.id)

        with pytest.raises(EmptyTimesheetError, match="no entries"):
            machine.submit(timesheet.id, owner)

        assert _statuses(store, timesheet.id)[0] == TimesheetStatus.OPEN

    def test_only_owner_submits(self, machine, employee, admin, make_timesheet, make_entry):
        """Test administrators and other employees cannot submit."""
        timesheet = make_timesheet(employee.id)
        make_entry(timesheet)

        with pytest.raises(PermissionDeniedError):
            machine.submit(timesheet.id, admin)
        with pytest.raises(PermissionDeniedError):
            machine.submit(timesheet.id, Actor.for_employee(employee.id + 1))

    @pytest.mark.parametrize("action", ["approve", "lock", "unlock"])
    def test_admin_actions_require_admin(self, machine, employee, owner, make_timesheet, action):
        """Test employees cannot run administrative transitions."""
        timesheet = make_timesheet(employee.id, status=TimesheetStatus.SUBMITTED)

        with pytest.raises(PermissionDeniedError):
            getattr(machine, action)(timesheet.id, owner)

    def test_invalid_transition_leaves_state_untouched(
        self, store, machine, employee, admin, make_timesheet, make_entry
    ):
        """Test a rejected transition changes nothing."""
        timesheet = make_timesheet(employee.id)
        make_entry(timesheet)

        with pytest.raises(StateTransitionError):
            machine.lock(timesheet.id, admin)

        assert _statuses(store, timesheet.id) == (TimesheetStatus.OPEN, [TimesheetStatus.OPEN])

    def test_unknown_timesheet(self, machine, admin):
        """Test transitions on missing timesheets raise NotFoundError."""
        with pytest.raises(NotFoundError):
            machine.approve(123, admin)


class TestDelete:
    """Test deleting timesheets."""

    @pytest.mark.parametrize("status", list(TimesheetStatus))
    def test_admin_deletes_in_any_state(
        self, store, machine, employee, admin, make_timesheet, make_entry, status
    ):
        """Test deletion works from every status and removes entries."""
        timesheet = make_timesheet(employee.id, status=status)
        make_entry(timesheet)

        assert machine.delete(timesheet.id, admin) == 1

        with store.session() as session:
            assert session.get(TimesheetEntry, 1) is None

    def test_employee_cannot_delete(self, machine, employee, owner, make_timesheet):
        """Test deletion is an administrative action."""
        timesheet = make_timesheet(employee.id)

        with pytest.raises(PermissionDeniedError):
            machine.delete(timesheet.id, owner)
