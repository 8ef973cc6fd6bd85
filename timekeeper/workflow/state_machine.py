"""Timesheet status lifecycle.

Timesheets move ``OPEN -> SUBMITTED -> APPROVED -> LOCKED``; ``unlock``
returns any non-open timesheet to ``OPEN``. Every transition rewrites the
status of the timesheet and all of its entries in one transaction.
"""

import logging
from typing import Dict, Tuple

from sqlmodel import Session

from timekeeper.calculators.time_utils import utcnow
from timekeeper.db.store import TimesheetStore
from timekeeper.exceptions import (
    EmptyTimesheetError,
    PermissionDeniedError,
    StateTransitionError,
)
from timekeeper.models.entities import Timesheet
from timekeeper.models.enums import TimesheetStatus
from timekeeper.models.values import Actor

logger = logging.getLogger(__name__)

SUBMIT = "submit"
APPROVE = "approve"
LOCK = "lock"
UNLOCK = "unlock"
DELETE = "delete"

TRANSITIONS: Dict[Tuple[TimesheetStatus, str], TimesheetStatus] = {
    (TimesheetStatus.OPEN, SUBMIT): TimesheetStatus.SUBMITTED,
    (TimesheetStatus.SUBMITTED, APPROVE): TimesheetStatus.APPROVED,
    (TimesheetStatus.APPROVED, LOCK): TimesheetStatus.LOCKED,
    (TimesheetStatus.SUBMITTED, UNLOCK): TimesheetStatus.OPEN,
    (TimesheetStatus.APPROVED, UNLOCK): TimesheetStatus.OPEN,
    (TimesheetStatus.LOCKED, UNLOCK): TimesheetStatus.OPEN,
}

ADMIN_ACTIONS = frozenset({APPROVE, LOCK, UNLOCK, DELETE})


class TimesheetStateMachine:
    """Applies lifecycle actions to persisted timesheets.

    Args:
        store: Store providing transactions and lookups
    """

    def __init__(self, store: TimesheetStore):
        self.store = store

    @staticmethod
    def next_state(current: TimesheetStatus, action: str) -> TimesheetStatus:
        """Look up the target state of ``action`` from ``current``.

        Raises:
            StateTransitionError: If no edge exists
        """
        target = TRANSITIONS.get((current, action))
        if target is None:
            raise StateTransitionError(current.value, action)
        return target

    @staticmethod
    def check_permission(actor: Actor, action: str, timesheet: Timesheet) -> None:
        """Admins run admin actions; only the owner submits.

        Raises:
            PermissionDeniedError: If the actor may not perform the action
        """
        if action in ADMIN_ACTIONS:
            if not actor.is_admin:
                raise PermissionDeniedError(f"Only administrators can {action} timesheets")
        elif not actor.owns(timesheet.employee_id):
            raise PermissionDeniedError(
                f"Only the owning employee can {action} timesheet {timesheet.id}"
            )

    def submit(self, timesheet_id: int, actor: Actor) -> Timesheet:
        """Submit an open timesheet for approval.

        Raises:
            EmptyTimesheetError: If the timesheet holds no entries
        """
        return self._transition(timesheet_id, actor, SUBMIT)

    def approve(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self._transition(timesheet_id, actor, APPROVE)

    def lock(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self._transition(timesheet_id, actor, LOCK)

    def unlock(self, timesheet_id: int, actor: Actor) -> Timesheet:
        """Return a submitted, approved or locked timesheet to OPEN."""
        return self._transition(timesheet_id, actor, UNLOCK)

    def delete(self, timesheet_id: int, actor: Actor) -> int:
        """Delete a timesheet in any state together with its entries.

        Returns:
            Number of entries deleted
        """
        with self.store.transaction() as session:
            timesheet = self.store.get_timesheet(session, timesheet_id)
            self.check_permission(actor, DELETE, timesheet)
            removed = self.store.delete_timesheet_cascade(session, timesheet)

        logger.info(
            "Timesheet %s deleted by %s (%d entries removed)",
            timesheet_id,
            actor.display_name,
            removed,
        )
        return removed

    def _transition(self, timesheet_id: int, actor: Actor, action: str) -> Timesheet:
        with self.store.transaction() as session:
            timesheet = self.store.get_timesheet(session, timesheet_id)
            self.check_permission(actor, action, timesheet)
            previous = timesheet.status
            target = self.next_state(previous, action)
            updated = self._apply(session, timesheet, target, action, actor)

        logger.info(
            "Timesheet %s %s -> %s by %s (%d entries updated)",
            timesheet_id,
            previous.value,
            target.value,
            actor.display_name,
            updated,
        )
        return timesheet

    def _apply(
        self,
        session: Session,
        timesheet: Timesheet,
        target: TimesheetStatus,
        action: str,
        actor: Actor,
    ) -> int:
        entries = self.store.entries_for_timesheet(session, timesheet.id)
        if action == SUBMIT and not entries:
            raise EmptyTimesheetError(timesheet.status.value)

        now = utcnow()
        timesheet.status = target
        timesheet.updated_at = now
        if action == SUBMIT:
            timesheet.submitted_at = now
        elif action == APPROVE:
            timesheet.approved_at = now
            timesheet.approved_by = actor.display_name
        elif action == UNLOCK:
            timesheet.submitted_at = None
            timesheet.approved_at = None
            timesheet.approved_by = None
        session.add(timesheet)

        for entry in entries:
            entry.status = target
            entry.updated_at = now
            session.add(entry)
        session.flush()
        return len(entries)
