"""Creation and editing of timesheets and their entries.

Entry writes are gated by the parent timesheet's status and validated
inside the same transaction that performs the write, so two concurrent
requests cannot both pass validation against stale siblings.
"""

import datetime as dt
import logging
from typing import Optional

from sqlmodel import Session

from timekeeper.calculators.time_utils import calculate_hours, get_week_start, utcnow
from timekeeper.db.store import TimesheetStore
from timekeeper.exceptions import (
    DuplicateTimesheetError,
    EntryValidationError,
    PermissionDeniedError,
    StateTransitionError,
    UnconfirmedWarningsError,
)
from timekeeper.models.entities import Timesheet, TimesheetEntry
from timekeeper.models.enums import EntrySource, TimesheetStatus
from timekeeper.models.values import Actor, EntryCandidate, ValidationResult
from timekeeper.validators.validator import EntryValidator

logger = logging.getLogger(__name__)

# Statuses in which an administrator may still correct entries
ADMIN_EDITABLE = frozenset(
    {TimesheetStatus.OPEN, TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED}
)


class EntryService:
    """Validated, status-gated writes of timesheets and entries.

    Args:
        store: Store providing transactions and lookups
        validator: Entry validator (default rule policy when omitted)
    """

    def __init__(self, store: TimesheetStore, validator: Optional[EntryValidator] = None):
        self.store = store
        self.validator = validator or EntryValidator()

    @staticmethod
    def check_entry_mutation(actor: Actor, timesheet: Timesheet) -> None:
        """Decide whether ``actor`` may change entries of ``timesheet``.

        Owners edit only OPEN timesheets. Administrators may also correct
        SUBMITTED and APPROVED ones, but a LOCKED timesheet is frozen until
        it is unlocked.

        Raises:
            PermissionDeniedError: If the actor is neither owner nor admin
            StateTransitionError: If the status does not allow edits
        """
        if actor.is_admin:
            if timesheet.status not in ADMIN_EDITABLE:
                raise StateTransitionError(
                    timesheet.status.value,
                    "edit entries",
                    message=f"Entries of a {timesheet.status.value} timesheet cannot be modified",
                )
            return

        if not actor.owns(timesheet.employee_id):
            raise PermissionDeniedError(
                f"Entries of timesheet {timesheet.id} belong to another employee"
            )
        if timesheet.status != TimesheetStatus.OPEN:
            raise StateTransitionError(
                timesheet.status.value,
                "edit entries",
                message=f"Entries can only be modified while the timesheet is OPEN "
                f"(current status: {timesheet.status.value})",
            )

    def create_timesheet(self, employee_id: int, week_of: dt.date, actor: Actor) -> Timesheet:
        """Create an OPEN timesheet for the Monday-aligned week of ``week_of``.

        Raises:
            DuplicateTimesheetError: If the employee already has one for that week
        """
        if not actor.is_admin and not actor.owns(employee_id):
            raise PermissionDeniedError("Cannot create timesheets for another employee")

        with self.store.transaction() as session:
            self.store.get_employee(session, employee_id)
            week_starting = get_week_start(week_of)
            if self.store.timesheets_for_week(session, employee_id, week_starting):
                raise DuplicateTimesheetError(
                    f"Employee {employee_id} already has a timesheet for week {week_starting}"
                )
            timesheet = self.store.create_timesheet_for_week(session, employee_id, week_of)

        logger.info("Timesheet %s created for week %s", timesheet.id, week_starting)
        return timesheet

    def validate_entry(
        self,
        candidate: EntryCandidate,
        timesheet_id: int,
        exclude_entry_id: Optional[int] = None,
    ) -> ValidationResult:
        """Validate a candidate against a timesheet without writing anything."""
        with self.store.session() as session:
            timesheet = self.store.get_timesheet(session, timesheet_id)
            return self._validate(session, timesheet, candidate, exclude_entry_id)

    def create_entry(
        self,
        timesheet_id: int,
        candidate: EntryCandidate,
        actor: Actor,
        confirm_warnings: bool = False,
    ) -> TimesheetEntry:
        """Validate and add a LOCAL entry to a timesheet.

        Args:
            timesheet_id: Parent timesheet
            candidate: Proposed entry
            actor: Acting user
            confirm_warnings: Accept an entry that only has warnings

        Returns:
            The persisted entry

        Raises:
            EntryValidationError: If any rule fails
            UnconfirmedWarningsError: If warnings were not confirmed
        """
        with self.store.transaction() as session:
            timesheet = self.store.get_timesheet(session, timesheet_id)
            self.check_entry_mutation(actor, timesheet)
            result = self._validate(session, timesheet, candidate, None)
            self._raise_if_rejected(result, confirm_warnings)

            entry = TimesheetEntry(
                timesheet_id=timesheet.id,
                status=timesheet.status,
                source=EntrySource.LOCAL,
            )
            self._copy_candidate(entry, candidate)
            session.add(entry)
            session.flush()

        logger.info(
            "Entry %s created on timesheet %s (%s %.2fh)",
            entry.id,
            timesheet_id,
            entry.date,
            entry.hours,
        )
        return entry

    def update_entry(
        self,
        entry_id: int,
        candidate: EntryCandidate,
        actor: Actor,
        confirm_warnings: bool = False,
    ) -> TimesheetEntry:
        """Replace an entry's fields with ``candidate`` after validation."""
        with self.store.transaction() as session:
            entry = self.store.get_entry(session, entry_id)
            timesheet = self.store.get_timesheet(session, entry.timesheet_id)
            self.check_entry_mutation(actor, timesheet)
            result = self._validate(session, timesheet, candidate, entry.id)
            self._raise_if_rejected(result, confirm_warnings)

            self._copy_candidate(entry, candidate)
            entry.updated_at = utcnow()
            session.add(entry)
            session.flush()

        logger.info("Entry %s updated", entry_id)
        return entry

    def delete_entry(self, entry_id: int, actor: Actor) -> None:
        with self.store.transaction() as session:
            entry = self.store.get_entry(session, entry_id)
            timesheet = self.store.get_timesheet(session, entry.timesheet_id)
            self.check_entry_mutation(actor, timesheet)
            session.delete(entry)

        logger.info("Entry %s deleted from timesheet %s", entry_id, timesheet.id)

    def _validate(
        self,
        session: Session,
        timesheet: Timesheet,
        candidate: EntryCandidate,
        exclude_entry_id: Optional[int],
    ) -> ValidationResult:
        # Siblings span all of the employee's timesheets and companies
        employee = self.store.get_employee(session, timesheet.employee_id)
        siblings = self.store.entries_for_employee_on(
            session, timesheet.employee_id, candidate.date
        )
        return self.validator.validate(
            candidate,
            siblings,
            timesheet.window,
            daily_cap=employee.max_daily_hours,
            exclude_entry_id=exclude_entry_id,
        )

    @staticmethod
    def _raise_if_rejected(result: ValidationResult, confirm_warnings: bool) -> None:
        if not result.valid:
            raise EntryValidationError(result.errors, result.warnings)
        if result.warnings and not confirm_warnings:
            raise UnconfirmedWarningsError(result.warnings)

    @staticmethod
    def _copy_candidate(entry: TimesheetEntry, candidate: EntryCandidate) -> None:
        entry.date = candidate.date
        entry.start_time = candidate.start_time
        entry.end_time = candidate.end_time
        entry.hours = calculate_hours(candidate.start_time, candidate.end_time)
        entry.entry_type = candidate.entry_type
        entry.company = candidate.company
        entry.notes = candidate.notes
        entry.location = candidate.location
        entry.travel_from = candidate.travel_from
        entry.travel_to = candidate.travel_to
