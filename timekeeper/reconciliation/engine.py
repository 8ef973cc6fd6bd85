"""Store-wide repair operations for imported attendance data.

Every operation here is idempotent and runs in a single transaction: a
second run over an already-repaired store changes nothing. LOCAL entries
are never deleted, and a timesheet is only deleted once its entries have
been moved elsewhere.
"""

import datetime as dt
import logging
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from sqlmodel import Session, select

from timekeeper.calculators.time_utils import get_week_start, is_weekend, utcnow
from timekeeper.db.store import TimesheetStore
from timekeeper.exceptions import ReconciliationConflict
from timekeeper.models.entities import Employee, Timesheet, TimesheetEntry
from timekeeper.models.enums import EntrySource, TimesheetStatus
from timekeeper.reconciliation.results import (
    AutoCreateResult,
    CleanupResult,
    MergeResult,
    RepairResult,
    WeekendCleanupResult,
)
from timekeeper.utils.logging_utils import log_operation

logger = logging.getLogger(__name__)

Signature = Tuple[int, dt.date, Optional[dt.time], Optional[dt.time], str]
ProgressCallback = Callable[[str], None]


def _noop_progress(message: str) -> None:
    pass


def normalize_company(company: Optional[str]) -> str:
    return (company or "").strip().lower()


def entry_signature(employee_id: int, entry: TimesheetEntry) -> Signature:
    """Identity used to detect the same work booked twice."""
    return (
        employee_id,
        entry.date,
        entry.start_time,
        entry.end_time,
        normalize_company(entry.company),
    )


class ReconciliationEngine:
    """Batch integrity repairs over the whole store.

    Args:
        store: Store providing transactions and lookups
    """

    def __init__(self, store: TimesheetStore):
        self.store = store

    @staticmethod
    def _entries_with_owner(
        session: Session, source: EntrySource
    ) -> List[Tuple[TimesheetEntry, int]]:
        statement = (
            select(TimesheetEntry, Timesheet.employee_id)
            .join(Timesheet, Timesheet.id == TimesheetEntry.timesheet_id)
            .where(TimesheetEntry.source == source)
            .order_by(TimesheetEntry.id)
        )
        return [(entry, employee_id) for entry, employee_id in session.exec(statement).all()]

    @staticmethod
    def _touch_timesheets(session: Session, timesheet_ids: Iterable[int]) -> int:
        now = utcnow()
        count = 0
        for timesheet_id in timesheet_ids:
            timesheet = session.get(Timesheet, timesheet_id)
            if timesheet is not None:
                timesheet.updated_at = now
                session.add(timesheet)
                count += 1
        return count

    @log_operation
    def cleanup_duplicates(
        self, progress: ProgressCallback = _noop_progress
    ) -> CleanupResult:
        """Remove duplicate EXTERNAL entries and verify matching LOCAL ones.

        EXTERNAL entries sharing a signature (employee, date, start, end,
        normalized company) are collapsed to the earliest-created one, lowest
        id breaking ties. LOCAL entries matching a surviving EXTERNAL entry
        are marked verified.
        """
        result = CleanupResult()
        touched: Set[int] = set()

        with self.store.transaction() as session:
            groups: Dict[Signature, List[TimesheetEntry]] = defaultdict(list)
            for entry, employee_id in self._entries_with_owner(session, EntrySource.EXTERNAL):
                groups[entry_signature(employee_id, entry)].append(entry)
            progress(f"Checking {len(groups)} external entry signatures for duplicates")

            for entries in groups.values():
                if len(entries) < 2:
                    continue
                entries.sort(key=lambda e: (e.created_at, e.id))
                for duplicate in entries[1:]:
                    touched.add(duplicate.timesheet_id)
                    session.delete(duplicate)
                    result.duplicates_removed += 1
            session.flush()

            for entry, employee_id in self._entries_with_owner(session, EntrySource.LOCAL):
                if entry.verified or entry_signature(employee_id, entry) not in groups:
                    continue
                entry.verified = True
                entry.updated_at = utcnow()
                session.add(entry)
                touched.add(entry.timesheet_id)
                result.entries_verified += 1

            result.timesheets_updated = self._touch_timesheets(session, touched)

        progress(
            f"Removed {result.duplicates_removed} duplicate entries, "
            f"verified {result.entries_verified} local entries"
        )
        return result

    @log_operation
    def merge_duplicate_timesheets(
        self, progress: ProgressCallback = _noop_progress
    ) -> MergeResult:
        """Collapse timesheets sharing (employee, week_starting) into one.

        The lowest id is canonical. Entries of the other timesheets move to
        it and the emptied timesheets are deleted. Differing statuses are
        reported as conflicts and resolved in favour of the canonical one.

        Raises:
            ReconciliationConflict: If a timesheet has no week to group by
        """
        result = MergeResult()

        with self.store.transaction() as session:
            timesheets = session.exec(select(Timesheet).order_by(Timesheet.id)).all()
            groups: Dict[Tuple[int, dt.date], List[Timesheet]] = defaultdict(list)
            for timesheet in timesheets:
                if timesheet.week_starting is None:
                    raise ReconciliationConflict(
                        f"Timesheet {timesheet.id} has no week_starting; cannot merge"
                    )
                groups[(timesheet.employee_id, timesheet.week_starting)].append(timesheet)

            duplicates = {key: group for key, group in groups.items() if len(group) > 1}
            progress(f"Found {len(duplicates)} employee weeks with duplicate timesheets")

            for (employee_id, week_starting), group in duplicates.items():
                canonical, others = group[0], group[1:]
                statuses = {t.status for t in group}
                if len(statuses) > 1:
                    conflict = ReconciliationConflict(
                        f"Employee {employee_id} week {week_starting}: statuses "
                        f"{sorted(s.value for s in statuses)} differ; keeping "
                        f"{canonical.status.value} from timesheet {canonical.id}"
                    )
                    logger.warning(str(conflict))
                    result.conflicts.append(conflict.message)

                for other in others:
                    for entry in self.store.entries_for_timesheet(session, other.id):
                        entry.timesheet_id = canonical.id
                        entry.status = canonical.status
                        entry.updated_at = utcnow()
                        session.add(entry)
                        result.entries_moved += 1
                    if canonical.external_period_id is None:
                        canonical.external_period_id = other.external_period_id
                    session.flush()
                    session.delete(other)
                    result.timesheets_merged += 1

                canonical.updated_at = utcnow()
                session.add(canonical)
                session.flush()

        progress(
            f"Merged {result.timesheets_merged} duplicate timesheets, "
            f"moved {result.entries_moved} entries"
        )
        return result

    @log_operation
    def repair_status_inconsistencies(
        self, progress: ProgressCallback = _noop_progress
    ) -> RepairResult:
        """Align entry statuses with their non-OPEN parent timesheet."""
        result = RepairResult()

        with self.store.transaction() as session:
            statement = (
                select(Timesheet)
                .where(Timesheet.status != TimesheetStatus.OPEN)
                .order_by(Timesheet.id)
            )
            for timesheet in session.exec(statement).all():
                result.timesheets_checked += 1
                fixed = 0
                for entry in self.store.entries_for_timesheet(session, timesheet.id):
                    if entry.status != timesheet.status:
                        entry.status = timesheet.status
                        entry.updated_at = utcnow()
                        session.add(entry)
                        fixed += 1
                if fixed:
                    result.timesheets_fixed += 1
                    result.entries_updated += fixed

        progress(
            f"Checked {result.timesheets_checked} timesheets, "
            f"fixed {result.timesheets_fixed}"
        )
        return result

    @log_operation
    def remove_weekend_entries(
        self, progress: ProgressCallback = _noop_progress
    ) -> WeekendCleanupResult:
        """Delete EXTERNAL entries dated on a Saturday or Sunday."""
        result = WeekendCleanupResult()
        touched: Set[int] = set()

        with self.store.transaction() as session:
            for entry, _ in self._entries_with_owner(session, EntrySource.EXTERNAL):
                if is_weekend(entry.date):
                    touched.add(entry.timesheet_id)
                    session.delete(entry)
                    result.weekend_entries_removed += 1
            session.flush()
            result.timesheets_updated = self._touch_timesheets(session, touched)

        progress(f"Removed {result.weekend_entries_removed} weekend entries")
        return result

    def auto_create_timesheets(
        self, employee_id: Optional[int] = None, today: Optional[dt.date] = None
    ) -> AutoCreateResult:
        """Ensure timesheets exist for the current and next week.

        Args:
            employee_id: Restrict to one employee (all employees when None)
            today: Reference date (defaults to the current date)
        """
        result = AutoCreateResult()
        today = today or dt.date.today()
        weeks = [get_week_start(today), get_week_start(today) + dt.timedelta(days=7)]

        with self.store.transaction() as session:
            if employee_id is not None:
                employees = [self.store.get_employee(session, employee_id)]
            else:
                employees = list(session.exec(select(Employee).order_by(Employee.id)).all())

            for employee in employees:
                for week_starting in weeks:
                    if self.store.timesheets_for_week(session, employee.id, week_starting):
                        result.existing += 1
                        continue
                    self.store.create_timesheet_for_week(
                        session, employee.id, week_starting, auto_created=True
                    )
                    result.created += 1

        logger.info(
            "Auto-created %d timesheets (%d already existed)", result.created, result.existing
        )
        return result
