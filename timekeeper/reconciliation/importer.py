"""Import of attendance records from the external provider.

For every employee holding an EXTERNAL_WORKER_ID identifier the importer
fetches the worker's records, groups them into Monday-aligned weeks,
makes sure a timesheet exists for each week and upserts one EXTERNAL
entry per record, keyed by the provider's record id.

External data wins for the fields the provider owns (date, times, hours,
company). Enrichment fields (notes, location, travel) are never touched,
and statuses only ever move forward.
"""

import datetime as dt
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from sqlmodel import Session, select

from timekeeper.calculators.time_utils import calculate_hours, get_week_start, is_weekend, utcnow
from timekeeper.db.store import TimesheetStore
from timekeeper.models.entities import Employee, Timesheet, TimesheetEntry
from timekeeper.models.enums import EntrySource, EntryType, IdentifierKind
from timekeeper.models.values import AttendanceRecord
from timekeeper.reconciliation.results import ImportResult
from timekeeper.reconciliation.status_mapping import (
    highest_status,
    map_external_status,
    raise_status,
)
from timekeeper.services.attendance_provider import AttendanceProvider
from timekeeper.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


def _noop_progress(message: str) -> None:
    pass


class AttendanceImporter:
    """Pulls provider records into the store.

    Args:
        store: Store providing transactions and lookups
        provider: Source of attendance records
    """

    def __init__(self, store: TimesheetStore, provider: AttendanceProvider):
        self.store = store
        self.provider = provider

    def import_all(self, progress: ProgressCallback = _noop_progress) -> ImportResult:
        """Import records for every linked worker.

        Each worker is committed separately, so a provider failure midway
        keeps the workers already imported.

        Raises:
            ExternalServiceError: If the provider cannot be reached
        """
        result = ImportResult()

        period = self.provider.get_current_period()
        period_id = str(period["id"]) if period and period.get("id") is not None else None
        result.period_id = period_id
        if period_id:
            progress(f"Current provider period: {period_id}")

        with self.store.session() as session:
            workers = self.store.employees_with_identifier(
                session, IdentifierKind.EXTERNAL_WORKER_ID
            )
        progress(f"Found {len(workers)} employees linked to the attendance provider")

        for employee, worker_id in workers:
            with LogContext(employee_id=employee.id, worker_id=worker_id):
                records = self.provider.fetch_records(worker_id, period_id)
                progress(f"Worker {worker_id} ({employee.name}): {len(records)} records")
                with self.store.transaction() as session:
                    self._sync_worker(session, employee, records, period_id, result)
            result.workers_synced += 1

        progress(
            f"Import finished: {result.entries_created} entries created, "
            f"{result.entries_updated} updated, {len(result.errors)} errors"
        )
        return result

    def _sync_worker(
        self,
        session: Session,
        employee: Employee,
        records: List[AttendanceRecord],
        period_id: Optional[str],
        result: ImportResult,
    ) -> None:
        weeks: Dict[dt.date, List[AttendanceRecord]] = defaultdict(list)
        for record in records:
            result.records_seen += 1
            if is_weekend(record.date):
                result.weekend_records_skipped += 1
                logger.debug("Skipping weekend record %s", record.external_id)
                continue
            weeks[get_week_start(record.date)].append(record)

        for week_starting, week_records in sorted(weeks.items()):
            timesheet = self._ensure_timesheet(
                session, employee, week_starting, week_records, period_id, result
            )
            for record in week_records:
                try:
                    self._upsert_entry(session, timesheet, record, result)
                except ValueError as e:
                    logger.warning("Skipping record %s: %s", record.external_id, e)
                    result.errors.append(
                        {
                            "employeeId": employee.id,
                            "externalId": record.external_id,
                            "error": str(e),
                        }
                    )

    def _ensure_timesheet(
        self,
        session: Session,
        employee: Employee,
        week_starting: dt.date,
        records: List[AttendanceRecord],
        period_id: Optional[str],
        result: ImportResult,
    ) -> Timesheet:
        week_status = highest_status(map_external_status(r.status) for r in records)
        existing = self.store.timesheets_for_week(session, employee.id, week_starting)

        if existing:
            # Lowest id is canonical; duplicates are left to the merge pass
            timesheet = existing[0]
            timesheet.status = raise_status(timesheet.status, week_status)
        else:
            timesheet = self.store.create_timesheet_for_week(
                session, employee.id, week_starting, status=week_status, auto_created=True
            )
            result.timesheets_created += 1
            logger.info(
                "Created timesheet %s for employee %s week %s",
                timesheet.id,
                employee.id,
                week_starting,
            )

        if period_id:
            timesheet.external_period_id = period_id
        timesheet.external_synced_at = utcnow()
        timesheet.updated_at = utcnow()
        session.add(timesheet)
        session.flush()
        return timesheet

    @staticmethod
    def _record_hours(record: AttendanceRecord) -> float:
        if record.start_time is not None and record.end_time is not None:
            if record.end_time <= record.start_time:
                raise ValueError(
                    f"end time {record.end_time} is not after start time {record.start_time}"
                )
            return calculate_hours(record.start_time, record.end_time)
        if record.start_time is not None or record.end_time is not None:
            raise ValueError("record has only one of start time and end time")
        if record.hours is None:
            raise ValueError("record has neither times nor hours")
        return round(record.hours, 2)

    def _upsert_entry(
        self,
        session: Session,
        timesheet: Timesheet,
        record: AttendanceRecord,
        result: ImportResult,
    ) -> None:
        hours = self._record_hours(record)
        status = raise_status(timesheet.status, map_external_status(record.status))

        entry = session.exec(
            select(TimesheetEntry)
            .where(TimesheetEntry.source == EntrySource.EXTERNAL)
            .where(TimesheetEntry.external_id == record.external_id)
            .order_by(TimesheetEntry.id)
        ).first()

        if entry is None:
            entry = TimesheetEntry(
                timesheet_id=timesheet.id,
                entry_type=EntryType.GENERAL,
                source=EntrySource.EXTERNAL,
                external_id=record.external_id,
                status=status,
            )
            result.entries_created += 1
        else:
            entry.timesheet_id = timesheet.id
            entry.status = raise_status(entry.status, status)
            entry.updated_at = utcnow()
            result.entries_updated += 1

        entry.date = record.date
        entry.start_time = record.start_time
        entry.end_time = record.end_time
        entry.hours = hours
        entry.company = record.company
        session.add(entry)
        session.flush()
