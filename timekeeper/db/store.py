"""Transactional access to the timesheet store.

``TimesheetStore`` owns the engine and hands out sessions. Every write
path in the engine runs inside ``transaction()``, which commits when the
block finishes and rolls back when it raises, so a parent timesheet and
its entries are always changed together or not at all.
"""

import datetime as dt
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from timekeeper.calculators.time_utils import get_week_end, get_week_start
from timekeeper.db.engine import build_engine, create_db_and_tables, is_in_memory_url
from timekeeper.exceptions import NotFoundError
from timekeeper.models.entities import (
    Employee,
    EmployeeIdentifier,
    SyncJob,
    Timesheet,
    TimesheetEntry,
)
from timekeeper.models.enums import IdentifierKind, TimesheetStatus
from timekeeper.models.identifiers import IdentifierType

logger = logging.getLogger(__name__)


class TimesheetStore:
    """Session factory plus id-based lookups over the persisted records.

    Args:
        engine: SQLAlchemy engine; built from configuration when omitted
        create_tables: Create missing tables on construction

    Example:
        >>> store = TimesheetStore.from_url("sqlite://")
        >>> with store.transaction() as session:
        ...     session.add(Employee(name="Ada"))
    """

    def __init__(self, engine: Optional[Engine] = None, create_tables: bool = True):
        self.engine = engine or build_engine()
        if create_tables:
            create_db_and_tables(self.engine)

    @classmethod
    def from_url(cls, database_url: str) -> "TimesheetStore":
        return cls(build_engine(database_url))

    @property
    def in_memory(self) -> bool:
        """True when every session shares one in-memory SQLite connection."""
        return is_in_memory_url(self.engine.url)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Read-only style session; nothing is committed automatically."""
        with Session(self.engine, expire_on_commit=False) as session:
            yield session

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session that commits on success and rolls back on any exception."""
        with Session(self.engine, expire_on_commit=False) as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    # Lookups

    @staticmethod
    def get_employee(session: Session, employee_id: int) -> Employee:
        employee = session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    @staticmethod
    def get_timesheet(session: Session, timesheet_id: int) -> Timesheet:
        timesheet = session.get(Timesheet, timesheet_id)
        if timesheet is None:
            raise NotFoundError("Timesheet", timesheet_id)
        return timesheet

    @staticmethod
    def get_entry(session: Session, entry_id: int) -> TimesheetEntry:
        entry = session.get(TimesheetEntry, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        return entry

    @staticmethod
    def get_job(session: Session, job_id: int) -> SyncJob:
        job = session.get(SyncJob, job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job

    @staticmethod
    def entries_for_timesheet(session: Session, timesheet_id: int) -> List[TimesheetEntry]:
        """Entries of a timesheet ordered by date and start time."""
        statement = (
            select(TimesheetEntry)
            .where(TimesheetEntry.timesheet_id == timesheet_id)
            .order_by(TimesheetEntry.date, TimesheetEntry.start_time, TimesheetEntry.id)
        )
        return list(session.exec(statement).all())

    @staticmethod
    def entries_for_employee_on(
        session: Session, employee_id: int, day: dt.date
    ) -> List[TimesheetEntry]:
        """All entries of an employee on one day, across all their timesheets."""
        statement = (
            select(TimesheetEntry)
            .join(Timesheet, Timesheet.id == TimesheetEntry.timesheet_id)
            .where(Timesheet.employee_id == employee_id)
            .where(TimesheetEntry.date == day)
            .order_by(TimesheetEntry.start_time, TimesheetEntry.id)
        )
        return list(session.exec(statement).all())

    @staticmethod
    def timesheets_for_week(
        session: Session, employee_id: int, week_starting: dt.date
    ) -> List[Timesheet]:
        """Timesheets of an employee for a week, lowest id first."""
        statement = (
            select(Timesheet)
            .where(Timesheet.employee_id == employee_id)
            .where(Timesheet.week_starting == week_starting)
            .order_by(Timesheet.id)
        )
        return list(session.exec(statement).all())

    @staticmethod
    def count_entries(session: Session, timesheet_id: int) -> int:
        return len(TimesheetStore.entries_for_timesheet(session, timesheet_id))

    # Writes

    def create_timesheet_for_week(
        self,
        session: Session,
        employee_id: int,
        day: dt.date,
        status: TimesheetStatus = TimesheetStatus.OPEN,
        auto_created: bool = False,
    ) -> Timesheet:
        """Add a Monday-aligned timesheet covering ``day`` and flush it."""
        week_starting = get_week_start(day)
        timesheet = Timesheet(
            employee_id=employee_id,
            week_starting=week_starting,
            week_ending=get_week_end(week_starting),
            status=status,
            auto_created=auto_created,
        )
        session.add(timesheet)
        session.flush()
        logger.debug(
            "Created timesheet %s for employee %s week %s",
            timesheet.id,
            employee_id,
            week_starting,
        )
        return timesheet

    def delete_timesheet_cascade(self, session: Session, timesheet: Timesheet) -> int:
        """Delete a timesheet and its entries; returns the entry count removed."""
        entries = self.entries_for_timesheet(session, timesheet.id)
        for entry in entries:
            session.delete(entry)
        session.flush()
        session.delete(timesheet)
        session.flush()
        return len(entries)

    # Employees and identifiers

    def add_employee(
        self,
        name: str,
        max_daily_hours: float = 16.0,
        identifiers: Optional[List[Tuple[IdentifierType, str]]] = None,
    ) -> Employee:
        """Create an employee with optional typed identifiers."""
        with self.transaction() as session:
            employee = Employee(name=name, max_daily_hours=max_daily_hours)
            session.add(employee)
            session.flush()
            for identifier_type, value in identifiers or []:
                self.add_identifier(session, employee.id, identifier_type, value)
        return employee

    @staticmethod
    def add_identifier(
        session: Session, employee_id: int, identifier_type: IdentifierType, value: str
    ) -> EmployeeIdentifier:
        if not value or not value.strip():
            raise ValueError("Identifier value cannot be empty")
        identifier = EmployeeIdentifier(
            employee_id=employee_id,
            kind=identifier_type.kind,
            custom_kind=identifier_type.custom_label or "",
            value=value.strip(),
        )
        session.add(identifier)
        session.flush()
        return identifier

    @staticmethod
    def employees_with_identifier(
        session: Session, kind: IdentifierKind
    ) -> List[Tuple[Employee, str]]:
        """Employees holding an identifier of ``kind`` with its value."""
        statement = (
            select(Employee, EmployeeIdentifier.value)
            .join(EmployeeIdentifier, EmployeeIdentifier.employee_id == Employee.id)
            .where(EmployeeIdentifier.kind == kind)
            .order_by(Employee.id)
        )
        return [(employee, value) for employee, value in session.exec(statement).all()]
