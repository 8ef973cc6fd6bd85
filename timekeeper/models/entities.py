"""Persisted records.

All cross-record references are integer foreign keys resolved through
``TimesheetStore``; no record holds an in-memory pointer to another.
"""

import datetime as dt
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Field, SQLModel, UniqueConstraint

from timekeeper.calculators.time_utils import calculate_hours, utcnow
from timekeeper.models.enums import (
    EntrySource,
    EntryType,
    IdentifierKind,
    JobKind,
    JobStatus,
    TimesheetStatus,
)
from timekeeper.models.identifiers import IdentifierType
from timekeeper.models.values import WeekWindow


def _created_stamp():
    """Non-null timestamp column defaulting to the current naive UTC time."""
    return Field(
        default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False)
    )


def _optional_stamp():
    """Nullable naive UTC timestamp column."""
    return Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))


class Employee(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    max_daily_hours: float = Field(default=16.0)
    # Entry-creation defaults only; never enforced
    morning_start: dt.time = Field(default=dt.time(8, 0))
    morning_end: dt.time = Field(default=dt.time(12, 0))
    afternoon_start: dt.time = Field(default=dt.time(12, 30))
    afternoon_end: dt.time = Field(default=dt.time(16, 30))
    created_at: dt.datetime = _created_stamp()

    def default_window(self, part_of_day: str):
        """Return the (start, end) default for 'morning' or 'afternoon'."""
        if part_of_day == "morning":
            return self.morning_start, self.morning_end
        if part_of_day == "afternoon":
            return self.afternoon_start, self.afternoon_end
        raise ValueError(f"Unknown part of day: {part_of_day}")


class EmployeeIdentifier(SQLModel, table=True):
    __tablename__ = "employee_identifier"
    __table_args__ = (
        UniqueConstraint("employee_id", "kind", "custom_kind", name="uniq_identifier_kind"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    kind: IdentifierKind = Field(index=True)
    # Empty for known kinds so the unique constraint also covers them
    custom_kind: str = Field(default="")
    value: str = Field(index=True)

    @property
    def identifier_type(self) -> IdentifierType:
        return IdentifierType(kind=self.kind, custom_label=self.custom_kind or None)


class Timesheet(SQLModel, table=True):
    # At most one timesheet per employee and week is the target state, but
    # imports can violate it; merge_duplicate_timesheets restores it.
    __table_args__ = (
        Index("ix_timesheet_employee_week", "employee_id", "week_starting"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    employee_id: int = Field(foreign_key="employee.id", index=True)
    week_starting: dt.date
    week_ending: dt.date
    status: TimesheetStatus = Field(default=TimesheetStatus.OPEN, index=True)
    auto_created: bool = Field(default=False)
    submitted_at: Optional[dt.datetime] = _optional_stamp()
    approved_at: Optional[dt.datetime] = _optional_stamp()
    approved_by: Optional[str] = Field(default=None)
    external_period_id: Optional[str] = Field(default=None)
    external_synced_at: Optional[dt.datetime] = _optional_stamp()
    created_at: dt.datetime = _created_stamp()
    updated_at: Optional[dt.datetime] = _optional_stamp()

    @property
    def window(self) -> WeekWindow:
        return WeekWindow(week_starting=self.week_starting, week_ending=self.week_ending)


class TimesheetEntry(SQLModel, table=True):
    __tablename__ = "timesheet_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    timesheet_id: int = Field(foreign_key="timesheet.id", index=True)
    date: dt.date = Field(index=True)
    start_time: Optional[dt.time] = Field(default=None)
    end_time: Optional[dt.time] = Field(default=None)
    hours: float = Field(default=0.0)
    entry_type: EntryType = Field(default=EntryType.GENERAL)
    status: TimesheetStatus = Field(default=TimesheetStatus.OPEN)
    source: EntrySource = Field(default=EntrySource.LOCAL, index=True)
    verified: bool = Field(default=False)
    external_id: Optional[str] = Field(default=None, index=True)
    company: Optional[str] = Field(default=None)
    # Enrichment fields, owned by local users
    notes: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)
    travel_from: Optional[str] = Field(default=None)
    travel_to: Optional[str] = Field(default=None)
    created_at: dt.datetime = _created_stamp()
    updated_at: Optional[dt.datetime] = _optional_stamp()

    def recalculate_hours(self) -> None:
        """Derive ``hours`` from the start and end times."""
        if self.start_time is not None and self.end_time is not None:
            self.hours = calculate_hours(self.start_time, self.end_time)
        else:
            self.hours = 0.0


class SyncJob(SQLModel, table=True):
    __tablename__ = "sync_job"

    id: Optional[int] = Field(default=None, primary_key=True)
    kind: JobKind = Field(index=True)
    status: JobStatus = Field(default=JobStatus.PENDING, index=True)
    requested_by: Optional[str] = Field(default=None)
    created_at: dt.datetime = _created_stamp()
    started_at: Optional[dt.datetime] = _optional_stamp()
    completed_at: Optional[dt.datetime] = _optional_stamp()
    result: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    error_message: Optional[str] = Field(default=None)


class SyncJobProgress(SQLModel, table=True):
    __tablename__ = "sync_job_progress"
    __table_args__ = (UniqueConstraint("job_id", "seq", name="uniq_progress_job_seq"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    job_id: int = Field(foreign_key="sync_job.id", index=True)
    seq: int
    timestamp: dt.datetime = _created_stamp()
    message: str
