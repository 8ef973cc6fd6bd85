"""Data models for the timekeeper engine.

Persisted SQLModel tables:
- Employee, EmployeeIdentifier
- Timesheet, TimesheetEntry
- SyncJob, SyncJobProgress

Pydantic value objects:
- Actor, EntryCandidate, WeekWindow, ValidationResult, AttendanceRecord
- IdentifierType: tagged identifier kind
"""

from timekeeper.models.base import BaseDataModel
from timekeeper.models.entities import (
    Employee,
    EmployeeIdentifier,
    SyncJob,
    SyncJobProgress,
    Timesheet,
    TimesheetEntry,
)
from timekeeper.models.enums import (
    EntrySource,
    EntryType,
    IdentifierKind,
    JobKind,
    JobStatus,
    TimesheetStatus,
)
from timekeeper.models.identifiers import IdentifierType
from timekeeper.models.values import (
    Actor,
    AttendanceRecord,
    EntryCandidate,
    ValidationResult,
    WeekWindow,
)

__all__ = [
    "BaseDataModel",
    "Employee",
    "EmployeeIdentifier",
    "Timesheet",
    "TimesheetEntry",
    "SyncJob",
    "SyncJobProgress",
    "EntrySource",
    "EntryType",
    "IdentifierKind",
    "JobKind",
    "JobStatus",
    "TimesheetStatus",
    "IdentifierType",
    "Actor",
    "AttendanceRecord",
    "EntryCandidate",
    "ValidationResult",
    "WeekWindow",
]
