"""Enumerations shared by the persisted records and the engine components."""

from enum import Enum


class TimesheetStatus(str, Enum):
    """Approval lifecycle of a timesheet; entries mirror their parent."""

    OPEN = "OPEN"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    LOCKED = "LOCKED"

    @property
    def priority(self) -> int:
        """Rank used when imported data may only raise a status."""
        return _STATUS_PRIORITY[self]


_STATUS_PRIORITY = {
    TimesheetStatus.OPEN: 0,
    TimesheetStatus.SUBMITTED: 1,
    TimesheetStatus.APPROVED: 2,
    TimesheetStatus.LOCKED: 3,
}


class EntryType(str, Enum):
    GENERAL = "GENERAL"
    TRAVEL = "TRAVEL"


class EntrySource(str, Enum):
    """Where an entry originated."""

    LOCAL = "LOCAL"
    EXTERNAL = "EXTERNAL"


class JobStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobKind(str, Enum):
    """Long-running operations the job tracker can execute."""

    CLEANUP_DUPLICATES = "cleanup-duplicates"
    MERGE_DUPLICATE_TIMESHEETS = "merge-duplicate-timesheets"
    REPAIR_STATUS_INCONSISTENCIES = "repair-status-inconsistencies"
    REMOVE_WEEKEND_ENTRIES = "remove-weekend-entries"
    EXTERNAL_SYNC = "external-sync"


class IdentifierKind(str, Enum):
    """Known kinds of employee identifier.

    OTHER requires a custom label; see ``IdentifierType``.
    """

    EXTERNAL_WORKER_ID = "EXTERNAL_WORKER_ID"
    PAYROLL_ID = "PAYROLL_ID"
    BADGE_NUMBER = "BADGE_NUMBER"
    OTHER = "OTHER"
