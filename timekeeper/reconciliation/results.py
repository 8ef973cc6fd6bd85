"""Result records returned by reconciliation operations.

``to_dict`` produces the camelCase payload stored on a completed SyncJob
and shown to operators.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class CleanupResult:
    duplicates_removed: int = 0
    entries_verified: int = 0
    timesheets_updated: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duplicatesRemoved": self.duplicates_removed,
            "entriesVerified": self.entries_verified,
            "timesheetsUpdated": self.timesheets_updated,
        }


@dataclass
class MergeResult:
    timesheets_merged: int = 0
    entries_moved: int = 0
    conflicts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timesheetsMerged": self.timesheets_merged,
            "entriesMoved": self.entries_moved,
            "conflicts": list(self.conflicts),
        }


@dataclass
class RepairResult:
    timesheets_checked: int = 0
    timesheets_fixed: int = 0
    entries_updated: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timesheetsChecked": self.timesheets_checked,
            "timesheetsFixed": self.timesheets_fixed,
            "entriesUpdated": self.entries_updated,
        }


@dataclass
class WeekendCleanupResult:
    weekend_entries_removed: int = 0
    timesheets_updated: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekendEntriesRemoved": self.weekend_entries_removed,
            "timesheetsUpdated": self.timesheets_updated,
        }


@dataclass
class AutoCreateResult:
    created: int = 0
    existing: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"created": self.created, "existing": self.existing}


@dataclass
class ImportResult:
    """Outcome of pulling records from the attendance provider.

    Attributes:
        workers_synced: Employees whose records were fetched
        records_seen: Records returned by the provider
        entries_created: New EXTERNAL entries
        entries_updated: Existing EXTERNAL entries refreshed
        timesheets_created: Timesheets auto-created for imported weeks
        weekend_records_skipped: Records dropped by the weekend policy
        errors: Per-record failures that did not abort the import
    """

    period_id: Any = None
    workers_synced: int = 0
    records_seen: int = 0
    entries_created: int = 0
    entries_updated: int = 0
    timesheets_created: int = 0
    weekend_records_skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "periodId": self.period_id,
            "workersSynced": self.workers_synced,
            "recordsSeen": self.records_seen,
            "entriesCreated": self.entries_created,
            "entriesUpdated": self.entries_updated,
            "timesheetsCreated": self.timesheets_created,
            "weekendRecordsSkipped": self.weekend_records_skipped,
            "errors": list(self.errors),
        }
