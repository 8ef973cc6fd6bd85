"""Reconciliation of imported attendance data."""

from timekeeper.reconciliation.engine import ReconciliationEngine, entry_signature
from timekeeper.reconciliation.importer import AttendanceImporter
from timekeeper.reconciliation.results import (
    AutoCreateResult,
    CleanupResult,
    ImportResult,
    MergeResult,
    RepairResult,
    WeekendCleanupResult,
)
from timekeeper.reconciliation.status_mapping import map_external_status

__all__ = [
    "AttendanceImporter",
    "ReconciliationEngine",
    "entry_signature",
    "map_external_status",
    "AutoCreateResult",
    "CleanupResult",
    "ImportResult",
    "MergeResult",
    "RepairResult",
    "WeekendCleanupResult",
]
