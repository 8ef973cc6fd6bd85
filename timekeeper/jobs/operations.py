"""Job operations wired to the reconciliation engine and the importer."""

import logging
from typing import Any, Callable, Dict, Optional

from timekeeper.models.enums import JobKind
from timekeeper.reconciliation.engine import ReconciliationEngine
from timekeeper.reconciliation.importer import AttendanceImporter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
ImporterFactory = Callable[[], AttendanceImporter]


class ExternalSyncOperation:
    """Import from the provider, then clean up duplicates, then merge timesheets.

    The importer is built lazily so a misconfigured provider fails the job
    instead of the caller that started it.
    """

    def __init__(self, engine: ReconciliationEngine, importer_factory: ImporterFactory):
        self.engine = engine
        self.importer_factory = importer_factory

    def __call__(self, progress: ProgressCallback) -> Dict[str, Any]:
        importer = self.importer_factory()

        progress("Importing attendance records from the provider")
        imported = importer.import_all(progress)

        progress("Removing duplicate entries")
        cleanup = self.engine.cleanup_duplicates(progress)

        progress("Merging duplicate timesheets")
        merge = self.engine.merge_duplicate_timesheets(progress)

        return {
            "import": imported.to_dict(),
            "cleanupDuplicates": cleanup.to_dict(),
            "mergeDuplicateTimesheets": merge.to_dict(),
        }


def default_operations(
    engine: ReconciliationEngine, importer_factory: Optional[ImporterFactory] = None
) -> Dict[JobKind, Callable[[ProgressCallback], Any]]:
    """Map every job kind to the callable that performs it.

    ``external-sync`` is only registered when an importer factory is given.
    """
    operations: Dict[JobKind, Callable[[ProgressCallback], Any]] = {
        JobKind.CLEANUP_DUPLICATES: engine.cleanup_duplicates,
        JobKind.MERGE_DUPLICATE_TIMESHEETS: engine.merge_duplicate_timesheets,
        JobKind.REPAIR_STATUS_INCONSISTENCIES: engine.repair_status_inconsistencies,
        JobKind.REMOVE_WEEKEND_ENTRIES: engine.remove_weekend_entries,
    }
    if importer_factory is not None:
        operations[JobKind.EXTERNAL_SYNC] = ExternalSyncOperation(engine, importer_factory)
    else:
        logger.debug("No attendance importer configured; external-sync is unavailable")
    return operations
