"""Single entry point bundling validation, workflow and reconciliation.

``TimekeeperService`` wires the store, the entry service, the state machine,
the reconciliation engine and the job tracker together from one
configuration object. The CLI is a thin layer over this class.
"""

import datetime as dt
import logging
from typing import Callable, Optional, Union

from timekeeper.config import TimekeeperConfig, get_config
from timekeeper.db.store import TimesheetStore
from timekeeper.exceptions import ExternalServiceError
from timekeeper.jobs.operations import default_operations
from timekeeper.jobs.poller import JobPoller, PollOutcome
from timekeeper.jobs.tracker import JobSnapshot, SyncJobTracker
from timekeeper.models.entities import Timesheet, TimesheetEntry
from timekeeper.models.enums import JobKind
from timekeeper.models.values import Actor, EntryCandidate, ValidationResult
from timekeeper.readers.attendance_sheet_reader import SheetsAttendanceProvider
from timekeeper.reconciliation.engine import ReconciliationEngine
from timekeeper.reconciliation.importer import AttendanceImporter
from timekeeper.reconciliation.results import AutoCreateResult
from timekeeper.services.attendance_client import AttendanceApiClient
from timekeeper.services.attendance_provider import AttendanceProvider
from timekeeper.validators.entry_rules import RulePolicy
from timekeeper.validators.validator import EntryValidator
from timekeeper.workflow.entry_service import EntryService
from timekeeper.workflow.state_machine import TimesheetStateMachine

logger = logging.getLogger(__name__)


def build_attendance_provider(config: TimekeeperConfig) -> AttendanceProvider:
    """Pick the provider backend from configuration.

    The REST API wins when both an API URL and a sheet id are configured.

    Raises:
        ExternalServiceError: If neither backend is configured
    """
    if config.attendance_api_url:
        return AttendanceApiClient.from_config(config)
    if config.attendance_sheet_id:
        return SheetsAttendanceProvider.from_config(config)
    raise ExternalServiceError(
        "No attendance provider configured (set ATTENDANCE_API_URL or ATTENDANCE_SHEET_ID)"
    )


class TimekeeperService:
    """Facade over the timekeeper components.

    Args:
        config: Configuration (global configuration when omitted)
        store: Store to use (built from ``config.database_url`` when omitted)
        provider_factory: Builds the attendance provider for external-sync jobs
        poll_sleep: Sleep function used by ``poll_job``

    Example:
        >>> service = TimekeeperService()
        >>> job_id = service.start_reconciliation_job("cleanup-duplicates")
        >>> outcome = service.poll_job(job_id)
    """

    def __init__(
        self,
        config: Optional[TimekeeperConfig] = None,
        store: Optional[TimesheetStore] = None,
        provider_factory: Optional[Callable[[], AttendanceProvider]] = None,
        poll_sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config or get_config()
        self.store = store or TimesheetStore.from_url(self.config.database_url)
        self.validator = EntryValidator(RulePolicy.from_config(self.config))
        self.entries = EntryService(self.store, self.validator)
        self.state_machine = TimesheetStateMachine(self.store)
        self.engine = ReconciliationEngine(self.store)

        self._provider_factory = provider_factory or (
            lambda: build_attendance_provider(self.config)
        )
        self.tracker = SyncJobTracker(
            self.store,
            default_operations(self.engine, self._build_importer),
            max_workers=self.config.job_workers,
        )
        poller_kwargs = {"sleep": poll_sleep} if poll_sleep is not None else {}
        self.poller = JobPoller(
            self.tracker.get_job_status,
            interval=self.config.job_poll_interval,
            max_attempts=self.config.job_poll_max_attempts,
            **poller_kwargs,
        )

    def _build_importer(self) -> AttendanceImporter:
        return AttendanceImporter(self.store, self._provider_factory())

    # Entries

    def validate_entry(
        self,
        candidate: EntryCandidate,
        timesheet_id: int,
        exclude_entry_id: Optional[int] = None,
    ) -> ValidationResult:
        return self.entries.validate_entry(candidate, timesheet_id, exclude_entry_id)

    def create_entry(
        self,
        timesheet_id: int,
        candidate: EntryCandidate,
        actor: Actor,
        confirm_warnings: bool = False,
    ) -> TimesheetEntry:
        return self.entries.create_entry(timesheet_id, candidate, actor, confirm_warnings)

    def update_entry(
        self,
        entry_id: int,
        candidate: EntryCandidate,
        actor: Actor,
        confirm_warnings: bool = False,
    ) -> TimesheetEntry:
        return self.entries.update_entry(entry_id, candidate, actor, confirm_warnings)

    def delete_entry(self, entry_id: int, actor: Actor) -> None:
        self.entries.delete_entry(entry_id, actor)

    # Timesheets

    def create_timesheet(self, employee_id: int, week_of: dt.date, actor: Actor) -> Timesheet:
        return self.entries.create_timesheet(employee_id, week_of, actor)

    def submit_timesheet(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self.state_machine.submit(timesheet_id, actor)

    def approve_timesheet(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self.state_machine.approve(timesheet_id, actor)

    def lock_timesheet(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self.state_machine.lock(timesheet_id, actor)

    def unlock_timesheet(self, timesheet_id: int, actor: Actor) -> Timesheet:
        return self.state_machine.unlock(timesheet_id, actor)

    def delete_timesheet(self, timesheet_id: int, actor: Actor) -> int:
        """Delete a timesheet and its entries; returns the number of entries removed."""
        return self.state_machine.delete(timesheet_id, actor)

    def auto_create_timesheets(
        self, employee_id: Optional[int] = None, today: Optional[dt.date] = None
    ) -> AutoCreateResult:
        return self.engine.auto_create_timesheets(employee_id, today)

    # Jobs

    def start_reconciliation_job(
        self,
        kind: Union[JobKind, str],
        requested_by: Optional[str] = None,
        background: bool = True,
    ) -> int:
        return self.tracker.start_job(kind, requested_by=requested_by, background=background)

    def get_job_status(self, job_id: int) -> JobSnapshot:
        return self.tracker.get_job_status(job_id)

    def fail_stale_jobs(self, older_than: Optional[dt.timedelta] = None) -> int:
        """Fail PENDING/RUNNING jobs whose process is known to be gone.

        Only call this when no other process is running jobs on the store,
        or pass ``older_than`` to spare recent jobs.
        """
        return self.tracker.cleanup_stale_jobs(older_than)

    def poll_job(
        self,
        job_id: int,
        on_update: Optional[Callable[[JobSnapshot], None]] = None,
    ) -> PollOutcome:
        return self.poller.poll(job_id, on_update)

    def wait_for_job(self, job_id: int, timeout: Optional[float] = None) -> JobSnapshot:
        return self.tracker.wait(job_id, timeout)

    def close(self) -> None:
        self.tracker.shutdown(wait=True)
        self.store.engine.dispose()
