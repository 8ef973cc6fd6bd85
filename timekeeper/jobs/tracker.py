"""Execution and bookkeeping of long-running reconciliation jobs.

Each job is a persisted ``SyncJob`` row that moves
``PENDING -> RUNNING -> COMPLETED | FAILED`` and owns an append-only list of
progress lines. Jobs run on a thread pool; callers observe them by polling
``get_job_status``. Once a job is terminal it never changes again.
"""

import datetime as dt
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from sqlmodel import func, select

from timekeeper.calculators.time_utils import utcnow
from timekeeper.db.store import TimesheetStore
from timekeeper.exceptions import (
    ExternalServiceError,
    JobAlreadyRunningError,
    JobFinalizedError,
)
from timekeeper.models.entities import SyncJob, SyncJobProgress
from timekeeper.models.enums import JobKind, JobStatus
from timekeeper.utils.logging_utils import LogContext

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
JobOperation = Callable[[ProgressCallback], Any]

ACTIVE_STATUSES = (JobStatus.PENDING, JobStatus.RUNNING)
STALE_JOB_MESSAGE = "Tracker restarted before the job finished"


@dataclass(frozen=True)
class ProgressLine:
    timestamp: dt.datetime
    message: str


@dataclass(frozen=True)
class JobSnapshot:
    """Point-in-time view of a job, safe to hand to pollers."""

    id: int
    kind: JobKind
    status: JobStatus
    progress: List[ProgressLine] = field(default_factory=list)
    result: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    started_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "status": self.status.value,
            "progress": [
                {"timestamp": line.timestamp.isoformat(), "message": line.message}
                for line in self.progress
            ],
            "result": self.result,
            "errorMessage": self.error_message,
        }


def _result_payload(outcome: Any) -> Optional[Dict[str, Any]]:
    if outcome is None:
        return None
    if hasattr(outcome, "to_dict"):
        return outcome.to_dict()
    if isinstance(outcome, dict):
        return outcome
    return {"value": outcome}


class SyncJobTracker:
    """Starts jobs, records their progress and reports their status.

    Args:
        store: Store holding the job records
        operations: Callable per job kind; each receives a progress callback
            and returns a result object (with ``to_dict``) or a dict
        max_workers: Size of the worker pool
        cleanup_stale: Fail every PENDING/RUNNING job on construction. Only
            safe when no other process shares the store
    """

    def __init__(
        self,
        store: TimesheetStore,
        operations: Dict[JobKind, JobOperation],
        max_workers: int = 2,
        cleanup_stale: bool = False,
    ):
        self.store = store
        self.operations = dict(operations)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="timekeeper-job"
        )
        self._futures: Dict[int, Future] = {}
        self._lock = threading.Lock()

        if cleanup_stale:
            self.cleanup_stale_jobs()

    def cleanup_stale_jobs(self, older_than: Optional[dt.timedelta] = None) -> int:
        """Mark jobs orphaned by a dead process as FAILED.

        Never called on a read path: a job that is PENDING or RUNNING may
        belong to another live process sharing the store.

        Args:
            older_than: Only fail jobs created longer ago than this

        Returns:
            Number of jobs failed
        """
        query = select(SyncJob).where(SyncJob.status.in_(ACTIVE_STATUSES))
        if older_than is not None:
            query = query.where(SyncJob.created_at < utcnow() - older_than)

        with self.store.transaction() as session:
            stale = session.exec(query).all()
            for job in stale:
                job.status = JobStatus.FAILED
                job.error_message = STALE_JOB_MESSAGE
                job.completed_at = utcnow()
                session.add(job)

        if stale:
            logger.warning("Marked %d stale jobs as FAILED", len(stale))
        return len(stale)

    def start_job(
        self,
        kind: Union[JobKind, str],
        requested_by: Optional[str] = None,
        background: bool = True,
    ) -> int:
        """Create a PENDING job and run it.

        Args:
            kind: Job kind (enum or its string value)
            requested_by: Name recorded on the job
            background: Run on the worker pool (False runs inline)

        Returns:
            Id of the new job

        Raises:
            JobAlreadyRunningError: If a job of the same kind is pending or running
            ValueError: If the kind is unknown or has no operation
        """
        kind = JobKind(kind)
        if kind not in self.operations:
            raise ValueError(f"No operation registered for job kind {kind.value}")

        with self._lock:
            with self.store.transaction() as session:
                active = session.exec(
                    select(SyncJob)
                    .where(SyncJob.kind == kind)
                    .where(SyncJob.status.in_(ACTIVE_STATUSES))
                    .order_by(SyncJob.id)
                ).first()
                if active is not None:
                    raise JobAlreadyRunningError(kind.value, active.id)

                job = SyncJob(kind=kind, requested_by=requested_by)
                session.add(job)
                session.flush()
                job_id = job.id

        logger.info("Job %s (%s) created by %s", job_id, kind.value, requested_by or "system")

        if background and self.store.in_memory:
            # Worker threads would share the single in-memory connection
            logger.info("In-memory store, running job %s inline", job_id)
            background = False

        if background:
            future = self._executor.submit(self._run, job_id, kind)
            with self._lock:
                self._futures[job_id] = future
            future.add_done_callback(lambda done: self._forget(job_id, done))
        else:
            self._run(job_id, kind)
        return job_id

    def _forget(self, job_id: int, future: Future) -> None:
        with self._lock:
            self._futures.pop(job_id, None)
        if not future.cancelled() and future.exception() is not None:
            logger.error("Worker for job %s crashed: %s", job_id, future.exception())

    def _run(self, job_id: int, kind: JobKind) -> None:
        with LogContext(job_id=job_id, job_kind=kind.value):
            try:
                self._mark_running(job_id)
                outcome = self.operations[kind](
                    lambda message: self.append_progress(job_id, message)
                )
            except JobFinalizedError as e:
                logger.error(
                    "Job %s was finalized elsewhere, outcome dropped: %s", job_id, e
                )
            except ExternalServiceError as e:
                logger.error("Job %s failed talking to the provider: %s", job_id, e.message)
                self.fail_job(job_id, e.message)
            except Exception as e:
                logger.exception("Job %s failed", job_id)
                self.fail_job(job_id, f"{type(e).__name__}: {e}")
            else:
                self.complete_job(job_id, _result_payload(outcome))

    def _mark_running(self, job_id: int) -> None:
        with self.store.transaction() as session:
            job = self.store.get_job(session, job_id)
            if job.status != JobStatus.PENDING:
                raise JobFinalizedError(f"Job {job_id} is {job.status.value}, not PENDING")
            job.status = JobStatus.RUNNING
            job.started_at = utcnow()
            session.add(job)

    def append_progress(self, job_id: int, message: str) -> None:
        """Append one progress line to a non-terminal job.

        Raises:
            JobFinalizedError: If the job already finished
        """
        with self.store.transaction() as session:
            job = self.store.get_job(session, job_id)
            if job.status.is_terminal:
                raise JobFinalizedError(f"Job {job_id} is {job.status.value}; progress is closed")
            last_seq = session.exec(
                select(func.max(SyncJobProgress.seq)).where(SyncJobProgress.job_id == job_id)
            ).one()
            session.add(
                SyncJobProgress(job_id=job_id, seq=(last_seq or 0) + 1, message=message)
            )
        logger.info(message)

    def complete_job(self, job_id: int, result: Optional[Dict[str, Any]]) -> None:
        self._finalize(job_id, JobStatus.COMPLETED, result=result)

    def fail_job(self, job_id: int, error_message: str) -> None:
        self._finalize(job_id, JobStatus.FAILED, error_message=error_message)

    def _finalize(
        self,
        job_id: int,
        status: JobStatus,
        result: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> None:
        with self.store.transaction() as session:
            job = self.store.get_job(session, job_id)
            if job.status.is_terminal:
                raise JobFinalizedError(f"Job {job_id} already finished as {job.status.value}")
            job.status = status
            job.result = result
            job.error_message = error_message
            job.completed_at = utcnow()
            session.add(job)
        logger.info("Job %s finished: %s", job_id, status.value)

    def get_job_status(self, job_id: int) -> JobSnapshot:
        """Current snapshot of a job including all progress lines.

        Raises:
            NotFoundError: If the job does not exist
        """
        with self.store.session() as session:
            job = self.store.get_job(session, job_id)
            lines = session.exec(
                select(SyncJobProgress)
                .where(SyncJobProgress.job_id == job_id)
                .order_by(SyncJobProgress.seq)
            ).all()
            return JobSnapshot(
                id=job.id,
                kind=job.kind,
                status=job.status,
                progress=[ProgressLine(line.timestamp, line.message) for line in lines],
                result=dict(job.result) if job.result is not None else None,
                error_message=job.error_message,
                created_at=job.created_at,
                started_at=job.started_at,
                completed_at=job.completed_at,
            )

    def wait(self, job_id: int, timeout: Optional[float] = None) -> JobSnapshot:
        """Block until a background job started by this tracker finishes."""
        future = self._futures.get(job_id)
        if future is not None:
            future.result(timeout=timeout)
        return self.get_job_status(job_id)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
