"""Caller-driven polling of job status."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from timekeeper.jobs.tracker import JobSnapshot

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_ATTEMPTS = 120


@dataclass(frozen=True)
class PollOutcome:
    """Last snapshot seen by a poller.

    ``still_running`` means the attempt budget ran out before the job
    finished. The job keeps running; callers should check again later.
    """

    snapshot: JobSnapshot
    attempts: int
    still_running: bool


class JobPoller:
    """Polls a status function until the job is terminal.

    Args:
        get_status: Callable returning the current JobSnapshot for a job id
        interval: Seconds between polls
        max_attempts: Polls before giving up
        sleep: Sleep function (replaceable in tests)
    """

    def __init__(
        self,
        get_status: Callable[[int], JobSnapshot],
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.get_status = get_status
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    @classmethod
    def from_config(cls, get_status: Callable[[int], JobSnapshot], config) -> "JobPoller":
        return cls(
            get_status,
            interval=config.job_poll_interval,
            max_attempts=config.job_poll_max_attempts,
        )

    def poll(
        self,
        job_id: int,
        on_update: Optional[Callable[[JobSnapshot], None]] = None,
    ) -> PollOutcome:
        attempts = 0
        while True:
            attempts += 1
            snapshot = self.get_status(job_id)
            if on_update is not None:
                on_update(snapshot)
            if snapshot.is_terminal:
                return PollOutcome(snapshot, attempts, still_running=False)
            if attempts >= self.max_attempts:
                logger.info(
                    "Job %s still %s after %d polls; check again later",
                    job_id,
                    snapshot.status.value,
                    attempts,
                )
                return PollOutcome(snapshot, attempts, still_running=True)
            self._sleep(self.interval)
