"""Background reconciliation jobs and their polling."""

from timekeeper.jobs.operations import ExternalSyncOperation, default_operations
from timekeeper.jobs.poller import JobPoller, PollOutcome
from timekeeper.jobs.tracker import JobSnapshot, ProgressLine, SyncJobTracker

__all__ = [
    "ExternalSyncOperation",
    "JobPoller",
    "JobSnapshot",
    "PollOutcome",
    "ProgressLine",
    "SyncJobTracker",
    "default_operations",
]
