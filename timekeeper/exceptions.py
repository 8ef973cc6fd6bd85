"""Exception hierarchy for the timesheet integrity engine.

Every error raised by the engine derives from TimekeeperError so callers
(the CLI, the job tracker) can catch the whole family at one seam while
still telling user-correctable problems apart from operational failures.
"""

from typing import Any, Dict, List, Optional


class TimekeeperError(Exception):
    """Base class for all timekeeper errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EntryValidationError(TimekeeperError):
    """A proposed entry violates one or more entry rules.

    Attributes:
        errors: Blocking rule violations
        warnings: Non-blocking findings reported alongside the errors
    """

    def __init__(
        self,
        errors: List[str],
        warnings: Optional[List[str]] = None,
        message: Optional[str] = None,
    ):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__(
            message or "; ".join(self.errors) or "Entry failed validation",
            {"errors": self.errors, "warnings": self.warnings},
        )


class UnconfirmedWarningsError(EntryValidationError):
    """The entry is valid but carries warnings the caller has not confirmed."""

    def __init__(self, warnings: List[str]):
        super().__init__(
            [],
            warnings,
            message="Entry has warnings that must be confirmed: " + "; ".join(warnings),
        )


class StateTransitionError(TimekeeperError):
    """The requested action has no edge from the timesheet's current state."""

    def __init__(self, current_state: str, action: str, message: Optional[str] = None):
        self.current_state = current_state
        self.action = action
        super().__init__(
            message or f"Cannot {action} a timesheet in status {current_state}",
            {"current_state": current_state, "action": action},
        )


class EmptyTimesheetError(StateTransitionError):
    """Submission of a timesheet that holds no entries."""

    def __init__(self, current_state: str = "OPEN"):
        super().__init__(
            current_state,
            "submit",
            message="Cannot submit a timesheet with no entries",
        )


class PermissionDeniedError(TimekeeperError):
    """The acting user is not allowed to perform the operation."""


class NotFoundError(TimekeeperError):
    """A referenced record does not exist."""

    def __init__(self, kind: str, record_id: Any):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found", {"kind": kind, "id": record_id})


class DuplicateTimesheetError(TimekeeperError):
    """A timesheet already exists for the employee and week."""


class ReconciliationConflict(TimekeeperError):
    """Reconciliation found records that disagree.

    Conflicts are normally resolved by tie-break and only logged; the
    exception is raised when no tie-break can be applied.
    """


class ExternalServiceError(TimekeeperError):
    """Failure talking to the external attendance provider.

    Attributes:
        status_code: HTTP status code when the provider answered
        retryable: Whether a later retry may succeed
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retryable: bool = False,
    ):
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message, {"status_code": status_code, "retryable": retryable})


class JobAlreadyRunningError(TimekeeperError):
    """A job of the same kind is already pending or running."""

    def __init__(self, kind: str, job_id: int):
        self.kind = kind
        self.job_id = job_id
        super().__init__(
            f"A {kind} job is already in progress (job {job_id})",
            {"kind": kind, "job_id": job_id},
        )


class JobFinalizedError(TimekeeperError):
    """Attempt to modify a job that already reached a terminal status."""
