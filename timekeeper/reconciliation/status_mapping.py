"""Translation of provider status strings to the local status vocabulary.

The provider distinguishes a few states the local lifecycle does not:
``incomplete`` is still editable and maps to OPEN, while ``processed`` and
``finalized`` are frozen and map to LOCKED.
"""

from typing import Iterable, Optional

from timekeeper.models.enums import TimesheetStatus

EXTERNAL_STATUS_MAP = {
    "open": TimesheetStatus.OPEN,
    "draft": TimesheetStatus.OPEN,
    "incomplete": TimesheetStatus.OPEN,
    "submitted": TimesheetStatus.SUBMITTED,
    "pending": TimesheetStatus.SUBMITTED,
    "awaiting_approval": TimesheetStatus.SUBMITTED,
    "approved": TimesheetStatus.APPROVED,
    "locked": TimesheetStatus.LOCKED,
    "processed": TimesheetStatus.LOCKED,
    "finalized": TimesheetStatus.LOCKED,
}


def map_external_status(value: Optional[str]) -> TimesheetStatus:
    """Map a provider status string; unknown or missing values mean OPEN.

    Example:
        >>> map_external_status("Awaiting_Approval")
        <TimesheetStatus.SUBMITTED: 'SUBMITTED'>
    """
    if not value:
        return TimesheetStatus.OPEN
    return EXTERNAL_STATUS_MAP.get(value.strip().lower(), TimesheetStatus.OPEN)


def highest_status(statuses: Iterable[TimesheetStatus]) -> TimesheetStatus:
    """Most advanced status by lifecycle priority (OPEN when empty)."""
    return max(statuses, key=lambda s: s.priority, default=TimesheetStatus.OPEN)


def raise_status(current: TimesheetStatus, incoming: TimesheetStatus) -> TimesheetStatus:
    """Imported data may advance a status but never move it back."""
    return incoming if incoming.priority > current.priority else current
