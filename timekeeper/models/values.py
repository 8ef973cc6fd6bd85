"""Value objects passed between the engine components.

These models are never persisted directly:
- Actor: who is performing an operation
- EntryCandidate: a proposed entry awaiting validation
- WeekWindow: the date range of a timesheet
- ValidationResult: outcome of validating a candidate
- AttendanceRecord: one record supplied by the external provider
"""

import datetime as dt
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from timekeeper.calculators.time_utils import calculate_hours, get_week_end, get_week_start
from timekeeper.models.base import BaseDataModel
from timekeeper.models.enums import EntryType


class Actor(BaseDataModel):
    """The user on whose behalf an operation runs.

    Attributes:
        employee_id: Employee record linked to the user, if any
        is_admin: Whether the user holds administrative rights
        name: Display name used in audit fields
    """

    employee_id: Optional[int] = None
    is_admin: bool = False
    name: Optional[str] = None

    @classmethod
    def admin(cls, name: str = "admin") -> "Actor":
        return cls(is_admin=True, name=name)

    @classmethod
    def for_employee(cls, employee_id: int, name: Optional[str] = None) -> "Actor":
        return cls(employee_id=employee_id, name=name)

    def owns(self, employee_id: int) -> bool:
        return self.employee_id is not None and self.employee_id == employee_id

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.employee_id is not None:
            return f"employee:{self.employee_id}"
        return "system"


class EntryCandidate(BaseDataModel):
    """A proposed time entry.

    Times are optional here on purpose: a missing start or end is reported
    by the validator as a rule failure instead of a model error.

    Example:
        >>> candidate = EntryCandidate(
        ...     date=dt.date(2024, 1, 15),
        ...     start_time=dt.time(9, 0),
        ...     end_time=dt.time(12, 0),
        ...     company="Acme",
        ... )
        >>> candidate.hours
        3.0
    """

    date: dt.date = Field(..., description="Day the work happened")
    start_time: Optional[dt.time] = Field(None, description="Start of work")
    end_time: Optional[dt.time] = Field(None, description="End of work")
    company: Optional[str] = Field(None, description="Company the work was for")
    entry_type: EntryType = Field(EntryType.GENERAL, description="General work or travel")
    notes: Optional[str] = None
    location: Optional[str] = None
    travel_from: Optional[str] = None
    travel_to: Optional[str] = None

    @field_validator("company", "notes", "location", "travel_from", "travel_to")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @property
    def has_times(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @property
    def hours(self) -> Optional[float]:
        """Duration in hours, or None while a time is missing."""
        if not self.has_times:
            return None
        return calculate_hours(self.start_time, self.end_time)


class WeekWindow(BaseDataModel):
    """Inclusive date range covered by a timesheet."""

    week_starting: dt.date
    week_ending: dt.date

    @model_validator(mode="after")
    def validate_range(self) -> "WeekWindow":
        if self.week_ending < self.week_starting:
            raise ValueError("week_ending must not be before week_starting")
        return self

    @classmethod
    def for_day(cls, day: dt.date) -> "WeekWindow":
        """Monday-to-Sunday window containing ``day``."""
        start = get_week_start(day)
        return cls(week_starting=start, week_ending=get_week_end(start))

    def contains(self, day: dt.date) -> bool:
        return self.week_starting <= day <= self.week_ending


class ValidationResult(BaseDataModel):
    """Outcome of validating an entry candidate.

    Attributes:
        valid: True when no errors were found; warnings do not affect it
        errors: Blocking rule violations, in rule order
        warnings: Non-blocking findings
    """

    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class AttendanceRecord(BaseDataModel):
    """A single attendance record from the external provider.

    Attributes:
        external_id: Provider's record id, used as the upsert key
        worker_id: Provider's worker id (matches EXTERNAL_WORKER_ID identifiers)
        date: Day of the record
        start_time: Start of work, if the provider supplied one
        end_time: End of work, if the provider supplied one
        hours: Hours logged, used when no start and end time are supplied
        company: Company the work was booked against
        status: Raw provider status string (mapped during import)
        period_id: Provider's pay period id
    """

    external_id: str = Field(..., min_length=1)
    worker_id: str = Field(..., min_length=1)
    date: dt.date
    start_time: Optional[dt.time] = None
    end_time: Optional[dt.time] = None
    hours: Optional[float] = Field(None, ge=0)
    company: Optional[str] = None
    status: Optional[str] = None
    period_id: Optional[str] = None

    @field_validator("external_id", "worker_id", "period_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Providers send ids as numbers or strings."""
        if v is None:
            return v
        return str(v).strip()
