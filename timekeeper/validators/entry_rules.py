"""Business rules for time entries.

Each rule is a static method that inspects its inputs and records
findings on a ``ValidationReport``. Rules never raise and never touch the
store; ``EntryValidator`` decides which rules run and in what order.
"""

import datetime as dt
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from timekeeper.calculators.time_utils import (
    calculate_duration_minutes,
    calculate_hours,
    convert_time_to_minutes,
    format_time,
    is_weekend,
)
from timekeeper.models.values import WeekWindow
from timekeeper.validators.validation_report import ValidationReport


@dataclass(frozen=True)
class RulePolicy:
    """Thresholds applied by the entry rules.

    Attributes:
        max_entry_hours: Longest single entry allowed
        latest_start_time: Entries may not start at or after this time
        min_break_minutes: Gap required somewhere in a multi-entry day
        default_daily_cap: Daily cap used when the employee has none
    """

    max_entry_hours: float = 12.0
    latest_start_time: dt.time = dt.time(23, 0)
    min_break_minutes: int = 30
    default_daily_cap: float = 16.0

    @classmethod
    def from_config(cls, config) -> "RulePolicy":
        return cls(
            max_entry_hours=config.max_entry_hours,
            latest_start_time=config.latest_start_time,
            min_break_minutes=config.min_break_minutes,
            default_daily_cap=config.default_max_daily_hours,
        )


def _sibling_hours(sibling: Any) -> float:
    hours = getattr(sibling, "hours", None)
    if hours is None:
        return calculate_hours(sibling.start_time, sibling.end_time)
    return float(hours)


def _company_label(sibling: Any) -> str:
    company = getattr(sibling, "company", None)
    return company if company else "unknown"


class EntryRuleValidators:
    """Collection of entry rule checks.

    Siblings passed to these methods are entry-like objects exposing
    ``start_time``, ``end_time``, ``hours`` and ``company``; they are
    already restricted to the candidate's day and have both times set.
    """

    @staticmethod
    def validate_times_present(
        start_time: Optional[dt.time],
        end_time: Optional[dt.time],
        report: ValidationReport,
    ) -> bool:
        """Record an error when either time is missing.

        Returns:
            True when both times are present
        """
        if start_time is None or end_time is None:
            report.add_error("times_required", "Start time and end time are required.")
            return False
        return True

    @staticmethod
    def validate_time_order(
        start_time: dt.time,
        end_time: dt.time,
        policy: RulePolicy,
        report: ValidationReport,
    ) -> None:
        """Entries end after they start and start before the latest start time.

        Overnight entries are not supported; work past midnight is booked
        as two entries.
        """
        if end_time <= start_time:
            report.add_error(
                "time_order", "End time must be after start time.", end_time
            )
        if start_time >= policy.latest_start_time:
            latest = policy.latest_start_time.strftime("%I:%M %p").lstrip("0")
            report.add_error(
                "latest_start",
                f"Start time cannot be {latest} or later.",
                start_time,
            )

    @staticmethod
    def validate_entry_duration(
        start_time: dt.time,
        end_time: dt.time,
        policy: RulePolicy,
        report: ValidationReport,
    ) -> None:
        """A single entry may not exceed the per-entry maximum."""
        hours = calculate_duration_minutes(start_time, end_time) / 60
        if hours > policy.max_entry_hours:
            report.add_error(
                "max_duration",
                f"Entry duration of {hours:.1f} hours exceeds the "
                f"{policy.max_entry_hours:g}-hour maximum per entry.",
                hours,
            )

    @staticmethod
    def validate_within_window(
        day: dt.date, window: WeekWindow, report: ValidationReport
    ) -> None:
        if not window.contains(day):
            report.add_error(
                "date_window",
                "Entry date must be within the timesheet week "
                f"({window.week_starting.isoformat()} - {window.week_ending.isoformat()}).",
                day,
            )

    @staticmethod
    def validate_weekend(day: dt.date, report: ValidationReport) -> None:
        """Weekend work is allowed but flagged."""
        if is_weekend(day):
            report.add_warning(
                "weekend",
                "This entry is on a weekend. A reason for deviation may be "
                "required by the attendance provider.",
                day,
            )

    @staticmethod
    def validate_no_overlap(
        start_time: dt.time,
        end_time: dt.time,
        siblings: Sequence[Any],
        report: ValidationReport,
    ) -> None:
        """Half-open intervals [start, end) may not intersect; touching is fine."""
        start_mins = convert_time_to_minutes(start_time)
        end_mins = convert_time_to_minutes(end_time)
        for other in siblings:
            other_start = convert_time_to_minutes(other.start_time)
            other_end = convert_time_to_minutes(other.end_time)
            if start_mins < other_end and end_mins > other_start:
                report.add_error(
                    "overlap",
                    f"Entry {format_time(start_time)}-{format_time(end_time)} overlaps "
                    f"with existing entry {format_time(other.start_time)}-"
                    f"{format_time(other.end_time)} ({_company_label(other)}).",
                    getattr(other, "id", None),
                )

    @staticmethod
    def validate_break(
        start_time: dt.time,
        end_time: dt.time,
        siblings: Sequence[Any],
        policy: RulePolicy,
        report: ValidationReport,
    ) -> None:
        """A day with more than one entry needs at least one long enough gap."""
        if not siblings:
            return

        intervals = sorted(
            [
                (convert_time_to_minutes(s.start_time), convert_time_to_minutes(s.end_time))
                for s in siblings
            ]
            + [(convert_time_to_minutes(start_time), convert_time_to_minutes(end_time))]
        )
        has_break = any(
            intervals[i + 1][0] - intervals[i][1] >= policy.min_break_minutes
            for i in range(len(intervals) - 1)
        )
        if not has_break:
            report.add_error(
                "break",
                f"At least one {policy.min_break_minutes}-minute unpaid break is "
                "required when there are multiple entries in a day.",
            )

    @staticmethod
    def validate_daily_cap(
        candidate_hours: float,
        siblings: Sequence[Any],
        daily_cap: float,
        report: ValidationReport,
    ) -> None:
        total = round(sum(_sibling_hours(s) for s in siblings) + candidate_hours, 2)
        if total > daily_cap:
            report.add_error(
                "daily_cap",
                f"Total hours for this day would be {total:.1f}h, exceeding the "
                f"{daily_cap:g}h daily limit.",
                total,
            )
