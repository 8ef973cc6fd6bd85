"""Entry validator orchestrating the entry rules.

This module provides ``EntryValidator``, the single entry point used by
the entry service and the facade to decide whether a proposed entry may
be accepted.
"""

import logging
from typing import Any, Iterable, List, Optional

from timekeeper.models.values import EntryCandidate, ValidationResult, WeekWindow
from timekeeper.validators.entry_rules import EntryRuleValidators, RulePolicy
from timekeeper.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)


class EntryValidator:
    """Validates an entry candidate against the other entries of its day.

    Validation is deterministic and side-effect free: the same candidate,
    siblings, window and cap always give the same result.

    Example:
        >>> validator = EntryValidator()
        >>> result = validator.validate(candidate, siblings, window, daily_cap=8)
        >>> if not result.valid:
        ...     print(result.errors)
    """

    def __init__(self, policy: Optional[RulePolicy] = None) -> None:
        self.policy = policy or RulePolicy()

    def validate(
        self,
        candidate: EntryCandidate,
        sibling_entries: Iterable[Any],
        window: WeekWindow,
        daily_cap: Optional[float] = None,
        exclude_entry_id: Optional[int] = None,
    ) -> ValidationResult:
        """Validate a candidate entry.

        Rules run in a fixed order. A missing time or a malformed time range
        stops validation early; every later rule runs and reports
        independently.

        Args:
            candidate: The proposed entry
            sibling_entries: Existing entries of the same employee; only those
                on the candidate's date are considered
            window: The owning timesheet's week
            daily_cap: Maximum hours per day (policy default when None)
            exclude_entry_id: Id of the entry being edited, skipped as a sibling

        Returns:
            ValidationResult with errors and warnings in rule order
        """
        report = self.build_report(
            candidate, sibling_entries, window, daily_cap, exclude_entry_id
        )
        if report.has_errors():
            logger.debug("Entry on %s rejected: %s", candidate.date, report.summary())
        return report.to_result()

    def build_report(
        self,
        candidate: EntryCandidate,
        sibling_entries: Iterable[Any],
        window: WeekWindow,
        daily_cap: Optional[float] = None,
        exclude_entry_id: Optional[int] = None,
    ) -> ValidationReport:
        """Run the rules and return the raw report (see ``validate``)."""
        report = ValidationReport()
        rules = EntryRuleValidators
        policy = self.policy
        start, end = candidate.start_time, candidate.end_time

        if not rules.validate_times_present(start, end, report):
            return report

        rules.validate_time_order(start, end, policy, report)
        if report.has_errors():
            return report

        rules.validate_entry_duration(start, end, policy, report)
        rules.validate_within_window(candidate.date, window, report)
        rules.validate_weekend(candidate.date, report)

        siblings = self._same_day_siblings(candidate, sibling_entries, exclude_entry_id)
        rules.validate_no_overlap(start, end, siblings, report)
        rules.validate_break(start, end, siblings, policy, report)

        cap = policy.default_daily_cap if daily_cap is None else daily_cap
        rules.validate_daily_cap(candidate.hours, siblings, cap, report)

        return report

    @staticmethod
    def _same_day_siblings(
        candidate: EntryCandidate,
        sibling_entries: Iterable[Any],
        exclude_entry_id: Optional[int],
    ) -> List[Any]:
        return [
            entry
            for entry in sibling_entries
            if entry.date == candidate.date
            and (exclude_entry_id is None or getattr(entry, "id", None) != exclude_entry_id)
            and entry.start_time is not None
            and entry.end_time is not None
        ]
