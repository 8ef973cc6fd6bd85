"""Validation report collecting rule findings for an entry candidate."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, List

from timekeeper.models.values import ValidationResult


class ValidationSeverity(IntEnum):
    """Severity levels for validation issues."""

    WARNING = 2
    ERROR = 3


@dataclass
class ValidationIssue:
    """A single rule finding.

    Attributes:
        severity: ERROR blocks the entry, WARNING only informs
        rule: Name of the rule that produced the finding (e.g. "overlap")
        message: Human-readable description shown to the user
        value: The value that triggered the finding
    """

    severity: ValidationSeverity
    rule: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.rule}: {self.message}"


class ValidationReport:
    """Accumulates findings in rule order.

    Example:
        >>> report = ValidationReport()
        >>> report.add_warning("weekend", "This entry is on a weekend.")
        >>> report.is_valid()
        True
        >>> report.to_result().warnings
        ['This entry is on a weekend.']
    """

    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []

    def _of(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def error_count(self) -> int:
        return len(self._of(ValidationSeverity.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self._of(ValidationSeverity.WARNING))

    @property
    def errors(self) -> List[str]:
        """Error messages in the order the rules produced them."""
        return [issue.message for issue in self._of(ValidationSeverity.ERROR)]

    @property
    def warnings(self) -> List[str]:
        """Warning messages in the order the rules produced them."""
        return [issue.message for issue in self._of(ValidationSeverity.WARNING)]

    def is_valid(self) -> bool:
        """True when no errors were recorded; warnings do not count."""
        return self.error_count == 0

    def has_errors(self) -> bool:
        return self.error_count > 0

    def add_error(self, rule: str, message: str, value: Any = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.ERROR, rule, message, value))

    def add_warning(self, rule: str, message: str, value: Any = None) -> None:
        self.issues.append(ValidationIssue(ValidationSeverity.WARNING, rule, message, value))

    def merge(self, other: "ValidationReport") -> None:
        """Append another report's findings after this one's."""
        self.issues.extend(other.issues)

    def summary(self) -> str:
        """Short description such as "2 error(s), 1 warning(s)"."""
        parts = []
        if self.error_count:
            parts.append(f"{self.error_count} error(s)")
        if self.warning_count:
            parts.append(f"{self.warning_count} warning(s)")
        return ", ".join(parts) if parts else "No issues found"

    def to_result(self) -> ValidationResult:
        """Convert the collected findings into a ValidationResult."""
        return ValidationResult(
            valid=self.is_valid(), errors=self.errors, warnings=self.warnings
        )
