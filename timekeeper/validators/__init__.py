"""Entry validation: rules, report and the validator orchestrator."""

from timekeeper.validators.entry_rules import EntryRuleValidators, RulePolicy
from timekeeper.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)
from timekeeper.validators.validator import EntryValidator

__all__ = [
    "EntryValidator",
    "EntryRuleValidators",
    "RulePolicy",
    "ValidationReport",
    "ValidationIssue",
    "ValidationSeverity",
]
