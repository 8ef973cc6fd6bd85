"""CLI utility functions."""

from timekeeper.cli.utils.formatters import (
    format_error,
    format_info,
    format_result,
    format_success,
    format_table,
    format_warning,
)
from timekeeper.cli.utils.progress import JobProgressPrinter

__all__ = [
    "format_error",
    "format_info",
    "format_result",
    "format_success",
    "format_table",
    "format_warning",
    "JobProgressPrinter",
]
