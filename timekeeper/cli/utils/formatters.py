"""Output formatting utilities for CLI."""

from typing import Any, Dict, List

import click


def format_success(message: str) -> str:
    """Format a success message with green color."""
    return click.style(f"✓ {message}", fg="green", bold=True)


def format_error(message: str) -> str:
    """Format an error message with red color."""
    return click.style(f"✗ {message}", fg="red", bold=True)


def format_warning(message: str) -> str:
    """Format a warning message with yellow color."""
    return click.style(f"⚠ {message}", fg="yellow", bold=True)


def format_info(message: str) -> str:
    """Format an info message with blue color."""
    return click.style(f"ℹ {message}", fg="blue")


def format_table(headers: List[str], rows: List[List[Any]], max_width: int = 80) -> str:
    """Format data as a table.

    Args:
        headers: List of column headers
        rows: List of data rows (each row is a list of cell values)
        max_width: Maximum width for each column (default: 80)

    Returns:
        Formatted table as a string
    """
    if not headers:
        return ""

    col_widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(col_widths)]):
            col_widths[i] = max(col_widths[i], len(str(cell)))
    col_widths = [min(w, max_width) for w in col_widths]

    separator = "+" + "+".join("-" * (w + 2) for w in col_widths) + "+"

    def render(cells: List[Any]) -> str:
        padded = [
            f" {str(cell)[: col_widths[i]]:<{col_widths[i]}} "
            for i, cell in enumerate(cells[: len(col_widths)])
        ]
        return "|" + "|".join(padded) + "|"

    lines = [separator, render(headers), separator]
    if rows:
        lines.extend(render(row) for row in rows)
        lines.append(separator)
    return "\n".join(lines)


def format_result(result: Dict[str, Any]) -> str:
    """Render a job result dict as a two-column table.

    Nested dicts (the steps of an external sync) are flattened with a
    ``step.key`` prefix.
    """
    rows: List[List[Any]] = []
    for key, value in result.items():
        if isinstance(value, dict):
            rows.extend([f"{key}.{sub_key}", sub_value] for sub_key, sub_value in value.items())
        elif isinstance(value, list):
            rows.append([key, len(value)])
        else:
            rows.append([key, value])
    return format_table(["Metric", "Value"], rows)
