"""Validate entry command."""

from datetime import datetime
from typing import Optional

import click

from timekeeper.calculators.time_utils import parse_time
from timekeeper.cli.context import CLIContext, pass_cli_context
from timekeeper.cli.error_handlers import DataValidationError, with_error_handling
from timekeeper.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from timekeeper.models.enums import EntryType
from timekeeper.models.values import EntryCandidate


@click.command(name="validate-entry")
@click.option("--timesheet-id", type=int, required=True, help="Timesheet to validate against")
@click.option(
    "--date",
    "entry_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    required=True,
    help="Entry date (YYYY-MM-DD)",
)
@click.option("--start", "start_time", type=str, default=None, help="Start time (HH:MM)")
@click.option("--end", "end_time", type=str, default=None, help="End time (HH:MM)")
@click.option("--company", type=str, default=None, help="Company the work is booked against")
@click.option(
    "--type",
    "entry_type",
    type=click.Choice([t.value for t in EntryType], case_sensitive=False),
    default=EntryType.GENERAL.value,
    show_default=True,
)
@click.option(
    "--exclude-entry-id",
    type=int,
    default=None,
    help="Entry being edited (ignored when checking overlaps)",
)
@pass_cli_context
def validate_entry(
    context: CLIContext,
    timesheet_id: int,
    entry_date: datetime,
    start_time: Optional[str],
    end_time: Optional[str],
    company: Optional[str],
    entry_type: str,
    exclude_entry_id: Optional[int],
):
    """Check a proposed entry against the rules without saving it.

    Returns exit code 3 if the entry has errors.

    Example:
        timekeeper validate-entry --timesheet-id 4 --date 2024-10-14 \\
            --start 09:00 --end 12:00 --company Acme
    """
    with with_error_handling(context.debug):
        try:
            start, end = parse_time(start_time), parse_time(end_time)
        except ValueError as e:
            raise DataValidationError(str(e), recovery_hint="Use HH:MM, for example 09:30")

        candidate = EntryCandidate(
            date=entry_date.date(),
            start_time=start,
            end_time=end,
            company=company,
            entry_type=EntryType(entry_type.upper()),
        )
        click.echo(format_info(f"Validating entry on {candidate.date} for timesheet {timesheet_id}"))
        result = context.service.validate_entry(candidate, timesheet_id, exclude_entry_id)

        for message in result.errors:
            click.echo(format_error(f"  {message}"))
        for message in result.warnings:
            click.echo(format_warning(f"  {message}"))

        if not result.valid:
            raise DataValidationError(
                f"Entry failed validation with {len(result.errors)} error(s)",
                recovery_hint="Adjust the times or company and validate again",
            )
        if result.warnings:
            click.echo(format_warning(f"Entry is valid with {len(result.warnings)} warning(s)"))
        else:
            click.echo(format_success("Entry is valid"))
