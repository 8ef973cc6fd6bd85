"""Timesheet transition commands."""

from typing import Optional

import click

from timekeeper.cli.context import CLIContext, actor_option, pass_cli_context, resolve_actor
from timekeeper.cli.error_handlers import with_error_handling
from timekeeper.cli.utils.formatters import format_success, format_warning


@click.group(name="timesheet")
def timesheet():
    """Move timesheets through OPEN -> SUBMITTED -> APPROVED -> LOCKED."""


def _transition_command(name: str, past_tense: str, service_method: str, doc: str):
    @timesheet.command(name=name, help=doc)
    @click.argument("timesheet_id", type=int)
    @actor_option
    @pass_cli_context
    def command(context: CLIContext, timesheet_id: int, as_employee: Optional[int]):
        with with_error_handling(context.debug):
            actor = resolve_actor(as_employee)
            updated = getattr(context.service, service_method)(timesheet_id, actor)
            click.echo(
                format_success(
                    f"Timesheet {updated.id} {past_tense} (status: {updated.status.value})"
                )
            )

    return command


submit = _transition_command(
    "submit",
    "submitted",
    "submit_timesheet",
    "Submit an OPEN timesheet for approval (owner only; use --as-employee).",
)
approve = _transition_command(
    "approve", "approved", "approve_timesheet", "Approve a SUBMITTED timesheet."
)
lock = _transition_command("lock", "locked", "lock_timesheet", "Lock an APPROVED timesheet.")
unlock = _transition_command(
    "unlock",
    "unlocked",
    "unlock_timesheet",
    "Reopen a SUBMITTED, APPROVED or LOCKED timesheet.",
)


@timesheet.command(name="delete")
@click.argument("timesheet_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@actor_option
@pass_cli_context
def delete(context: CLIContext, timesheet_id: int, yes: bool, as_employee: Optional[int]):
    """Delete a timesheet together with all of its entries."""
    with with_error_handling(context.debug):
        if not yes:
            click.confirm(
                format_warning(f"Delete timesheet {timesheet_id} and all of its entries?"),
                abort=True,
            )
        removed = context.service.delete_timesheet(timesheet_id, resolve_actor(as_employee))
        click.echo(format_success(f"Timesheet {timesheet_id} deleted ({removed} entries removed)"))
