"""Reconciliation job commands."""

import json
from datetime import datetime, timedelta
from typing import Optional

import click

from timekeeper.cli.context import CLIContext, pass_cli_context
from timekeeper.cli.error_handlers import ProcessingError, with_error_handling
from timekeeper.cli.utils.formatters import (
    format_info,
    format_result,
    format_success,
    format_table,
    format_warning,
)
from timekeeper.cli.utils.progress import JobProgressPrinter
from timekeeper.jobs.tracker import JobSnapshot
from timekeeper.models.enums import JobKind, JobStatus


def _report(snapshot: JobSnapshot) -> None:
    if snapshot.status == JobStatus.FAILED:
        raise ProcessingError(
            f"Job {snapshot.id} ({snapshot.kind.value}) failed: {snapshot.error_message}",
            recovery_hint="Progress logged before the failure was kept; fix the cause and rerun",
        )
    if snapshot.status == JobStatus.COMPLETED:
        click.echo(format_success(f"Job {snapshot.id} ({snapshot.kind.value}) completed"))
        if snapshot.result:
            click.echo(format_result(snapshot.result))
        return
    click.echo(
        format_info(
            f"Job {snapshot.id} is still {snapshot.status.value.lower()}; "
            f"check later with: timekeeper job-status {snapshot.id}"
        )
    )


@click.command(name="reconcile")
@click.argument("kind", type=click.Choice([k.value for k in JobKind]))
@click.option("--no-wait", is_flag=True, help="Start the job and return immediately")
@pass_cli_context
def reconcile(context: CLIContext, kind: str, no_wait: bool):
    """Start a reconciliation job and follow its progress.

    Exactly one job of each kind can run at a time. Without --no-wait the
    job is polled until it finishes or the poll budget runs out; a job
    still running at that point is reported, not treated as a failure.

    Example:
        timekeeper reconcile cleanup-duplicates
        timekeeper reconcile external-sync --no-wait
    """
    with with_error_handling(context.debug):
        service = context.service
        job_id = service.start_reconciliation_job(kind, requested_by="cli")
        click.echo(format_info(f"Started {kind} job {job_id}"))

        if no_wait:
            click.echo(format_info(f"Follow it with: timekeeper job-status {job_id}"))
            return

        outcome = service.poll_job(job_id, on_update=JobProgressPrinter())
        if outcome.still_running:
            click.echo(
                format_warning(f"Still running after {outcome.attempts} polls, check later")
            )
        _report(outcome.snapshot)


@click.command(name="job-status")
@click.argument("job_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the raw job snapshot as JSON")
@pass_cli_context
def job_status(context: CLIContext, job_id: int, as_json: bool):
    """Show the status, progress and result of a job."""
    with with_error_handling(context.debug):
        snapshot = context.service.get_job_status(job_id)
        if as_json:
            click.echo(json.dumps(snapshot.to_dict(), indent=2))
            return

        click.echo(f"Job {snapshot.id} ({snapshot.kind.value}): {snapshot.status.value}")
        if snapshot.progress:
            rows = [
                [line.timestamp.strftime("%Y-%m-%d %H:%M:%S"), line.message]
                for line in snapshot.progress
            ]
            click.echo(format_table(["Time", "Progress"], rows))
        if snapshot.is_terminal:
            _report(snapshot)


@click.command(name="auto-create")
@click.option("--employee-id", type=int, default=None, help="Only this employee")
@click.option(
    "--date",
    "reference_date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date (defaults to today)",
)
@pass_cli_context
def auto_create(
    context: CLIContext, employee_id: Optional[int], reference_date: Optional[datetime]
):
    """Make sure timesheets exist for the current and next week."""
    with with_error_handling(context.debug):
        result = context.service.auto_create_timesheets(
            employee_id, reference_date.date() if reference_date else None
        )
        click.echo(
            format_success(
                f"Created {result.created} timesheets ({result.existing} already existed)"
            )
        )


@click.command(name="fail-stale-jobs")
@click.option(
    "--older-than-minutes",
    type=click.IntRange(min=0),
    default=None,
    help="Only fail jobs created more than this many minutes ago",
)
@click.confirmation_option(
    prompt="Jobs still running in another process will be marked FAILED. Continue?"
)
@pass_cli_context
def fail_stale_jobs(context: CLIContext, older_than_minutes: Optional[int]):
    """Mark PENDING and RUNNING jobs left behind by a dead process as FAILED.

    Run this after a crash, when no other timekeeper process is working
    on the same database. It frees the one-job-per-kind slot held by the
    orphaned jobs.

    Example:
        timekeeper fail-stale-jobs --yes
        timekeeper fail-stale-jobs --older-than-minutes 120 --yes
    """
    with with_error_handling(context.debug):
        older_than = (
            timedelta(minutes=older_than_minutes) if older_than_minutes is not None else None
        )
        failed = context.service.fail_stale_jobs(older_than)
        click.echo(format_success(f"Marked {failed} stale jobs as FAILED"))
