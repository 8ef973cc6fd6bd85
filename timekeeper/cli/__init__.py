"""Timekeeper CLI.

Command-line interface over ``TimekeeperService``: schema setup, entry
validation, timesheet transitions and reconciliation jobs.
"""

import click

from timekeeper import __version__
from timekeeper.cli.commands.database import init_db
from timekeeper.cli.commands.entries import validate_entry
from timekeeper.cli.commands.jobs import auto_create, fail_stale_jobs, job_status, reconcile
from timekeeper.cli.commands.timesheet import timesheet
from timekeeper.cli.context import CLIContext
from timekeeper.config.logging_config import LoggingConfig, configure_logging


@click.group(help="Timekeeper - timesheet validation, approval and reconciliation")
@click.version_option(version=__version__)
@click.option("--debug", is_flag=True, help="Show full stack traces and debug logs")
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    default="WARNING",
    show_default=True,
    type=click.Choice(sorted(LoggingConfig.VALID_LEVELS), case_sensitive=False),
    help="Log level for messages written to stderr",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, log_level: str):
    """Timekeeper CLI main entry point."""
    configure_logging(LoggingConfig(log_level="DEBUG" if debug else log_level))
    ctx.obj = CLIContext(debug=debug)
    ctx.call_on_close(ctx.obj.close)


# Register commands
cli.add_command(init_db)
cli.add_command(validate_entry)
cli.add_command(timesheet)
cli.add_command(reconcile)
cli.add_command(job_status)
cli.add_command(auto_create)
cli.add_command(fail_stale_jobs)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
