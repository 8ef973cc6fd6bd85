"""CLI commands."""

from timekeeper.cli.commands.database import init_db
from timekeeper.cli.commands.entries import validate_entry
from timekeeper.cli.commands.jobs import auto_create, job_status, reconcile
from timekeeper.cli.commands.timesheet import timesheet

__all__ = ["auto_create", "init_db", "job_status", "reconcile", "timesheet", "validate_entry"]
