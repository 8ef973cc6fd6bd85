"""Enhanced error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
from pydantic import ValidationError

from timekeeper.cli.utils.formatters import format_error, format_warning
from timekeeper.exceptions import (
    EntryValidationError,
    ExternalServiceError,
    JobAlreadyRunningError,
    NotFoundError,
    PermissionDeniedError,
    StateTransitionError,
    TimekeeperError,
)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


class DataValidationError(CLIError):
    """Error related to data validation."""


class ProcessingError(CLIError):
    """Error related to job processing."""


def _echo(title: str, hint: Optional[str] = None) -> None:
    click.echo(format_error(title))
    if hint:
        click.echo(format_warning(f"Hint: {hint}"))


def _handle_external_error(error: ExternalServiceError) -> int:
    status_code = error.status_code
    if status_code in (401, 403):
        _echo(
            f"Attendance provider rejected the credentials (HTTP {status_code})",
            "Check ATTENDANCE_API_KEY or the Google service account in the .env file",
        )
        return 5
    if status_code == 429:
        _echo(
            "Attendance provider rate limit exceeded",
            "Wait a few minutes before retrying",
        )
        return 8
    _echo(f"Attendance provider error: {error.message}")
    return 2


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Handle CLI errors with user-friendly messages.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-10 for known error types, 130 on cancel, 255 otherwise)
    """
    if isinstance(error, CLIError):
        exit_codes = {ConfigurationError: 1, DataValidationError: 3, ProcessingError: 4}
        labels = {
            ConfigurationError: "Configuration Error",
            DataValidationError: "Data Validation Error",
            ProcessingError: "Processing Error",
        }
        _echo(f"{labels.get(type(error), 'Error')}: {error.message}", error.recovery_hint)
        return exit_codes.get(type(error), 1)

    if isinstance(error, ValidationError):
        _echo(
            f"Configuration Error: {error}",
            "Check the values in your .env file or environment",
        )
        return 1

    if isinstance(error, ExternalServiceError):
        return _handle_external_error(error)

    if isinstance(error, EntryValidationError):
        click.echo(format_error("Entry rejected"))
        for message in error.errors:
            click.echo(format_error(f"  {message}"))
        for message in error.warnings:
            click.echo(format_warning(f"  {message}"))
        return 3

    if isinstance(error, StateTransitionError):
        _echo(f"Invalid transition: {error.message}")
        return 4

    if isinstance(error, PermissionDeniedError):
        _echo(f"Permission Denied: {error.message}", "Retry as an administrator")
        return 6

    if isinstance(error, NotFoundError):
        _echo(f"Not Found: {error.message}", "Verify the id you passed")
        return 7

    if isinstance(error, JobAlreadyRunningError):
        _echo(
            error.message,
            f"Follow it with: timekeeper job-status {error.job_id}",
        )
        return 9

    if isinstance(error, TimekeeperError):
        _echo(error.message)
        return 10

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130  # Standard exit code for SIGINT

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))
    if debug:
        click.echo("\nFull stack trace:")
        click.echo(traceback.format_exc())
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))
    return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        def my_command():
            with with_error_handling(debug):
                ...
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, SystemExit):
                sys.exit(handle_cli_error(exc_val, self.show_debug))
            return False

    return ErrorHandler(debug)
