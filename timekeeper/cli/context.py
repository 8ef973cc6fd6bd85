"""Shared state handed to every CLI command."""

from typing import Optional

import click

from timekeeper.facade import TimekeeperService
from timekeeper.models.values import Actor


class CLIContext:
    """Lazily built service plus global flags.

    Attributes:
        debug: Show full stack traces on errors
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._service: Optional[TimekeeperService] = None

    @property
    def service(self) -> TimekeeperService:
        if self._service is None:
            self._service = TimekeeperService()
        return self._service

    def close(self) -> None:
        if self._service is not None:
            self._service.close()
            self._service = None


pass_cli_context = click.make_pass_decorator(CLIContext, ensure=True)


def resolve_actor(employee_id: Optional[int]) -> Actor:
    """Act as the given employee, or as the CLI administrator when None."""
    if employee_id is not None:
        return Actor.for_employee(employee_id)
    return Actor.admin(name="cli")


actor_option = click.option(
    "--as-employee",
    "as_employee",
    type=int,
    default=None,
    help="Act as this employee instead of as administrator",
)
