"""Database setup command."""

from typing import Optional

import click

from timekeeper.cli.context import CLIContext, pass_cli_context
from timekeeper.cli.error_handlers import with_error_handling
from timekeeper.cli.utils.formatters import format_info, format_success
from timekeeper.config import get_config
from timekeeper.db.engine import build_engine, create_db_and_tables


@click.command(name="init-db")
@click.option(
    "--database-url",
    type=str,
    default=None,
    help="SQLAlchemy URL (defaults to DATABASE_URL from the configuration)",
)
@pass_cli_context
def init_db(context: CLIContext, database_url: Optional[str]):
    """Create the timekeeper tables. Safe to run repeatedly.

    Example:
        timekeeper init-db
        timekeeper init-db --database-url sqlite:///./timekeeper.db
    """
    with with_error_handling(context.debug):
        url = database_url or get_config().database_url
        click.echo(format_info(f"Initializing database ({url.split(':', 1)[0]})..."))
        engine = build_engine(url)
        try:
            create_db_and_tables(engine)
        finally:
            engine.dispose()
        click.echo(format_success("Database ready"))
