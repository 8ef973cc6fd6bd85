"""Database engine construction and schema creation."""

import logging
from typing import Optional, Union

from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from timekeeper.config import get_config

logger = logging.getLogger(__name__)


def is_in_memory_url(url: Union[str, URL]) -> bool:
    """True for SQLite URLs whose database lives only in memory."""
    url = make_url(url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def build_engine(database_url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``database_url`` (defaults to configuration).

    SQLite connections are shared with job worker threads, so the
    same-thread check is disabled; in-memory databases additionally keep a
    single connection so every session sees the same data. That connection
    must not be used from several threads, so the job tracker runs jobs
    inline for such stores.
    """
    config = get_config()
    url = database_url or config.database_url
    kwargs = {"echo": config.database_echo if echo is None else echo}

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if is_in_memory_url(url):
            kwargs["poolclass"] = StaticPool

    driver = url.split(":", 1)[0] if ":" in url else "unknown"
    logger.info("Creating database engine (driver=%s)", driver)
    return create_engine(url, **kwargs)


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables that do not exist yet. Safe to call repeatedly."""
    # Importing registers the table classes on SQLModel.metadata
    import timekeeper.models.entities  # noqa: F401

    SQLModel.metadata.create_all(engine)

