"""Persistence layer: engine construction and the transactional store."""

from timekeeper.db.engine import build_engine, create_db_and_tables
from timekeeper.db.store import TimesheetStore

__all__ = ["TimesheetStore", "build_engine", "create_db_and_tables"]
