"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer for the dependency graph: WAL mode for
concurrent readers, foreign keys for edge integrity, and the unique
constraints in :mod:`schema` for idempotent upserts.

All access goes through SQLAlchemy Core; there is no ORM session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from depgraph.infrastructure.database.schema import metadata


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def create_schema(engine: Engine) -> None:
    """Create every table, uniqueness constraint, and index.

    Idempotent — ``create_all`` skips objects that already exist.
    """
    metadata.create_all(engine)


def init_database(db_path: Path) -> Engine:
    """Initialize the graph database at *db_path*.

    Creates parent directories and the full schema. Safe to call on an
    existing database.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    create_schema(engine)
    return engine
