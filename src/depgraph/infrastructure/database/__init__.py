"""SQLite database engine and schema via SQLAlchemy Core."""

from depgraph.infrastructure.database.engine import create_db_engine, create_schema, init_database
from depgraph.infrastructure.database.schema import (
    depends_on,
    files,
    has_file,
    metadata,
    packages,
    projects,
)

__all__ = [
    "create_db_engine",
    "create_schema",
    "depends_on",
    "files",
    "has_file",
    "init_database",
    "metadata",
    "packages",
    "projects",
]
