"""GraphStore — the single gateway between services and the database.

Services never touch the SQLAlchemy engine directly for analysis work:
they hand a statement (Core construct or raw SQL text) to
:meth:`GraphStore.execute_query` or :meth:`GraphStore.execute_write`.
Each call is its own unit of work; nothing here spans statements.

The store is opened once per process and closed on exit. Use it as a
context manager or call :meth:`connect` / :meth:`close` explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self, TypeAlias

from pydantic import BaseModel
from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError

from depgraph.errors import (
    QueryExecutionError,
    StoreCapabilityMissingError,
    StoreConnectionError,
)
from depgraph.infrastructure.database.engine import create_schema, init_database
from depgraph.infrastructure.database.schema import (
    CLEAR_ORDER,
    depends_on,
    files,
    packages,
    projects,
)
from depgraph.infrastructure.graph.engine import PackageGraph

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.sql.expression import Executable

    from depgraph.config.settings import DepGraphSettings

logger = logging.getLogger(__name__)

Statement: TypeAlias = "str | Executable"

JSON_AGGREGATES = "json_aggregates"

_JSON_CHECK_SQL = "SELECT json_group_array(json_object('ok', 1)) AS ok"


class StoreCapabilities(BaseModel):
    """Optional store features, fixed once at connect time.

    Attributes:
        json_aggregates: ``json_group_array`` / ``json_object`` are
            available, so grouping can happen inside the store.
    """

    model_config = {"frozen": True}

    json_aggregates: bool = False

    def has(self, name: str) -> bool:
        return bool(getattr(self, name, False))


@dataclass(frozen=True)
class WriteSummary:
    """Outcome of a single write statement."""

    rowcount: int


def _message(exc: SQLAlchemyError) -> str:
    """Return the driver's message without SQLAlchemy's SQL echo."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class GraphStore:
    """Query-execution gateway over the SQLite dependency graph."""

    def __init__(self, db_path: Path, *, json_aggregates: bool | None = None) -> None:
        self._db_path = db_path
        self._json_aggregates_override = json_aggregates
        self._engine: Engine | None = None
        self._graph: PackageGraph | None = None
        self._capabilities = StoreCapabilities()

    @classmethod
    def from_settings(cls, settings: DepGraphSettings) -> GraphStore:
        """Build an unconnected store from resolved settings."""
        return cls(settings.store_path, json_aggregates=settings.store.json_aggregates)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the database, ensure the schema, and detect capabilities.

        Calling ``connect`` on an open store is a no-op.
        """
        if self._engine is not None:
            return
        location = str(self._db_path)
        try:
            engine = init_database(self._db_path)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            msg = _message(exc) if isinstance(exc, SQLAlchemyError) else str(exc)
            logger.error("Failed to connect to graph store: %s", msg)
            raise StoreConnectionError(msg, location=location) from exc

        self._engine = engine
        self._graph = PackageGraph(engine)
        self._capabilities = StoreCapabilities(json_aggregates=self._detect_json_aggregates())
        logger.debug(
            "Connected to graph store at %s (json_aggregates=%s)",
            location,
            self._capabilities.json_aggregates,
        )

    def close(self) -> None:
        """Dispose the engine. Safe to call more than once."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._graph = None
            logger.debug("Graph store closed")

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _detect_json_aggregates(self) -> bool:
        if self._json_aggregates_override is not None:
            return self._json_aggregates_override
        try:
            with self.engine.connect() as conn:
                conn.execute(text(_JSON_CHECK_SQL)).scalar()
        except SQLAlchemyError:
            return False
        return True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._db_path

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        if self._engine is None:
            raise StoreConnectionError("store is not connected", location=str(self._db_path))
        return self._engine

    @property
    def graph(self) -> PackageGraph:
        """The package graph (lazy-built from committed edges)."""
        if self._graph is None:
            raise StoreConnectionError("store is not connected", location=str(self._db_path))
        return self._graph

    @property
    def capabilities(self) -> StoreCapabilities:
        return self._capabilities

    def require(self, capability: str) -> None:
        """Raise :class:`StoreCapabilityMissingError` unless *capability* is on."""
        if not self._capabilities.has(capability):
            raise StoreCapabilityMissingError(capability)

    # ------------------------------------------------------------------
    # Query execution
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(statement: Statement) -> Executable:
        return text(statement) if isinstance(statement, str) else statement

    def execute_query(
        self,
        statement: Statement,
        parameters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Run a read statement and return its rows as column mappings."""
        stmt = self._coerce(statement)
        try:
            with self.engine.connect() as conn:
                result = conn.execute(stmt, parameters) if parameters else conn.execute(stmt)
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            msg = _message(exc)
            logger.error("Query failed: %s", msg)
            raise QueryExecutionError(msg) from exc

    def execute_write(
        self,
        statement: Statement,
        parameters: dict[str, Any] | None = None,
    ) -> WriteSummary:
        """Run one write statement in its own transaction."""
        stmt = self._coerce(statement)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt, parameters) if parameters else conn.execute(stmt)
                rowcount = result.rowcount
        except SQLAlchemyError as exc:
            msg = _message(exc)
            logger.error("Write query failed: %s", msg)
            raise QueryExecutionError(msg) from exc
        finally:
            if self._graph is not None:
                self._graph.invalidate()
        return WriteSummary(rowcount=rowcount)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear_database(self) -> None:
        """Delete every node and edge. Destructive."""
        for table in CLEAR_ORDER:
            self.execute_write(delete(table))
        logger.info("Graph store cleared")

    def create_constraints(self) -> None:
        """Ensure tables, identity constraints, and indexes exist."""
        try:
            create_schema(self.engine)
        except SQLAlchemyError as exc:
            raise QueryExecutionError(_message(exc)) from exc

    def get_stats(self) -> dict[str, int]:
        """Count projects, packages, DEPENDS_ON edges, and files."""
        counts = {
            "projects": projects,
            "packages": packages,
            "dependencies": depends_on,
            "files": files,
        }
        stats: dict[str, int] = {}
        for key, table in counts.items():
            rows = self.execute_query(select(func.count().label("count")).select_from(table))
            stats[key] = int(rows[0]["count"]) if rows else 0
        return stats
