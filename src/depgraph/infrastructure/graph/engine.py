"""PackageGraph — lazy-built NetworkX graph of Package -> Package edges.

Rebuilt per invocation, no cross-invocation cache. Only the package
subgraph is loaded: Project -> Package edges never close a loop on
their own, and the link step mirrors every inter-project dependency
onto the package layer before cycle analysis runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

from depgraph.domain.types import NodeLabel

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

_Graph: TypeAlias = nx.DiGraph


class PackageGraph:
    """Lazy-loading package graph backed by the ``depends_on`` table."""

    def __init__(self, db: Engine) -> None:
        self._db = db
        self._graph: _Graph | None = None

    @property
    def graph(self) -> _Graph:
        """Return the graph, building from DB on first access."""
        if self._graph is None:
            self._graph = self._build_from_db()
        return self._graph

    def invalidate(self) -> None:
        """Clear the cached graph, forcing rebuild on next access."""
        self._graph = None

    def _build_from_db(self) -> _Graph:
        """Build a DiGraph from the packages table and package-sourced edges.

        Loads all packages first (so isolated packages appear in the
        graph), then adds edges with their attributes.
        """
        from sqlalchemy import select

        from depgraph.infrastructure.database.schema import depends_on, packages

        g: _Graph = nx.DiGraph()
        with self._db.connect() as conn:
            for row in conn.execute(select(packages.c.name, packages.c.version, packages.c.language)):
                g.add_node(row.name, version=row.version, language=row.language)

            stmt = select(
                depends_on.c.source_name,
                depends_on.c.target_name,
                depends_on.c.version_constraint,
                depends_on.c.type,
                depends_on.c.source,
            ).where(depends_on.c.source_label == NodeLabel.PACKAGE.value)
            for row in conn.execute(stmt):
                g.add_edge(
                    row.source_name,
                    row.target_name,
                    version_constraint=row.version_constraint,
                    type=row.type,
                    source=row.source,
                )
        return g
