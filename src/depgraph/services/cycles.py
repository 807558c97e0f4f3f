"""CycleService — circular dependency detection on the package graph.

Cycles live on Package -> Package edges, which only exist after
:meth:`GraphBuilderService.link_package_dependencies` has mirrored
inter-project dependencies onto the package layer. Enumeration uses
NetworkX ``simple_cycles`` on the lazily built package graph; the
listing caps bound the size of the result, never the search, so
:meth:`CycleService.get_statistics` can report more cycles than a
capped listing shows.
"""

from __future__ import annotations

import logging
from statistics import mean
from typing import Any

import networkx as nx
from sqlalchemy import and_, select

from depgraph.domain.cycles import Cycle, canonical_cycle
from depgraph.domain.types import NodeLabel
from depgraph.infrastructure.database.schema import depends_on
from depgraph.services.base import BaseService
from depgraph.services.result import ServiceResult
from depgraph.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class CycleService(BaseService):
    """Finds and summarises dependency cycles between packages."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _enumerate_cycles(self) -> list[Cycle]:
        """Every elementary cycle longer than one edge, shortest first.

        Self-loops (a package depending on itself) are dropped.
        """
        with trace_span("build_graph") as span:
            g = self._store.graph.graph
            if span:
                span.count("nodes", g.number_of_nodes())
                span.count("edges", g.number_of_edges())

        with trace_span("simple_cycles") as span:
            found = {canonical_cycle(nodes) for nodes in nx.simple_cycles(g) if len(nodes) > 1}
            if span:
                span.count("cycles", len(found))
        return sorted(found)

    @staticmethod
    def _listing(op: str, cycles: list[Cycle], limit: int, **extra: Any) -> ServiceResult:
        shown = cycles[:limit]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                **extra,
                "count": len(shown),
                "truncated": len(cycles) > limit,
                "cycles": [cycle.to_dict() for cycle in shown],
            },
        )

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @traced
    def find_all_cycles(self) -> ServiceResult:
        """All package cycles, shortest first, capped at ``max_cycles``."""
        logger.info("Analyzing circular dependencies")
        cycles = self._enumerate_cycles()
        if cycles:
            logger.warning("Found %d circular dependencies", len(cycles))
        return self._listing("cycles", cycles, self._analysis.max_cycles)

    @traced
    def find_direct_cycles(self) -> ServiceResult:
        """Two-package cycles (A -> B -> A), each pair reported once.

        ``package_a`` always sorts before ``package_b``.
        """
        a = depends_on.alias("a")
        b = depends_on.alias("b")
        package = NodeLabel.PACKAGE.value
        stmt = (
            select(
                a.c.source_name.label("package_a"),
                a.c.target_name.label("package_b"),
            )
            .select_from(
                a.join(
                    b,
                    and_(
                        b.c.source_label == package,
                        b.c.source_name == a.c.target_name,
                        b.c.target_name == a.c.source_name,
                    ),
                )
            )
            .where(a.c.source_label == package, a.c.source_name < a.c.target_name)
            .order_by(a.c.source_name, a.c.target_name)
        )
        items = self._store.execute_query(stmt)
        if items:
            logger.warning("Found %d direct circular dependencies", len(items))
        return ServiceResult(
            ok=True,
            op="direct_cycles",
            data={"count": len(items), "items": items},
        )

    @traced
    def find_project_cycles(self, project_name: str) -> ServiceResult:
        """Cycles passing through any package *project_name* depends on."""
        logger.info("Analyzing circular dependencies for project %s", project_name)
        rows = self._store.execute_query(
            select(depends_on.c.target_name).where(
                depends_on.c.source_label == NodeLabel.PROJECT.value,
                depends_on.c.source_name == project_name,
            )
        )
        direct = {row["target_name"] for row in rows}
        cycles = [c for c in self._enumerate_cycles() if direct.intersection(c.packages)]
        return self._listing(
            "project_cycles",
            cycles,
            self._analysis.max_project_cycles,
            project=project_name,
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    @traced
    def get_statistics(self) -> ServiceResult:
        """Totals over every cycle; never capped. All zeros when acyclic."""
        lengths = [cycle.length for cycle in self._enumerate_cycles()]
        if not lengths:
            data: dict[str, Any] = {
                "total_cycles": 0,
                "shortest_cycle": 0,
                "longest_cycle": 0,
                "avg_cycle_length": 0,
            }
        else:
            data = {
                "total_cycles": len(lengths),
                "shortest_cycle": min(lengths),
                "longest_cycle": max(lengths),
                "avg_cycle_length": round(mean(lengths), 2),
            }
        return ServiceResult(ok=True, op="cycle_stats", data=data)
