"""GraphBuilderService — turn manifest records into graph nodes and edges.

Every write is an upsert keyed on the identity constraints in the
schema, so ingesting the same manifest twice leaves node and edge counts
unchanged. Writes are issued one statement at a time, in manifest order;
a failure part-way through leaves the earlier upserts applied.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import PurePath
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from depgraph.domain.manifest import DEFAULT_PROJECT_VERSION, DependencyRecord, ManifestRecord
from depgraph.domain.types import DERIVED_SOURCE, MANIFEST_FILE_TYPE, NodeLabel
from depgraph.infrastructure.database.schema import (
    depends_on,
    files,
    has_file,
    packages,
    projects,
)
from depgraph.services.base import BaseService
from depgraph.services.result import ServiceResult
from depgraph.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

_PROJECT = NodeLabel.PROJECT.value

# Mirror every Project -> Package edge onto the Package node that shares
# the project's name. Existing edges are left untouched.
_LINK_PACKAGES_SQL = """
    INSERT INTO depends_on (
        source_label, source_name, target_name, version_constraint, type,
        direct, line_number, source, created_at, updated_at
    )
    SELECT 'Package', proj.name, r.target_name, r.version_constraint, r.type,
           0, 0, :source, :now, :now
    FROM projects AS proj
    JOIN packages AS pkg ON pkg.name = proj.name
    JOIN depends_on AS r ON r.source_label = 'Project' AND r.source_name = proj.name
    WHERE true
    ON CONFLICT (source_label, source_name, target_name) DO NOTHING
"""

_COUNT_PACKAGE_LINKS_SQL = """
    SELECT count(*) AS links
    FROM projects AS proj
    JOIN packages AS pkg ON pkg.name = proj.name
    JOIN depends_on AS r ON r.source_label = 'Project' AND r.source_name = proj.name
    JOIN depends_on AS d
      ON d.source_label = 'Package'
     AND d.source_name = proj.name
     AND d.target_name = r.target_name
"""


def _now() -> str:
    return datetime.now(UTC).isoformat()


def visualization_query(project_name: str, *, limit: int = 50) -> str:
    """Return a Cypher query that draws a project's direct dependencies.

    The text targets the Project/Package/DEPENDS_ON layout used by
    :meth:`ExportService.export_graph`; it is never executed here.
    """
    escaped = project_name.replace("\\", "\\\\").replace("'", "\\'")
    return (
        f"MATCH path = (proj:Project {{name: '{escaped}'}})-[:DEPENDS_ON]->(pkg:Package)\n"
        f"RETURN path\n"
        f"LIMIT {limit}"
    )


class GraphBuilderService(BaseService):
    """Writes parsed manifests into the graph and answers direct-edge queries."""

    # ------------------------------------------------------------------
    # build_project_graph — project, packages, edges, manifest file
    # ------------------------------------------------------------------

    @traced
    def build_project_graph(self, record: ManifestRecord) -> ServiceResult:
        """Upsert the project, each dependency, and the manifest file.

        ``dependencies_processed`` counts records, not distinct packages:
        a name listed twice is processed (and counted) twice.
        """
        logger.info("Building graph for project %s", record.project_name)
        now = _now()

        with trace_span("project_node"):
            self._upsert_project(record, now)

        with trace_span("dependency_nodes") as span:
            processed = self._upsert_dependencies(record, now)
            if span:
                span.count("dependencies", processed)

        with trace_span("file_node"):
            self._upsert_file(record, now)

        logger.info("Built graph for %s: %d dependencies", record.project_name, processed)
        return ServiceResult(
            ok=True,
            op="build_project_graph",
            data={
                "project": record.project_name,
                "dependencies_processed": processed,
                "file": record.dependency_file,
            },
        )

    def _upsert_project(self, record: ManifestRecord, now: str) -> None:
        values = {
            "name": record.project_name,
            "path": record.project_path,
            "language": record.language,
            "version": record.version or DEFAULT_PROJECT_VERSION,
            "description": record.description or "",
            "total_dependencies": record.total_dependencies,
            "updated_at": now,
        }
        stmt = sqlite_insert(projects).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[projects.c.name],
            set_={key: stmt.excluded[key] for key in values if key != "name"},
        )
        self._store.execute_write(stmt)

    def _upsert_dependencies(self, record: ManifestRecord, now: str) -> int:
        processed = 0
        for dep in record.dependencies:
            self._upsert_package(dep, record.language, now)
            self._upsert_direct_edge(record.project_name, dep, now)
            processed += 1
        return processed

    def _upsert_package(self, dep: DependencyRecord, default_language: str, now: str) -> None:
        # Last write wins: the package reflects the most recent edge touching it.
        values = {
            "name": dep.name,
            "version": dep.version,
            "operator": dep.operator,
            "language": dep.language or default_language,
            "updated_at": now,
        }
        stmt = sqlite_insert(packages).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[packages.c.name],
            set_={key: stmt.excluded[key] for key in values if key != "name"},
        )
        self._store.execute_write(stmt)

    def _upsert_direct_edge(self, project_name: str, dep: DependencyRecord, now: str) -> None:
        stmt = sqlite_insert(depends_on).values(
            source_label=_PROJECT,
            source_name=project_name,
            target_name=dep.name,
            version_constraint=dep.constraint,
            type=dep.type.value,
            direct=1,
            line_number=dep.line_number,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                depends_on.c.source_label,
                depends_on.c.source_name,
                depends_on.c.target_name,
            ],
            set_={
                "version_constraint": stmt.excluded.version_constraint,
                "type": stmt.excluded.type,
                "direct": stmt.excluded.direct,
                "line_number": stmt.excluded.line_number,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        self._store.execute_write(stmt)

    def _upsert_file(self, record: ManifestRecord, now: str) -> None:
        file_stmt = sqlite_insert(files).values(
            path=record.dependency_file,
            name=PurePath(record.dependency_file).name,
            type=MANIFEST_FILE_TYPE,
            language=record.language,
            updated_at=now,
        )
        file_stmt = file_stmt.on_conflict_do_update(
            index_elements=[files.c.path],
            set_={
                "name": file_stmt.excluded.name,
                "type": file_stmt.excluded.type,
                "language": file_stmt.excluded.language,
                "updated_at": file_stmt.excluded.updated_at,
            },
        )
        self._store.execute_write(file_stmt)

        link_stmt = sqlite_insert(has_file).values(
            project_name=record.project_name,
            file_path=record.dependency_file,
        )
        self._store.execute_write(link_stmt.on_conflict_do_nothing())

    # ------------------------------------------------------------------
    # link_package_dependencies — derive Package -> Package edges
    # ------------------------------------------------------------------

    @traced
    def link_package_dependencies(self) -> ServiceResult:
        """Create Package -> Package edges for packages that are also projects.

        Only missing edges are created; an existing derived edge keeps its
        original constraint even if the project has since changed it.
        ``links`` counts every qualifying edge, old and new alike.
        """
        logger.info("Linking package-to-package dependencies")
        with trace_span("derive_edges") as span:
            summary = self._store.execute_write(
                _LINK_PACKAGES_SQL, {"now": _now(), "source": DERIVED_SOURCE}
            )
            rows = self._store.execute_query(_COUNT_PACKAGE_LINKS_SQL)
            links = int(rows[0]["links"]) if rows else 0
            if span:
                span.count("links", max(summary.rowcount, 0))
        logger.info("Package links: %d total, %d new", links, max(summary.rowcount, 0))
        return ServiceResult(
            ok=True,
            op="link_packages",
            data={"links": links, "created": max(summary.rowcount, 0)},
        )

    # ------------------------------------------------------------------
    # Read-side queries over direct edges
    # ------------------------------------------------------------------

    @traced
    def get_project_dependencies(self, project_name: str) -> ServiceResult:
        """List a project's direct dependencies, ordered by package name."""
        stmt = (
            select(
                packages.c.name,
                packages.c.version,
                depends_on.c.version_constraint.label("constraint"),
                depends_on.c.type,
                depends_on.c.line_number,
            )
            .select_from(depends_on.join(packages, packages.c.name == depends_on.c.target_name))
            .where(
                depends_on.c.source_label == _PROJECT,
                depends_on.c.source_name == project_name,
            )
            .order_by(packages.c.name)
        )
        items = self._store.execute_query(stmt)
        return ServiceResult(
            ok=True,
            op="project_dependencies",
            data={"project": project_name, "count": len(items), "items": items},
        )

    @traced
    def get_dependency_stats(self, project_name: str) -> ServiceResult:
        """Count a project's direct dependencies per dependency type."""
        stmt = (
            select(depends_on.c.type, func.count().label("count"))
            .where(
                depends_on.c.source_label == _PROJECT,
                depends_on.c.source_name == project_name,
            )
            .group_by(depends_on.c.type)
            .order_by(depends_on.c.type)
        )
        rows = self._store.execute_query(stmt)
        stats = {str(row["type"]): int(row["count"]) for row in rows}
        return ServiceResult(
            ok=True,
            op="dependency_stats",
            data={"project": project_name, "stats": stats},
        )

    @traced
    def find_shared_dependencies(self) -> ServiceResult:
        """Packages used directly by more than one project, most-used first."""
        stmt = (
            select(
                packages.c.name.label("package"),
                packages.c.version,
                depends_on.c.source_name.label("project"),
            )
            .select_from(depends_on.join(packages, packages.c.name == depends_on.c.target_name))
            .where(depends_on.c.source_label == _PROJECT)
            .order_by(packages.c.name, depends_on.c.source_name)
        )
        grouped: dict[str, dict[str, Any]] = {}
        for row in self._store.execute_query(stmt):
            entry = grouped.setdefault(
                row["package"],
                {"package": row["package"], "version": row["version"], "projects": []},
            )
            entry["projects"].append(row["project"])

        items = [
            {**entry, "usage_count": len(entry["projects"])}
            for entry in grouped.values()
            if len(entry["projects"]) > 1
        ]
        items.sort(key=lambda item: (-item["usage_count"], item["package"]))
        return ServiceResult(
            ok=True,
            op="shared_dependencies",
            data={"count": len(items), "items": items},
        )

    @traced
    def find_projects_using_package(self, package_name: str) -> ServiceResult:
        """Projects with a direct edge to *package_name*, ordered by name."""
        stmt = (
            select(
                projects.c.name.label("project"),
                projects.c.language,
                depends_on.c.version_constraint,
                depends_on.c.type.label("dependency_type"),
            )
            .select_from(depends_on.join(projects, projects.c.name == depends_on.c.source_name))
            .where(
                depends_on.c.source_label == _PROJECT,
                depends_on.c.target_name == package_name,
            )
            .order_by(projects.c.name)
        )
        items = self._store.execute_query(stmt)
        return ServiceResult(
            ok=True,
            op="package_users",
            data={"package": package_name, "count": len(items), "items": items},
        )

    def visualize_project_graph(self, project_name: str) -> ServiceResult:
        """Return the visualization query text for *project_name*."""
        query = visualization_query(project_name, limit=self._analysis.visualize_limit)
        return ServiceResult(
            ok=True,
            op="visualize",
            data={"project": project_name, "query": query},
        )

    # ------------------------------------------------------------------
    # Store maintenance
    # ------------------------------------------------------------------

    @traced
    def get_database_stats(self) -> ServiceResult:
        """Node and edge totals for the whole graph."""
        return ServiceResult(ok=True, op="db_stats", data=self._store.get_stats())

    def clear_graph(self) -> ServiceResult:
        """Delete everything, then re-create the identity constraints."""
        logger.warning("Clearing graph store at %s", self._store.path)
        self._store.clear_database()
        self._store.create_constraints()
        return ServiceResult(ok=True, op="clear", data=self._store.get_stats())

    def ensure_constraints(self) -> ServiceResult:
        """Create tables and identity constraints if missing."""
        self._store.create_constraints()
        return ServiceResult(ok=True, op="init", data={"store": str(self._store.path)})
