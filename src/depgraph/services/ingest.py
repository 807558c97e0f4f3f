"""IngestService — parse one project directory and load it into the graph.

Orchestrates the full pipeline the ``ingest`` command runs: optional
clear, manifest parse, graph build, package linking, then a read-back of
what was stored. Parse and store errors propagate to the caller.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from depgraph.parsers import parse_project
from depgraph.services.base import BaseService
from depgraph.services.builder import GraphBuilderService
from depgraph.services.result import ServiceResult
from depgraph.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


class IngestService(BaseService):
    """Load a project's manifest and report what the graph now holds."""

    @traced
    def ingest(self, path: str | Path, *, clear: bool = False) -> ServiceResult:
        builder = GraphBuilderService(self._store, analysis=self._analysis)
        warnings: list[str] = []

        if clear:
            with trace_span("clear"):
                builder.clear_graph()

        with trace_span("parse"):
            record = parse_project(path)
        logger.info(
            "Parsed %s (%s): %d dependencies",
            record.project_name,
            record.language,
            record.total_dependencies,
        )
        if not record.dependencies:
            warnings.append(f"{record.dependency_file} declares no dependencies")

        built = builder.build_project_graph(record)
        linked = builder.link_package_dependencies()

        deps = builder.get_project_dependencies(record.project_name).data["items"]
        grouped: dict[str, list[dict[str, Any]]] = {}
        for dep in deps:
            grouped.setdefault(str(dep["type"]), []).append(dep)

        stats = builder.get_dependency_stats(record.project_name).data["stats"]
        query = builder.visualize_project_graph(record.project_name).data["query"]
        database = builder.get_database_stats().data

        return ServiceResult(
            ok=True,
            op="ingest",
            data={
                "project": record.project_name,
                "language": str(record.language),
                "version": record.version,
                "dependency_file": record.dependency_file,
                "dependencies_processed": built.data["dependencies_processed"],
                "links": linked.data["links"],
                "dependencies": grouped,
                "stats": stats,
                "query": query,
                "database": database,
            },
            warnings=warnings,
        )

    @traced
    def ingest_many(self, paths: list[str] | list[Path], *, clear: bool = False) -> ServiceResult:
        """Ingest several projects in order, clearing at most once up front.

        Package links are re-derived after each project, so the final
        ``links`` total covers dependencies between every project loaded.
        """
        loaded: list[dict[str, Any]] = []
        warnings: list[str] = []
        last: ServiceResult | None = None
        for index, path in enumerate(paths):
            last = self.ingest(path, clear=clear and index == 0)
            loaded.append(
                {
                    "project": last.data["project"],
                    "dependencies_processed": last.data["dependencies_processed"],
                }
            )
            warnings.extend(last.warnings)

        return ServiceResult(
            ok=True,
            op="ingest_batch",
            data={
                "projects": loaded,
                "links": last.data["links"] if last else 0,
                "database": last.data["database"] if last else self._store.get_stats(),
            },
            warnings=warnings,
        )
