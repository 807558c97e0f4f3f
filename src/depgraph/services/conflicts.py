"""ConflictService — packages depended on with differing constraints.

Two execution strategies produce the same findings:

- **aggregated** — grouping and the distinct-constraint filter run inside
  the store via ``json_group_array``; used when the store reports the
  ``json_aggregates`` capability.
- **basic** — the store returns flat edge rows for every package with
  more than one dependent project; grouping and filtering run here.

The strategy is picked from the capability flag fixed at connect time.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy import func, select

from depgraph.domain.types import NodeLabel
from depgraph.domain.versions import all_compatible, is_compatible
from depgraph.infrastructure.database.schema import depends_on, packages
from depgraph.infrastructure.store import JSON_AGGREGATES
from depgraph.services.base import BaseService
from depgraph.services.result import ServiceResult
from depgraph.services.telemetry import traced

logger = logging.getLogger(__name__)

_PROJECT = NodeLabel.PROJECT.value

_AGGREGATED_CONFLICTS_SQL = """
    SELECT r.target_name AS package_name,
           json_group_array(
               json_object('project', r.source_name,
                           'version', r.version_constraint,
                           'type', r.type)
           ) AS dependencies
    FROM depends_on AS r
    JOIN projects AS proj ON proj.name = r.source_name
    WHERE r.source_label = 'Project'
    GROUP BY r.target_name
    HAVING count(DISTINCT r.source_name) > 1
       AND count(DISTINCT r.version_constraint) > 1
    ORDER BY r.target_name
"""

_SHARED_EDGES_SQL = """
    SELECT r.target_name AS package_name,
           r.source_name AS project,
           r.version_constraint AS version,
           r.type AS type
    FROM depends_on AS r
    JOIN projects AS proj ON proj.name = r.source_name
    WHERE r.source_label = 'Project'
      AND r.target_name IN (
          SELECT target_name FROM depends_on
          WHERE source_label = 'Project'
          GROUP BY target_name
          HAVING count(DISTINCT source_name) > 1
      )
    ORDER BY r.target_name, r.source_name
"""

_PACKAGE_EDGES_SQL = """
    SELECT r.source_name AS project,
           r.version_constraint AS version,
           r.type AS type
    FROM depends_on AS r
    JOIN projects AS proj ON proj.name = r.source_name
    WHERE r.source_label = 'Project' AND r.target_name = :package_name
    ORDER BY r.source_name
"""


def _distinct_versions(dependencies: list[dict[str, Any]]) -> list[str]:
    return list(dict.fromkeys(dep["version"] for dep in dependencies))


def _group_by_version(dependencies: list[dict[str, Any]]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    for dep in dependencies:
        groups.setdefault(dep["version"], []).append(dep["project"])
    return groups


def _conflict(package_name: str, dependencies: list[dict[str, Any]]) -> dict[str, Any]:
    dependencies = sorted(dependencies, key=lambda dep: dep["project"])
    versions = _distinct_versions(dependencies)
    return {
        "package_name": package_name,
        "dependencies": dependencies,
        "versions": _group_by_version(dependencies),
        "compatible": all_compatible(versions),
    }


class ConflictService(BaseService):
    """Finds version-constraint disagreements between projects."""

    is_compatible = staticmethod(is_compatible)

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _conflicts_aggregated(self) -> list[dict[str, Any]]:
        self._store.require(JSON_AGGREGATES)
        rows = self._store.execute_query(_AGGREGATED_CONFLICTS_SQL)
        return [_conflict(row["package_name"], json.loads(row["dependencies"])) for row in rows]

    def _conflicts_basic(self) -> list[dict[str, Any]]:
        grouped: dict[str, list[dict[str, Any]]] = {}
        for row in self._store.execute_query(_SHARED_EDGES_SQL):
            grouped.setdefault(row["package_name"], []).append(
                {"project": row["project"], "version": row["version"], "type": row["type"]}
            )
        return [
            _conflict(name, deps)
            for name, deps in sorted(grouped.items())
            if len(_distinct_versions(deps)) > 1
        ]

    @staticmethod
    def _conflict_result(
        conflicts: list[dict[str, Any]], strategy: str, warnings: list[str]
    ) -> ServiceResult:
        if conflicts:
            logger.warning("Found %d packages with version conflicts", len(conflicts))
        return ServiceResult(
            ok=True,
            op="conflicts",
            data={"count": len(conflicts), "strategy": strategy, "conflicts": conflicts},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @traced
    def find_version_conflicts(self) -> ServiceResult:
        """Packages whose dependent projects use more than one constraint.

        Falls back to :meth:`find_version_conflicts_basic` when the store
        cannot aggregate JSON.
        """
        logger.info("Analyzing version conflicts")
        if not self._store.capabilities.has(JSON_AGGREGATES):
            msg = "JSON aggregates unavailable in store, using basic conflict detection"
            logger.warning(msg)
            return self._conflict_result(self._conflicts_basic(), "basic", [msg])
        return self._conflict_result(self._conflicts_aggregated(), "aggregated", [])

    @traced
    def find_version_conflicts_basic(self) -> ServiceResult:
        """Same findings as :meth:`find_version_conflicts`, grouped in-process."""
        return self._conflict_result(self._conflicts_basic(), "basic", [])

    @traced
    def find_package_conflict(self, package_name: str) -> ServiceResult:
        """Conflict details for one package, or ``conflict: None``.

        ``None`` covers unknown packages, packages with a single dependent
        project, and packages whose dependents all agree.
        """
        logger.info("Checking version conflicts for %s", package_name)
        deps = self._store.execute_query(_PACKAGE_EDGES_SQL, {"package_name": package_name})
        versions = _distinct_versions(deps)
        conflict = _conflict(package_name, deps) if len(versions) > 1 else None
        return ServiceResult(
            ok=True,
            op="package_conflict",
            data={
                "package_name": package_name,
                "dependents": len(deps),
                "distinct_versions": versions,
                "conflict": conflict,
            },
        )

    @traced
    def get_statistics(self) -> ServiceResult:
        """Package totals plus a fresh full conflict scan."""
        total_rows = self._store.execute_query(
            select(func.count(func.distinct(packages.c.name)).label("total"))
        )
        shared_subquery = (
            select(depends_on.c.target_name)
            .where(depends_on.c.source_label == _PROJECT)
            .group_by(depends_on.c.target_name)
            .having(func.count(func.distinct(depends_on.c.source_name)) > 1)
            .subquery()
        )
        shared_rows = self._store.execute_query(
            select(func.count().label("shared")).select_from(shared_subquery)
        )
        conflicts = self.find_version_conflicts()
        return ServiceResult(
            ok=True,
            op="conflict_stats",
            data={
                "total_packages": int(total_rows[0]["total"]) if total_rows else 0,
                "shared_packages": int(shared_rows[0]["shared"]) if shared_rows else 0,
                "conflicting_packages": conflicts.data["count"],
            },
            warnings=conflicts.warnings,
        )
