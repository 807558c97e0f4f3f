"""Tests for identity constraints on the graph tables."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from depgraph.infrastructure.database.engine import init_database
from depgraph.infrastructure.database.schema import depends_on, packages, projects


@pytest.fixture
def engine(tmp_path: Path):
    e = init_database(tmp_path / "graph.db")
    try:
        yield e
    finally:
        e.dispose()


class TestConstraints:
    def test_project_name_unique(self, engine) -> None:
        with engine.begin() as conn:
            conn.execute(insert(projects).values(name="app"))
        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(insert(projects).values(name="app"))

    def test_edge_unique_per_endpoints(self, engine) -> None:
        row = {"source_label": "Project", "source_name": "app", "target_name": "lodash"}
        with engine.begin() as conn:
            conn.execute(insert(packages).values(name="lodash"))
            conn.execute(insert(depends_on).values(**row))
        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(insert(depends_on).values(**row))

    def test_edge_target_must_exist(self, engine) -> None:
        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(
                insert(depends_on).values(
                    source_label="Project", source_name="app", target_name="ghost"
                )
            )

    def test_source_label_checked(self, engine) -> None:
        with engine.begin() as conn:
            conn.execute(insert(packages).values(name="lodash"))
        with pytest.raises(IntegrityError), engine.begin() as conn:
            conn.execute(
                insert(depends_on).values(
                    source_label="File", source_name="x", target_name="lodash"
                )
            )
