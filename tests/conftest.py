"""Shared pytest fixtures and test helpers for depgraph tests."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from depgraph.domain.manifest import DependencyRecord, ManifestRecord
from depgraph.domain.types import DependencyType
from depgraph.infrastructure.store import GraphStore
from depgraph.services.builder import GraphBuilderService
from depgraph.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """`-v` enables telemetry for the rest of the thread; switch it off again."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def store(tmp_path: Path) -> Generator[GraphStore]:
    """Connected store on a fresh SQLite file."""
    s = GraphStore(tmp_path / "graph.db")
    s.connect()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def basic_store(tmp_path: Path) -> Generator[GraphStore]:
    """Connected store with JSON aggregation switched off."""
    s = GraphStore(tmp_path / "basic.db", json_aggregates=False)
    s.connect()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from a temp directory so it creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEPGRAPH_CONFIG", raising=False)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def make_record(
    name: str,
    deps: dict[str, str] | None = None,
    *,
    language: str = "javascript",
    dev: dict[str, str] | None = None,
    **kwargs: Any,
) -> ManifestRecord:
    """Build a ManifestRecord from ``{package: constraint}`` mappings."""
    dependencies = [
        DependencyRecord(name=pkg, version=constraint.lstrip("^~"), version_range=constraint)
        for pkg, constraint in (deps or {}).items()
    ]
    dependencies += [
        DependencyRecord(
            name=pkg,
            version=constraint.lstrip("^~"),
            version_range=constraint,
            type=DependencyType.DEVELOPMENT,
        )
        for pkg, constraint in (dev or {}).items()
    ]
    defaults: dict[str, Any] = {
        "project_name": name,
        "project_path": f"/work/{name}",
        "language": language,
        "dependency_file": f"/work/{name}/package.json",
        "dependencies": dependencies,
    }
    defaults.update(kwargs)
    return ManifestRecord(**defaults)


def ingest(store: GraphStore, *records: ManifestRecord) -> None:
    """Build each record and link packages, asserting success."""
    builder = GraphBuilderService(store)
    for record in records:
        result = builder.build_project_graph(record)
        assert result.ok, result.error
    assert builder.link_package_dependencies().ok


def write_package_json(directory: Path, data: dict[str, Any]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    return directory


def error_json(stderr: str) -> dict[str, Any]:
    """Parse the JSON error result out of stderr, skipping any log lines before it."""
    return json.loads(stderr[stderr.index("{"):])
