"""Tests for the graph query and export commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from depgraph.cli import cli


def _load_samples(runner: CliRunner) -> None:
    for kind in ("javascript", "circular"):
        result = runner.invoke(cli, ["sample", kind, "--ingest"])
        assert result.exit_code == 0, result.output


@pytest.mark.usefixtures("_isolated_cwd")
class TestGraphQueries:
    def test_deps(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["graph", "deps", "express-app"])
        assert result.exit_code == 0, result.output
        assert "express" in result.stdout
        assert "15 dependencies" in result.stdout

    def test_deps_json(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "graph", "deps", "express-app"])
        items = json.loads(result.stdout)["data"]["items"]
        assert len(items) == 15
        assert {item["type"] for item in items} == {"production", "development"}

    def test_stats(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "graph", "stats", "express-app"])
        assert json.loads(result.stdout)["data"]["stats"] == {"development": 5, "production": 10}

    def test_shared(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "graph", "shared"])
        shared = {item["package"]: item for item in json.loads(result.stdout)["data"]["items"]}
        assert shared["express"]["usage_count"] == 4

    def test_users(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["graph", "users", "axios"])
        assert result.exit_code == 0, result.output
        assert "dataAnalytics" in result.stdout
        assert "paymentService" in result.stdout

    def test_visualize(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graph", "visualize", "express-app"])
        assert result.exit_code == 0, result.output
        assert "express-app" in result.stdout
        assert "DEPENDS_ON" in result.stdout


@pytest.mark.usefixtures("_isolated_cwd")
class TestGraphExport:
    def test_dot_to_stdout(self, cli_runner: CliRunner) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(cli, ["graph", "export"])
        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("digraph dependencies {")
        assert '"Project:express-app"' in result.stdout

    def test_json_to_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        _load_samples(cli_runner)
        result = cli_runner.invoke(
            cli, ["graph", "export", "--format", "json", "--output", "out/graph.json"]
        )
        assert result.exit_code == 0, result.output
        assert "out/graph.json" in result.stdout
        data = json.loads((tmp_path / "out" / "graph.json").read_text(encoding="utf-8"))
        assert {"nodes", "links"} <= data.keys()
        assert any(node["id"] == "Project:authService" for node in data["nodes"])

    def test_file_result_omits_content(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "graph", "export", "--output", "g.dot"])
        data = json.loads(result.stdout)["data"]
        assert "content" not in data
        assert data["output"] == "g.dot"

    def test_unknown_format_rejected(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["graph", "export", "--format", "svg"])
        assert result.exit_code == 2
