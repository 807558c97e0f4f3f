"""Tests for the cycles command group against the circular sample set."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from depgraph.cli import cli
from tests.conftest import error_json


def _load_circular(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["sample", "circular", "--ingest", "--clear"])
    assert result.exit_code == 0, result.output


@pytest.mark.usefixtures("_isolated_cwd")
class TestCyclesCommands:
    def test_all(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["cycles", "all"])
        assert result.exit_code == 0, result.output
        assert "CIRCULAR DEPENDENCY REPORT" in result.stdout
        assert "Found 3 circular dependencies" in result.stdout
        assert "Cycle of length 3:" in result.stdout

    def test_all_json(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "cycles", "all"])
        data = json.loads(result.stdout)["data"]
        assert [c["length"] for c in data["cycles"]] == [2, 2, 3]
        assert data["truncated"] is False

    def test_all_quiet(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["-q", "cycles", "all"])
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 3
        assert all("→" in line for line in lines)

    def test_empty_store(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["cycles", "all"])
        assert result.exit_code == 0
        assert "No circular dependencies detected" in result.stdout

    def test_direct(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["cycles", "direct"])
        assert result.exit_code == 0, result.output
        assert "⟷" in result.stdout
        assert "sharedUtils" in result.stdout
        assert "paymentService" in result.stdout

    def test_stats(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "cycles", "stats"])
        data = json.loads(result.stdout)["data"]
        assert data["total_cycles"] == 3
        assert data["shortest_cycle"] == 2
        assert data["longest_cycle"] == 3

    def test_project(self, cli_runner: CliRunner) -> None:
        _load_circular(cli_runner)
        result = cli_runner.invoke(cli, ["--json", "cycles", "project", "dataAnalytics"])
        data = json.loads(result.stdout)["data"]
        assert data["project"] == "dataAnalytics"
        assert data["count"] == 1

    def test_project_missing_name(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "cycles", "project"])
        assert result.exit_code == 1
        data = error_json(result.stderr)
        assert data["op"] == "cycles_project"
        assert data["error"]["code"] == "MISSING_ARGUMENT"

    def test_project_missing_name_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["cycles", "project"])
        assert result.exit_code == 1
        assert "Please provide a project name" in result.stderr
