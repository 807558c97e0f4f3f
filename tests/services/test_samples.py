"""Tests for SampleService."""

from __future__ import annotations

import json
from pathlib import Path

from depgraph.parsers import parse_project
from depgraph.services.samples import SampleService


class TestSampleService:
    def test_javascript(self, tmp_path: Path) -> None:
        result = SampleService(tmp_path).create("javascript")
        assert result.ok
        [path] = result.data["projects"]
        data = json.loads((Path(path) / "package.json").read_text())
        assert data["name"] == "express-app"
        assert data["dependencies"]["lodash"] == "^4.17.21"
        assert data["devDependencies"]["jest"] == "^29.6.1"

    def test_python(self, tmp_path: Path) -> None:
        [path] = SampleService(tmp_path).create("python").data["projects"]
        record = parse_project(path)
        assert record.project_name == "flask_app"
        assert record.total_dependencies == 13

    def test_circular(self, tmp_path: Path) -> None:
        paths = SampleService(tmp_path).create("circular").data["projects"]
        names = [Path(p).name for p in paths]
        assert names == [
            "authService",
            "userService",
            "paymentService",
            "sharedUtils",
            "dataAnalytics",
        ]
        assert all(Path(p).parent.name == "company_A" for p in paths)

    def test_rewrites_existing(self, tmp_path: Path) -> None:
        service = SampleService(tmp_path)
        service.create("javascript")
        assert service.create("javascript").ok

    def test_unknown_kind(self, tmp_path: Path) -> None:
        result = SampleService(tmp_path).create("rust")
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "INVALID_SAMPLE"
