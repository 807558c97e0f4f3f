"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from depgraph.errors import ManifestNotFoundError, QueryExecutionError
from depgraph.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="cycles", data={"count": 0})
        assert result.ok is True
        assert result.data == {"count": 0}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="test", data={"key": "value"}, meta={"n": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["data"]["key"] == "value"
        assert parsed["meta"]["n"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="test")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_failure_from_exception(self) -> None:
        result = ServiceResult.failure("ingest", ManifestNotFoundError("/tmp/x"))
        assert result.ok is False
        assert result.op == "ingest"
        assert result.error is not None
        assert result.error.code == "MANIFEST_NOT_FOUND"
        assert result.error.detail == {"path": "/tmp/x"}


class TestServiceError:
    def test_from_exception(self) -> None:
        error = ServiceError.from_exception(QueryExecutionError("no such table: x"))
        assert error.code == "QUERY_FAILED"
        assert error.message == "no such table: x"
        assert error.detail == {}
