"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: All public service-layer methods return ServiceResult.
The CLI renderers and the JSON output mode consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from depgraph.errors import DepGraphError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: DepGraphError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"cycles"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, exc: DepGraphError) -> ServiceResult:
        """Wrap a raised :class:`DepGraphError` as a failed result."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
