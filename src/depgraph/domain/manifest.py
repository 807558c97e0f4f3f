"""Manifest records — the normalized shape every parser produces.

The graph builder consumes only these models, so a new ecosystem needs
nothing more than a parser that emits a valid :class:`ManifestRecord`.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from pydantic import BaseModel, Field, model_validator

from depgraph.domain.types import DependencyType

DEFAULT_PROJECT_VERSION = "1.0.0"


class DependencyRecord(BaseModel):
    """One dependency line from a manifest.

    Attributes:
        name: Package name as written in the manifest.
        version: Version with any operator stripped (``latest`` when unpinned).
        version_range: The raw constraint string (``^4.18.0``, ``>=1.2``).
        operator: Leading operator split off the constraint, empty for exact pins.
        type: production, development, or peer.
        line_number: 1-based manifest line, 0 when unknown.
        extras: Python extras (``[async]``), empty elsewhere.
        language: Ecosystem override; the builder falls back to the manifest's.
    """

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    version: str
    version_range: str | None = None
    operator: str = ""
    type: DependencyType = DependencyType.PRODUCTION
    line_number: int = Field(default=0, ge=0)
    extras: str = ""
    language: str | None = None

    @property
    def constraint(self) -> str:
        """The constraint stored on the DEPENDS_ON edge."""
        return self.version_range or self.version


class ManifestRecord(BaseModel):
    """A parsed project and its ordered dependency list."""

    model_config = {"frozen": True}

    project_name: str = Field(min_length=1)
    project_path: str
    language: str
    version: str | None = None
    description: str | None = None
    dependency_file: str
    dependencies: list[DependencyRecord] = Field(default_factory=list)
    total_dependencies: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _default_total(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("total_dependencies") is None:
            data = {**data, "total_dependencies": len(data.get("dependencies") or [])}
        return data

    @property
    def stats(self) -> dict[str, int]:
        """Dependency counts per type, every known type present."""
        counts = Counter(dep.type.value for dep in self.dependencies)
        return {t.value: counts.get(t.value, 0) for t in DependencyType}
