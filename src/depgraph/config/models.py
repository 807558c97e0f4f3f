"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, depgraph.toml only contains
overrides. A fresh checkout needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    # Relative paths resolve against the project root.
    path: Path = Path(".depgraph") / "depgraph.db"
    # None = detect from the store at connect time.
    json_aggregates: bool | None = None


class AnalysisConfig(BaseModel):
    """[analysis] section."""

    model_config = {"frozen": True}

    max_cycles: int = Field(default=100, ge=1)
    max_project_cycles: int = Field(default=50, ge=1)
    visualize_limit: int = Field(default=50, ge=1)


class SamplesConfig(BaseModel):
    """[samples] section."""

    model_config = {"frozen": True}

    output_dir: Path = Path("sample_projects")

