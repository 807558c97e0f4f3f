"""Locate the ``depgraph.toml`` that marks a project root.

Relative store and sample paths resolve against the directory holding
this file. ``DEPGRAPH_CONFIG`` pins one file and turns the search off.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "depgraph.toml"
CONFIG_ENV_VAR = "DEPGRAPH_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``depgraph.toml`` at or above *start* (default: cwd)."""
    pinned = os.environ.get(CONFIG_ENV_VAR)
    if pinned:
        path = Path(pinned).expanduser()
        return path if path.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
