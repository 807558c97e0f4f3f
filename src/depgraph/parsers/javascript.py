"""package.json parser."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from depgraph.domain.manifest import DEFAULT_PROJECT_VERSION, DependencyRecord, ManifestRecord
from depgraph.domain.types import DependencyType, Language
from depgraph.domain.versions import parse_npm_version
from depgraph.errors import ManifestNotFoundError, ManifestParseError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"

# Manifest sections in the order their dependencies are emitted.
SECTIONS: tuple[tuple[str, DependencyType], ...] = (
    ("dependencies", DependencyType.PRODUCTION),
    ("devDependencies", DependencyType.DEVELOPMENT),
    ("peerDependencies", DependencyType.PEER),
)


def _key_line(lines: list[str], key: str, *, start: int = 0) -> int:
    """1-based line of the first ``"key":`` at or after *start*, 0 if absent."""
    pattern = re.compile(rf'"{re.escape(key)}"\s*:')
    for idx in range(start, len(lines)):
        if pattern.search(lines[idx]):
            return idx + 1
    return 0


class JavaScriptParser:
    """Read a project's ``package.json`` into a :class:`ManifestRecord`."""

    def __init__(self, project_path: str | Path) -> None:
        self.project_path = Path(project_path).resolve()
        self.project_name = self.project_path.name

    @property
    def manifest_path(self) -> Path:
        return self.project_path / MANIFEST_NAME

    def parse(self) -> ManifestRecord:
        path = self.manifest_path
        if not path.is_file():
            raise ManifestNotFoundError(
                str(self.project_path),
                f"No package.json found in {self.project_path}",
            )

        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestParseError(str(path), str(exc)) from exc
        if not isinstance(data, dict):
            raise ManifestParseError(str(path), "top-level value is not an object")

        lines = text.splitlines()
        dependencies: list[DependencyRecord] = []
        for section, dep_type in SECTIONS:
            dependencies.extend(self._extract(data.get(section) or {}, dep_type, lines, section))

        logger.debug("Parsed %d dependencies from %s", len(dependencies), path)
        return ManifestRecord(
            project_name=data.get("name") or self.project_name,
            project_path=str(self.project_path),
            language=Language.JAVASCRIPT,
            version=data.get("version") or DEFAULT_PROJECT_VERSION,
            description=data.get("description") or "",
            dependency_file=str(path),
            dependencies=dependencies,
        )

    def _extract(
        self,
        deps: dict[str, Any],
        dep_type: DependencyType,
        lines: list[str],
        section: str,
    ) -> list[DependencyRecord]:
        if not isinstance(deps, dict):
            raise ManifestParseError(str(self.manifest_path), f"'{section}' is not an object")

        section_line = _key_line(lines, section)
        records = []
        for name, raw in deps.items():
            raw = str(raw)
            spec = parse_npm_version(raw)
            records.append(
                DependencyRecord(
                    name=name,
                    version=spec.version,
                    version_range=raw,
                    operator=spec.operator,
                    type=dep_type,
                    line_number=_key_line(lines, name, start=max(section_line - 1, 0)),
                )
            )
        return records
