"""requirements.txt parser."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from depgraph.domain.manifest import DependencyRecord, ManifestRecord
from depgraph.domain.types import DependencyType, Language
from depgraph.errors import ManifestNotFoundError, ManifestParseError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "requirements.txt"

# name[extras]<operator>version
REQUIREMENT_PATTERN = re.compile(r"^([a-zA-Z0-9_\-\.]+)(\[[\w,]+\])?(==|>=|<=|>|<|~=)?(.+)?$")


def parse_requirement_line(line: str, line_number: int) -> DependencyRecord | None:
    """Parse one cleaned requirement line, or return None if it does not match."""
    match = REQUIREMENT_PATTERN.match(line)
    if match is None:
        logger.warning("Could not parse line %d: %s", line_number, line)
        return None

    name, extras, operator, version = match.groups()
    operator = operator or ""
    version = (version or "").strip()
    return DependencyRecord(
        name=name,
        version=version or "latest",
        version_range=operator + version,
        operator=operator,
        extras=extras or "",
        type=DependencyType.PRODUCTION,
        line_number=line_number,
    )


class PythonParser:
    """Read a project's ``requirements.txt`` into a :class:`ManifestRecord`."""

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
                f"No requirements.txt found in {self.project_path}",
            )

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestParseError(str(path), str(exc)) from exc

        dependencies: list[DependencyRecord] = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            clean = line.split("#", 1)[0].strip()
            # Blank lines and pip options (-r, -e, --index-url, ...)
            if not clean or clean.startswith("-"):
                continue
            dep = parse_requirement_line(clean, line_number)
            if dep is not None:
                dependencies.append(dep)

        logger.debug("Parsed %d dependencies from %s", len(dependencies), path)
        return ManifestRecord(
            project_name=self.project_name,
            project_path=str(self.project_path),
            language=Language.PYTHON,
            dependency_file=str(path),
            dependencies=dependencies,
        )
