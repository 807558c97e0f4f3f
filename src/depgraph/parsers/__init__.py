"""Manifest parsers — one per supported ecosystem.

:func:`parse_project` picks the parser from the manifest present in the
directory, trying ``package.json`` before ``requirements.txt``.
"""

from __future__ import annotations

from pathlib import Path

from depgraph.domain.manifest import ManifestRecord
from depgraph.errors import ManifestNotFoundError
from depgraph.parsers.javascript import JavaScriptParser
from depgraph.parsers.python import PythonParser

PARSERS: tuple[type[JavaScriptParser] | type[PythonParser], ...] = (JavaScriptParser, PythonParser)

__all__ = ["PARSERS", "JavaScriptParser", "PythonParser", "detect_parser", "parse_project"]


def detect_parser(path: str | Path) -> JavaScriptParser | PythonParser:
    """Return a parser for the first manifest found in *path*."""
    root = Path(path)
    if not root.is_dir():
        raise ManifestNotFoundError(str(path), f"Project directory not found: {path}")
    for parser_cls in PARSERS:
        parser = parser_cls(root)
        if parser.manifest_path.is_file():
            return parser
    raise ManifestNotFoundError(str(root.resolve()))


def parse_project(path: str | Path) -> ManifestRecord:
    """Detect and parse the project's dependency manifest."""
    return detect_parser(path).parse()
