"""Version-constraint parsing and the compatibility heuristic.

Pure functions, no infrastructure dependencies. This is deliberately
not a semver solver: two constraints are "compatible" only in the narrow
cases :func:`is_compatible` lists, everything else is treated as a
potential conflict.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import combinations

_MAJOR_PATTERN = re.compile(r"\d+")
_MINOR_PATTERN = re.compile(r"\d+\.(\d+)")

# Longest operators first so ">=" wins over ">".
_NPM_OPERATORS = ("^", "~", ">=", "<=", ">", "<", "=")

CARET = "^"
TILDE = "~"


@dataclass(frozen=True)
class VersionSpec:
    """A constraint split into its operator and version parts."""

    version: str
    operator: str = ""


def parse_npm_version(raw: str) -> VersionSpec:
    """Split an npm-style constraint (``^1.0.0``, ``>=2``, ``latest``).

    Wildcards become ``latest``, git and ``file:`` sources keep the raw
    string with a pseudo-operator, and anything else without a known
    operator is an exact pin.
    """
    if raw in ("*", "latest"):
        return VersionSpec(version="latest")
    if "git" in raw or "github" in raw:
        return VersionSpec(version=raw, operator="git")
    if raw.startswith("file:"):
        return VersionSpec(version=raw, operator="file")
    for op in _NPM_OPERATORS:
        if raw.startswith(op) and len(raw) > len(op):
            return VersionSpec(version=raw[len(op) :], operator=op)
    return VersionSpec(version=raw)


def extract_major(version: str) -> int | None:
    """Return the first run of digits, or None if there is none."""
    match = _MAJOR_PATTERN.search(version)
    return int(match.group(0)) if match else None


def extract_minor(version: str) -> int | None:
    """Return the second group of the first ``digits.digits`` pattern."""
    match = _MINOR_PATTERN.search(version)
    return int(match.group(1)) if match else None


def is_compatible(version_a: str, version_b: str) -> bool:
    """Heuristically decide whether two constraints can coexist.

    - identical strings are compatible
    - two caret constraints are compatible when their majors match
    - two tilde constraints are compatible when major and minor match
    - every other combination is reported as incompatible
    """
    if version_a == version_b:
        return True

    if version_a.startswith(CARET) and version_b.startswith(CARET):
        return extract_major(version_a) == extract_major(version_b)

    if version_a.startswith(TILDE) and version_b.startswith(TILDE):
        return extract_major(version_a) == extract_major(version_b) and extract_minor(
            version_a
        ) == extract_minor(version_b)

    return False


def all_compatible(versions: list[str]) -> bool:
    """True when every unordered pair of distinct versions is compatible."""
    distinct = list(dict.fromkeys(versions))
    return all(is_compatible(a, b) for a, b in combinations(distinct, 2))
