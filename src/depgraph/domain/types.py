"""Graph labels and classification enums.

Label and edge-type values are the persisted wire contract: external
tools that read an exported graph match on these exact strings.
"""

from __future__ import annotations

from enum import StrEnum


class NodeLabel(StrEnum):
    """Node kinds stored in the graph."""

    PROJECT = "Project"
    PACKAGE = "Package"
    FILE = "File"


class EdgeType(StrEnum):
    """Relationship kinds stored in the graph."""

    DEPENDS_ON = "DEPENDS_ON"
    HAS_FILE = "HAS_FILE"


class DependencyType(StrEnum):
    """How a manifest declares a dependency."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    PEER = "peer"


class Language(StrEnum):
    """Manifest ecosystems understood by the parsers."""

    JAVASCRIPT = "javascript"
    PYTHON = "python"


# Tag on Package -> Package edges inferred by the link step.
DERIVED_SOURCE = "derived"

# File.type for every manifest file node.
MANIFEST_FILE_TYPE = "dependency_manifest"
