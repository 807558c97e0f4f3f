"""Exception hierarchy shared by every layer.

Each error carries a stable ``code`` so the CLI can turn it into a
:class:`~depgraph.services.result.ServiceError` without inspecting the
message text.
"""

from __future__ import annotations


class DepGraphError(Exception):
    """Base class for all depgraph failures."""

    code = "DEPGRAPH_ERROR"

    def __init__(self, message: str, *, detail: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, str] = detail or {}


class StoreConnectionError(DepGraphError):
    """The graph store could not be opened or initialized."""

    code = "STORE_UNAVAILABLE"

    GUIDANCE = (
        "Check that the store path is writable, that no other process holds "
        "an exclusive lock on it, and that DEPGRAPH_STORE__PATH / depgraph.toml "
        "point at the intended database."
    )

    def __init__(self, message: str, *, location: str) -> None:
        super().__init__(
            f"Failed to connect to graph store at {location}: {message}",
            detail={"location": location, "guidance": self.GUIDANCE},
        )


class StoreCapabilityMissingError(DepGraphError):
    """An optional store capability was required but is not available."""

    code = "CAPABILITY_MISSING"

    def __init__(self, capability: str) -> None:
        super().__init__(
            f"Graph store lacks the '{capability}' capability",
            detail={"capability": capability},
        )
        self.capability = capability


class QueryExecutionError(DepGraphError):
    """A read or write statement failed inside the store."""

    code = "QUERY_FAILED"


class ManifestNotFoundError(DepGraphError):
    """No supported dependency manifest exists at the given path."""

    code = "MANIFEST_NOT_FOUND"

    def __init__(self, path: str, message: str | None = None) -> None:
        super().__init__(
            message or f"No package.json or requirements.txt found in {path}",
            detail={"path": path},
        )
        self.path = path


class ManifestParseError(DepGraphError):
    """A manifest exists but could not be parsed."""

    code = "MANIFEST_UNPARSEABLE"

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}", detail={"path": path})
        self.path = path
        self.reason = reason
