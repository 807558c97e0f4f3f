"""BaseService — foundation for all depgraph services.

Every service receives a connected :class:`GraphStore` at construction
time and issues its reads and writes through it. The store is owned by
the caller (the CLI context or a test fixture), never by the service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from depgraph.config.models import AnalysisConfig

if TYPE_CHECKING:
    from depgraph.infrastructure.store import GraphStore


class BaseService:
    """Base for service-layer classes.

    Usage::

        class CycleService(BaseService):
            def find_all_cycles(self) -> ServiceResult:
                g = self._store.graph.graph
                ...
    """

    def __init__(self, store: GraphStore, *, analysis: AnalysisConfig | None = None) -> None:
        self._store = store
        self._analysis = analysis or AnalysisConfig()
