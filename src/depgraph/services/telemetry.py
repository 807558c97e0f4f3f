"""Per-operation timing for service calls, reported under ``--verbose``.

A ``@traced`` service method opens a root span and ``trace_span`` nests
the steps it runs (parse, upsert, link, enumerate) beneath it. Steps
record work counts such as dependencies written, links created or cycles
found; the root span sums them into ``totals`` so ``meta.telemetry``
shows both where the time went and how much graph work was done.
"""

from __future__ import annotations

import functools
import time
from collections import Counter
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from depgraph.services.result import ServiceResult

logger = structlog.get_logger(__name__)

_enabled: ContextVar[bool] = ContextVar("depgraph_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("depgraph_active_span", default=None)


@dataclass
class Span:
    """One timed step of a service operation."""

    name: str
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    counts: dict[str, int] = field(default_factory=dict)
    steps: list[Span] = field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def close(self) -> None:
        self.finished = time.perf_counter()

    def count(self, key: str, value: int) -> None:
        """Add *value* to this step's *key* counter (``dependencies``, ``cycles`` ...)."""
        self.counts[key] = self.counts.get(key, 0) + value

    def totals(self) -> dict[str, int]:
        merged = Counter(self.counts)
        for step in self.steps:
            merged.update(step.totals())
        return dict(merged)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.counts:
            data["counts"] = dict(self.counts)
        if self.steps:
            data["steps"] = [step.to_dict() for step in self.steps]
        return data


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a step of the running traced operation.

    Yields None outside a traced call or when telemetry is off, so call
    sites guard their ``count`` calls with ``if span:``.
    """
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    step = Span(name=name)
    parent.steps.append(step)
    token = _active.set(step)
    try:
        yield step
    finally:
        step.close()
        _active.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time a service method; a returned ServiceResult gains ``meta.telemetry``."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        parent = _active.get()
        if parent is not None:
            parent.steps.append(root)
        token = _active.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = True
        finally:
            root.close()
            _active.reset(token)
            logger.debug(
                "operation.timed",
                operation=root.name,
                duration_ms=round(root.duration_ms, 2),
                ok=ok,
                **root.totals(),
            )

        if isinstance(result, ServiceResult):
            report = {**root.to_dict(), "totals": root.totals()}
            result = result.model_copy(  # type: ignore[assignment]
                update={"meta": {**(result.meta or {}), "telemetry": report}}
            )
        return result

    return wrapper


def enable_telemetry() -> None:
    """Switch timing on for the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
