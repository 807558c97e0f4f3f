"""Cycle shapes — canonical form and listing order for dependency cycles.

A cycle found by the graph engine is a list of package names with no
repeat. The canonical form rotates it to start at its smallest name and
closes it by repeating that name, so the same loop always renders the
same way no matter where the traversal entered it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, order=True)
class Cycle:
    """A closed dependency loop.

    Ordering is by ``length`` then ``packages`` so a sorted list of
    cycles is shortest-first with a stable tie-break.
    """

    length: int
    packages: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"packages": list(self.packages), "length": self.length}


def canonical_cycle(nodes: Sequence[str]) -> Cycle:
    """Rotate *nodes* to start at the smallest name and close the loop.

    ``length`` is the edge count, which equals the number of distinct
    nodes in an elementary cycle.
    """
    if not nodes:
        raise ValueError("A cycle needs at least one node")
    start = min(range(len(nodes)), key=lambda i: nodes[i])
    rotated = tuple(nodes[start:]) + tuple(nodes[:start])
    return Cycle(length=len(rotated), packages=(*rotated, rotated[0]))


def format_cycle(cycle: Cycle | Sequence[str], *, separator: str = " → ") -> str:
    """Join the cycle's names with an arrow."""
    names = cycle.packages if isinstance(cycle, Cycle) else cycle
    return separator.join(names)
