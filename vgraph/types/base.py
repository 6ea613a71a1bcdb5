"""Enums and aliases shared across the graph engine."""

from __future__ import annotations

from enum import IntEnum
from typing import Tuple, Union

#: Node identifier; assigned by the graph store and never reused.
NodeID = int

#: Edge identifier; assigned by the graph store and never reused.
EdgeID = int

#: Numeric edge weight / path distance.
Cost = Union[int, float]

#: 2D position in layout space.
Position = Tuple[float, float]


class AlgorithmKind(IntEnum):
    """Algorithms supported by the stepwise runtime."""

    BFS = 1
    DFS = 2
    DIJKSTRA = 3
    PRIM = 4
    KRUSKAL = 5
    TOPOLOGICAL_SORT = 6

    @classmethod
    def from_string(cls, value: str) -> "AlgorithmKind":
        """Parse a case-insensitive algorithm name.

        Accepts the member names plus dashed forms such as ``topological-sort``
        and the short alias ``topo``.

        Raises:
            ValueError: If the string does not name an algorithm.
        """
        normalized = value.strip().upper().replace("-", "_")
        if normalized == "TOPO":
            normalized = "TOPOLOGICAL_SORT"
        try:
            return cls[normalized]
        except KeyError:
            valid = ", ".join(e.name.lower() for e in cls)
            raise ValueError(
                f"Invalid algorithm '{value}'. Valid values are: {valid}"
            ) from None


class EventKind(IntEnum):
    """Kinds of events an algorithm runtime emits."""

    NODE_VISITED = 1
    NODE_FINISHED = 2
    EDGE_RELAXED = 3
    EDGE_DISCARDED = 4
    PATH_FOUND = 5
    ALGORITHM_COMPLETE = 6


class NodeHighlight(IntEnum):
    """Highlight state of a node in the view model."""

    NONE = 0
    FRONTIER = 1  # discovered / reached through a relaxed edge
    VISITED = 2
    FINISHED = 3
    PATH = 4


class EdgeHighlight(IntEnum):
    """Highlight state of an edge in the view model."""

    NONE = 0
    DISCARDED = 1
    RELAXED = 2
    PATH = 3
