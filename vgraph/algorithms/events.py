"""Algorithm event records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from vgraph.types.base import EdgeID, EventKind, NodeID


@dataclass(frozen=True)
class AlgorithmEvent:
    """One discrete step of algorithm progress.

    Events are produced in strict execution order; ``index`` is the position
    of the event in its run (assigned by the runtime).

    Attributes:
        kind: What happened.
        node: Node visited/finished, or the node an edge leads to.
        edge: Edge relaxed or discarded.
        value: Optional scalar (depth, distance, weight, order position, ...).
        path: Node sequence carried by PATH_FOUND.
        path_edges: Edge sequence carried by PATH_FOUND.
        index: Sequence number within the run.
    """

    kind: EventKind
    node: Optional[NodeID] = None
    edge: Optional[EdgeID] = None
    value: Optional[float] = None
    path: Tuple[NodeID, ...] = ()
    path_edges: Tuple[EdgeID, ...] = ()
    index: int = -1

    @property
    def is_terminal(self) -> bool:
        return self.kind == EventKind.ALGORITHM_COMPLETE

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation."""
        return {
            "index": self.index,
            "kind": self.kind.name.lower(),
            "node": self.node,
            "edge": self.edge,
            "value": self.value,
            "path": list(self.path),
            "path_edges": list(self.path_edges),
        }
