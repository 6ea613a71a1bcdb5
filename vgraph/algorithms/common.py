"""Shared helpers for the stepwise algorithm variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from vgraph.types.base import Cost, EdgeID, NodeID

#: Predecessor map: node -> (previous node, edge used to reach it).
PredMap = Dict[NodeID, Tuple[NodeID, EdgeID]]


@dataclass(frozen=True)
class AlgorithmResult:
    """Final (or partial, if read mid-run) outcome of an algorithm run.

    Only the fields meaningful for the algorithm are filled in.

    Attributes:
        visited: Nodes in the order they were visited.
        distances: Node -> depth (BFS), discovery time (DFS) or distance (Dijkstra).
        predecessors: Node -> (previous node, edge).
        tree_edges: Edges selected into a spanning tree/forest.
        total_weight: Total weight of the spanning forest.
        path: Node path to the requested target, or the topological order.
        path_edges: Edges along ``path`` when it is a path.
        has_cycle: Topological sort found a cycle.
    """

    visited: Tuple[NodeID, ...] = ()
    distances: Mapping[NodeID, Cost] = field(default_factory=dict)
    predecessors: Mapping[NodeID, Tuple[NodeID, EdgeID]] = field(default_factory=dict)
    tree_edges: Tuple[EdgeID, ...] = ()
    total_weight: Optional[Cost] = None
    path: Tuple[NodeID, ...] = ()
    path_edges: Tuple[EdgeID, ...] = ()
    has_cycle: bool = False


def resolve_path(pred: PredMap, target: NodeID) -> Tuple[Tuple[NodeID, ...], Tuple[EdgeID, ...]]:
    """Walk a predecessor map back from ``target``.

    Returns:
        ``(nodes, edges)`` from the root of the search to ``target``.
    """
    nodes = [target]
    edges = []
    node = target
    while node in pred:
        prev, e_id = pred[node]
        nodes.append(prev)
        edges.append(e_id)
        node = prev
    nodes.reverse()
    edges.reverse()
    return tuple(nodes), tuple(edges)
