"""Immutable, read-only snapshot of a graph for algorithm runs.

A `GraphView` copies everything an algorithm needs (node ids, edge
endpoints, weights, effective directions and the ordered neighbor lists) into
tuples and read-only mappings. Edits to the live `StrictGraph` after the
snapshot is taken are invisible to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from vgraph.errors import InvalidReferenceError
from vgraph.graph.store import StrictGraph
from vgraph.types.base import Cost, EdgeID, NodeID


@dataclass(frozen=True)
class EdgeRecord:
    """Frozen copy of one edge."""

    id: EdgeID
    source: NodeID
    target: NodeID
    weight: Cost
    directed: bool

    def other(self, node: NodeID) -> NodeID:
        """Return the endpoint opposite ``node``."""
        return self.target if node == self.source else self.source


@dataclass(frozen=True)
class GraphView:
    """Read-only graph snapshot.

    Attributes:
        directed: Graph mode at snapshot time.
        nodes: Node ids in ascending order.
        edges: Edge id -> EdgeRecord.
        adjacency: Node id -> ``((neighbor, edge_id), ...)`` in the store's
            adjacency order.
    """

    directed: bool
    nodes: Tuple[NodeID, ...]
    edges: Mapping[EdgeID, EdgeRecord]
    adjacency: Mapping[NodeID, Tuple[Tuple[NodeID, EdgeID], ...]]

    @classmethod
    def from_graph(cls, graph: StrictGraph, include_disabled: bool = False) -> GraphView:
        """Capture a snapshot of ``graph``.

        Args:
            graph: Live graph store.
            include_disabled: Keep disabled nodes (and their edges). By default
                they are left out, as they are hidden from the view.
        """
        node_data = graph.get_nodes()
        kept = [
            n
            for n in graph.node_ids()
            if include_disabled or not node_data[n].get("disabled", False)
        ]
        kept_set = set(kept)

        edges: Dict[EdgeID, EdgeRecord] = {}
        for e_id in graph.edge_ids():
            src, dst, _, attrs = graph.edge_data(e_id)
            if src in kept_set and dst in kept_set:
                edges[e_id] = EdgeRecord(
                    id=e_id,
                    source=src,
                    target=dst,
                    weight=attrs["weight"],
                    directed=graph.is_edge_directed(e_id),
                )

        adjacency: Dict[NodeID, Tuple[Tuple[NodeID, EdgeID], ...]] = {}
        for n in kept:
            adjacency[n] = tuple(
                (nbr, e_id) for nbr, e_id in graph.iter_neighbors(n) if e_id in edges
            )

        return cls(
            directed=graph.directed,
            nodes=tuple(kept),
            edges=MappingProxyType(edges),
            adjacency=MappingProxyType(adjacency),
        )

    def __contains__(self, node: object) -> bool:
        return node in self.adjacency

    def neighbors(self, node: NodeID) -> Tuple[Tuple[NodeID, EdgeID], ...]:
        """Return ``(neighbor, edge_id)`` pairs in adjacency order.

        Raises:
            InvalidReferenceError: If the node is not part of the snapshot.
        """
        if node not in self.adjacency:
            raise InvalidReferenceError(f"Node '{node}' is not in the graph snapshot.")
        return self.adjacency[node]

    def edges_by_id(self) -> List[EdgeRecord]:
        """Return edge records in ascending id order."""
        return [self.edges[e_id] for e_id in sorted(self.edges)]
