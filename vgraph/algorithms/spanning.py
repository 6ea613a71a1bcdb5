"""Stepwise minimum spanning forest: Prim and Kruskal.

Both require an undirected graph and treat every edge as undirected, even
edges carrying a per-edge ``directed`` override.

Prim grows one tree at a time from the start node (lowest id by default),
then from the lowest id not yet in the forest. Its heap holds
``(weight, node, edge)`` so weight ties go to the lowest node id, then the
lowest edge id. Kruskal examines edges in ``(weight, edge id)`` order.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from heapq import heappop, heappush
from typing import Deque, Dict, List, Optional, Set, Tuple

from vgraph.algorithms.common import AlgorithmResult, PredMap
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.algorithms.spf import check_non_negative
from vgraph.errors import InvalidInputError, WrongGraphModeError
from vgraph.graph.view import GraphView
from vgraph.types.base import Cost, EdgeID, EventKind, NodeID


def _require_undirected(view: GraphView, algorithm: str) -> None:
    if view.directed:
        raise WrongGraphModeError(f"{algorithm} requires an undirected graph.")


def _undirected_incidence(view: GraphView) -> Dict[NodeID, List[Tuple[NodeID, EdgeID]]]:
    incidence: Dict[NodeID, List[Tuple[NodeID, EdgeID]]] = {n: [] for n in view.nodes}
    for edge in view.edges_by_id():
        if edge.source == edge.target:
            continue
        incidence[edge.source].append((edge.target, edge.id))
        incidence[edge.target].append((edge.source, edge.id))
    return incidence


@dataclass
class PrimState:
    view: GraphView
    incidence: Dict[NodeID, List[Tuple[NodeID, EdgeID]]]
    roots: Deque[NodeID]
    in_tree: Set[NodeID] = field(default_factory=set)
    min_pq: List[Tuple[Cost, NodeID, EdgeID, NodeID]] = field(default_factory=list)
    pred: PredMap = field(default_factory=dict)
    visited: List[NodeID] = field(default_factory=list)
    tree_edges: List[EdgeID] = field(default_factory=list)
    total_weight: Cost = 0.0
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def init_prim(view: GraphView, start: Optional[NodeID], target: Optional[NodeID]) -> PrimState:
    _require_undirected(view, "Prim")
    if target is not None:
        raise InvalidInputError("Prim does not take a target node.")
    check_non_negative(view, "Prim")
    roots = deque(view.nodes)
    if start is not None:
        roots.remove(start)
        roots.appendleft(start)
    return PrimState(view=view, incidence=_undirected_incidence(view), roots=roots)


def _prim_add(state: PrimState, node: NodeID, weight: Cost) -> None:
    state.in_tree.add(node)
    state.visited.append(node)
    state.pending.append(AlgorithmEvent(EventKind.NODE_VISITED, node=node, value=weight))
    for nbr, e_id in state.incidence[node]:
        if nbr not in state.in_tree:
            heappush(state.min_pq, (state.view.edges[e_id].weight, nbr, e_id, node))


def advance_prim(state: PrimState) -> bool:
    """Do one unit of Prim work. Returns False when the forest is complete."""
    if state.min_pq:
        weight, node, e_id, from_node = heappop(state.min_pq)
        if node in state.in_tree:
            state.pending.append(AlgorithmEvent(EventKind.EDGE_DISCARDED, node=node, edge=e_id, value=weight))
            return True
        state.tree_edges.append(e_id)
        state.pred[node] = (from_node, e_id)
        state.total_weight += weight
        state.pending.append(AlgorithmEvent(EventKind.EDGE_RELAXED, node=node, edge=e_id, value=weight))
        _prim_add(state, node, weight)
        return True

    while state.roots and state.roots[0] in state.in_tree:
        state.roots.popleft()
    if not state.roots:
        state.summary = state.total_weight
        return False
    _prim_add(state, state.roots.popleft(), 0.0)
    return True


def prim_result(state: PrimState) -> AlgorithmResult:
    return AlgorithmResult(
        visited=tuple(state.visited),
        predecessors=dict(state.pred),
        tree_edges=tuple(state.tree_edges),
        total_weight=state.total_weight,
    )


class DisjointSet:
    """Union-find with path compression and union by rank."""

    def __init__(self, items) -> None:
        self._parent: Dict[NodeID, NodeID] = {item: item for item in items}
        self._rank: Dict[NodeID, int] = {item: 0 for item in self._parent}

    def find(self, item: NodeID) -> NodeID:
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: NodeID, b: NodeID) -> bool:
        """Merge the sets of ``a`` and ``b``; False if already merged."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        if self._rank[root_a] < self._rank[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        if self._rank[root_a] == self._rank[root_b]:
            self._rank[root_a] += 1
        return True


@dataclass
class KruskalState:
    view: GraphView
    ordered: List[Tuple[Cost, EdgeID]]
    components: DisjointSet
    cursor: int = 0
    touched: Set[NodeID] = field(default_factory=set)
    visited: List[NodeID] = field(default_factory=list)
    tree_edges: List[EdgeID] = field(default_factory=list)
    total_weight: Cost = 0.0
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def init_kruskal(view: GraphView, start: Optional[NodeID], target: Optional[NodeID]) -> KruskalState:
    _require_undirected(view, "Kruskal")
    if start is not None or target is not None:
        raise InvalidInputError("Kruskal does not take start or target nodes.")
    ordered = sorted((edge.weight, edge.id) for edge in view.edges.values())
    return KruskalState(view=view, ordered=ordered, components=DisjointSet(view.nodes))


def advance_kruskal(state: KruskalState) -> bool:
    """Examine one edge. Returns False when the forest is complete."""
    if len(state.tree_edges) >= len(state.view.nodes) - 1 or state.cursor >= len(state.ordered):
        state.summary = state.total_weight
        return False

    weight, e_id = state.ordered[state.cursor]
    state.cursor += 1
    edge = state.view.edges[e_id]
    if edge.source == edge.target or not state.components.union(edge.source, edge.target):
        state.pending.append(AlgorithmEvent(EventKind.EDGE_DISCARDED, node=edge.target, edge=e_id, value=weight))
        return True

    state.tree_edges.append(e_id)
    state.total_weight += weight
    state.pending.append(AlgorithmEvent(EventKind.EDGE_RELAXED, node=edge.target, edge=e_id, value=weight))
    for node in (edge.source, edge.target):
        if node not in state.touched:
            state.touched.add(node)
            state.visited.append(node)
            state.pending.append(AlgorithmEvent(EventKind.NODE_VISITED, node=node))
    return True


def kruskal_result(state: KruskalState) -> AlgorithmResult:
    return AlgorithmResult(
        visited=tuple(state.visited),
        tree_edges=tuple(state.tree_edges),
        total_weight=state.total_weight,
    )
