"""Stepwise Dijkstra shortest-path-first search.

The priority queue holds ``(distance, node)`` pairs, so equal distances are
settled lowest node id first. Stale heap entries are skipped lazily. When a
target is given the search stops as soon as the target is settled and emits
the path to it; the target itself is not expanded.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from heapq import heappop, heappush
from typing import Deque, Dict, List, Optional, Set, Tuple

from vgraph.algorithms.common import AlgorithmResult, PredMap, resolve_path
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.errors import InvalidInputError
from vgraph.graph.view import GraphView
from vgraph.types.base import Cost, EventKind, NodeID


@dataclass
class DijkstraState:
    view: GraphView
    source: NodeID
    target: Optional[NodeID]
    costs: Dict[NodeID, Cost] = field(default_factory=dict)
    pred: PredMap = field(default_factory=dict)
    min_pq: List[Tuple[Cost, NodeID]] = field(default_factory=list)
    settled: Set[NodeID] = field(default_factory=set)
    visited: List[NodeID] = field(default_factory=list)
    current: Optional[NodeID] = None
    cursor: int = 0
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def check_non_negative(view: GraphView, algorithm: str) -> None:
    """Raise ``InvalidInputError`` if any edge in the snapshot has a negative weight."""
    for edge in view.edges_by_id():
        if edge.weight < 0:
            raise InvalidInputError(
                f"{algorithm} requires non-negative weights; edge {edge.id} "
                f"({edge.source} -> {edge.target}) has weight {edge.weight}."
            )


def init_dijkstra(
    view: GraphView, start: Optional[NodeID], target: Optional[NodeID]
) -> DijkstraState:
    if start is None:
        raise InvalidInputError("Dijkstra requires a start node.")
    check_non_negative(view, "Dijkstra")
    state = DijkstraState(view=view, source=start, target=target)
    state.costs[start] = 0.0
    state.min_pq.append((0.0, start))
    return state


def advance_dijkstra(state: DijkstraState) -> bool:
    """Do one unit of Dijkstra work. Returns False when the search is over."""
    emit = state.pending.append

    if state.current is not None:
        node = state.current
        neighbors = state.view.adjacency[node]
        if state.cursor < len(neighbors):
            nbr, e_id = neighbors[state.cursor]
            state.cursor += 1
            new_cost = state.costs[node] + state.view.edges[e_id].weight
            if nbr not in state.settled and (
                nbr not in state.costs or new_cost < state.costs[nbr]
            ):
                state.costs[nbr] = new_cost
                state.pred[nbr] = (node, e_id)
                heappush(state.min_pq, (new_cost, nbr))
                emit(AlgorithmEvent(EventKind.EDGE_RELAXED, node=nbr, edge=e_id, value=new_cost))
            else:
                emit(AlgorithmEvent(EventKind.EDGE_DISCARDED, node=nbr, edge=e_id, value=new_cost))
            return True
        emit(AlgorithmEvent(EventKind.NODE_FINISHED, node=node, value=state.costs[node]))
        state.current = None
        return True

    while state.min_pq:
        current_cost, node = heappop(state.min_pq)
        if node in state.settled or current_cost > state.costs[node]:
            continue
        state.settled.add(node)
        state.visited.append(node)
        emit(AlgorithmEvent(EventKind.NODE_VISITED, node=node, value=current_cost))
        if node == state.target:
            path, path_edges = resolve_path(state.pred, node)
            emit(
                AlgorithmEvent(
                    EventKind.PATH_FOUND,
                    node=node,
                    value=current_cost,
                    path=path,
                    path_edges=path_edges,
                )
            )
            state.summary = current_cost
            return False
        state.current = node
        state.cursor = 0
        return True

    # Heap exhausted; an unreachable target leaves the summary empty.
    if state.target is None:
        state.summary = len(state.settled)
    return False


def dijkstra_result(state: DijkstraState) -> AlgorithmResult:
    path, path_edges = (), ()
    if state.target is not None and state.target in state.settled:
        path, path_edges = resolve_path(state.pred, state.target)
    return AlgorithmResult(
        visited=tuple(state.visited),
        distances=dict(state.costs),
        predecessors=dict(state.pred),
        path=path,
        path_edges=path_edges,
    )
