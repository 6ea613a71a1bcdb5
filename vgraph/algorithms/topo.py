"""Stepwise topological sort (Kahn's algorithm).

Nodes whose remaining in-degree is zero are output lowest id first. Edges
that are traversable both ways (undirected overrides) and self-loops count as
cycles.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from heapq import heapify, heappop, heappush
from typing import Deque, Dict, List, Optional

from vgraph.algorithms.common import AlgorithmResult
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.errors import InvalidInputError, WrongGraphModeError
from vgraph.graph.view import GraphView
from vgraph.types.base import EventKind, NodeID


@dataclass
class TopoState:
    view: GraphView
    indegree: Dict[NodeID, int]
    ready: List[NodeID]
    order: List[NodeID] = field(default_factory=list)
    current: Optional[NodeID] = None
    cursor: int = 0
    has_cycle: bool = False
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def init_topological_sort(
    view: GraphView, start: Optional[NodeID], target: Optional[NodeID]
) -> TopoState:
    if not view.directed:
        raise WrongGraphModeError("Topological sort requires a directed graph.")
    if start is not None or target is not None:
        raise InvalidInputError("Topological sort does not take start or target nodes.")
    indegree = {n: 0 for n in view.nodes}
    for node in view.nodes:
        for nbr, _ in view.adjacency[node]:
            indegree[nbr] += 1
    ready = [n for n, deg in indegree.items() if deg == 0]
    heapify(ready)
    return TopoState(view=view, indegree=indegree, ready=ready)


def advance_topological_sort(state: TopoState) -> bool:
    """Do one unit of Kahn's algorithm. Returns False when no node is ready."""
    emit = state.pending.append

    if state.current is not None:
        node = state.current
        neighbors = state.view.adjacency[node]
        if state.cursor < len(neighbors):
            nbr, e_id = neighbors[state.cursor]
            state.cursor += 1
            state.indegree[nbr] -= 1
            if state.indegree[nbr] == 0:
                heappush(state.ready, nbr)
            emit(AlgorithmEvent(EventKind.EDGE_RELAXED, node=nbr, edge=e_id, value=state.indegree[nbr]))
            return True
        emit(AlgorithmEvent(EventKind.NODE_FINISHED, node=node, value=len(state.order) - 1))
        state.current = None
        return True

    if state.ready:
        node = heappop(state.ready)
        state.order.append(node)
        emit(AlgorithmEvent(EventKind.NODE_VISITED, node=node, value=len(state.order) - 1))
        state.current = node
        state.cursor = 0
        return True

    state.summary = len(state.order)
    if len(state.order) == len(state.view.nodes):
        emit(AlgorithmEvent(EventKind.PATH_FOUND, value=len(state.order), path=tuple(state.order)))
    else:
        state.has_cycle = True
    return False


def topological_sort_result(state: TopoState) -> AlgorithmResult:
    return AlgorithmResult(
        visited=tuple(state.order),
        path=tuple(state.order) if not state.has_cycle and state.summary is not None else (),
        has_cycle=state.has_cycle,
    )
