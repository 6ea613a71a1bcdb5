"""Stepwise breadth-first and depth-first search.

Both traversals follow the graph store's adjacency order. Without a start
node they cover every component, starting new trees from the lowest
undiscovered node id. With a target they stop once the target is visited and
report the path to it.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set

from vgraph.algorithms.common import AlgorithmResult, PredMap, resolve_path
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.graph.view import GraphView
from vgraph.types.base import EventKind, NodeID


@dataclass
class BfsState:
    view: GraphView
    target: Optional[NodeID]
    roots: Deque[NodeID]
    queue: Deque[NodeID] = field(default_factory=deque)
    discovered: Set[NodeID] = field(default_factory=set)
    depth: Dict[NodeID, int] = field(default_factory=dict)
    pred: PredMap = field(default_factory=dict)
    visited: List[NodeID] = field(default_factory=list)
    current: Optional[NodeID] = None
    cursor: int = 0
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def init_bfs(view: GraphView, start: Optional[NodeID], target: Optional[NodeID]) -> BfsState:
    roots = deque([start] if start is not None else view.nodes)
    return BfsState(view=view, target=target, roots=roots)


def advance_bfs(state: BfsState) -> bool:
    """Do one unit of BFS work. Returns False when the traversal is over."""
    emit = state.pending.append

    if state.current is not None:
        node = state.current
        neighbors = state.view.adjacency[node]
        if state.cursor < len(neighbors):
            nbr, e_id = neighbors[state.cursor]
            state.cursor += 1
            if nbr not in state.discovered:
                state.discovered.add(nbr)
                state.depth[nbr] = state.depth[node] + 1
                state.pred[nbr] = (node, e_id)
                state.queue.append(nbr)
                emit(AlgorithmEvent(EventKind.EDGE_RELAXED, node=nbr, edge=e_id, value=state.depth[nbr]))
            else:
                emit(AlgorithmEvent(EventKind.EDGE_DISCARDED, node=nbr, edge=e_id))
            return True
        emit(AlgorithmEvent(EventKind.NODE_FINISHED, node=node, value=state.depth[node]))
        state.current = None
        return True

    if not state.queue:
        while state.roots and state.roots[0] in state.discovered:
            state.roots.popleft()
        if not state.roots:
            state.summary = len(state.visited)
            return False
        root = state.roots.popleft()
        state.discovered.add(root)
        state.depth[root] = 0
        state.queue.append(root)

    node = state.queue.popleft()
    state.visited.append(node)
    emit(AlgorithmEvent(EventKind.NODE_VISITED, node=node, value=state.depth[node]))
    if node == state.target:
        path, path_edges = resolve_path(state.pred, node)
        emit(
            AlgorithmEvent(
                EventKind.PATH_FOUND,
                node=node,
                value=state.depth[node],
                path=path,
                path_edges=path_edges,
            )
        )
        state.summary = len(state.visited)
        return False
    state.current = node
    state.cursor = 0
    return True


def bfs_result(state: BfsState) -> AlgorithmResult:
    path, path_edges = (), ()
    if state.target is not None and state.target in state.visited:
        path, path_edges = resolve_path(state.pred, state.target)
    return AlgorithmResult(
        visited=tuple(state.visited),
        distances=dict(state.depth),
        predecessors=dict(state.pred),
        path=path,
        path_edges=path_edges,
    )


@dataclass
class DfsState:
    view: GraphView
    target: Optional[NodeID]
    roots: Deque[NodeID]
    # Frames of [node, next adjacency index]
    stack: List[List[int]] = field(default_factory=list)
    discovered: Set[NodeID] = field(default_factory=set)
    discovery: Dict[NodeID, int] = field(default_factory=dict)
    pred: PredMap = field(default_factory=dict)
    visited: List[NodeID] = field(default_factory=list)
    clock: int = 0
    pending: Deque[AlgorithmEvent] = field(default_factory=deque)
    summary: Optional[float] = None


def init_dfs(view: GraphView, start: Optional[NodeID], target: Optional[NodeID]) -> DfsState:
    roots = deque([start] if start is not None else view.nodes)
    return DfsState(view=view, target=target, roots=roots)


def _dfs_enter(state: DfsState, node: NodeID) -> bool:
    state.discovered.add(node)
    state.discovery[node] = state.clock
    state.clock += 1
    state.visited.append(node)
    state.stack.append([node, 0])
    state.pending.append(AlgorithmEvent(EventKind.NODE_VISITED, node=node, value=state.discovery[node]))
    if node == state.target:
        path, path_edges = resolve_path(state.pred, node)
        state.pending.append(
            AlgorithmEvent(
                EventKind.PATH_FOUND,
                node=node,
                value=len(path_edges),
                path=path,
                path_edges=path_edges,
            )
        )
        state.summary = len(state.visited)
        return False
    return True


def advance_dfs(state: DfsState) -> bool:
    """Do one unit of DFS work. Returns False when the traversal is over."""
    emit = state.pending.append

    if state.stack:
        frame = state.stack[-1]
        node, cursor = frame
        neighbors = state.view.adjacency[node]
        if cursor < len(neighbors):
            frame[1] += 1
            nbr, e_id = neighbors[cursor]
            if nbr in state.discovered:
                emit(AlgorithmEvent(EventKind.EDGE_DISCARDED, node=nbr, edge=e_id))
                return True
            state.pred[nbr] = (node, e_id)
            emit(AlgorithmEvent(EventKind.EDGE_RELAXED, node=nbr, edge=e_id))
            return _dfs_enter(state, nbr)
        state.stack.pop()
        emit(AlgorithmEvent(EventKind.NODE_FINISHED, node=node, value=state.clock))
        state.clock += 1
        return True

    while state.roots and state.roots[0] in state.discovered:
        state.roots.popleft()
    if not state.roots:
        state.summary = len(state.visited)
        return False
    return _dfs_enter(state, state.roots.popleft())


def dfs_result(state: DfsState) -> AlgorithmResult:
    path, path_edges = (), ()
    if state.target is not None and state.target in state.discovered:
        path, path_edges = resolve_path(state.pred, state.target)
    return AlgorithmResult(
        visited=tuple(state.visited),
        distances=dict(state.discovery),
        predecessors=dict(state.pred),
        path=path,
        path_edges=path_edges,
    )
