"""Stepwise algorithm runtime.

``start()`` validates an algorithm's preconditions, captures an immutable
`GraphView` of the graph and returns a `RuntimeHandle`. Each ``step()`` on
the handle returns exactly one `AlgorithmEvent`; the terminal
``ALGORITHM_COMPLETE`` event is returned once, after which stepping raises
``AlreadyCompleteError``. ``cancel()`` invalidates the handle.

Every algorithm is a variant made of three plain functions over its own
state dataclass (see ``_VARIANTS``):

- ``init(view, start, target) -> state``: validate and build initial state;
- ``advance(state) -> bool``: do one unit of work, appending events to
  ``state.pending``; return False when no work is left;
- ``result(state) -> AlgorithmResult``.

The handle only drains ``state.pending`` one event per call, so the caller
decides the pace (one event per rendered frame, fast-forward, ...).
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from vgraph.algorithms.common import AlgorithmResult
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.algorithms.spanning import (
    advance_kruskal,
    advance_prim,
    init_kruskal,
    init_prim,
    kruskal_result,
    prim_result,
)
from vgraph.algorithms.spf import advance_dijkstra, dijkstra_result, init_dijkstra
from vgraph.algorithms.topo import (
    advance_topological_sort,
    init_topological_sort,
    topological_sort_result,
)
from vgraph.algorithms.traversal import (
    advance_bfs,
    advance_dfs,
    bfs_result,
    dfs_result,
    init_bfs,
    init_dfs,
)
from vgraph.errors import AlreadyCompleteError, CancelledError, InvalidReferenceError
from vgraph.graph.store import StrictGraph
from vgraph.graph.view import GraphView
from vgraph.logging import get_logger
from vgraph.types.base import AlgorithmKind, EventKind, NodeID

LOGGER = get_logger(__name__)


class _Variant(NamedTuple):
    init: Callable[[GraphView, Optional[NodeID], Optional[NodeID]], Any]
    advance: Callable[[Any], bool]
    result: Callable[[Any], AlgorithmResult]


_VARIANTS: Dict[AlgorithmKind, _Variant] = {
    AlgorithmKind.BFS: _Variant(init_bfs, advance_bfs, bfs_result),
    AlgorithmKind.DFS: _Variant(init_dfs, advance_dfs, dfs_result),
    AlgorithmKind.DIJKSTRA: _Variant(init_dijkstra, advance_dijkstra, dijkstra_result),
    AlgorithmKind.PRIM: _Variant(init_prim, advance_prim, prim_result),
    AlgorithmKind.KRUSKAL: _Variant(init_kruskal, advance_kruskal, kruskal_result),
    AlgorithmKind.TOPOLOGICAL_SORT: _Variant(
        init_topological_sort, advance_topological_sort, topological_sort_result
    ),
}


class RuntimeHandle:
    """A running algorithm bound to an immutable graph snapshot.

    Handles are created by ``start()``. Two handles never share state.
    """

    def __init__(self, kind: AlgorithmKind, view: GraphView, state: Any) -> None:
        self._kind = kind
        self._view = view
        self._state = state
        self._variant = _VARIANTS[kind]
        self._exhausted = False
        self._complete = False
        self._cancelled = False
        self._emitted = 0

    @property
    def kind(self) -> AlgorithmKind:
        return self._kind

    @property
    def view(self) -> GraphView:
        """The graph snapshot the algorithm runs on."""
        return self._view

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def events_emitted(self) -> int:
        return self._emitted

    @property
    def has_cycle(self) -> bool:
        """True if a topological sort found a cycle."""
        return self.result.has_cycle

    @property
    def result(self) -> AlgorithmResult:
        """Outcome so far (final once the run is complete)."""
        return self._variant.result(self._state)

    def step(self) -> AlgorithmEvent:
        """Advance by one event.

        Raises:
            CancelledError: If the handle was cancelled.
            AlreadyCompleteError: If the completion event was already returned.
        """
        if self._cancelled:
            raise CancelledError(f"{self._kind.name} run was cancelled.")
        if self._complete:
            raise AlreadyCompleteError(f"{self._kind.name} run is already complete.")

        pending = self._state.pending
        while not pending and not self._exhausted:
            self._exhausted = not self._variant.advance(self._state)

        if pending:
            event = pending.popleft()
        else:
            event = AlgorithmEvent(EventKind.ALGORITHM_COMPLETE, value=self._state.summary)
            self._complete = True
            LOGGER.info(
                "%s run complete after %d event(s)", self._kind.name, self._emitted + 1
            )

        event = replace(event, index=self._emitted)
        self._emitted += 1
        LOGGER.debug("%s event %s", self._kind.name, event)
        return event

    def cancel(self) -> None:
        """Invalidate the handle; later ``step()`` calls raise ``CancelledError``."""
        if not self._cancelled:
            LOGGER.debug("%s run cancelled after %d event(s)", self._kind.name, self._emitted)
        self._cancelled = True


def start(
    kind: Union[AlgorithmKind, str],
    graph: Union[StrictGraph, GraphView],
    start_node: Optional[NodeID] = None,
    target: Optional[NodeID] = None,
) -> RuntimeHandle:
    """Validate preconditions and start an algorithm run.

    Args:
        kind: Algorithm to run (enum member or name).
        graph: Live graph (snapshotted here) or an existing snapshot.
        start_node: Start node where the algorithm takes one.
        target: Optional target node for BFS, DFS and Dijkstra.

    Returns:
        A fresh handle. No event has been produced yet.

    Raises:
        InvalidReferenceError: If ``start_node`` or ``target`` is unknown.
        InvalidInputError: If the algorithm's input requirements are unmet.
        WrongGraphModeError: If the graph mode does not suit the algorithm.
    """
    if isinstance(kind, str):
        kind = AlgorithmKind.from_string(kind)
    view = graph if isinstance(graph, GraphView) else GraphView.from_graph(graph)
    for role, node in (("start", start_node), ("target", target)):
        if node is not None and node not in view:
            raise InvalidReferenceError(f"The {role} node '{node}' is not in the graph.")

    state = _VARIANTS[kind].init(view, start_node, target)
    LOGGER.info(
        "Starting %s on %d node(s), %d edge(s)", kind.name, len(view.nodes), len(view.edges)
    )
    return RuntimeHandle(kind, view, state)


def step(handle: RuntimeHandle) -> AlgorithmEvent:
    """Advance ``handle`` by one event."""
    return handle.step()


def cancel(handle: RuntimeHandle) -> None:
    """Cancel ``handle``."""
    handle.cancel()


def run_to_completion(handle: RuntimeHandle) -> List[AlgorithmEvent]:
    """Step ``handle`` until the completion event and return all events."""
    events = []
    while not handle.is_complete:
        events.append(handle.step())
    return events
