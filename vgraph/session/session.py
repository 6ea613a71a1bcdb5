"""Visualization session: the single entry point for the UI layer.

A session owns one graph, its layout engine and at most one algorithm run.
The external render loop calls ``advance_frame()`` once per frame; the UI
calls the command methods, each of which returns a `CommandResult` and
never raises for engine errors. A failed command leaves the session exactly
as it was.

Algorithm playback keeps every event produced so far together with a cursor.
Playing forward either re-applies an already recorded event (after a rewind)
or steps the runtime for a new one, so scrubbing never re-runs the algorithm
against the live, possibly edited, graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from vgraph.algorithms import runtime as algorithm_runtime
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.algorithms.runtime import RuntimeHandle
from vgraph.config import SESSION_CONFIG, LayoutConfig, SessionConfig
from vgraph.errors import VGraphError
from vgraph.graph.io import document_to_graph, graph_to_document, load_graph, save_graph
from vgraph.graph.store import StrictGraph
from vgraph.layout.force import ForceLayout
from vgraph.logging import get_logger
from vgraph.session.intents import (
    AddEdge,
    AddNode,
    CommandResult,
    EditIntent,
    MoveNodeManually,
    ReleaseNode,
    RemoveEdge,
    RemoveNode,
    SetEdgeWeight,
    SetNodeEnabled,
    SetNodeStyle,
)
from vgraph.session.view_model import HighlightState, ViewModel, build_view_model, replay
from vgraph.types.base import AlgorithmKind, NodeID

LOGGER = get_logger(__name__)


class VisualizationSession:
    """Orchestrates graph store, layout engine and algorithm runtime.

    Args:
        graph: Graph to own. A new empty graph is created when omitted.
        directed: Mode of the new graph when ``graph`` is omitted.
        multigraph: Multi-edge flag of the new graph when ``graph`` is omitted.
        layout_config: Layout parameters (defaults to ``LAYOUT_CONFIG``).
        config: Session behaviour (defaults to ``SESSION_CONFIG``).
    """

    def __init__(
        self,
        graph: Optional[StrictGraph] = None,
        directed: bool = False,
        multigraph: bool = False,
        layout_config: Optional[LayoutConfig] = None,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self._config = config or SESSION_CONFIG
        self._layout_config = layout_config
        self._frame = 0
        self._attach(graph if graph is not None else StrictGraph(directed, multigraph))
        self._handlers: Dict[type, Callable[[Any], Tuple[Any, str]]] = {
            AddNode: self._add_node,
            AddEdge: self._add_edge,
            RemoveNode: self._remove_node,
            RemoveEdge: self._remove_edge,
            MoveNodeManually: self._move_node,
            ReleaseNode: self._release_node,
            SetNodeEnabled: self._set_node_enabled,
            SetNodeStyle: self._set_node_style,
            SetEdgeWeight: self._set_edge_weight,
        }

    def _attach(self, graph: StrictGraph) -> None:
        self._graph = graph
        self._layout = ForceLayout(graph, self._layout_config, seed=self._config.seed)
        self._reset_algorithm()

    def _reset_algorithm(self) -> None:
        self._runtime: Optional[RuntimeHandle] = None
        self._events: List[AlgorithmEvent] = []
        self._cursor = -1
        self._highlights = HighlightState()
        self._paused = False

    #
    # Read-only state
    #
    @property
    def graph(self) -> StrictGraph:
        return self._graph

    @property
    def layout(self) -> ForceLayout:
        return self._layout

    @property
    def events(self) -> Tuple[AlgorithmEvent, ...]:
        """All events recorded for the current run."""
        return tuple(self._events)

    @property
    def cursor(self) -> int:
        """Index of the last event applied to the highlights (-1 for none)."""
        return self._cursor

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def runtime(self) -> Optional[RuntimeHandle]:
        return self._runtime

    @property
    def highlights(self) -> HighlightState:
        return self._highlights

    #
    # Edits
    #
    def apply_edit(self, intent: EditIntent) -> CommandResult:
        """Apply one edit intent to the graph.

        Returns:
            A successful result carrying the new id for AddNode/AddEdge, or a
            failed result with the error message.
        """
        handler = self._handlers.get(type(intent))
        if handler is None:
            return CommandResult.failure(f"Unsupported edit: {type(intent).__name__}")
        try:
            value, message = handler(intent)
        except VGraphError as exc:
            LOGGER.warning("%s rejected: %s", type(intent).__name__, exc)
            return CommandResult.failure(str(exc))
        LOGGER.debug(message)
        return CommandResult.success(message, value)

    def _add_node(self, intent: AddNode) -> Tuple[Any, str]:
        node_id = self._graph.add_node(intent.label, intent.position, intent.style)
        self._layout.on_graph_changed()
        return node_id, f"Added node {node_id}"

    def _add_edge(self, intent: AddEdge) -> Tuple[Any, str]:
        edge_id = self._graph.add_edge(
            intent.source, intent.target, weight=intent.weight, directed=intent.directed
        )
        self._layout.on_graph_changed()
        return edge_id, f"Added edge {edge_id}"

    def _remove_node(self, intent: RemoveNode) -> Tuple[Any, str]:
        self._graph.remove_node(intent.node)
        self._layout.on_graph_changed()
        return None, f"Removed node {intent.node}"

    def _remove_edge(self, intent: RemoveEdge) -> Tuple[Any, str]:
        self._graph.remove_edge_by_id(intent.edge)
        self._layout.on_graph_changed()
        return None, f"Removed edge {intent.edge}"

    def _move_node(self, intent: MoveNodeManually) -> Tuple[Any, str]:
        self._graph.set_node_position(intent.node, intent.position)
        self._graph.set_node_pinned(intent.node, True)
        self._layout.wake()
        return None, f"Pinned node {intent.node} at {tuple(intent.position)}"

    def _release_node(self, intent: ReleaseNode) -> Tuple[Any, str]:
        self._graph.set_node_pinned(intent.node, False)
        self._layout.wake()
        return None, f"Released node {intent.node}"

    def _set_node_enabled(self, intent: SetNodeEnabled) -> Tuple[Any, str]:
        self._graph.set_node_disabled(intent.node, not intent.enabled)
        state = "Enabled" if intent.enabled else "Disabled"
        return None, f"{state} node {intent.node}"

    def _set_node_style(self, intent: SetNodeStyle) -> Tuple[Any, str]:
        self._graph.set_node_style(intent.node, intent.style)
        return None, f"Styled node {intent.node}"

    def _set_edge_weight(self, intent: SetEdgeWeight) -> Tuple[Any, str]:
        self._graph.set_edge_weight(intent.edge, intent.weight)
        return None, f"Set weight of edge {intent.edge} to {intent.weight}"

    #
    # Algorithm control
    #
    def run_algorithm(
        self,
        kind: Union[AlgorithmKind, str],
        start: Optional[NodeID] = None,
        target: Optional[NodeID] = None,
    ) -> CommandResult:
        """Start a new algorithm run on a snapshot of the current graph.

        Any previous run is cancelled and its events dropped, but only once
        the new run has started successfully.
        """
        try:
            handle = algorithm_runtime.start(kind, self._graph, start, target)
        except (VGraphError, ValueError) as exc:
            LOGGER.warning("Cannot run %s: %s", kind, exc)
            return CommandResult.failure(str(exc))
        if self._runtime is not None:
            self._runtime.cancel()
        self._reset_algorithm()
        self._runtime = handle
        return CommandResult.success(f"Started {handle.kind.name}", handle.kind)

    def _require_run(self) -> Optional[CommandResult]:
        if self._runtime is None:
            return CommandResult.failure("No algorithm has been run.")
        return None

    def pause(self) -> CommandResult:
        failed = self._require_run()
        if failed is not None:
            return failed
        self._paused = True
        return CommandResult.success("Paused")

    def resume(self) -> CommandResult:
        failed = self._require_run()
        if failed is not None:
            return failed
        self._paused = False
        return CommandResult.success("Resumed")

    def cancel(self) -> CommandResult:
        """Cancel the running algorithm; recorded events stay scrubbable."""
        failed = self._require_run()
        if failed is not None:
            return failed
        self._runtime.cancel()
        return CommandResult.success(f"Cancelled {self._runtime.kind.name}")

    def clear_algorithm(self) -> CommandResult:
        """Drop the current run and all highlights."""
        if self._runtime is not None:
            self._runtime.cancel()
        self._reset_algorithm()
        return CommandResult.success("Cleared")

    def scrub_to(self, event_index: int) -> CommandResult:
        """Rebuild highlights from events ``0..event_index`` and pause.

        ``-1`` rewinds to before the first event.
        """
        failed = self._require_run()
        if failed is not None:
            return failed
        if not -1 <= event_index < len(self._events):
            return CommandResult.failure(
                f"Event index {event_index} is out of range "
                f"(0..{len(self._events) - 1})."
            )
        self._highlights = replay(self._events[: event_index + 1])
        self._cursor = event_index
        self._paused = True
        return CommandResult.success(f"Scrubbed to event {event_index}", event_index)

    def step_algorithm(self) -> CommandResult:
        """Play exactly one event, regardless of the paused flag."""
        failed = self._require_run()
        if failed is not None:
            return failed
        event = self._play_one()
        if event is None:
            return CommandResult.failure("No more events.")
        return CommandResult.success(event.kind.name, event)

    def _play_one(self) -> Optional[AlgorithmEvent]:
        if self._cursor < len(self._events) - 1:
            self._cursor += 1
            event = self._events[self._cursor]
        else:
            handle = self._runtime
            if handle is None or handle.is_complete or handle.is_cancelled:
                return None
            event = handle.step()
            self._events.append(event)
            self._cursor += 1
        self._highlights.apply(event)
        return event

    #
    # Frames
    #
    def advance_frame(self) -> ViewModel:
        """Run one frame of work and return the composed view model."""
        self._frame += 1
        if not self._layout.is_stable():
            self._layout.tick()
        if self._runtime is not None and not self._paused:
            for _ in range(self._config.steps_per_frame):
                if self._play_one() is None:
                    break
        return self.view_model()

    def view_model(self) -> ViewModel:
        """Return the current view model without advancing anything."""
        snapshot = self._layout.snapshot()
        return build_view_model(
            self._graph,
            snapshot.positions,
            self._highlights,
            frame=self._frame,
            layout_stable=self._layout.is_stable(),
            algorithm=self._runtime.kind.name if self._runtime is not None else None,
            event_index=self._cursor,
            paused=self._paused,
        )

    #
    # Persistence
    #
    def to_document(self, include_positions: bool = True) -> Dict[str, Any]:
        return graph_to_document(self._graph, include_positions=include_positions)

    def load_document(
        self, data: Dict[str, Any], keep_positions: Optional[bool] = None
    ) -> CommandResult:
        """Replace the graph with one built from ``data``."""
        if keep_positions is None:
            keep_positions = self._config.keep_positions_on_load
        try:
            graph = document_to_graph(data, keep_positions=keep_positions)
        except VGraphError as exc:
            LOGGER.warning("Cannot load graph document: %s", exc)
            return CommandResult.failure(str(exc))
        self._attach(graph)
        return CommandResult.success(
            f"Loaded {graph.number_of_nodes()} node(s), {len(graph.get_edges())} edge(s)"
        )

    def save(self, path: Union[str, Path]) -> CommandResult:
        try:
            written = save_graph(self._graph, path)
        except (VGraphError, OSError) as exc:
            LOGGER.warning("Cannot save graph: %s", exc)
            return CommandResult.failure(str(exc))
        return CommandResult.success(f"Saved to {written}", written)

    def load(self, path: Union[str, Path], keep_positions: Optional[bool] = None) -> CommandResult:
        if keep_positions is None:
            keep_positions = self._config.keep_positions_on_load
        try:
            graph = load_graph(path, keep_positions=keep_positions)
        except (VGraphError, OSError) as exc:
            LOGGER.warning("Cannot load graph: %s", exc)
            return CommandResult.failure(str(exc))
        self._attach(graph)
        return CommandResult.success(f"Loaded {path}")
