"""Renderer-facing view model.

`HighlightState` folds algorithm events into per-node/per-edge highlight
states. It is rebuilt from scratch on scrubbing, so ``replay(events[:k])``
always equals the state reached by live playback of the same ``k`` events.

`build_view_model()` combines the graph, the latest positions and the
highlights into draw records; the renderer never reads the store directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from vgraph.algorithms.events import AlgorithmEvent
from vgraph.graph.store import StrictGraph
from vgraph.types.base import (
    EdgeHighlight,
    EdgeID,
    EventKind,
    NodeHighlight,
    NodeID,
    Position,
)


@dataclass
class HighlightState:
    """Accumulated highlight state of an algorithm run."""

    nodes: Dict[NodeID, NodeHighlight] = field(default_factory=dict)
    edges: Dict[EdgeID, EdgeHighlight] = field(default_factory=dict)
    annotations: Dict[NodeID, float] = field(default_factory=dict)
    last_event: Optional[AlgorithmEvent] = None

    def apply(self, event: AlgorithmEvent) -> None:
        """Fold one event into the state."""
        kind = event.kind
        if kind == EventKind.NODE_VISITED:
            self._raise_node(event.node, NodeHighlight.VISITED)
            self._annotate(event)
        elif kind == EventKind.NODE_FINISHED:
            self._raise_node(event.node, NodeHighlight.FINISHED)
        elif kind == EventKind.EDGE_RELAXED:
            self._raise_edge(event.edge, EdgeHighlight.RELAXED)
            self._raise_node(event.node, NodeHighlight.FRONTIER)
            self._annotate(event)
        elif kind == EventKind.EDGE_DISCARDED:
            self._raise_edge(event.edge, EdgeHighlight.DISCARDED)
        elif kind == EventKind.PATH_FOUND:
            for node in event.path:
                self.nodes[node] = NodeHighlight.PATH
            for edge in event.path_edges:
                self.edges[edge] = EdgeHighlight.PATH
        self.last_event = event

    def _raise_node(self, node: Optional[NodeID], level: NodeHighlight) -> None:
        # Highlights only move forward: a finished node is not re-marked as frontier
        if node is not None and self.nodes.get(node, NodeHighlight.NONE) < level:
            self.nodes[node] = level

    def _raise_edge(self, edge: Optional[EdgeID], level: EdgeHighlight) -> None:
        if edge is not None and self.edges.get(edge, EdgeHighlight.NONE) < level:
            self.edges[edge] = level

    def _annotate(self, event: AlgorithmEvent) -> None:
        if event.node is not None and event.value is not None:
            self.annotations[event.node] = event.value


def replay(events: Iterable[AlgorithmEvent]) -> HighlightState:
    """Build a fresh highlight state from a sequence of events."""
    state = HighlightState()
    for event in events:
        state.apply(event)
    return state


@dataclass(frozen=True)
class NodeDrawRecord:
    id: NodeID
    position: Position
    label: str
    style: Mapping[str, Any]
    highlight: NodeHighlight
    annotation: Optional[float] = None
    pinned: bool = False


@dataclass(frozen=True)
class EdgeDrawRecord:
    id: EdgeID
    source: NodeID
    target: NodeID
    source_position: Position
    target_position: Position
    weight_label: str
    directed: bool
    highlight: EdgeHighlight


@dataclass(frozen=True)
class ViewModel:
    """Everything the renderer draws for one frame."""

    nodes: Tuple[NodeDrawRecord, ...] = ()
    edges: Tuple[EdgeDrawRecord, ...] = ()
    frame: int = 0
    layout_stable: bool = True
    algorithm: Optional[str] = None
    event_index: int = -1
    paused: bool = False

    def node(self, node_id: NodeID) -> NodeDrawRecord:
        for record in self.nodes:
            if record.id == node_id:
                return record
        raise KeyError(node_id)

    def edge(self, edge_id: EdgeID) -> EdgeDrawRecord:
        for record in self.edges:
            if record.id == edge_id:
                return record
        raise KeyError(edge_id)


def format_weight(weight: float) -> str:
    return f"{weight:g}"


def build_view_model(
    graph: StrictGraph,
    positions: Mapping[NodeID, Position],
    highlights: HighlightState,
    frame: int = 0,
    layout_stable: bool = True,
    algorithm: Optional[str] = None,
    event_index: int = -1,
    paused: bool = False,
) -> ViewModel:
    """Compose draw records for the enabled part of ``graph``.

    Nodes that are disabled are omitted, and so are their incident edges.
    Positions fall back to the node's stored position, then the origin.
    """
    nodes = []
    visible_positions: Dict[NodeID, Position] = {}
    for node_id in graph.node_ids():
        attrs = graph.node_data(node_id)
        if attrs.get("disabled"):
            continue
        position = positions.get(node_id) or attrs.get("position") or (0.0, 0.0)
        visible_positions[node_id] = position
        nodes.append(
            NodeDrawRecord(
                id=node_id,
                position=position,
                label=attrs.get("label", ""),
                style=dict(attrs.get("style", {})),
                highlight=highlights.nodes.get(node_id, NodeHighlight.NONE),
                annotation=highlights.annotations.get(node_id),
                pinned=bool(attrs.get("pinned")),
            )
        )

    edges = []
    for edge_id in graph.edge_ids():
        src, dst, _, attrs = graph.edge_data(edge_id)
        if src not in visible_positions or dst not in visible_positions:
            continue
        edges.append(
            EdgeDrawRecord(
                id=edge_id,
                source=src,
                target=dst,
                source_position=visible_positions[src],
                target_position=visible_positions[dst],
                weight_label=format_weight(attrs["weight"]),
                directed=graph.is_edge_directed(edge_id),
                highlight=highlights.edges.get(edge_id, EdgeHighlight.NONE),
            )
        )

    return ViewModel(
        nodes=tuple(nodes),
        edges=tuple(edges),
        frame=frame,
        layout_stable=layout_stable,
        algorithm=algorithm,
        event_index=event_index,
        paused=paused,
    )
