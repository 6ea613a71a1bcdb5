"""vgraph: graph engine for an interactive graph visualizer.

vgraph provides the editable graph store, an incremental force-directed
layout, stepwise graph algorithms that emit visit events for animation, and a
session object that combines them into a renderer-facing view model.

Primary API:
    StrictGraph - Editable graph with stable ids and ordered adjacency
    ForceLayout - Incremental force-directed layout engine
    start() - Start a stepwise algorithm run on a graph snapshot
    VisualizationSession - Command surface and view model for the UI

Example:
    from vgraph import AddEdge, AddNode, VisualizationSession

    session = VisualizationSession(directed=False)
    a = session.apply_edit(AddNode("A")).value
    b = session.apply_edit(AddNode("B")).value
    session.apply_edit(AddEdge(a, b, weight=2.0))

    session.run_algorithm("dijkstra", start=a, target=b)
    frame = session.advance_frame()
"""

from __future__ import annotations

from vgraph import cli, logging
from vgraph._version import __version__
from vgraph.algorithms import (
    AlgorithmEvent,
    AlgorithmResult,
    RuntimeHandle,
    cancel,
    run_to_completion,
    start,
    step,
)
from vgraph.config import LayoutConfig, SessionConfig, load_config
from vgraph.errors import (
    AlreadyCompleteError,
    CancelledError,
    DuplicateEdgeError,
    InvalidInputError,
    InvalidReferenceError,
    VGraphError,
    WrongGraphModeError,
)
from vgraph.graph import GraphView, StrictGraph
from vgraph.graph.io import (
    document_to_graph,
    graph_to_document,
    graph_to_mermaid,
    load_graph,
    parse_edge_list,
    save_graph,
)
from vgraph.layout import ForceLayout, LayoutSnapshot
from vgraph.session import (
    AddEdge,
    AddNode,
    CommandResult,
    MoveNodeManually,
    ReleaseNode,
    RemoveEdge,
    RemoveNode,
    SetEdgeWeight,
    SetNodeEnabled,
    SetNodeStyle,
    ViewModel,
    VisualizationSession,
)
from vgraph.types.base import AlgorithmKind, EdgeHighlight, EventKind, NodeHighlight

__all__ = [
    # Version
    "__version__",
    # Graph
    "StrictGraph",
    "GraphView",
    # Persistence
    "graph_to_document",
    "document_to_graph",
    "save_graph",
    "load_graph",
    "parse_edge_list",
    "graph_to_mermaid",
    # Layout
    "ForceLayout",
    "LayoutSnapshot",
    "LayoutConfig",
    # Algorithms
    "AlgorithmKind",
    "EventKind",
    "AlgorithmEvent",
    "AlgorithmResult",
    "RuntimeHandle",
    "start",
    "step",
    "cancel",
    "run_to_completion",
    # Session
    "VisualizationSession",
    "SessionConfig",
    "CommandResult",
    "AddNode",
    "AddEdge",
    "RemoveNode",
    "RemoveEdge",
    "MoveNodeManually",
    "ReleaseNode",
    "SetNodeEnabled",
    "SetNodeStyle",
    "SetEdgeWeight",
    "ViewModel",
    "NodeHighlight",
    "EdgeHighlight",
    # Errors
    "VGraphError",
    "InvalidReferenceError",
    "DuplicateEdgeError",
    "InvalidInputError",
    "WrongGraphModeError",
    "AlreadyCompleteError",
    "CancelledError",
    # Utilities
    "load_config",
    "cli",
    "logging",
]
