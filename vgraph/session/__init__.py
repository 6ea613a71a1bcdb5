"""Visualization session, edit intents and the renderer-facing view model."""

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
from vgraph.session.session import VisualizationSession
from vgraph.session.view_model import (
    EdgeDrawRecord,
    HighlightState,
    NodeDrawRecord,
    ViewModel,
    replay,
)

__all__ = [
    "VisualizationSession",
    "CommandResult",
    "EditIntent",
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
    "NodeDrawRecord",
    "EdgeDrawRecord",
    "HighlightState",
    "replay",
]
