"""Edit intents accepted by the session and the command result type."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from vgraph.types.base import EdgeID, NodeID, Position


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a session command, surfaced by the UI as a message.

    Attributes:
        ok: Whether the command succeeded.
        message: Human-readable description (error text on failure).
        value: Command-specific payload, e.g. the id of a new node.
    """

    ok: bool
    message: str = ""
    value: Any = None

    @classmethod
    def success(cls, message: str = "", value: Any = None) -> CommandResult:
        return cls(True, message, value)

    @classmethod
    def failure(cls, message: str) -> CommandResult:
        return cls(False, message)

    def __bool__(self) -> bool:
        return self.ok


@dataclass(frozen=True)
class AddNode:
    label: str = ""
    position: Optional[Position] = None
    style: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddEdge:
    source: NodeID
    target: NodeID
    weight: float = 1.0
    directed: Optional[bool] = None


@dataclass(frozen=True)
class RemoveNode:
    node: NodeID


@dataclass(frozen=True)
class RemoveEdge:
    edge: EdgeID


@dataclass(frozen=True)
class MoveNodeManually:
    """Place a node by hand and pin it until it is released."""

    node: NodeID
    position: Position


@dataclass(frozen=True)
class ReleaseNode:
    """Return a pinned node to automatic layout."""

    node: NodeID


@dataclass(frozen=True)
class SetNodeEnabled:
    """Show or hide a node (and its edges) in the view and in algorithm runs."""

    node: NodeID
    enabled: bool


@dataclass(frozen=True)
class SetNodeStyle:
    node: NodeID
    style: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SetEdgeWeight:
    edge: EdgeID
    weight: float


EditIntent = Union[
    AddNode,
    AddEdge,
    RemoveNode,
    RemoveEdge,
    MoveNodeManually,
    ReleaseNode,
    SetNodeEnabled,
    SetNodeStyle,
    SetEdgeWeight,
]
