"""Strict graph store with stable integer ids and an ordered adjacency index.

`StrictGraph` extends `networkx.MultiDiGraph` and is the single owner of the
editable graph: node and edge ids come from monotonically increasing counters
and are never reused, every mutation validates its references before touching
any state, and the per-node incidence index (edge insertion order) is patched
before each mutating call returns.

Undirected edges are stored once, with the orientation they were created
with. Whether an edge is traversable in both directions is decided by
``is_edge_directed()``: the per-edge ``directed`` override when set, the graph
mode otherwise.
"""

from __future__ import annotations

import math
from pickle import dumps, loads
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import networkx as nx

from vgraph.errors import DuplicateEdgeError, InvalidInputError, InvalidReferenceError
from vgraph.logging import get_logger
from vgraph.types.base import EdgeID, NodeID, Position

LOGGER = get_logger(__name__)

AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


def _check_weight(weight: Any) -> float:
    try:
        value = float(weight)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Edge weight must be numeric, got {weight!r}.") from None
    if not math.isfinite(value):
        raise InvalidInputError(f"Edge weight must be finite, got {weight!r}.")
    return value


def _check_style(style: Any) -> Dict[str, Any]:
    if style is None:
        return {}
    if not isinstance(style, Mapping):
        raise InvalidInputError(f"Style must be a mapping, got {style!r}.")
    bad = [name for name in style if not isinstance(name, str)]
    if bad:
        raise InvalidInputError(f"Style tag names must be strings, got {bad[0]!r}.")
    return dict(style)


def _check_position(position: Any) -> Position:
    try:
        x, y = float(position[0]), float(position[1])
    except (TypeError, ValueError, IndexError):
        raise InvalidInputError(f"Position must be an (x, y) pair, got {position!r}.") from None
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidInputError(f"Position must be finite, got {position!r}.")
    return (x, y)


class StrictGraph(nx.MultiDiGraph):
    """Editable graph with strict validation and insertion-ordered adjacency.

    This class enforces:
      - Node and edge ids are integers assigned by the store and never reused.
      - Adding an edge never creates nodes; both endpoints must exist.
      - Parallel edges are rejected unless the graph was created with
        ``multigraph=True``. The mode flags cannot change afterwards.
      - Removing a node removes all incident edges.
      - Unknown ids raise ``InvalidReferenceError``; a failed call changes
        nothing.

    Inherits from:
        networkx.MultiDiGraph
    """

    def __init__(self, directed: bool = False, multigraph: bool = False, **attr: Any) -> None:
        """Initialize an empty graph.

        Args:
            directed: Global edge mode. Individual edges may override it.
            multigraph: Whether parallel edges between the same pair are allowed.
            **attr: Extra graph attributes.

        Attributes:
            _edges: Map edge id to ``(source, target, edge_id, attribute_dict)``.
            _incidence: Map node id to an insertion-ordered dict of incident edge ids.
        """
        super().__init__(**attr)
        self.graph["directed"] = bool(directed)
        self.graph["multigraph"] = bool(multigraph)
        self._edges: Dict[EdgeID, EdgeTuple] = {}
        self._incidence: Dict[NodeID, Dict[EdgeID, None]] = {}
        # Counters only advance; removed ids are never handed out again.
        self._next_node_id: int = 0
        self._next_edge_id: int = 0

    @property
    def directed(self) -> bool:
        """Global edge mode fixed at creation."""
        return self.graph["directed"]

    @property
    def multigraph(self) -> bool:
        """Whether parallel edges are permitted."""
        return self.graph["multigraph"]

    def copy(self, as_view: bool = False, pickle: bool = True) -> StrictGraph:
        """Create a copy of this graph.

        By default, use pickle-based deep copying, which keeps the id counters
        and the incidence index. If ``pickle=False``, fall back to the
        NetworkX copy.
        """
        if not pickle:
            return super().copy(as_view=as_view)  # type: ignore[return-value]
        return loads(dumps(self))

    #
    # Node management
    #
    def add_node(  # pyright: ignore[reportIncompatibleMethodOverride]
        self,
        label: str = "",
        position: Optional[Position] = None,
        style: Optional[Mapping[str, Any]] = None,
        node_id: Optional[NodeID] = None,
        disabled: bool = False,
        pinned: bool = False,
    ) -> NodeID:
        """Add a node and return its id.

        Args:
            label: Display label.
            position: Initial position; None lets the layout engine place it.
            style: Free-form style tags (color, shape, ...).
            node_id: Explicit id, used when restoring a saved document. The
                counter is advanced past it.
            disabled: Hide the node from the view and from algorithm runs.
            pinned: Exclude the node from automatic repositioning.

        Returns:
            NodeID: The id of the new node.

        Raises:
            InvalidInputError: If an explicit id is already in use, or the
                position or style is malformed.
        """
        if position is not None:
            position = _check_position(position)
        style = _check_style(style)
        if node_id is None:
            node_id = self._next_node_id
        elif node_id in self:
            raise InvalidInputError(f"Node with id '{node_id}' already exists.")
        self._next_node_id = max(self._next_node_id, int(node_id) + 1)

        super().add_node(
            node_id,
            label=str(label),
            position=position,
            style=style,
            disabled=bool(disabled),
            pinned=bool(pinned),
        )
        self._incidence[node_id] = {}
        LOGGER.debug("Added node %s (%r)", node_id, label)
        return node_id

    def remove_node(self, n: NodeID) -> None:
        """Remove a node and all incident edges.

        Raises:
            InvalidReferenceError: If the node does not exist.
        """
        if n not in self:
            raise InvalidReferenceError(f"Node '{n}' does not exist.")
        incident = list(self._incidence[n])
        for e_id in incident:
            self._drop_edge(e_id)
        del self._incidence[n]
        super().remove_node(n)
        LOGGER.debug("Removed node %s with %d incident edge(s)", n, len(incident))

    #
    # Edge management
    #
    def add_edge(  # pyright: ignore[reportIncompatibleMethodOverride]
        self,
        u_for_edge: NodeID,
        v_for_edge: NodeID,
        weight: float = 1.0,
        directed: Optional[bool] = None,
        key: Optional[EdgeID] = None,
    ) -> EdgeID:
        """Add an edge from ``u_for_edge`` to ``v_for_edge``.

        Args:
            u_for_edge: Source node. Must exist.
            v_for_edge: Target node. Must exist.
            weight: Finite numeric weight.
            directed: Per-edge override of the graph mode; None inherits it.
            key: Explicit edge id (document restore). Must not be in use.

        Returns:
            EdgeID: The id of the new edge.

        Raises:
            InvalidReferenceError: If either endpoint does not exist.
            DuplicateEdgeError: If parallel edges are disallowed and the pair is
                already connected.
            InvalidInputError: If the weight is not finite or the key is taken.
        """
        if u_for_edge not in self:
            raise InvalidReferenceError(f"Source node '{u_for_edge}' does not exist.")
        if v_for_edge not in self:
            raise InvalidReferenceError(f"Target node '{v_for_edge}' does not exist.")
        weight = _check_weight(weight)
        if directed is not None:
            directed = bool(directed)

        if not self.multigraph:
            existing = self._find_parallel(u_for_edge, v_for_edge, directed)
            if existing is not None:
                raise DuplicateEdgeError(
                    f"Edge {existing} already connects '{u_for_edge}' and "
                    f"'{v_for_edge}'; this graph does not allow multi-edges."
                )

        if key is None:
            key = self._next_edge_id
        elif key in self._edges:
            raise InvalidInputError(f"Edge with id '{key}' already exists.")
        self._next_edge_id = max(self._next_edge_id, int(key) + 1)

        super().add_edge(u_for_edge, v_for_edge, key=key, weight=weight, directed=directed)
        self._edges[key] = (
            u_for_edge,
            v_for_edge,
            key,
            self[u_for_edge][v_for_edge][key],  # pyright: ignore[reportArgumentType]
        )
        self._incidence[u_for_edge][key] = None
        self._incidence[v_for_edge][key] = None
        LOGGER.debug("Added edge %s: %s -> %s (w=%s)", key, u_for_edge, v_for_edge, weight)
        return key

    def remove_edge(self, u: NodeID, v: Optional[NodeID] = None, key: Optional[EdgeID] = None) -> None:  # type: ignore[override]
        """Remove an edge.

        ``remove_edge(edge_id)`` removes by id. The NetworkX form
        ``remove_edge(u, v, key)`` is accepted as well, in which case the
        key must connect ``u`` to ``v``.

        Raises:
            InvalidReferenceError: If the edge does not exist.
        """
        if v is None and key is None:
            self.remove_edge_by_id(u)
            return
        if key is None or key not in self._edges:
            raise InvalidReferenceError(f"No edge with id='{key}' found from {u} to {v}.")
        src_node, dst_node, _, _ = self._edges[key]
        if (src_node, dst_node) != (u, v):
            raise InvalidReferenceError(
                f"Edge with id='{key}' is actually from {src_node} to {dst_node}, "
                f"not from {u} to {v}."
            )
        self.remove_edge_by_id(key)

    def remove_edge_by_id(self, key: EdgeID) -> None:
        """Remove an edge by its id.

        Raises:
            InvalidReferenceError: If no edge with this id exists.
        """
        if key not in self._edges:
            raise InvalidReferenceError(f"Edge with id='{key}' not found.")
        self._drop_edge(key)
        LOGGER.debug("Removed edge %s", key)

    def _drop_edge(self, key: EdgeID) -> None:
        src_node, dst_node, _, _ = self._edges.pop(key)
        self._incidence[src_node].pop(key, None)
        self._incidence[dst_node].pop(key, None)
        super().remove_edge(src_node, dst_node, key=key)

    def _find_parallel(
        self, u: NodeID, v: NodeID, directed: Optional[bool]
    ) -> Optional[EdgeID]:
        new_directed = self.directed if directed is None else directed
        for e_id in self._incidence[u]:
            src_node, dst_node, _, _ = self._edges[e_id]
            if (src_node, dst_node) == (u, v):
                return e_id
            if (src_node, dst_node) == (v, u) and not (
                new_directed and self.is_edge_directed(e_id)
            ):
                return e_id
        return None

    #
    # Queries
    #
    def has_node(self, n: Any) -> bool:
        return n in self._incidence

    def has_edge_by_id(self, key: EdgeID) -> bool:
        """Check whether an edge with the given id exists."""
        return key in self._edges

    def node_ids(self) -> List[NodeID]:
        """Return all node ids in ascending order."""
        return sorted(self._incidence)

    def edge_ids(self) -> List[EdgeID]:
        """Return all edge ids in ascending order."""
        return sorted(self._edges)

    def node_data(self, n: NodeID) -> AttrDict:
        """Return the live attribute dict of a node.

        Raises:
            InvalidReferenceError: If the node does not exist.
        """
        if n not in self._incidence:
            raise InvalidReferenceError(f"Node '{n}' does not exist.")
        return self._node[n]

    def get_nodes(self) -> Dict[NodeID, AttrDict]:
        """Retrieve all nodes and their attributes as a dictionary."""
        return dict(self.nodes(data=True))

    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """Retrieve a dictionary of all edges by id.

        Returns:
            Mapping of edge id to ``(source, target, edge_id, attributes)``.
        """
        return self._edges

    def edge_data(self, key: EdgeID) -> EdgeTuple:
        """Return ``(source, target, edge_id, attributes)`` for an edge.

        Raises:
            InvalidReferenceError: If no edge with this id exists.
        """
        if key not in self._edges:
            raise InvalidReferenceError(f"Edge with id='{key}' not found.")
        return self._edges[key]

    def is_edge_directed(self, key: EdgeID) -> bool:
        """Return whether an edge is traversable only from source to target."""
        override = self.edge_data(key)[3]["directed"]
        return self.directed if override is None else override

    def incident_edges(self, n: NodeID) -> List[EdgeID]:
        """Return incident edge ids of a node in insertion order.

        Raises:
            InvalidReferenceError: If the node does not exist.
        """
        if n not in self._incidence:
            raise InvalidReferenceError(f"Node '{n}' does not exist.")
        return list(self._incidence[n])

    def iter_neighbors(self, n: NodeID) -> Iterator[Tuple[NodeID, EdgeID]]:
        """Yield ``(neighbor, edge_id)`` pairs reachable from ``n``.

        Order follows edge insertion. Outgoing edges always count, incoming
        edges only when undirected. A self-loop yields ``n`` once.
        """
        for e_id in self.incident_edges(n):
            src_node, dst_node, _, _ = self._edges[e_id]
            if src_node == n:
                yield dst_node, e_id
            elif not self.is_edge_directed(e_id):
                yield src_node, e_id

    def neighbors(self, n: NodeID) -> List[Tuple[NodeID, EdgeID]]:  # type: ignore[override]
        """Return ``(neighbor, edge_id)`` pairs in edge insertion order.

        Raises:
            InvalidReferenceError: If the node does not exist.
        """
        return list(self.iter_neighbors(n))

    #
    # Attribute updates (never touch the adjacency index)
    #
    def set_node_position(self, n: NodeID, position: Position) -> None:
        self.node_data(n)["position"] = _check_position(position)

    def set_node_pinned(self, n: NodeID, pinned: bool) -> None:
        self.node_data(n)["pinned"] = bool(pinned)

    def set_node_disabled(self, n: NodeID, disabled: bool) -> None:
        self.node_data(n)["disabled"] = bool(disabled)

    def set_node_label(self, n: NodeID, label: str) -> None:
        self.node_data(n)["label"] = str(label)

    def set_node_style(self, n: NodeID, style: Mapping[str, Any]) -> None:
        """Merge style tags into a node's style; a None value deletes the tag.

        Raises:
            InvalidReferenceError: If the node does not exist.
            InvalidInputError: If a tag name is not a string.
        """
        current = self.node_data(n)["style"]
        for name, value in _check_style(style).items():
            if value is None:
                current.pop(name, None)
            else:
                current[name] = value

    def set_edge_weight(self, key: EdgeID, weight: float) -> None:
        """Change an edge weight.

        Raises:
            InvalidReferenceError: If the edge does not exist.
            InvalidInputError: If the weight is not finite.
        """
        attrs = self.edge_data(key)[3]
        attrs["weight"] = _check_weight(weight)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the graph to its persisted document form."""
        # Import here to avoid circular import
        from vgraph.graph.io import graph_to_document

        return graph_to_document(self)
