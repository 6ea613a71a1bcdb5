"""Exception hierarchy shared by the graph store, runtime and session."""

from __future__ import annotations


class VGraphError(Exception):
    """Base class for all recoverable vgraph errors."""


class InvalidReferenceError(VGraphError, ValueError):
    """An operation named a node or edge id that is not present."""


class DuplicateEdgeError(VGraphError, ValueError):
    """A parallel edge was added to a graph that does not allow multi-edges."""


class InvalidInputError(VGraphError, ValueError):
    """Algorithm preconditions or document contents are invalid."""


class WrongGraphModeError(VGraphError, RuntimeError):
    """The algorithm requires a directed/undirected mode the graph does not have."""


class AlreadyCompleteError(VGraphError, RuntimeError):
    """A finished algorithm runtime was stepped again."""


class CancelledError(VGraphError, RuntimeError):
    """A cancelled algorithm runtime was stepped."""
