"""Graph store and helpers.

This package provides the editable graph type `StrictGraph`, the immutable
`GraphView` snapshot used by algorithm runs, and the persistence helpers in
`io`.
"""

from vgraph.graph.store import StrictGraph
from vgraph.graph.view import EdgeRecord, GraphView

__all__ = ["StrictGraph", "GraphView", "EdgeRecord"]
