"""Force-directed layout engine."""

from vgraph.layout.force import ForceLayout, LayoutSnapshot

__all__ = ["ForceLayout", "LayoutSnapshot"]
