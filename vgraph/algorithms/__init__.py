"""Stepwise graph algorithms.

Entry points:
    start(kind, graph, start_node=None, target=None) -> RuntimeHandle
    step(handle) / handle.step() -> AlgorithmEvent
    cancel(handle) / handle.cancel()
"""

from vgraph.algorithms.common import AlgorithmResult
from vgraph.algorithms.events import AlgorithmEvent
from vgraph.algorithms.runtime import RuntimeHandle, cancel, run_to_completion, start, step

__all__ = [
    "AlgorithmEvent",
    "AlgorithmResult",
    "RuntimeHandle",
    "start",
    "step",
    "cancel",
    "run_to_completion",
]
