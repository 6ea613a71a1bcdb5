"""Incremental force-directed layout.

`ForceLayout` runs a damped spring embedder over the nodes of a
`StrictGraph`:

- every pair of nodes repels with ``repulsion / d^2`` (``d`` floored at
  ``min_distance``);
- every edge pulls its endpoints with ``spring * (d - rest_length)``;
- a weak ``gravity`` term pulls nodes toward the origin.

Velocities are damped every tick and the per-tick displacement is capped by
``max_displacement * temperature``. The temperature is reset on each graph
change and cools geometrically, so movement always dies out and the layout
reports itself stable.

Notes:
    One tick is O(N^2 + E) because of the all-pairs repulsion. That is fine for
    a few hundred nodes; larger graphs would need a spatial approximation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from vgraph.config import LAYOUT_CONFIG, LayoutConfig
from vgraph.graph.store import StrictGraph
from vgraph.logging import get_logger
from vgraph.seed_manager import SeedManager
from vgraph.types.base import NodeID, Position

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class LayoutSnapshot:
    """Positions after a layout tick.

    Attributes:
        positions: Node id -> (x, y).
        settle_counter: Number of simulation ticks run so far.
        stable: True once per-tick movement fell below the threshold.
        total_displacement: Sum of node displacements of the last tick.
    """

    positions: Mapping[NodeID, Position] = field(default_factory=dict)
    settle_counter: int = 0
    stable: bool = False
    total_displacement: float = 0.0


class ForceLayout:
    """Force-directed layout bound to one graph.

    Positions live on the graph nodes (``position`` attribute) and are
    written through ``StrictGraph.set_node_position``. The engine keeps only
    velocities, the temperature and its seeded random states.

    Args:
        graph: Graph to lay out.
        config: Simulation parameters; defaults to ``LAYOUT_CONFIG``.
        seed: Master seed for new-node placement and coincidence tie-breaks.
    """

    def __init__(
        self,
        graph: StrictGraph,
        config: Optional[LayoutConfig] = None,
        seed: Optional[int] = None,
    ) -> None:
        self._graph = graph
        self._config = config or LAYOUT_CONFIG
        seeds = SeedManager(seed)
        self._placement_rng = seeds.create_random_state("layout", "placement")
        self._tiebreak_rng = seeds.create_random_state("layout", "coincident")

        self._velocity: Dict[NodeID, Tuple[float, float]] = {}
        self._known: List[NodeID] = []
        self._temperature = 1.0
        self._settle_counter = 0
        self._stable = False
        self._snapshot = LayoutSnapshot()
        self.on_graph_changed()

    @property
    def graph(self) -> StrictGraph:
        return self._graph

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def is_stable(self) -> bool:
        """Return True once the simulation has settled."""
        return self._stable

    def snapshot(self) -> LayoutSnapshot:
        """Return the latest snapshot without advancing the simulation."""
        return self._snapshot

    def on_graph_changed(self) -> None:
        """Synchronize with the graph after a mutation.

        New nodes without a position are placed near the centroid of their
        placed neighbors (graph centroid if they have none); everything else
        keeps its position. The simulation is reheated.
        """
        graph = self._graph
        current = graph.node_ids()
        current_set = set(current)
        for gone in [n for n in self._velocity if n not in current_set]:
            del self._velocity[gone]

        placed = 0
        for node_id in current:
            if graph.node_data(node_id)["position"] is None:
                graph.set_node_position(node_id, self._placement_for(node_id))
                placed += 1
            self._velocity.setdefault(node_id, (0.0, 0.0))

        self._known = current
        self.wake()
        LOGGER.debug(
            "Layout synchronized: %d node(s), %d newly placed", len(current), placed
        )

    def wake(self) -> None:
        """Reheat the simulation so it runs again until it settles."""
        self._temperature = 1.0
        self._stable = not self._known
        self._snapshot = LayoutSnapshot(
            positions=self._current_positions(),
            settle_counter=self._settle_counter,
            stable=self._stable,
            total_displacement=self._snapshot.total_displacement,
        )

    def _current_positions(self) -> Mapping[NodeID, Position]:
        return MappingProxyType(
            {n: self._graph.node_data(n)["position"] for n in self._known}
        )

    def _placement_for(self, node_id: NodeID) -> Position:
        graph = self._graph
        anchors = []
        for e_id in graph.incident_edges(node_id):
            src, dst, _, _ = graph.edge_data(e_id)
            other = dst if src == node_id else src
            pos = graph.node_data(other)["position"]
            if other != node_id and pos is not None:
                anchors.append(pos)
        if not anchors:
            anchors = [
                attrs["position"]
                for n, attrs in graph.nodes(data=True)
                if n != node_id and attrs["position"] is not None
            ]
        if anchors:
            cx = sum(p[0] for p in anchors) / len(anchors)
            cy = sum(p[1] for p in anchors) / len(anchors)
        else:
            cx = cy = 0.0

        angle = self._placement_rng.uniform(0.0, 2.0 * math.pi)
        radius = self._config.placement_jitter * (0.5 + 0.5 * self._placement_rng.random())
        return (cx + radius * math.cos(angle), cy + radius * math.sin(angle))

    def _separate_coincident(self, pos: np.ndarray, pinned: np.ndarray) -> None:
        """Nudge apart nodes that sit exactly on top of each other.

        The later node of a coincident pair moves unless it is pinned, in
        which case the earlier one does. Two pinned nodes stay put.
        """
        seen: Dict[Tuple[float, float], int] = {}
        nudge = self._config.min_distance * 0.1
        for i in range(pos.shape[0]):
            key = (float(pos[i, 0]), float(pos[i, 1]))
            if key in seen:
                earlier = seen[key]
                if not pinned[i]:
                    mover = i
                elif not pinned[earlier]:
                    mover = earlier
                    seen[key] = i
                else:
                    continue
                angle = self._tiebreak_rng.uniform(0.0, 2.0 * math.pi)
                pos[mover, 0] += nudge * math.cos(angle)
                pos[mover, 1] += nudge * math.sin(angle)
            else:
                seen[key] = i

    def tick(self) -> LayoutSnapshot:
        """Advance the simulation by one step and return the new snapshot."""
        graph = self._graph
        if graph.node_ids() != self._known or any(
            graph.node_data(n)["position"] is None for n in self._known
        ):
            self.on_graph_changed()
        if self._stable:
            return self._snapshot

        cfg = self._config
        nodes = self._known
        index = {n: i for i, n in enumerate(nodes)}
        node_data = [graph.node_data(n) for n in nodes]
        pos = np.array([attrs["position"] for attrs in node_data], dtype=float)
        vel = np.array([self._velocity[n] for n in nodes], dtype=float)
        pinned = np.array([attrs["pinned"] for attrs in node_data], dtype=bool)

        self._separate_coincident(pos, pinned)

        # Pairwise repulsion
        delta = pos[:, None, :] - pos[None, :, :]
        dist2 = np.einsum("ijk,ijk->ij", delta, delta)
        dist = np.sqrt(dist2)
        magnitude = cfg.repulsion / np.maximum(dist2, cfg.min_distance**2)
        unit = delta / np.where(dist > 0.0, dist, 1.0)[:, :, None]
        force = (unit * magnitude[:, :, None]).sum(axis=1)

        # Springs
        pairs = [
            (index[src], index[dst])
            for src, dst, _, _ in graph.get_edges().values()
            if src != dst
        ]
        if pairs:
            src_idx = np.array([p[0] for p in pairs], dtype=int)
            dst_idx = np.array([p[1] for p in pairs], dtype=int)
            span = pos[dst_idx] - pos[src_idx]
            length = np.sqrt(np.einsum("ij,ij->i", span, span))
            direction = span / np.where(length > 0.0, length, 1.0)[:, None]
            pull = (cfg.spring * (length - cfg.rest_length))[:, None] * direction
            np.add.at(force, src_idx, pull)
            np.add.at(force, dst_idx, -pull)

        # Centering
        force -= cfg.gravity * pos

        vel = (vel + force * cfg.time_step) * cfg.damping
        speed = np.sqrt(np.einsum("ij,ij->i", vel, vel))
        cap = cfg.max_displacement * self._temperature
        vel *= np.where(speed > cap, cap / np.where(speed > 0.0, speed, 1.0), 1.0)[:, None]
        vel[pinned] = 0.0

        pos += vel
        total = float(np.sqrt(np.einsum("ij,ij->i", vel, vel)).sum())

        for i, node_id in enumerate(nodes):
            graph.set_node_position(node_id, (pos[i, 0], pos[i, 1]))
            self._velocity[node_id] = (float(vel[i, 0]), float(vel[i, 1]))

        self._temperature *= cfg.cooling
        self._settle_counter += 1
        self._stable = total < cfg.convergence_threshold * max(1, len(nodes))
        self._snapshot = LayoutSnapshot(
            positions=self._current_positions(),
            settle_counter=self._settle_counter,
            stable=self._stable,
            total_displacement=total,
        )
        if self._stable:
            LOGGER.debug("Layout settled after %d tick(s)", self._settle_counter)
        return self._snapshot

    def settle(self, max_ticks: int = 2000) -> LayoutSnapshot:
        """Tick until stable or ``max_ticks`` ticks have run."""
        for _ in range(max_ticks):
            if self._stable:
                break
            self.tick()
        return self._snapshot
