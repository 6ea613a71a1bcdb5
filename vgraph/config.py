"""Configuration classes for vgraph components."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple

import yaml


@dataclass
class LayoutConfig:
    """Parameters of the force-directed layout simulation."""

    # Pairwise repulsion constant (force = repulsion / d^2)
    repulsion: float = 2500.0

    # Edge spring constant and rest length
    spring: float = 0.05
    rest_length: float = 80.0

    # Weak pull toward the origin
    gravity: float = 0.01

    # Velocity multiplier per tick; must be < 1
    damping: float = 0.85
    time_step: float = 1.0

    # Per-tick displacement cap, scaled by the current temperature
    max_displacement: float = 25.0
    cooling: float = 0.97

    # Distance floor used when computing repulsion
    min_distance: float = 1.0

    # Mean displacement per node below which the layout is stable
    convergence_threshold: float = 0.05

    # Radius of the random offset given to newly placed nodes
    placement_jitter: float = 20.0

    def __post_init__(self) -> None:
        if not 0.0 < self.damping < 1.0:
            raise ValueError(f"damping must be in (0, 1), got {self.damping}")
        if not 0.0 < self.cooling < 1.0:
            raise ValueError(f"cooling must be in (0, 1), got {self.cooling}")
        if self.min_distance <= 0.0:
            raise ValueError("min_distance must be positive")


@dataclass
class SessionConfig:
    """Behaviour of a visualization session."""

    # Master seed for layout placement; None gives non-reproducible layouts
    seed: Optional[int] = 0

    # Keep stored positions when loading a document (False re-lays out)
    keep_positions_on_load: bool = True

    # Algorithm events played back per advance_frame() call
    steps_per_frame: int = 1

    def __post_init__(self) -> None:
        if self.steps_per_frame < 1:
            raise ValueError("steps_per_frame must be >= 1")


def _build(cls: type, section: Any, name: str) -> Any:
    if section is None:
        return cls()
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    allowed = {f.name for f in fields(cls)}
    extra = set(section) - allowed
    if extra:
        raise ValueError(
            f"Unrecognized key(s) in '{name}': {', '.join(sorted(extra))}. "
            f"Allowed keys are {sorted(allowed)}"
        )
    return cls(**section)


def load_config(yaml_str: str) -> Tuple[LayoutConfig, SessionConfig]:
    """Build layout and session configuration from a YAML document.

    The document may contain ``layout`` and ``session`` mappings; missing
    sections fall back to defaults.

    Raises:
        ValueError: On unknown sections/keys or out-of-range values.
    """
    data: Dict[str, Any] = yaml.safe_load(yaml_str) or {}
    if not isinstance(data, dict):
        raise ValueError("The provided YAML must map to a dictionary at top-level.")
    extra = set(data) - {"layout", "session"}
    if extra:
        raise ValueError(
            f"Unrecognized top-level key(s) in config: {', '.join(sorted(extra))}"
        )
    return (
        _build(LayoutConfig, data.get("layout"), "layout"),
        _build(SessionConfig, data.get("session"), "session"),
    )


# Global configuration instances
LAYOUT_CONFIG = LayoutConfig()
SESSION_CONFIG = SessionConfig()
