"""Deterministic seed derivation for the layout and other seeded components."""

from __future__ import annotations

import hashlib
import random
from typing import Any, Optional


class SeedManager:
    """Derive per-component seeds from a single master seed.

    Each consumer (node placement, coincidence tie-breaking, ...) gets its own
    ``random.Random`` so that the order in which components draw numbers does
    not change the results of the others.

    Usage:
        seed_mgr = SeedManager(42)
        rng = seed_mgr.create_random_state("layout", "placement")
    """

    def __init__(self, master_seed: Optional[int] = None) -> None:
        """Initialize the seed manager.

        Args:
            master_seed: Master seed. If None, derived seeds are None and the
                created random states are unseeded.
        """
        self.master_seed = master_seed

    def derive_seed(self, *components: Any) -> Optional[int]:
        """Derive a deterministic seed from the master seed and component ids.

        Args:
            *components: Identifiers (strings, integers, ...) naming the
                consumer of the seed.

        Returns:
            A positive 31-bit integer, or None if no master seed is set.
        """
        if self.master_seed is None:
            return None

        seed_input = f"{self.master_seed}:" + ":".join(str(c) for c in components)
        hash_digest = hashlib.sha256(seed_input.encode()).digest()
        seed_value = int.from_bytes(hash_digest[:4], byteorder="big")
        return seed_value & 0x7FFFFFFF

    def create_random_state(self, *components: Any) -> random.Random:
        """Create a new Random instance seeded with the derived seed.

        Args:
            *components: Component identifiers for seed derivation.

        Returns:
            Seeded Random instance, or an unseeded one without a master seed.
        """
        derived_seed = self.derive_seed(*components)
        rng = random.Random()
        if derived_seed is not None:
            rng.seed(derived_seed)
        return rng
