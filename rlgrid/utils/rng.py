"""Random number generation utilities for the Q-learning agent."""

import random
from typing import Optional


class SeededRNG:
    """
    Seeded random number generator for reproducible runs.

    Each instance owns its own generator so that two agents never
    share exploration state.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        """Generate random float in [0, 1)."""
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        """Generate random integer in [a, b]."""
        return self._random.randint(a, b)
