"""
Seedable randomness shared by every rule that rolls, draws or picks.

A single RandomSource is threaded through the engine so that a seed
reproduces a whole game.
"""

import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RandomSource:
    """Thin wrapper around ``random.Random`` with the game's helpers."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        """Float in [0, 1)."""
        return self._rng.random()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both inclusive."""
        return self._rng.randint(low, high)

    def uniform(self, low: float, high: float) -> float:
        """Float in [low, high), derived from ``random()``."""
        return low + self.random() * (high - low)

    def roll_dice(self) -> int:
        """Roll one six-sided die."""
        return self.randint(1, 6)

    def pick(self, items: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not items:
            raise ValueError("cannot pick from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def pick_n(self, items: Sequence[T], n: int) -> List[T]:
        """Pick up to n distinct elements."""
        pool = list(items)
        result: List[T] = []
        for _ in range(min(n, len(pool))):
            result.append(pool.pop(self.randint(0, len(pool) - 1)))
        return result

    def weighted_random(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """
        Weighted choice. Weights need not sum to anything in particular.

        Walks the items subtracting each weight from a uniform threshold and
        returns the first item that takes the threshold to zero or below.
        """
        if not items:
            raise ValueError("cannot pick from an empty sequence")
        total = sum(weights)
        threshold = self.random() * total
        for item, weight in zip(items, weights):
            threshold -= weight
            if threshold <= 0:
                return item
        return items[-1]
