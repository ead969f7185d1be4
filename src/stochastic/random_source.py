"""
Random number source shared by every stochastic operation.

A single generator is consumed strictly sequentially by growth sampling,
division splitting, shuffled traversal and spatial placement, so a run is
reproducible for a given seed.
"""

from __future__ import annotations

import math
from typing import MutableSequence, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class RandomSource:
    """Thin wrapper around :class:`numpy.random.Generator`."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def generator(self) -> np.random.Generator:
        return self._rng

    def next_double(self) -> float:
        """Uniform deviate on [0, 1)."""
        return float(self._rng.random())

    def next_int(self, bound: int) -> int:
        """Uniform integer on [0, bound)."""
        if bound <= 0:
            raise ValueError("bound must be positive")
        return int(self._rng.integers(0, bound))

    def next_int_range(self, lower: int, upper: int) -> int:
        """Uniform integer on [lower, upper)."""
        if upper <= lower:
            raise ValueError("upper must exceed lower")
        return lower + self.next_int(upper - lower)

    def next_gaussian(self, mean: float = 0.0, stdev: float = 1.0) -> float:
        return float(self._rng.normal(mean, stdev))

    def accept(self, probability: float) -> bool:
        """Bernoulli trial with the given success probability."""
        return self.next_double() < probability

    def discretize(self, x: float) -> int:
        """Round a non-negative real to an integer with the correct expectation.

        Returns floor(x) + 1 with probability x - floor(x), otherwise floor(x).
        """
        k = math.floor(x)
        if self.accept(x - k):
            return int(k) + 1
        return int(k)

    def select_cdf(self, cdf: Sequence[float]) -> int:
        """Index of the first CDF entry strictly greater than a uniform draw."""
        draw = self.next_double()
        index = int(np.searchsorted(cdf, draw, side="right"))
        if index >= len(cdf):
            # Round-off in the final entry; it is 1.0 by construction.
            index = len(cdf) - 1
        return index

    def select(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("cannot select from an empty sequence")
        return items[self.next_int(len(items))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Shuffle a list in place."""
        self._rng.shuffle(items)

    def uniform_array(self, size: int) -> np.ndarray:
        return self._rng.random(size)


_GLOBAL: Optional[RandomSource] = None


def global_source() -> RandomSource:
    """Process-wide source used when no source is supplied explicitly."""
    global _GLOBAL
    if _GLOBAL is None:
        _GLOBAL = RandomSource()
    return _GLOBAL


def seed_global(seed: Optional[int]) -> RandomSource:
    """Replace the process-wide source with a freshly seeded one."""
    global _GLOBAL
    _GLOBAL = RandomSource(seed)
    return _GLOBAL


def resolve(source: Optional[RandomSource]) -> RandomSource:
    return source if source is not None else global_source()
