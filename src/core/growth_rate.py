"""
Birth and death rates for discrete-time growth.

At most one event (division or death) may happen to a cell in one time
step, so a GrowthRate is a pair of probabilities whose sum is at most one.
All transformations return new objects; a GrowthRate is never modified.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING

import numpy as np

from stochastic.probability import TOLERANCE, validate_probability
from stochastic.random_source import RandomSource, resolve

if TYPE_CHECKING:
    from .mutation import Mutation


@dataclass(frozen=True)
class GrowthCount:
    """Realized number of birth and death events in a population."""

    birth_count: int
    death_count: int

    def __post_init__(self):
        if self.birth_count < 0 or self.death_count < 0:
            raise ValueError("event counts must be non-negative")

    @property
    def event_count(self) -> int:
        return self.birth_count + self.death_count

    @property
    def net_change(self) -> int:
        return self.birth_count - self.death_count


def _validate_population(population: int) -> int:
    if population < 0:
        raise ValueError("population must be non-negative")
    return int(population)


@dataclass(frozen=True)
class GrowthRate:
    """Per-step birth (division) and death probabilities.

    Attributes:
        birth_rate: Probability that a cell divides in the next step.
        death_rate: Probability that a cell dies in the next step.
    """

    birth_rate: float
    death_rate: float

    def __post_init__(self):
        birth = validate_probability(self.birth_rate, "birth rate")
        death = validate_probability(self.death_rate, "death rate")
        if birth + death > 1.0 + TOLERANCE:
            raise ValueError(
                f"birth and death rates sum to more than one: {birth} + {death}"
            )
        object.__setattr__(self, "birth_rate", birth)
        object.__setattr__(self, "death_rate", death)

    # --- Constructors ---

    @classmethod
    def net(cls, net_rate: float) -> "GrowthRate":
        """Unit event rate with b = (1 + r) / 2 and d = (1 - r) / 2."""
        if net_rate < -1.0 or net_rate > 1.0:
            raise ValueError("net rate must be in [-1, 1]")
        return cls(0.5 * (1.0 + net_rate), 0.5 * (1.0 - net_rate))

    @classmethod
    def birthless(cls, death_rate: float) -> "GrowthRate":
        return cls(0.0, death_rate)

    @classmethod
    def balanced(cls, event_prob: float) -> "GrowthRate":
        """Zero net growth with b = d = p / 2."""
        return cls(0.5 * event_prob, 0.5 * event_prob)

    # --- Derived quantities ---

    @property
    def event_rate(self) -> float:
        return self.birth_rate + self.death_rate

    @property
    def net_rate(self) -> float:
        return self.birth_rate - self.death_rate

    @property
    def growth_factor(self) -> float:
        """Expected ratio N(t + 1) / N(t) = 1 + b - d, bounded on [0, 2]."""
        return 1.0 + self.net_rate

    # --- Transformations ---

    def no_birth(self) -> "GrowthRate":
        return GrowthRate(0.0, self.death_rate)

    def no_growth(self) -> "GrowthRate":
        """Same event rate but no net growth; shrinking rates are unchanged."""
        if self.growth_factor <= 1.0:
            return self
        half = 0.5 * self.event_rate
        return GrowthRate(half, half)

    def rescale_birth_rate(self, scalar: float) -> "GrowthRate":
        return GrowthRate(self.birth_rate * scalar, self.death_rate)

    def rescale_death_rate(self, scalar: float) -> "GrowthRate":
        return GrowthRate(self.birth_rate, self.death_rate * scalar)

    def rescale_growth_factor(self, scalar: float) -> "GrowthRate":
        """Return a rate with growth factor scalar * g and the same event rate.

        Valid scalars lie in [0, 2 / g]; others produce invalid rates and
        raise ValueError.
        """
        b = self.birth_rate
        d = self.death_rate
        sm1 = scalar - 1.0
        sp1 = scalar + 1.0
        b_new = 0.5 * (sm1 + sp1 * b - sm1 * d)
        d_new = 0.5 * (-sm1 - sm1 * b + sp1 * d)
        return GrowthRate(b_new, d_new)

    def apply(self, mutations: Iterable["Mutation"]) -> "GrowthRate":
        """Net effect of a sequence of mutations on this rate."""
        rate = self
        for mutation in mutations:
            rate = mutation.mutate(rate)
        return rate

    # --- Event sampling ---

    def sample(self, population: int, source: Optional[RandomSource] = None) -> GrowthCount:
        """Fully stochastic: one uniform draw per member of the population."""
        population = _validate_population(population)
        if population == 0:
            return GrowthCount(0, 0)
        draws = resolve(source).uniform_array(population)
        birth_count = int(np.count_nonzero(draws < self.birth_rate))
        death_count = int(np.count_nonzero(draws < self.event_rate)) - birth_count
        return GrowthCount(birth_count, death_count)

    def compute(self, population: int, source: Optional[RandomSource] = None) -> GrowthCount:
        """Semi-stochastic: expected counts, randomly discretized."""
        population = _validate_population(population)
        event_rate = self.event_rate
        if population == 0 or event_rate == 0.0:
            return GrowthCount(0, 0)
        source = resolve(source)
        event_count = source.discretize(population * event_rate)
        birth_count = source.discretize(event_count * self.birth_rate / event_rate)
        return GrowthCount(birth_count, event_count - birth_count)

    def expected(self, population: int) -> GrowthCount:
        """Deterministic: expected counts rounded to the nearest integer."""
        population = _validate_population(population)
        birth_count = int(round(population * self.birth_rate))
        death_count = int(round(population * self.death_rate))
        return GrowthCount(birth_count, min(death_count, population))

    def __str__(self) -> str:
        return f"GrowthRate(B = {self.birth_rate}, D = {self.death_rate})"


NO_GROWTH = GrowthRate.balanced(1.0)
