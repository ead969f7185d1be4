"""
Mutations and the stochastic generators that create them.

A Mutation records when it arose and how it changes a growth rate. Neutral
(passenger) mutations leave the rate unchanged; selective (driver)
mutations apply a pure effect function. A Mutator draws the number of new
mutations in one daughter cell from a MutationRate and builds them.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Tuple, TYPE_CHECKING

from stochastic.distributions import DiscreteDistribution, PoissonDistribution
from stochastic.random_source import RandomSource

from .growth_rate import GrowthRate

if TYPE_CHECKING:
    from .context import RunContext

MutationList = Tuple["Mutation", ...]

EMPTY: MutationList = ()


@dataclass(frozen=True, eq=False)
class Mutation:
    """A heritable change arising in exactly one carrier.

    Attributes:
        index: Ordinal issued by the run context.
        creation_time: Index of the time step when the mutation arose.
    """

    index: int
    creation_time: int

    @property
    def is_neutral(self) -> bool:
        return True

    @property
    def is_selective(self) -> bool:
        return not self.is_neutral

    def mutate(self, rate: GrowthRate) -> GrowthRate:
        return rate

    @staticmethod
    def neutral(creation_time: int, context: "RunContext") -> "Mutation":
        return NeutralMutation(context.next_index("mutation"), creation_time)

    @staticmethod
    def selective(
        creation_time: int,
        effect: Callable[[GrowthRate], GrowthRate],
        context: "RunContext",
    ) -> "Mutation":
        return SelectiveMutation(context.next_index("mutation"), creation_time, effect)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.index}; {self.creation_time})"


@dataclass(frozen=True, eq=False, repr=False)
class NeutralMutation(Mutation):
    """Passenger mutation: the growth rate is unchanged."""


@dataclass(frozen=True, eq=False, repr=False)
class SelectiveMutation(Mutation):
    """Driver mutation with a nontrivial effect on the growth rate."""

    effect: Callable[[GrowthRate], GrowthRate] = field(default=lambda rate: rate)

    @property
    def is_neutral(self) -> bool:
        return False

    def mutate(self, rate: GrowthRate) -> GrowthRate:
        return self.effect(rate)


def apply_mutations(mutations: Iterable[Mutation], rate: GrowthRate) -> GrowthRate:
    """Net effect of a collection of mutations on a growth rate."""
    return rate.apply(mutations)


def accumulate(carriers) -> MutationList:
    """Concatenate the original mutations of a collection of carriers."""
    result = []
    for carrier in carriers:
        result.extend(carrier.original_mutations())
    return tuple(result)


class MutationRate:
    """Distribution of the number of mutations arising in one daughter cell."""

    def __init__(self, distribution: Optional[DiscreteDistribution]):
        self.distribution = distribution

    @classmethod
    def poisson(cls, mean: float) -> "MutationRate":
        if mean == 0.0:
            return cls.zero()
        return cls(PoissonDistribution.create(mean))

    @classmethod
    def zero(cls) -> "MutationRate":
        return cls(None)

    @property
    def mean(self) -> float:
        return 0.0 if self.distribution is None else self.distribution.mean()

    def sample(self, source: Optional[RandomSource] = None) -> int:
        if self.distribution is None:
            return 0
        return self.distribution.sample(source)

    def __repr__(self) -> str:
        return f"MutationRate(mean={self.mean})"


class Mutator:
    """Generates the mutations originating in a newly created daughter."""

    def __init__(self, mutation_rate: MutationRate):
        self.mutation_rate = mutation_rate

    @staticmethod
    def neutral(mutation_rate: MutationRate) -> "Mutator":
        return Mutator(mutation_rate)

    @staticmethod
    def selective(
        mutation_rate: MutationRate, effect: Callable[[GrowthRate], GrowthRate]
    ) -> "Mutator":
        return SelectiveMutator(mutation_rate, effect)

    @staticmethod
    def none() -> "Mutator":
        return Mutator(MutationRate.zero())

    def make(self, time_step: int, context: "RunContext") -> Mutation:
        return Mutation.neutral(time_step, context)

    def generate(self, time_step: int, context: "RunContext") -> MutationList:
        count = self.mutation_rate.sample(context.random)

        if count == 0:
            return EMPTY
        if count == 1:
            return (self.make(time_step, context),)
        if count == 2:
            return (self.make(time_step, context), self.make(time_step, context))

        return tuple(self.make(time_step, context) for _ in range(count))


class SelectiveMutator(Mutator):
    """Mutator whose mutations all carry the same growth-rate effect."""

    def __init__(self, mutation_rate: MutationRate, effect: Callable[[GrowthRate], GrowthRate]):
        super().__init__(mutation_rate)
        self.effect = effect

    def make(self, time_step: int, context: "RunContext") -> Mutation:
        return Mutation.selective(time_step, self.effect, context)
