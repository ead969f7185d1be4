"""
Homogeneous multi-cell populations.

A Lineage holds a count of identical cells rather than cell objects. Only
daughters that acquire new mutations are peeled off into separate
single-cell lineages; unmutated daughters stay folded into the count.
"""

from abc import abstractmethod
from typing import Iterable, List, Optional, TYPE_CHECKING

from stochastic.distributions import BinomialDistribution
from stochastic.probability import validate_probability

from .carrier import UniformCarrier
from .context import RunContext
from .growth_rate import GrowthCount, GrowthRate
from .mutation import EMPTY, Mutation, MutationList, MutationRate, Mutator
from .propagator import State

if TYPE_CHECKING:
    from .tumor_env import TumorEnv


class Lineage(UniformCarrier):
    """Population of cells sharing one growth rate and mutation history."""

    kind = "lineage"

    # Lineages at or below this size are advanced by explicit per-cell trials.
    EXACT_ENUMERATION_LIMIT = 10

    # Number of cells in a newly spawned mutated daughter lineage.
    DAUGHTER_CELL_COUNT = 1

    def __init__(
        self,
        parent: Optional["Lineage"],
        growth_rate: GrowthRate,
        mutator: Mutator,
        original_mutations: Iterable[Mutation],
        cell_count: int,
        context: Optional[RunContext] = None,
    ):
        if cell_count <= 0:
            raise ValueError("initial cell count must be positive")
        super().__init__(parent, growth_rate, mutator, original_mutations, context)
        self._cell_count = int(cell_count)

    @abstractmethod
    def fission(self, cell_count: int) -> "Lineage":
        """New sibling lineage holding cell_count cells and no new mutations."""

    def count_cells(self) -> int:
        return self._cell_count

    def is_empty(self) -> bool:
        return self._cell_count == 0

    @property
    def state(self) -> State:
        return State.DEAD if self.is_empty() else State.ALIVE

    def divide(self, retention_prob: float) -> Optional["Lineage"]:
        """Transfer a binomial share of the cells to a new fission product.

        Each cell stays with probability retention_prob. Returns None when no
        cell is transferred; this lineage may be left empty.
        """
        transfer_prob = 1.0 - validate_probability(retention_prob, "retention probability")
        transfer_dist = BinomialDistribution.create(self._cell_count, transfer_prob)
        transfer_count = transfer_dist.sample(self.context.random)

        if transfer_count == 0:
            return None

        product = self.fission(transfer_count)
        self._cell_count -= transfer_count
        return product

    def advance(self, env: "TumorEnv") -> List["Lineage"]:
        if self.is_dead():
            return []

        growth_count = self._resolve_growth_count(env)
        self._cell_count += growth_count.birth_count - growth_count.death_count

        daughters = self._spawn_daughters(env, 2 * growth_count.birth_count)
        assert self._cell_count >= 0
        return daughters

    def _resolve_growth_count(self, env: "TumorEnv") -> GrowthCount:
        rate = self.local_growth_rate(env)
        if self._cell_count <= env.exact_enumeration_limit:
            return rate.sample(self._cell_count, self.context.random)
        return rate.compute(self._cell_count, self.context.random)

    def _spawn_daughters(self, env: "TumorEnv", daughter_count: int) -> List["Lineage"]:
        return []

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.index}; {self._cell_count} x "
            f"{list(self.original_mutations())})"
        )


class MutatingLineage(Lineage):
    """Lineage whose newly born daughter cells may acquire mutations."""

    @abstractmethod
    def daughter(self, mutations: MutationList) -> "MutatingLineage":
        """Single-cell lineage carrying the given newly originated mutations."""

    def _spawn_daughters(self, env: "TumorEnv", daughter_count: int) -> List["Lineage"]:
        daughters = []
        for _ in range(daughter_count):
            mutations = self.mutator.generate(env.time_step, self.context)
            if mutations:
                daughters.append(self.daughter(mutations))
                self._cell_count -= 1
        return daughters


class NeutralLineage(MutatingLineage):
    """Lineage that accumulates passenger mutations only."""

    @classmethod
    def create_founder(
        cls,
        growth_rate: GrowthRate,
        mutation_rate: MutationRate,
        cell_count: int,
        context: Optional[RunContext] = None,
    ) -> "NeutralLineage":
        return cls(None, growth_rate, Mutator.neutral(mutation_rate), EMPTY, cell_count, context)

    @classmethod
    def transformer(
        cls,
        growth_rate: GrowthRate,
        mutation_rate: MutationRate,
        cell_count: int,
        context: Optional[RunContext] = None,
    ) -> "NeutralLineage":
        """Founder carrying the single mutation that transformed it."""
        context = context if context is not None else RunContext.default()
        transforming = (Mutation.neutral(0, context),)
        return cls(None, growth_rate, Mutator.neutral(mutation_rate), transforming, cell_count, context)

    def fission(self, cell_count: int) -> "NeutralLineage":
        return NeutralLineage(self, self.intrinsic_growth_rate, self.mutator, EMPTY, cell_count)

    def daughter(self, mutations: MutationList) -> "NeutralLineage":
        return NeutralLineage(
            self,
            self.daughter_growth_rate(mutations),
            self.mutator,
            mutations,
            self.DAUGHTER_CELL_COUNT,
        )


class SelectiveLineage(MutatingLineage):
    """Lineage whose daughters may carry driver mutations."""

    @classmethod
    def create_founder(
        cls,
        growth_rate: GrowthRate,
        mutator: Mutator,
        cell_count: int,
        context: Optional[RunContext] = None,
    ) -> "SelectiveLineage":
        return cls(None, growth_rate, mutator, EMPTY, cell_count, context)

    def fission(self, cell_count: int) -> "SelectiveLineage":
        return SelectiveLineage(self, self.intrinsic_growth_rate, self.mutator, EMPTY, cell_count)

    def daughter(self, mutations: MutationList) -> "SelectiveLineage":
        return SelectiveLineage(
            self,
            self.daughter_growth_rate(mutations),
            self.mutator,
            mutations,
            self.DAUGHTER_CELL_COUNT,
        )


class PerfectLineage(Lineage):
    """Lineage that grows deterministically and never mutates.

    Birth and death counts are the expected counts rounded to integers, so
    a perfect lineage never spawns daughters and only changes in size.
    """

    @classmethod
    def create_founder(
        cls,
        growth_rate: GrowthRate,
        cell_count: int,
        context: Optional[RunContext] = None,
    ) -> "PerfectLineage":
        return cls(None, growth_rate, Mutator.none(), EMPTY, cell_count, context)

    def fission(self, cell_count: int) -> "PerfectLineage":
        return PerfectLineage(self, self.intrinsic_growth_rate, self.mutator, EMPTY, cell_count)

    def _resolve_growth_count(self, env: "TumorEnv") -> GrowthCount:
        return self.local_growth_rate(env).expected(self._cell_count)
