"""
Individually tracked tumor cells.

A cell is alive when created and dies on its first event: a birth replaces
it with two daughters, a death removes it without offspring.
"""

from abc import abstractmethod
from typing import List, Optional, TYPE_CHECKING

from .carrier import UniformCarrier
from .context import RunContext
from .errors import ConsistencyError
from .growth_rate import GrowthRate, NO_GROWTH
from .mutation import EMPTY, MutationList, MutationRate, Mutator
from .propagator import State

if TYPE_CHECKING:
    from .tumor_env import TumorEnv


class TumorCell(UniformCarrier):
    kind = "cell"

    def __init__(
        self,
        parent: Optional["TumorCell"],
        growth_rate: GrowthRate,
        mutator: Mutator,
        original_mutations: MutationList = EMPTY,
        context: Optional[RunContext] = None,
    ):
        super().__init__(parent, growth_rate, mutator, original_mutations, context)
        self._state = State.ALIVE

    @abstractmethod
    def daughter(self, mutations: MutationList) -> "TumorCell":
        """Daughter cell carrying the given newly originated mutations."""

    @property
    def state(self) -> State:
        return self._state

    def _transition(self, state: State) -> None:
        if self._state is State.DEAD and state is not State.DEAD:
            raise ConsistencyError(f"{self!r} cannot leave the DEAD state")
        self._state = state

    def advance(self, env: "TumorEnv") -> List["TumorCell"]:
        if self.is_dead():
            return []

        count = self.local_growth_rate(env).sample(1, self.context.random)
        assert count.event_count <= 1

        if count.birth_count == 1:
            self._transition(State.DEAD)
            return [self._spawn(env), self._spawn(env)]

        if count.death_count == 1:
            self._transition(State.DEAD)

        return []

    def _spawn(self, env: "TumorEnv") -> "TumorCell":
        return self.daughter(self.mutator.generate(env.time_step, self.context))


class NeutralCell(TumorCell):
    """Cell that accumulates passenger mutations only."""

    @classmethod
    def create_founder(
        cls,
        growth_rate: GrowthRate,
        mutation_rate: MutationRate,
        context: Optional[RunContext] = None,
    ) -> "NeutralCell":
        return cls(None, growth_rate, Mutator.neutral(mutation_rate), EMPTY, context)

    def daughter(self, mutations: MutationList) -> "NeutralCell":
        return NeutralCell(self, self.daughter_growth_rate(mutations), self.mutator, mutations)


class PerfectCell(TumorCell):
    """Cell that never mutates; daughters inherit its growth rate unchanged."""

    @classmethod
    def create_founder(
        cls,
        growth_rate: GrowthRate = NO_GROWTH,
        context: Optional[RunContext] = None,
    ) -> "PerfectCell":
        return cls(None, growth_rate, Mutator.none(), EMPTY, context)

    def daughter(self, mutations: MutationList) -> "PerfectCell":
        return PerfectCell(self, self.intrinsic_growth_rate, self.mutator, EMPTY)
