"""
Propagators that carry heritable mutations.

A Carrier records the mutations that originated in it; the mutations it
has accumulated are those of every ancestor from the founder down to
itself, in that order. Ancestry never changes, so the accumulated list is
computed once per carrier and kept in the run context's cache.
"""

from typing import Iterable, Optional, TYPE_CHECKING

from .growth_rate import GrowthRate
from .mutation import EMPTY, MutationList, Mutator
from .propagator import Propagator

if TYPE_CHECKING:
    from .context import RunContext
    from .tumor_env import TumorEnv


class Carrier(Propagator):
    """A propagator with a fixed list of originating mutations."""

    def __init__(
        self,
        parent: Optional["Carrier"],
        original_mutations: Iterable = EMPTY,
        context: Optional["RunContext"] = None,
    ):
        super().__init__(parent, context)
        self._original = tuple(original_mutations)

    def original_mutations(self) -> MutationList:
        return self._original

    def accumulated_mutations(self) -> MutationList:
        cache = self.context.accumulated_mutations
        cached = cache.get(self.key)
        if cached is not None:
            return cached

        # Walk up to the nearest cached ancestor, then fill in downward;
        # deep trees must not recurse.
        pending = []
        node = self
        while node is not None and node.key not in cache:
            pending.append(node)
            node = node.parent

        accumulated = EMPTY if node is None else cache[node.key]
        for node in reversed(pending):
            accumulated = accumulated + node.original_mutations()
            cache[node.key] = accumulated

        return accumulated


class UniformCarrier(Carrier):
    """A carrier whose members share one intrinsic growth rate and mutator."""

    def __init__(
        self,
        parent: Optional["UniformCarrier"],
        growth_rate: GrowthRate,
        mutator: Mutator,
        original_mutations: Iterable = EMPTY,
        context: Optional["RunContext"] = None,
    ):
        super().__init__(parent, original_mutations, context)
        self.intrinsic_growth_rate = growth_rate
        self.mutator = mutator

    def local_growth_rate(self, env: "TumorEnv") -> GrowthRate:
        """The intrinsic rate adjusted for the local environment."""
        return env.adjust_growth_rate(self.intrinsic_growth_rate)

    def daughter_growth_rate(self, mutations: MutationList) -> GrowthRate:
        """Intrinsic rate of a daughter carrying the given new mutations."""
        return self.intrinsic_growth_rate.apply(mutations)
