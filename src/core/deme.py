"""
Spatially co-located collections of lineages.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, TYPE_CHECKING

from .errors import ConsistencyError
from .lineage import Lineage
from .mutation import MutationList, accumulate
from .propagator import Propagator, State

if TYPE_CHECKING:
    from .tumor_env import TumorEnv


class Deme(Propagator):
    """A set of lineages sharing one lattice site.

    Every lineage created in or moved into the deme is held in exactly one
    of two collections, live or dead, according to its current state.
    When the total cell count exceeds the maximum deme size the deme
    either divides (if the environment allows it) or restricts the growth
    of its lineages so that it cannot grow any further.
    """

    kind = "deme"

    def __init__(
        self,
        parent: Optional["Deme"],
        lineages: Iterable[Lineage],
    ):
        lineages = list(lineages)
        if not lineages:
            raise ValueError("a deme requires at least one lineage")
        super().__init__(parent, lineages[0].context)

        # Insertion-ordered; values are unused.
        self._live: Dict[Lineage, None] = {}
        self._dead: Dict[Lineage, None] = {}
        self._update_lineages(lineages)

    @classmethod
    def create(cls, lineage: Lineage) -> "Deme":
        return cls(None, [lineage])

    def _update_lineages(self, lineages: Iterable[Lineage]) -> None:
        for lineage in lineages:
            self._update_lineage(lineage)

    def _update_lineage(self, lineage: Lineage) -> None:
        if lineage.context is not self.context:
            raise ConsistencyError(f"{lineage!r} belongs to a different run context")
        state = lineage.state
        if state is State.ALIVE:
            self._live[lineage] = None
            self._dead.pop(lineage, None)
        elif state is State.DEAD:
            self._dead[lineage] = None
            self._live.pop(lineage, None)
        else:
            raise ConsistencyError(f"lineage state must be ALIVE or DEAD; got {state}")

    # --- Counts and views ---

    def count_cells(self) -> int:
        return sum(lineage.count_cells() for lineage in self._live)

    def count_lineages(self) -> int:
        return len(self._live) + len(self._dead)

    def count_live_lineages(self) -> int:
        return len(self._live)

    def count_dead_lineages(self) -> int:
        return len(self._dead)

    def is_empty(self) -> bool:
        return not self._live

    def view_lineages(self) -> FrozenSet[Lineage]:
        return frozenset(self._live) | frozenset(self._dead)

    def view_live_lineages(self) -> FrozenSet[Lineage]:
        return frozenset(self._live)

    def view_dead_lineages(self) -> FrozenSet[Lineage]:
        return frozenset(self._dead)

    def iter_lineages(self):
        """Live then dead lineages, in the order they joined the deme."""
        yield from self._live
        yield from self._dead

    @property
    def state(self) -> State:
        return State.DEAD if self.is_empty() else State.ALIVE

    def original_mutations(self) -> MutationList:
        """Mutations originating in any lineage of this deme."""
        return accumulate(self.iter_lineages())

    def accumulated_mutations(self) -> MutationList:
        """Distinct mutations carried by the live cells, ordered by index."""
        seen = {}
        for lineage in self._live:
            for mutation in lineage.accumulated_mutations():
                seen[mutation.index] = mutation
        return tuple(seen[index] for index in sorted(seen))

    # --- Advancement ---

    def advance(self, env: "TumorEnv") -> List["Deme"]:
        if self.is_dead():
            return []

        lineage_env = self._lineage_env(env)

        dead_parents = []
        live_daughters = []
        for parent in list(self._live):
            live_daughters.extend(parent.advance(lineage_env))
            if parent.is_dead():
                dead_parents.append(parent)

        self._update_lineages(dead_parents)
        self._update_lineages(live_daughters)

        if self._must_divide(env):
            daughter = self._divide(lineage_env)
            if daughter is not None:
                return [daughter]

        return []

    def _exceeds_maximum_size(self, env: "TumorEnv") -> bool:
        return self.count_cells() > env.maximum_deme_size

    def _lineage_env(self, env: "TumorEnv") -> "TumorEnv":
        lineage_env = env.get_component_env()
        if not env.allow_deme_division() and self._exceeds_maximum_size(env):
            lineage_env = lineage_env.no_growth()
        return lineage_env

    def _must_divide(self, env: "TumorEnv") -> bool:
        return env.allow_deme_division() and self._exceeds_maximum_size(env)

    def _divide(self, lineage_env: "TumorEnv") -> Optional["Deme"]:
        # Fission products from every lineage go to a single new deme.
        products = []
        dead_parents = []
        for lineage in list(self._live):
            product = lineage.divide(lineage_env.retention_prob)
            if lineage.is_dead():
                dead_parents.append(lineage)
            if product is not None:
                products.append(product)

        self._update_lineages(dead_parents)

        if not products:
            return None
        return Deme(self, products)

    def __repr__(self) -> str:
        return (
            f"Deme({self.index}; {self.count_cells()} cells, "
            f"{self.count_live_lineages()} live / {self.count_dead_lineages()} dead lineages)"
        )
