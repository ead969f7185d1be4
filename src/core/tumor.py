"""
The tumor: demes placed on a sparse periodic lattice.

Each step the live demes are advanced in a freshly shuffled order. A deme
may only divide when at least one neighboring site is free; its daughter
is placed on a free neighbor chosen uniformly at random. Demes whose last
lineage dies are removed from the lattice, but their final site is kept
so that the spatial history of extinct demes remains queryable.
"""

import logging
from collections import Counter
from typing import Dict, FrozenSet, Iterator, List, Mapping, Union, TYPE_CHECKING

from lattice.coord import ORIGIN, Coord, Period
from lattice.lattice import Lattice

from .deme import Deme
from .errors import ConsistencyError
from .lineage import Lineage
from .metrics import VectorMoment
from .mutation import Mutation, MutationList, accumulate
from .propagator import Propagator, State
from .survey import MutationSurvey

if TYPE_CHECKING:
    from .tumor_env import TumorEnv

logger = logging.getLogger(__name__)

# The lattice is sparse, so a large periodic box costs nothing.
LATTICE_LENGTH = 1000

# Deme coordinates are relative to the founding deme.
INITIAL_COORD = ORIGIN


class Tumor(Propagator):
    kind = "tumor"

    def __init__(self, deme: Deme):
        super().__init__(None, deme.context)
        self._lattice: Lattice[Deme] = Lattice(Period.cubic(LATTICE_LENGTH))
        self._live: Dict[Deme, None] = {}
        self._dead: Dict[Deme, Coord] = {}
        self._add_deme(deme, INITIAL_COORD)

    @classmethod
    def create(cls, founder: Union[Deme, Lineage]) -> "Tumor":
        if isinstance(founder, Lineage):
            founder = Deme.create(founder)
        return cls(founder)

    def _add_deme(self, deme: Deme, coord: Coord) -> None:
        self._lattice.occupy(deme, coord)
        self._live[deme] = None
        logger.debug("placed %r at %s", deme, coord)

    def _remove_deme(self, deme: Deme) -> None:
        coord = self._lattice.vacate(deme)
        del self._live[deme]
        self._dead[deme] = coord
        logger.debug("%r died at %s", deme, coord)

    # --- Counts and views ---

    def count_cells(self) -> int:
        return sum(deme.count_cells() for deme in self._live)

    def count_lineages(self) -> int:
        return sum(deme.count_lineages() for deme in self._iter_demes())

    def count_demes(self) -> int:
        return len(self._live) + len(self._dead)

    def count_live_demes(self) -> int:
        return len(self._live)

    def count_dead_demes(self) -> int:
        return len(self._dead)

    def is_empty(self) -> bool:
        return not self._live

    def _iter_demes(self) -> Iterator[Deme]:
        yield from self._live
        yield from self._dead

    def view_demes(self) -> FrozenSet[Deme]:
        return frozenset(self._live) | frozenset(self._dead)

    def view_live_demes(self) -> FrozenSet[Deme]:
        return frozenset(self._live)

    def view_dead_demes(self) -> FrozenSet[Deme]:
        return frozenset(self._dead)

    def view_lattice(self) -> Mapping[Deme, Coord]:
        """Current site of every live deme."""
        return self._lattice.view_occupants()

    @property
    def state(self) -> State:
        return State.DEAD if self.is_empty() else State.ALIVE

    def original_mutations(self) -> MutationList:
        return accumulate(self._iter_demes())

    # --- Provenance and spatial queries ---

    def locate_deme(self, deme: Deme) -> Coord:
        coord = self._lattice.locate(deme)
        if coord is not None:
            return coord
        coord = self._dead.get(deme)
        if coord is not None:
            return coord
        raise ConsistencyError(f"{deme!r} cannot be located in this tumor")

    def find_originators(self) -> Dict[Mutation, Lineage]:
        """Map every mutation to the single lineage in which it arose."""
        originators: Dict[Mutation, Lineage] = {}
        for deme in self._iter_demes():
            for lineage in deme.iter_lineages():
                for mutation in lineage.original_mutations():
                    if mutation in originators:
                        raise ConsistencyError(
                            f"{mutation!r} originated in both {originators[mutation]!r} and {lineage!r}"
                        )
                    originators[mutation] = lineage
        return originators

    def locate_lineages(self) -> Dict[Lineage, Coord]:
        """Map every lineage to the site of its deme (last site if dead)."""
        coords: Dict[Lineage, Coord] = {}
        for deme in self._iter_demes():
            coord = self.locate_deme(deme)
            for lineage in deme.iter_lineages():
                if lineage in coords:
                    raise ConsistencyError(f"{lineage!r} is located in more than one deme")
                coords[lineage] = coord
        return coords

    def map_cells(self) -> Counter:
        """Number of live cells at each occupied site."""
        counts: Counter = Counter()
        for deme in self._live:
            counts[self._lattice.locate(deme)] += deme.count_cells()
        return counts

    def compute_moment(self) -> VectorMoment:
        return VectorMoment.compute(self.map_cells())

    def survey_mutations(self, time_step: int) -> Dict[Mutation, MutationSurvey]:
        """Origin site and current spatial spread of every carried mutation."""
        originators = self.find_originators()
        lineage_coords = self.locate_lineages()

        origin_coords: Dict[Mutation, Coord] = {}
        for mutation, lineage in originators.items():
            coord = lineage_coords.get(lineage)
            if coord is None:
                raise ConsistencyError(f"{lineage!r} has no recorded location")
            origin_coords[mutation] = coord

        carrier_coords: Dict[Mutation, Counter] = {}
        for lineage, coord in lineage_coords.items():
            if lineage.is_empty():
                continue
            for mutation in lineage.accumulated_mutations():
                carrier_coords.setdefault(mutation, Counter())[coord] += lineage.count_cells()

        surveys = {}
        for mutation, counts in carrier_coords.items():
            origin = origin_coords.get(mutation)
            if origin is None:
                raise ConsistencyError(f"{mutation!r} has no recorded origin")
            surveys[mutation] = MutationSurvey(mutation, time_step, origin, counts)
        return surveys

    # --- Advancement ---

    def advance(self, env: "TumorEnv") -> List[Propagator]:
        if self.is_dead():
            return []

        # Iterate over a shuffled copy so demes can be added and removed.
        shuffled = list(self._live)
        self.context.random.shuffle(shuffled)

        neighborhood = env.deme_neighborhood
        for deme in shuffled:
            deme_env = env.get_component_env()
            if not self._lattice.has_available_neighbor(deme, neighborhood):
                deme_env = deme_env.no_deme_division()

            daughters = deme.advance(deme_env)
            if len(daughters) > 1:
                raise ConsistencyError(f"{deme!r} produced {len(daughters)} daughters in one step")

            for daughter in daughters:
                available = self._lattice.find_available(deme, neighborhood)
                if not available:
                    raise ConsistencyError(f"no free site for the daughter of {deme!r}")
                self._add_deme(daughter, self.context.random.select(available))

            if deme.is_dead():
                self._remove_deme(deme)

        return []

    def __repr__(self) -> str:
        return (
            f"Tumor({self.index}; {self.count_cells()} cells, "
            f"{self.count_live_demes()} live / {self.count_dead_demes()} dead demes)"
        )
