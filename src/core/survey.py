"""Spatial survey of a single mutation across a tumor."""

from collections import Counter
from dataclasses import dataclass, field

from lattice.coord import Coord

from .mutation import Mutation


@dataclass(frozen=True)
class MutationSurvey:
    """Where the cells carrying one mutation are found at a given time.

    Attributes:
        mutation: The surveyed mutation.
        time_step: Time step of the survey.
        origin: Site of the lineage in which the mutation arose.
        coord_counts: Number of carrier cells at each occupied site.
    """

    mutation: Mutation
    time_step: int
    origin: Coord
    coord_counts: Counter = field(default_factory=Counter)

    @property
    def cell_count(self) -> int:
        return sum(self.coord_counts.values())

    @property
    def site_count(self) -> int:
        return len(self.coord_counts)

    @property
    def age(self) -> int:
        return self.time_step - self.mutation.creation_time

    def mean_distance(self) -> float:
        """Cell-weighted mean Euclidean distance from the origin site."""
        total = self.cell_count
        if total == 0:
            return 0.0
        weighted = sum(
            count * self.origin.distance_to(coord)
            for coord, count in self.coord_counts.items()
        )
        return weighted / total

    def max_distance(self) -> float:
        if not self.coord_counts:
            return 0.0
        return max(self.origin.distance_to(coord) for coord in self.coord_counts)
