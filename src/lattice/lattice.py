# src/lattice/lattice.py

from typing import Dict, Generic, List, Mapping, Optional, TypeVar

from .coord import Coord, Period
from .neighborhood import Neighborhood

T = TypeVar("T")


class OccupancyError(RuntimeError):
    """A site or occupant is not in the state an operation requires."""


class Lattice(Generic[T]):
    """
    Sparse periodic lattice holding at most one occupant per site.
    Tracks occupancy in both directions: site image -> occupant and
    occupant -> the (unwrapped) coordinate it was placed at.
    """

    def __init__(self, period: Period):
        self.period = period
        self._occupants: Dict[Coord, T] = {}
        self._coords: Dict[T, Coord] = {}

    def is_available(self, coord: Coord) -> bool:
        return self.period.image(coord) not in self._occupants

    def is_occupied(self, coord: Coord) -> bool:
        return not self.is_available(coord)

    def occupant_at(self, coord: Coord) -> Optional[T]:
        return self._occupants.get(self.period.image(coord))

    def locate(self, occupant: T) -> Optional[Coord]:
        return self._coords.get(occupant)

    def occupy(self, occupant: T, coord: Coord) -> None:
        image = self.period.image(coord)
        current = self._occupants.get(image)
        if current is not None and current is not occupant:
            raise OccupancyError(f"site {coord} is already occupied")
        if occupant in self._coords and self._coords[occupant] != coord:
            self.vacate(occupant)
        self._occupants[image] = occupant
        self._coords[occupant] = coord

    def vacate(self, occupant: T) -> Coord:
        coord = self._coords.pop(occupant, None)
        if coord is None:
            raise OccupancyError("occupant is not on the lattice")
        del self._occupants[self.period.image(coord)]
        return coord

    def find_available(self, occupant: T, neighborhood: Neighborhood) -> List[Coord]:
        """Unoccupied sites adjacent to the site held by the occupant."""
        center = self._coords.get(occupant)
        if center is None:
            raise OccupancyError("occupant is not on the lattice")
        return [c for c in neighborhood.neighbors(center) if self.is_available(c)]

    def has_available_neighbor(self, occupant: T, neighborhood: Neighborhood) -> bool:
        center = self._coords.get(occupant)
        if center is None:
            raise OccupancyError("occupant is not on the lattice")
        return any(self.is_available(c) for c in neighborhood.neighbors(center))

    def count_occupants(self) -> int:
        return len(self._coords)

    def view_occupants(self) -> Mapping[T, Coord]:
        return dict(self._coords)
