# src/lattice/neighborhood.py

from enum import Enum
from typing import List, Tuple

from .coord import Coord

FIRST_NEAREST: Tuple[Coord, ...] = (
    Coord(0, 0, -1),
    Coord(0, -1, 0),
    Coord(-1, 0, 0),
    Coord(0, 1, 0),
    Coord(1, 0, 0),
    Coord(0, 0, 1),
)

SECOND_NEAREST: Tuple[Coord, ...] = (
    Coord(0, -1, -1),
    Coord(-1, 0, -1),
    Coord(0, 1, -1),
    Coord(1, 0, -1),
    Coord(-1, -1, 0),
    Coord(-1, 1, 0),
    Coord(1, 1, 0),
    Coord(1, -1, 0),
    Coord(0, -1, 1),
    Coord(-1, 0, 1),
    Coord(0, 1, 1),
    Coord(1, 0, 1),
)

THIRD_NEAREST: Tuple[Coord, ...] = (
    Coord(-1, -1, -1),
    Coord(-1, 1, -1),
    Coord(1, 1, -1),
    Coord(1, -1, -1),
    Coord(-1, -1, 1),
    Coord(-1, 1, 1),
    Coord(1, 1, 1),
    Coord(1, -1, 1),
)


class Neighborhood(Enum):
    VON_NEUMANN = "VON_NEUMANN"  # 6 face-sharing sites
    NEAR_NEXT = "NEAR_NEXT"      # + 12 edge-sharing sites
    MOORE = "MOORE"              # + 8 corner-sharing sites

    def basis(self) -> Tuple[Coord, ...]:
        if self is Neighborhood.VON_NEUMANN:
            return FIRST_NEAREST
        if self is Neighborhood.NEAR_NEXT:
            return FIRST_NEAREST + SECOND_NEAREST
        return FIRST_NEAREST + SECOND_NEAREST + THIRD_NEAREST

    def neighbors(self, center: Coord) -> List[Coord]:
        return [center + d for d in self.basis()]

    def size(self) -> int:
        return len(self.basis())
