# src/lattice/coord.py

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, eq=True)
class Coord:
    x: int
    y: int
    z: int

    def __add__(self, other: "Coord") -> "Coord":
        if not isinstance(other, Coord):
            return NotImplemented
        return Coord(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Coord") -> "Coord":
        if not isinstance(other, Coord):
            return NotImplemented
        return Coord(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: int) -> "Coord":
        if not isinstance(scalar, int):
            return NotImplemented
        return Coord(self.x * scalar, self.y * scalar, self.z * scalar)

    def as_tuple(self) -> Tuple[int, int, int]:
        return self.x, self.y, self.z

    def distance_to(self, other: "Coord") -> float:
        d = self - other
        return (d.x * d.x + d.y * d.y + d.z * d.z) ** 0.5


ORIGIN = Coord(0, 0, 0)


@dataclass(frozen=True)
class Period:
    """Periodic box dimensions; coordinates are wrapped onto their image."""

    nx: int
    ny: int
    nz: int

    def __post_init__(self) -> None:
        if min(self.nx, self.ny, self.nz) < 1:
            raise ValueError("periodic dimensions must be positive")

    @classmethod
    def cubic(cls, n: int) -> "Period":
        return cls(n, n, n)

    def image(self, coord: Coord) -> Coord:
        # Python's modulo already maps negatives into [0, n).
        return Coord(coord.x % self.nx, coord.y % self.ny, coord.z % self.nz)

    @property
    def site_count(self) -> int:
        return self.nx * self.ny * self.nz
