"""Sparse periodic lattice used to place demes in space."""

from .coord import ORIGIN, Coord, Period
from .lattice import Lattice, OccupancyError
from .neighborhood import Neighborhood

__all__ = ["ORIGIN", "Coord", "Period", "Lattice", "Neighborhood", "OccupancyError"]
