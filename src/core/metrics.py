"""
Spatial and genetic summary metrics for a simulated tumor.

The spatial shape is summarized by the cell-weighted gyration tensor

    RG_ij = sum_k w_k (r_k - CM)_i (r_k - CM)_j

whose eigenvalues (principal moments) l1 <= l2 <= l3 give the radius of
gyration sqrt(l1 + l2 + l3) and the standard shape descriptors:
asphericity b = l3 - (l1 + l2) / 2, acylindricity c = l2 - l1, and
relative shape anisotropy (b^2 + 3c^2 / 4) / Rg^4.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, TYPE_CHECKING, Union

import numpy as np

from lattice.coord import Coord

if TYPE_CHECKING:
    from .tumor import Tumor


@dataclass(frozen=True)
class VectorMoment:
    """Centre of mass and gyration tensor of a weighted point cloud."""

    cm: np.ndarray
    rg: np.ndarray

    @classmethod
    def compute(
        cls,
        points: Union[Mapping[Coord, int], Iterable[Sequence[float]]],
        weights: Optional[Sequence[float]] = None,
    ) -> "VectorMoment":
        """Compute the moments of a point collection.

        Args:
            points: Either a mapping from lattice coordinate to multiplicity
                (e.g. a Counter of cell locations) or a sequence of
                equal-length vectors.
            weights: Optional multiplicity of each vector; ignored when
                points is a mapping.

        Raises:
            ValueError: If there are no points, the total weight is not
                positive, or the vectors differ in dimension.
        """
        if isinstance(points, Mapping):
            weights = [points[coord] for coord in points]
            points = [coord.as_tuple() for coord in points]
        else:
            points = list(points)

        if not points:
            raise ValueError("at least one point is required")

        try:
            X = np.asarray(points, dtype=np.float64)
        except ValueError as exc:
            raise ValueError("all vectors must have the same dimension") from exc
        if X.ndim != 2:
            raise ValueError("all vectors must have the same dimension")

        if weights is None:
            w = np.ones(X.shape[0])
        else:
            w = np.asarray(weights, dtype=np.float64)
            if w.shape != (X.shape[0],) or np.any(w < 0.0):
                raise ValueError("weights must be non-negative, one per point")

        total = w.sum()
        if total <= 0.0:
            raise ValueError("total weight must be positive")

        w = w / total
        cm = w @ X
        dX = X - cm
        rg = (dX * w[:, None]).T @ dX
        return cls(cm, rg)

    @property
    def dimension(self) -> int:
        return self.cm.shape[0]

    def principal_moments(self) -> np.ndarray:
        """Eigenvalues of the gyration tensor in ascending order."""
        return np.linalg.eigvalsh(self.rg)

    def _principal_3d(self):
        if self.dimension != 3:
            raise ValueError("shape descriptors are defined only in three dimensions")
        l1, l2, l3 = self.principal_moments()
        return l1, l2, l3

    def radius_of_gyration(self) -> float:
        return math.sqrt(max(0.0, float(np.trace(self.rg))))

    def asphericity(self) -> float:
        l1, l2, l3 = self._principal_3d()
        return float(l3 - 0.5 * (l1 + l2))

    def acylindricity(self) -> float:
        l1, l2, _ = self._principal_3d()
        return float(l2 - l1)

    def anisotropy(self) -> float:
        l1, l2, l3 = self._principal_3d()
        rg2 = l1 + l2 + l3
        if rg2 == 0.0:
            return 0.0
        b = l3 - 0.5 * (l1 + l2)
        c = l2 - l1
        return float((b * b + 0.75 * c * c) / (rg2 * rg2))


def compute_mutation_burden(tumor: "Tumor") -> float:
    """Mean number of accumulated mutations per live cell.

    Returns:
        0.0 for an empty tumor.
    """
    cell_total = 0
    mutation_total = 0
    for deme in tumor.view_live_demes():
        for lineage in deme.view_live_lineages():
            n = lineage.count_cells()
            cell_total += n
            mutation_total += n * len(lineage.accumulated_mutations())

    if cell_total == 0:
        return 0.0
    return mutation_total / cell_total


def compute_clone_count(tumor: "Tumor") -> int:
    """Number of live lineages (genetically distinct clones)."""
    return sum(deme.count_live_lineages() for deme in tumor.view_live_demes())
