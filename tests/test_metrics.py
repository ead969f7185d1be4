from collections import Counter

import numpy as np
import pytest

from core.context import RunContext
from core.growth_rate import NO_GROWTH
from core.lineage import PerfectLineage
from core.metrics import VectorMoment, compute_clone_count, compute_mutation_burden
from core.survey import MutationSurvey
from core.mutation import Mutation
from core.tumor import Tumor
from lattice.coord import Coord


def test_weighted_coordinates_centre_of_mass():
    coords = Counter({Coord(1, 10, 100): 1, Coord(2, 20, 200): 2, Coord(3, 30, 300): 3})
    moment = VectorMoment.compute(coords)
    expected = [
        (1.0 + 2 * 2.0 + 3 * 3.0) / 6.0,
        (10.0 + 2 * 20.0 + 3 * 30.0) / 6.0,
        (100.0 + 2 * 200.0 + 3 * 300.0) / 6.0,
    ]
    assert moment.cm == pytest.approx(np.array(expected))

    vectors = [c.as_tuple() for c in coords.elements()]
    unweighted = VectorMoment.compute(vectors)
    assert unweighted.cm == pytest.approx(moment.cm)
    assert unweighted.rg == pytest.approx(moment.rg)


def test_single_point_has_zero_gyration():
    moment = VectorMoment.compute(Counter({Coord(1, 2, 3): 10}))
    assert moment.cm == pytest.approx(np.array([1.0, 2.0, 3.0]))
    assert moment.rg == pytest.approx(np.zeros((3, 3)))
    assert moment.radius_of_gyration() == 0.0
    assert moment.anisotropy() == 0.0


def test_two_vectors_gyration_tensor():
    v1 = [1.0, 2.0, 3.0, 4.0]
    v2 = [2.0, 4.0, 6.0, 8.0]
    moment = VectorMoment.compute([v1, v2])
    assert moment.cm == pytest.approx(np.array([1.5, 3.0, 4.5, 6.0]))
    expected = 0.25 * np.outer(v1, v1)
    assert moment.rg == pytest.approx(expected)
    with pytest.raises(ValueError):
        moment.asphericity()


def test_isotropic_cloud_shape_descriptors():
    rng = np.random.default_rng(1)
    points = rng.normal(0.0, 2.0, size=(1000000, 3))
    moment = VectorMoment.compute(points)
    assert moment.cm == pytest.approx(np.zeros(3), abs=0.02)
    assert moment.rg == pytest.approx(4.0 * np.eye(3), abs=0.05)
    assert 0.0 <= moment.asphericity() < 0.05
    assert 0.0 <= moment.acylindricity() < 0.05
    assert 0.0 <= moment.anisotropy() < 0.001
    assert moment.radius_of_gyration() == pytest.approx(np.sqrt(12.0), abs=0.02)


def test_linear_cloud_is_maximally_aspherical():
    points = [(x, 0, 0) for x in range(-5, 6)]
    moment = VectorMoment.compute(points)
    l1, l2, l3 = moment.principal_moments()
    assert l1 == pytest.approx(0.0, abs=1e-12)
    assert l2 == pytest.approx(0.0, abs=1e-12)
    assert moment.asphericity() == pytest.approx(l3)
    assert moment.anisotropy() == pytest.approx(1.0)


def test_invalid_inputs():
    with pytest.raises(ValueError):
        VectorMoment.compute([])
    with pytest.raises(ValueError):
        VectorMoment.compute([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0, 0.0]])
    with pytest.raises(ValueError):
        VectorMoment.compute(Counter())


def test_mutation_burden_and_clone_count():
    context = RunContext(seed=1)
    founder = PerfectLineage.create_founder(NO_GROWTH, 10, context)
    tumor = Tumor.create(founder)
    assert compute_mutation_burden(tumor) == 0.0
    assert compute_clone_count(tumor) == 1


def test_mutation_survey_distances():
    context = RunContext(seed=1)
    mutation = Mutation.neutral(2, context)
    survey = MutationSurvey(
        mutation, 10, Coord(0, 0, 0), Counter({Coord(0, 0, 0): 3, Coord(3, 4, 0): 1})
    )
    assert survey.cell_count == 4
    assert survey.site_count == 2
    assert survey.age == 8
    assert survey.mean_distance() == pytest.approx(1.25)
    assert survey.max_distance() == pytest.approx(5.0)
