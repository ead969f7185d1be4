import pytest

from lattice import ORIGIN, Coord, Lattice, Neighborhood, OccupancyError, Period


def test_neighborhood_sizes():
    assert Neighborhood.VON_NEUMANN.size() == 6
    assert Neighborhood.NEAR_NEXT.size() == 18
    assert Neighborhood.MOORE.size() == 26


def test_neighborhoods_are_nested_and_exclude_center():
    von_neumann = set(Neighborhood.VON_NEUMANN.basis())
    near_next = set(Neighborhood.NEAR_NEXT.basis())
    moore = set(Neighborhood.MOORE.basis())
    assert von_neumann < near_next < moore
    assert ORIGIN not in moore
    assert len(moore) == 26


def test_coord_arithmetic():
    a = Coord(1, 2, 3)
    b = Coord(-1, 0, 4)
    assert a + b == Coord(0, 2, 7)
    assert a - b == Coord(2, 2, -1)
    assert a * 2 == Coord(2, 4, 6)
    assert Coord(3, 4, 0).distance_to(ORIGIN) == pytest.approx(5.0)


def test_period_wraps_coordinates():
    period = Period.cubic(10)
    assert period.image(Coord(-1, 0, 12)) == Coord(9, 0, 2)
    assert period.site_count == 1000
    with pytest.raises(ValueError):
        Period(0, 1, 1)


def test_occupy_locate_and_vacate():
    lattice = Lattice(Period.cubic(10))
    lattice.occupy("a", ORIGIN)
    assert lattice.locate("a") == ORIGIN
    assert lattice.occupant_at(ORIGIN) == "a"
    assert lattice.is_occupied(Coord(10, 0, 0))
    assert lattice.count_occupants() == 1

    assert lattice.vacate("a") == ORIGIN
    assert lattice.locate("a") is None
    assert lattice.is_available(ORIGIN)


def test_occupied_site_is_exclusive():
    lattice = Lattice(Period.cubic(10))
    lattice.occupy("a", ORIGIN)
    with pytest.raises(OccupancyError):
        lattice.occupy("b", Coord(0, 0, 10))


def test_vacating_absent_occupant_is_an_error():
    lattice = Lattice(Period.cubic(10))
    with pytest.raises(OccupancyError):
        lattice.vacate("ghost")


def test_moving_an_occupant_frees_its_old_site():
    lattice = Lattice(Period.cubic(10))
    lattice.occupy("a", ORIGIN)
    lattice.occupy("a", Coord(1, 0, 0))
    assert lattice.is_available(ORIGIN)
    assert lattice.view_occupants() == {"a": Coord(1, 0, 0)}


def test_find_available_neighbors():
    lattice = Lattice(Period.cubic(100))
    lattice.occupy("center", ORIGIN)
    lattice.occupy("east", Coord(1, 0, 0))

    available = lattice.find_available("center", Neighborhood.VON_NEUMANN)
    assert len(available) == 5
    assert Coord(1, 0, 0) not in available
    assert lattice.has_available_neighbor("center", Neighborhood.VON_NEUMANN)

    for i, coord in enumerate(available):
        lattice.occupy(i, coord)
    assert not lattice.has_available_neighbor("center", Neighborhood.VON_NEUMANN)
    assert lattice.find_available("center", Neighborhood.VON_NEUMANN) == []


def test_neighbor_queries_require_placed_occupant():
    lattice = Lattice(Period.cubic(10))
    with pytest.raises(OccupancyError):
        lattice.find_available("ghost", Neighborhood.MOORE)
    with pytest.raises(OccupancyError):
        lattice.has_available_neighbor("ghost", Neighborhood.MOORE)


def test_lattice_package_does_not_depend_on_core():
    import inspect

    import lattice.coord
    import lattice.lattice
    import lattice.neighborhood

    for module in (lattice.coord, lattice.lattice, lattice.neighborhood):
        source = inspect.getsource(module)
        assert "from core" not in source
        assert "import core" not in source
