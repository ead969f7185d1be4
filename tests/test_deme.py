import pytest

from core.context import RunContext
from core.deme import Deme
from core.growth_rate import NO_GROWTH, GrowthRate
from core.lineage import NeutralLineage, PerfectLineage
from core.mutation import EMPTY, MutationRate
from core.tumor_env import EnvParameters, TumorEnv

MAX_SIZE = 10000


def assert_partition(deme, all_lineages):
    live = deme.view_live_lineages()
    dead = deme.view_dead_lineages()
    assert not (live & dead)
    assert live | dead == set(all_lineages)
    assert all(lineage.is_alive() for lineage in live)
    assert all(lineage.is_dead() for lineage in dead)


def test_neutral_restricted_deme_never_divides():
    mut_prob = 0.05
    init_size = 2 * MAX_SIZE
    lineage = NeutralLineage.create_founder(
        GrowthRate.net(0.5), MutationRate.poisson(mut_prob), init_size, RunContext(seed=17)
    )
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder).no_deme_division()

    assert founder.advance(env) == []
    cells1 = founder.count_cells()
    assert cells1 / init_size == pytest.approx(1.0, abs=0.01)
    mut_count1 = len(founder.original_mutations())
    assert mut_count1 >= founder.count_lineages() - 1
    assert mut_count1 / init_size == pytest.approx(mut_prob, abs=0.005)

    assert founder.advance(env) == []
    cells2 = founder.count_cells()
    assert cells2 / cells1 == pytest.approx(1.0, abs=0.01)
    mut_count2 = len(founder.original_mutations())
    assert mut_count2 / init_size / 2.0 == pytest.approx(mut_prob, abs=0.004)


def test_neutral_unrestricted_deme_divides_on_first_step():
    net_rate = 0.5
    init_size = 3 * MAX_SIZE // 4
    lineage = NeutralLineage.create_founder(
        GrowthRate.net(net_rate), MutationRate.poisson(0.05), init_size, RunContext(seed=5)
    )
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder)
    assert founder.count_lineages() == 1

    daughters = founder.advance(env)
    assert len(daughters) == 1
    daughter = daughters[0]
    assert daughter.parent is founder
    assert daughter.generation == 1

    total = founder.count_cells() + daughter.count_cells()
    assert total / init_size == pytest.approx(1.0 + net_rate, abs=0.01)
    assert daughter.count_cells() / founder.count_cells() == pytest.approx(1.0, abs=0.1)
    assert daughter.original_mutations() == EMPTY
    assert len(founder.original_mutations()) / total == pytest.approx(0.05, abs=0.008)


def test_neutral_slow_deme_eventually_divides_evenly():
    lineage = NeutralLineage.create_founder(
        GrowthRate.net(0.1), MutationRate.poisson(0.05), 1000, RunContext(seed=12)
    )
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder, EnvParameters(maximum_deme_size=2000))

    daughter = None
    for _ in range(100):
        daughters = founder.advance(env)
        if daughters:
            daughter = daughters[0]
            break

    assert daughter is not None
    assert daughter.count_cells() / founder.count_cells() == pytest.approx(1.0, abs=0.25)
    assert daughter.original_mutations() == EMPTY


def test_perfect_restricted_deme_holds_size():
    init_size = 2 * MAX_SIZE
    lineage = PerfectLineage.create_founder(GrowthRate.net(0.5), init_size, RunContext(seed=1))
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder).no_deme_division()

    for _ in range(10):
        assert founder.advance(env) == []
        assert founder.count_lineages() == 1
        assert founder.count_cells() == init_size
        assert lineage.count_cells() == init_size


def test_perfect_unrestricted_deme_divides_after_exceeding_maximum():
    net_rate = 0.5
    init_size = MAX_SIZE // 2
    lineage = PerfectLineage.create_founder(GrowthRate.net(net_rate), init_size, RunContext(seed=1))
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder)

    assert founder.advance(env) == []
    assert founder.count_lineages() == 1
    assert founder.count_cells() == pytest.approx(init_size * 1.5)
    assert founder.count_cells() < env.maximum_deme_size

    daughters = founder.advance(env)
    assert len(daughters) == 1
    daughter = daughters[0]
    total = founder.count_cells() + daughter.count_cells()
    assert founder.count_lineages() == 1
    assert daughter.count_lineages() == 1
    assert total / init_size == pytest.approx(2.25)
    assert founder.count_cells() / daughter.count_cells() == pytest.approx(1.0, abs=0.1)
    assert founder.original_mutations() == EMPTY
    assert founder.accumulated_mutations() == EMPTY


def test_restricted_deme_above_maximum_has_no_expected_growth():
    rate = GrowthRate(0.3, 0.1)
    init_size = 301
    parameters = EnvParameters(maximum_deme_size=200)

    lineage = NeutralLineage.create_founder(rate, MutationRate.zero(), init_size, RunContext(seed=33))
    deme = Deme.create(lineage)
    env = TumorEnv.unrestricted(deme, parameters).no_deme_division()
    capped = deme._lineage_env(env).adjust_growth_rate(rate)
    assert capped.growth_factor <= 1.0
    assert capped.event_rate == pytest.approx(rate.event_rate)

    # Birth and death balance, so sizes wander around the starting size.
    final_sizes = []
    for seed in range(50):
        lineage = NeutralLineage.create_founder(rate, MutationRate.zero(), init_size, RunContext(seed=seed))
        deme = Deme.create(lineage)
        env = TumorEnv.unrestricted(deme, parameters).no_deme_division()
        for _ in range(20):
            assert deme.advance(env) == []
        final_sizes.append(deme.count_cells())

    assert sum(final_sizes) / len(final_sizes) == pytest.approx(init_size, abs=5.0)
    assert max(final_sizes) < init_size * 1.2 ** 5


def test_restricted_deme_at_maximum_shrinks_with_declining_rate():
    context = RunContext(seed=34)
    lineage = NeutralLineage.create_founder(GrowthRate(0.2, 0.4), MutationRate.zero(), 300, context)
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder, EnvParameters(maximum_deme_size=200)).no_deme_division()

    previous = founder.count_cells()
    for _ in range(10):
        founder.advance(env)
        assert founder.count_cells() <= previous
        previous = founder.count_cells()
    assert previous < 300


def test_no_birth_environment_forbids_deme_division():
    lineage = PerfectLineage.create_founder(GrowthRate.net(0.5), 2 * MAX_SIZE, RunContext(seed=7))
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder).no_birth()

    for _ in range(3):
        assert founder.advance(env) == []
        assert founder.count_cells() == 2 * MAX_SIZE


def test_live_and_dead_lineages_partition_all_lineages():
    context = RunContext(seed=44)
    lineage = NeutralLineage.create_founder(GrowthRate(0.45, 0.45), MutationRate.poisson(0.3), 20, context)
    founder = Deme.create(lineage)
    env = TumorEnv.unrestricted(founder, EnvParameters(maximum_deme_size=10 ** 6))

    all_lineages = {lineage}
    for _ in range(30):
        before = set(founder.view_lineages())
        founder.advance(env)
        new = founder.view_lineages() - before
        all_lineages |= new
        assert_partition(founder, all_lineages)
        assert founder.count_lineages() == len(all_lineages)

    assert founder.count_dead_lineages() > 0


def test_view_lineages_is_read_only():
    lineage = PerfectLineage.create_founder(NO_GROWTH, 1000)
    founder = Deme.create(lineage)
    view = founder.view_lineages()
    assert view == {lineage}
    with pytest.raises(AttributeError):
        view.add(PerfectLineage.create_founder(NO_GROWTH, 1000))
    with pytest.raises(AttributeError):
        view.remove(lineage)


def test_dead_deme_is_immobile():
    lineage = PerfectLineage.create_founder(GrowthRate.net(-1.0), 10, RunContext(seed=1))
    deme = Deme.create(lineage)
    env = TumorEnv.unrestricted(deme)
    deme.advance(env)
    assert deme.is_dead()
    assert deme.count_dead_lineages() == 1
    assert deme.advance(env) == []
    assert deme.is_dead()


def test_merged_fission_products_form_one_daughter():
    context = RunContext(seed=3)
    lineages = [PerfectLineage.create_founder(NO_GROWTH, 400, context) for _ in range(3)]
    deme = Deme(None, lineages)
    env = TumorEnv.unrestricted(deme, EnvParameters(maximum_deme_size=1000))

    daughters = deme.advance(env)
    assert len(daughters) == 1
    assert daughters[0].count_lineages() == 3
    assert deme.count_cells() + daughters[0].count_cells() == 1200
