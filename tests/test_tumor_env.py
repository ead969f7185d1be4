import pytest

from core.context import RunContext
from core.deme import Deme
from core.errors import ConsistencyError
from core.growth_rate import GrowthRate
from core.lineage import PerfectLineage
from core.tumor_cell import PerfectCell
from core.tumor_env import EnvParameters, Override, TumorEnv
from lattice.neighborhood import Neighborhood

RATE_3065 = GrowthRate(0.30, 0.65)
RATE_4060 = GrowthRate(0.40, 0.60)
RATE_5545 = GrowthRate(0.55, 0.45)
RATE_7020 = GrowthRate(0.70, 0.20)


def assert_rate(rate, birth, death):
    assert rate.birth_rate == pytest.approx(birth, abs=1e-12)
    assert rate.death_rate == pytest.approx(death, abs=1e-12)


def unrestricted():
    return TumorEnv.unrestricted(PerfectCell.create_founder())


def test_unrestricted_env_allows_everything():
    env = unrestricted()
    assert env.allow_cell_division()
    assert env.allow_deme_division()
    assert env.adjust_growth_rate(RATE_5545) == RATE_5545
    assert env.parent is env
    assert env.get_component_env() is env


def test_default_parameters():
    env = unrestricted()
    assert env.exact_enumeration_limit == 10
    assert env.deme_neighborhood is Neighborhood.MOORE
    assert env.maximum_deme_size == 10000
    assert env.retention_prob == pytest.approx(0.5)


def test_no_birth_forbids_division_and_removes_births():
    env = unrestricted().no_birth()
    assert not env.allow_cell_division()
    assert not env.allow_deme_division()
    assert_rate(env.adjust_growth_rate(RATE_3065), 0.0, 0.65)
    assert_rate(env.adjust_growth_rate(RATE_4060), 0.0, 0.60)
    assert_rate(env.adjust_growth_rate(RATE_5545), 0.0, 0.45)
    assert_rate(env.adjust_growth_rate(RATE_7020), 0.0, 0.20)


def test_no_deme_division_only_changes_deme_division():
    env0 = unrestricted()
    env1 = env0.no_deme_division()
    assert env0.allow_deme_division()
    assert not env1.allow_deme_division()
    assert env1.allow_cell_division()
    assert env1.adjust_growth_rate(RATE_7020) == RATE_7020


def test_no_growth_is_idempotent():
    env1 = unrestricted().no_growth()
    env2 = env1.no_growth()
    for env in (env1, env2):
        assert_rate(env.adjust_growth_rate(RATE_3065), 0.30, 0.65)
        assert_rate(env.adjust_growth_rate(RATE_4060), 0.40, 0.60)
        assert_rate(env.adjust_growth_rate(RATE_5545), 0.50, 0.50)
        assert_rate(env.adjust_growth_rate(RATE_7020), 0.45, 0.45)


def test_slow_growth_composes_multiplicatively():
    env0 = unrestricted()
    env1 = env0.slow_growth(0.8)
    env2 = env1.slow_growth(0.7)
    env3 = env2.slow_growth(0.6)

    for env in (env0, env1, env2, env3):
        assert env.allow_cell_division()
        assert env.allow_deme_division()

    g0 = RATE_5545.growth_factor
    assert env1.adjust_growth_rate(RATE_5545).growth_factor == pytest.approx(0.8 * g0)
    assert env2.adjust_growth_rate(RATE_5545).growth_factor == pytest.approx(0.8 * 0.7 * g0)
    assert env3.adjust_growth_rate(RATE_5545).growth_factor == pytest.approx(0.8 * 0.7 * 0.6 * g0)


def test_slow_growth_rejects_invalid_fraction():
    with pytest.raises(ValueError):
        unrestricted().slow_growth(1.5)
    with pytest.raises(ValueError):
        unrestricted().slow_growth(-0.1)


def test_overrides_delegate_to_parent():
    env = unrestricted().no_deme_division().slow_growth(0.5)
    assert not env.allow_deme_division()
    assert env.allow_cell_division()
    assert env.override is Override.SLOW_GROWTH
    assert env.parent.override is Override.NO_DEME_DIVISION


def test_overrides_do_not_modify_wrapped_env():
    env0 = unrestricted()
    env0.no_birth()
    env0.no_growth()
    env0.slow_growth(0.1)
    assert env0.allow_deme_division()
    assert env0.adjust_growth_rate(RATE_7020) == RATE_7020


def test_component_env_is_unwrapped_root():
    env0 = unrestricted()
    env = env0.no_birth().slow_growth(0.5).no_deme_division()
    assert env.get_component_env() is env0


def test_overrides_share_time_step_and_parameters():
    parameters = EnvParameters(maximum_deme_size=50, retention_prob=0.25)
    env0 = TumorEnv.unrestricted(PerfectCell.create_founder(), parameters)
    env1 = env0.no_growth()
    env0.advance()
    env0.advance()
    assert env0.time_step == 2
    assert env1.time_step == 2
    assert env1.maximum_deme_size == 50
    assert env1.retention_prob == pytest.approx(0.25)


def test_advance_folds_offspring_into_session():
    cell = PerfectCell.create_founder(GrowthRate(1.0, 0.0))
    env = TumorEnv.unrestricted(cell)
    env.advance()
    propagators = env.view_propagators()
    assert len(propagators) == 3
    assert cell.is_dead()
    assert all(p.is_alive() for p in propagators[1:])


def test_invalid_parameters_are_rejected():
    with pytest.raises(ValueError):
        EnvParameters(maximum_deme_size=0)
    with pytest.raises(ValueError):
        EnvParameters(retention_prob=1.5)
    with pytest.raises(ValueError):
        EnvParameters(exact_enumeration_limit=-1)


def test_unhandled_override_is_a_consistency_error():
    env = unrestricted().no_growth()
    env.override = "SOMETHING_ELSE"
    with pytest.raises(ConsistencyError):
        env.adjust_growth_rate(RATE_5545)
    with pytest.raises(ConsistencyError):
        env.allow_deme_division()


def test_growth_override_applies_to_the_propagators_it_is_handed_to():
    lineage = PerfectLineage.create_founder(GrowthRate.net(0.5), 1000, RunContext(seed=1))
    env = TumorEnv.unrestricted(lineage).slow_growth(0.5)
    env.advance()
    # b = 0.375, d = 0.625 after halving the growth factor of 1.5.
    assert lineage.count_cells() == 750


def test_deme_hands_its_lineages_the_component_environment():
    lineage = PerfectLineage.create_founder(GrowthRate.net(0.5), 1000, RunContext(seed=1))
    deme = Deme.create(lineage)
    env = TumorEnv.unrestricted(deme).slow_growth(0.5)
    assert deme.advance(env) == []
    assert lineage.count_cells() == 1500
