"""
Parameter profiles for simulation runs.

A profile bundles the per-step growth and mutation rates of the founding
lineage with the deme-level parameters of the environment. Rates are
per time step; a time step is an abstract cell-cycle interval.
"""

from dataclasses import dataclass, replace

from core.growth_rate import GrowthRate
from core.mutation import MutationRate
from core.tumor_env import EnvParameters
from lattice.neighborhood import Neighborhood


def net_rate_to_rates(net_rate: float, event_rate: float = 1.0) -> tuple:
    """Split a net growth rate into (birth, death) probabilities.

    b - d = net_rate and b + d = event_rate.
    """
    if event_rate < 0.0 or event_rate > 1.0:
        raise ValueError("event_rate must be in [0, 1]")
    if abs(net_rate) > event_rate:
        raise ValueError("|net_rate| cannot exceed event_rate")
    return 0.5 * (event_rate + net_rate), 0.5 * (event_rate - net_rate)


@dataclass(frozen=True)
class ParameterProfile:
    name: str
    birth_rate: float
    death_rate: float
    mutation_rate: float
    founder_cell_count: int
    maximum_deme_size: int
    retention_prob: float = 0.5
    exact_enumeration_limit: int = 10
    neighborhood: str = "MOORE"
    note: str = ""

    def __post_init__(self):
        # Growth rate and environment validate their own fields.
        self.growth_rate()
        self.env_parameters()
        if self.mutation_rate < 0.0:
            raise ValueError("mutation_rate must be non-negative")
        if self.founder_cell_count <= 0:
            raise ValueError("founder_cell_count must be positive")

    def growth_rate(self) -> GrowthRate:
        return GrowthRate(self.birth_rate, self.death_rate)

    def mutation_rate_model(self) -> MutationRate:
        return MutationRate.poisson(self.mutation_rate)

    def env_parameters(self) -> EnvParameters:
        try:
            neighborhood = Neighborhood[self.neighborhood]
        except KeyError:
            raise ValueError(f"unknown neighborhood: {self.neighborhood}") from None
        return EnvParameters(
            exact_enumeration_limit=self.exact_enumeration_limit,
            deme_neighborhood=neighborhood,
            maximum_deme_size=self.maximum_deme_size,
            retention_prob=self.retention_prob,
        )

    def with_overrides(self, **changes) -> "ParameterProfile":
        return replace(self, **changes)


_DEMO_BIRTH, _DEMO_DEATH = net_rate_to_rates(0.2, event_rate=0.8)

NEUTRAL_DEMO_PROFILE = ParameterProfile(
    name="neutral-demo",
    birth_rate=_DEMO_BIRTH,
    death_rate=_DEMO_DEATH,
    mutation_rate=0.05,
    founder_cell_count=100,
    maximum_deme_size=1000,
    note="Neutral growth at 20% net rate per step; demes split at 1000 cells.",
)


SMALL_DEME_PROFILE = ParameterProfile(
    name="small-deme",
    birth_rate=0.6,
    death_rate=0.2,
    mutation_rate=0.02,
    founder_cell_count=10,
    maximum_deme_size=50,
    neighborhood="VON_NEUMANN",
    note="Fast-dividing small demes; exercises spatial crowding quickly.",
)


PROFILES = {
    profile.name: profile
    for profile in (NEUTRAL_DEMO_PROFILE, SMALL_DEME_PROFILE)
}
