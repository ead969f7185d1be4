"""
Environments that constrain propagators during a time step.

An environment answers four questions: the growth rate a carrier actually
experiences, whether cells may divide, whether demes may divide, and the
tunable parameters of the model. The root environment is unrestricted.
Overrides wrap a parent and change the answer to exactly one question,
delegating everything else, so constraints compose without copying or
modifying the environments they wrap.

    env = TumorEnv.unrestricted(tumor).slow_growth(0.8).no_deme_division()
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from lattice.neighborhood import Neighborhood
from stochastic.probability import validate_fraction, validate_probability

from .errors import ConsistencyError
from .growth_rate import GrowthRate
from .lineage import Lineage
from .propagator import Propagator


@dataclass(frozen=True)
class EnvParameters:
    """Tunable model parameters shared by every environment in a chain."""

    exact_enumeration_limit: int = Lineage.EXACT_ENUMERATION_LIMIT
    deme_neighborhood: Neighborhood = Neighborhood.MOORE
    maximum_deme_size: int = 10000
    retention_prob: float = 0.5

    def __post_init__(self):
        if self.exact_enumeration_limit < 0:
            raise ValueError("exact enumeration limit must be non-negative")
        if self.maximum_deme_size <= 0:
            raise ValueError("maximum deme size must be positive")
        if not isinstance(self.deme_neighborhood, Neighborhood):
            raise ValueError(f"unknown deme neighborhood: {self.deme_neighborhood!r}")
        object.__setattr__(
            self, "retention_prob", validate_probability(self.retention_prob, "retention probability")
        )


DEFAULT_PARAMETERS = EnvParameters()


class Override(Enum):
    NO_BIRTH = "NO_BIRTH"
    NO_DEME_DIVISION = "NO_DEME_DIVISION"
    NO_GROWTH = "NO_GROWTH"
    SLOW_GROWTH = "SLOW_GROWTH"


class _Session:
    """Time step and propagator list shared by a whole environment chain."""

    def __init__(self, propagators: Sequence[Propagator]):
        self.time_step = 0
        self.propagators: List[Propagator] = list(propagators)


class TumorEnv:
    def __init__(
        self,
        session: _Session,
        parameters: EnvParameters,
        parent: Optional["TumorEnv"] = None,
        override: Optional[Override] = None,
        fraction: float = 1.0,
    ):
        if (parent is None) != (override is None):
            raise ValueError("an override environment needs both a parent and an override")
        self._session = session
        self._parent = parent
        self.parameters = parameters
        self.override = override
        self.fraction = fraction

    @classmethod
    def unrestricted(
        cls, propagator: Propagator, parameters: Optional[EnvParameters] = None
    ) -> "TumorEnv":
        parameters = parameters if parameters is not None else DEFAULT_PARAMETERS
        return cls(_Session([propagator]), parameters)

    def _wrap(self, override: Override, fraction: float = 1.0) -> "TumorEnv":
        return TumorEnv(self._session, self.parameters, self, override, fraction)

    # --- Overrides ---

    def no_birth(self) -> "TumorEnv":
        return self._wrap(Override.NO_BIRTH)

    def no_deme_division(self) -> "TumorEnv":
        return self._wrap(Override.NO_DEME_DIVISION)

    def no_growth(self) -> "TumorEnv":
        return self._wrap(Override.NO_GROWTH)

    def slow_growth(self, fraction: float) -> "TumorEnv":
        return self._wrap(Override.SLOW_GROWTH, validate_fraction(fraction, "growth fraction"))

    # --- Session ---

    def advance(self) -> None:
        """Advance every propagator by one step and adopt their offspring."""
        session = self._session
        session.time_step += 1

        offspring = []
        for propagator in list(session.propagators):
            offspring.extend(propagator.advance(self))

        session.propagators.extend(offspring)

    @property
    def parent(self) -> "TumorEnv":
        """The wrapped environment, or this one at the root of the chain."""
        return self if self._parent is None else self._parent

    def is_root(self) -> bool:
        return self._parent is None

    @property
    def time_step(self) -> int:
        return self._session.time_step

    def view_propagators(self) -> Tuple[Propagator, ...]:
        return tuple(self._session.propagators)

    # --- Queries ---

    def adjust_growth_rate(self, intrinsic_rate: GrowthRate) -> GrowthRate:
        return resolve_growth_rate(self, intrinsic_rate)

    def allow_cell_division(self) -> bool:
        return resolve_cell_division(self)

    def allow_deme_division(self) -> bool:
        return resolve_deme_division(self)

    def get_component_env(self) -> "TumorEnv":
        """Unrestricted environment for the members one level down."""
        env = self
        while env._parent is not None:
            env = env._parent
        return env

    @property
    def exact_enumeration_limit(self) -> int:
        return self.parameters.exact_enumeration_limit

    @property
    def deme_neighborhood(self) -> Neighborhood:
        return self.parameters.deme_neighborhood

    @property
    def maximum_deme_size(self) -> int:
        return self.parameters.maximum_deme_size

    @property
    def retention_prob(self) -> float:
        return self.parameters.retention_prob

    def __repr__(self) -> str:
        chain = []
        env = self
        while env._parent is not None:
            chain.append(env.override.value)
            env = env._parent
        chain.append("UNRESTRICTED")
        return "TumorEnv(" + " <- ".join(chain) + ")"


def resolve_growth_rate(env: TumorEnv, rate: GrowthRate) -> GrowthRate:
    override = env.override
    if override is None:
        return rate
    if override is Override.NO_BIRTH:
        return rate.no_birth()
    if override is Override.NO_GROWTH:
        return rate.no_growth()
    if override is Override.SLOW_GROWTH:
        return resolve_growth_rate(env.parent, rate).rescale_growth_factor(env.fraction)
    if override is Override.NO_DEME_DIVISION:
        return resolve_growth_rate(env.parent, rate)
    raise ConsistencyError(f"unhandled environment override: {override!r}")


def resolve_cell_division(env: TumorEnv) -> bool:
    override = env.override
    if override is None:
        return True
    if override is Override.NO_BIRTH:
        return False
    if override in (Override.NO_DEME_DIVISION, Override.NO_GROWTH, Override.SLOW_GROWTH):
        return resolve_cell_division(env.parent)
    raise ConsistencyError(f"unhandled environment override: {override!r}")


def resolve_deme_division(env: TumorEnv) -> bool:
    override = env.override
    if override is None:
        return True
    if override in (Override.NO_BIRTH, Override.NO_DEME_DIVISION):
        return False
    if override in (Override.NO_GROWTH, Override.SLOW_GROWTH):
        return resolve_deme_division(env.parent)
    raise ConsistencyError(f"unhandled environment override: {override!r}")
