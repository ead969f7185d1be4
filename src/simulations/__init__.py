"""Tumor growth simulation driver."""
from .engine import Simulation
from .parameter_profiles import (
    net_rate_to_rates,
    ParameterProfile,
    NEUTRAL_DEMO_PROFILE,
    SMALL_DEME_PROFILE,
    PROFILES,
)
