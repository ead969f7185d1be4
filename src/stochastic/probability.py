"""Validation helpers for probabilities and fractions."""

TOLERANCE = 1.0e-12


def validate_probability(value: float, name: str = "probability") -> float:
    """Return value as a float in [0, 1], clamping round-off at the edges."""
    value = float(value)
    if value != value or value < -TOLERANCE or value > 1.0 + TOLERANCE:
        raise ValueError(f"{name} must be in [0, 1]; got {value}")
    return min(1.0, max(0.0, value))


def validate_fraction(value: float, name: str = "fraction") -> float:
    return validate_probability(value, name)
