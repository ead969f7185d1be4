"""
Discrete probability distributions consumed by the tumor model.

Only the operations the model needs are provided: sampling, moments and
point probabilities. The binomial and Poisson families choose a sampling
strategy automatically from their parameters; exact enumeration is used
where it is cheap, and a rounded normal approximation where the normal is
accurate over the whole support.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import numpy as np
from scipy.special import gammaln

from .probability import TOLERANCE, validate_probability
from .random_source import RandomSource, resolve


class SamplingRegimeError(RuntimeError):
    """The chosen sampling strategy cannot handle the given parameters."""


class DiscreteDistribution(ABC):
    """A probability distribution over the integers."""

    @abstractmethod
    def sample(self, source: Optional[RandomSource] = None) -> int:
        ...

    @abstractmethod
    def mean(self) -> float:
        ...

    @abstractmethod
    def variance(self) -> float:
        ...

    @abstractmethod
    def pdf(self, k: int) -> float:
        ...

    @abstractmethod
    def support(self) -> Tuple[int, Optional[int]]:
        """Closed support interval; an upper bound of None means unbounded."""

    def stdev(self) -> float:
        return math.sqrt(self.variance())

    def effective_range(self) -> Tuple[int, int]:
        """Range outside of which the probability mass is negligible."""
        lower, upper = self.support()
        width = 12.0 * self.stdev()
        lo = max(lower, int(math.floor(self.mean() - width)))
        hi = int(math.ceil(self.mean() + width))
        if upper is not None:
            hi = min(upper, hi)
        return lo, hi


# ---------------------------------------------------------------------
# Tabulated CDF
# ---------------------------------------------------------------------


class DiscreteCDF:
    """Cumulative distribution tabulated over a contiguous integer range."""

    def __init__(self, lower: int, values: Sequence[float]):
        values = np.asarray(values, dtype=np.float64)
        if values.ndim != 1 or values.size == 0:
            raise ValueError("CDF values must be a non-empty 1-D sequence")
        for value in values:
            validate_probability(value, "CDF value")
        if np.any(np.diff(values) < -TOLERANCE):
            raise ValueError("CDF values must be non-decreasing")
        if abs(values[-1] - 1.0) > 1.0e-9:
            raise ValueError("CDF is not normalized")
        self.lower = int(lower)
        self.values = values

    @classmethod
    def from_pdf(cls, lower: int, pdf: Sequence[float]) -> "DiscreteCDF":
        return cls(lower, np.cumsum(np.asarray(pdf, dtype=np.float64)))

    @property
    def upper(self) -> int:
        return self.lower + self.values.size - 1

    def evaluate(self, k: int) -> float:
        if k < self.lower:
            return 0.0
        if k > self.upper:
            return 1.0
        return float(self.values[k - self.lower])

    def inverse(self, u: float) -> int:
        """Smallest k with CDF(k) >= u."""
        u = validate_probability(u, "cumulative probability")
        index = int(np.searchsorted(self.values, u - TOLERANCE, side="left"))
        if index >= self.values.size:
            raise SamplingRegimeError(
                f"no value brackets cumulative probability {u}"
            )
        return self.lower + index

    def pdf(self) -> np.ndarray:
        return np.diff(self.values, prepend=0.0)

    def sample(self, source: Optional[RandomSource] = None) -> int:
        return self.inverse(resolve(source).next_double())


# ---------------------------------------------------------------------
# Binomial
# ---------------------------------------------------------------------


def _validate_trial_count(trial_count: int) -> int:
    if trial_count < 0:
        raise ValueError("trial count cannot be negative")
    return int(trial_count)


class BinomialDistribution(DiscreteDistribution):
    """Number of successes in n independent Bernoulli trials."""

    # Always enumerate exactly below this many trials.
    EXACT_TRIAL_LIMIT = 10

    def __init__(self, trial_count: int, success_prob: float):
        self.trial_count = _validate_trial_count(trial_count)
        self.success_prob = validate_probability(success_prob, "success probability")

    @staticmethod
    def create(trial_count: int, success_prob: float) -> "BinomialDistribution":
        trial_count = _validate_trial_count(trial_count)
        success_prob = validate_probability(success_prob, "success probability")
        if BinomialDistribution.use_approx(trial_count, success_prob):
            return BinomialApprox(trial_count, success_prob)
        return BinomialExact(trial_count, success_prob)

    @staticmethod
    def use_approx(trial_count: int, success_prob: float) -> bool:
        if trial_count < BinomialDistribution.EXACT_TRIAL_LIMIT:
            return False
        # The normal approximation is accurate when the support [0, N]
        # spans four standard deviations on either side of the mean.
        mean = BinomialDistribution.mean_of(trial_count, success_prob)
        stdev = math.sqrt(BinomialDistribution.variance_of(trial_count, success_prob))
        return 0.0 <= mean - 4.0 * stdev and mean + 4.0 * stdev <= trial_count

    @staticmethod
    def mean_of(trial_count: int, success_prob: float) -> float:
        return _validate_trial_count(trial_count) * success_prob

    @staticmethod
    def variance_of(trial_count: int, success_prob: float) -> float:
        return _validate_trial_count(trial_count) * success_prob * (1.0 - success_prob)

    @staticmethod
    def log_pdf_of(k: int, trial_count: int, success_prob: float) -> float:
        n = _validate_trial_count(trial_count)
        if k < 0 or k > n:
            return -math.inf
        if success_prob == 0.0:
            return 0.0 if k == 0 else -math.inf
        if success_prob == 1.0:
            return 0.0 if k == n else -math.inf
        log_choose = gammaln(n + 1) - gammaln(k + 1) - gammaln(n - k + 1)
        return float(
            k * math.log(success_prob)
            + (n - k) * math.log1p(-success_prob)
            + log_choose
        )

    def mean(self) -> float:
        return self.mean_of(self.trial_count, self.success_prob)

    def variance(self) -> float:
        return self.variance_of(self.trial_count, self.success_prob)

    def pdf(self, k: int) -> float:
        return math.exp(self.log_pdf_of(k, self.trial_count, self.success_prob))

    def support(self) -> Tuple[int, Optional[int]]:
        return 0, self.trial_count


class BinomialExact(BinomialDistribution):
    """Explicit Bernoulli trial for every member."""

    def sample(self, source: Optional[RandomSource] = None) -> int:
        if self.trial_count == 0:
            return 0
        draws = resolve(source).uniform_array(self.trial_count)
        return int(np.count_nonzero(draws < self.success_prob))


class BinomialApprox(BinomialDistribution):
    """Normal approximation rounded and clamped to the support."""

    def sample(self, source: Optional[RandomSource] = None) -> int:
        draw = resolve(source).next_gaussian(self.mean(), self.stdev())
        return min(self.trial_count, max(0, int(round(draw))))


# ---------------------------------------------------------------------
# Poisson
# ---------------------------------------------------------------------


class PoissonDistribution(DiscreteDistribution):
    """Number of events for a given mean event count."""

    KNUTH_MEAN_LIMIT = 1.0
    NORMAL_MEAN_LIMIT = 50.0

    def __init__(self, mean: float):
        self._mean = self._validate_mean(mean)

    @staticmethod
    def _validate_mean(mean: float) -> float:
        mean = float(mean)
        if not mean > 0.0:
            raise ValueError("Poisson mean must be positive")
        return mean

    @staticmethod
    def create(mean: float) -> "PoissonDistribution":
        mean = PoissonDistribution._validate_mean(mean)
        if mean < PoissonDistribution.KNUTH_MEAN_LIMIT:
            return PoissonExact(mean)
        if mean < PoissonDistribution.NORMAL_MEAN_LIMIT:
            return PoissonKnuth(mean)
        return PoissonNormal(mean)

    @staticmethod
    def log_pdf_of(k: int, mean: float) -> float:
        mean = PoissonDistribution._validate_mean(mean)
        if k < 0:
            return -math.inf
        return float(-mean + k * math.log(mean) - gammaln(k + 1))

    @staticmethod
    def pdf_of(k: int, mean: float) -> float:
        return math.exp(PoissonDistribution.log_pdf_of(k, mean))

    def mean(self) -> float:
        return self._mean

    def variance(self) -> float:
        return self._mean

    def pdf(self, k: int) -> float:
        return self.pdf_of(k, self._mean)

    def support(self) -> Tuple[int, Optional[int]]:
        return 0, None


class PoissonExact(PoissonDistribution):
    """Inverse-CDF sampling from a tabulated distribution (small means)."""

    MAX_TERMS = 100

    def __init__(self, mean: float):
        super().__init__(mean)
        self.cdf = self._tabulate(self._mean)

    @classmethod
    def _tabulate(cls, mean: float) -> DiscreteCDF:
        values: List[float] = [cls.pdf_of(0, mean)]
        for k in range(1, cls.MAX_TERMS):
            values.append(values[-1] + cls.pdf_of(k, mean))
            if 1.0 - values[-1] < 1.0e-15:
                values.append(1.0)
                return DiscreteCDF(0, values)
        raise SamplingRegimeError(
            f"Poisson mean {mean} is too large for explicit CDF sampling"
        )

    def sample(self, source: Optional[RandomSource] = None) -> int:
        return self.cdf.lower + resolve(source).select_cdf(self.cdf.values)


class PoissonKnuth(PoissonDistribution):
    """Knuth's product-of-uniforms algorithm (moderate means)."""

    def __init__(self, mean: float):
        super().__init__(mean)
        self.max_iterations = int(round(1000.0 * self._mean))
        self.threshold = math.exp(-self._mean)
        if self.max_iterations < 1:
            raise SamplingRegimeError(
                "Knuth sampling is not appropriate for very small means"
            )

    def sample(self, source: Optional[RandomSource] = None) -> int:
        source = resolve(source)
        count = 0
        draw = source.next_double()
        while draw > self.threshold and count < self.max_iterations:
            count += 1
            draw *= source.next_double()
        return count


class PoissonNormal(PoissonDistribution):
    """Rounded normal approximation (large means)."""

    def sample(self, source: Optional[RandomSource] = None) -> int:
        draw = resolve(source).next_gaussian(self._mean, math.sqrt(self._mean))
        return max(0, int(round(draw)))
