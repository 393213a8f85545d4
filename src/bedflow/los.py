"""
Length-of-stay distributions used to simulate bed occupancy.

Stays are modelled with a Weibull distribution discretised to whole days. The
day of admission counts as the first occupied day, so a stay of ``k`` days
has probability ``F(k) - F(k-1)`` for ``k >= 1``, where ``F`` is the Weibull
CDF. Equivalently, a stay is the continuous Weibull draw rounded up to the next
whole day.

Default parameters (shape, scale in days) are provided per care category:

- ``critical``: Weibull(2, 10)
- ``normal``: Weibull(2, 13)
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import numpy as np
from scipy.stats import weibull_min

from bedflow.errors import InvalidParameter
from bedflow.validation import check_finite, check_integer

LOS_PARAMETERS: Dict[str, Tuple[float, float]] = {
    "critical": (2.0, 10.0),
    "normal": (2.0, 13.0),
}


def _as_generator(rng) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


@dataclass(frozen=True)
class DiscretisedWeibull:
    """Weibull length-of-stay distribution on whole days starting at 1.

    Parameters
    ----------
    shape : float
        Weibull shape parameter (k), must be positive.
    scale : float
        Weibull scale parameter (lambda) in days, must be positive.
    """

    shape: float
    scale: float

    def __post_init__(self):
        for name in ("shape", "scale"):
            value = check_finite(name, getattr(self, name))
            if value <= 0:
                raise InvalidParameter(name, value, "must be positive")

    @property
    def _continuous(self):
        return weibull_min(c=self.shape, scale=self.scale)

    def pmf(self, days) -> np.ndarray:
        """Probability of a stay of exactly ``days`` days (0 for days < 1)."""
        days = np.asarray(days, dtype=float)
        cdf = self._continuous.cdf
        probs = cdf(days) - cdf(days - 1)
        return np.where((days >= 1) & (days == np.floor(days)), probs, 0.0)

    def mean(self, max_days: int = 1000) -> float:
        """Mean stay in days, summed over stays up to ``max_days``."""
        max_days = check_integer("max_days", max_days, minimum=1)
        days = np.arange(1, max_days + 1)
        return float(np.sum(days * self.pmf(days)))

    def sample(self, n: int, rng=None) -> np.ndarray:
        """Draw ``n`` stays in whole days, each at least 1.

        Parameters
        ----------
        n : int
            Number of stays to draw.
        rng : numpy.random.Generator or int, optional
            Random generator or seed. A fresh generator is used if None.
        """
        n = check_integer("n", n, minimum=0)
        draws = self._continuous.rvs(size=n, random_state=_as_generator(rng))
        # a continuous draw of exactly 0 is still a one-day stay
        return np.maximum(np.ceil(draws), 1).astype(np.int64)

    def sampler(self, rng=None) -> Callable[[int], np.ndarray]:
        """Return ``f(n)`` drawing ``n`` stays from one shared generator."""
        generator = _as_generator(rng)

        def draw(n):
            return self.sample(n, rng=generator)

        return draw


def get_los_distribution(care: str) -> DiscretisedWeibull:
    """Return the default length-of-stay distribution for a care category."""
    if care not in LOS_PARAMETERS:
        raise InvalidParameter("care", care, f"must be one of {sorted(LOS_PARAMETERS)}")
    shape, scale = LOS_PARAMETERS[care]
    return DiscretisedWeibull(shape=shape, scale=scale)


def get_los_sampler(care: str, rng=None) -> Callable[[int], np.ndarray]:
    """Return a length-of-stay sampler for ``care`` ("critical" or "normal").

    Examples
    --------
    >>> sampler = get_los_sampler("critical", rng=42)
    >>> stays = sampler(5)
    >>> len(stays), bool((stays >= 1).all())
    (5, True)
    """
    return get_los_distribution(care).sampler(rng=rng)
