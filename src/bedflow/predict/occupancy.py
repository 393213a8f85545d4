"""
Simulate daily bed occupancy from admissions and length-of-stay draws.

Each replicate expands daily admission counts into individual admissions,
draws one length of stay per admission in a single batched call to the
sampler, and counts how many admissions occupy a bed on each day of the
horizon. An admission on day ``d`` with stay ``L`` occupies days
``d, d+1, ..., d+L-1``. Occupancy after the last forecast date is not
reported, even though patients admitted near the end of the horizon are
still in hospital.

Replicates depend only on the shared read-only inputs and return their own
arrays. They are combined into an :class:`OccupancyDistribution` once all of
them have completed.

Functions
---------
simulate_occupancy : function
    Run replicate simulations and return the distribution of daily bed counts.

OccupancyDistribution : class
    Date-indexed table of replicate bed counts with summary statistics.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

import numpy as np
import pandas as pd

from bedflow.errors import (
    InvalidParameter,
    SamplerContractViolation,
    SimulationCancelled,
)
from bedflow.validation import check_integer, check_quantiles

LOGGER = logging.getLogger(__name__)

DEFAULT_QUANTILES = (0.025, 0.5, 0.975)


@dataclass(frozen=True)
class OccupancyDistribution:
    """Daily bed counts across simulation replicates.

    Parameters
    ----------
    replicates : pandas.DataFrame
        Integer bed counts indexed by a daily ``DatetimeIndex`` named ``date``,
        one column per replicate. Days without occupancy hold 0.

    Notes
    -----
    Quantiles use linear interpolation between replicate values, so they may
    be fractional.
    """

    replicates: pd.DataFrame

    @property
    def n_replicates(self) -> int:
        return self.replicates.shape[1]

    @property
    def dates(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self.replicates.index, name="date")

    def mean(self) -> pd.Series:
        """Mean bed count per day across replicates."""
        return self.replicates.mean(axis=1).rename("mean")

    def median(self) -> pd.Series:
        """Median bed count per day across replicates."""
        return self.replicates.median(axis=1).rename("median")

    def quantiles(self, quantiles: Iterable[float] = DEFAULT_QUANTILES) -> pd.DataFrame:
        """Per-day quantiles of the replicate bed counts.

        Parameters
        ----------
        quantiles : iterable of float
            Probabilities in [0, 1].

        Returns
        -------
        pandas.DataFrame
            Indexed by date, one column per requested probability.
        """
        qs = check_quantiles("quantiles", quantiles)
        result = self.replicates.quantile(list(qs), axis=1).T
        result.index.name = "date"
        result.columns = pd.Index(qs, name="quantile")
        return result

    def summary(self, quantiles: Iterable[float] = DEFAULT_QUANTILES) -> pd.DataFrame:
        """Mean and quantiles per day, as one table."""
        return pd.concat([self.mean(), self.quantiles(quantiles)], axis=1)

    def reindex(self, dates: Sequence) -> "OccupancyDistribution":
        """Return a copy aligned to ``dates``; dates without data hold 0."""
        index = pd.DatetimeIndex(dates, name="date")
        aligned = self.replicates.reindex(index, fill_value=0)
        return OccupancyDistribution(replicates=aligned.astype(np.int64))


def _check_dates(dates) -> pd.DatetimeIndex:
    try:
        days = pd.DatetimeIndex(pd.to_datetime(dates)).normalize()
    except (TypeError, ValueError) as exc:
        raise InvalidParameter("dates", dates, "must be calendar dates") from exc
    if len(days) == 0:
        raise InvalidParameter("dates", dates, "must not be empty")
    if days.hasnans:
        raise InvalidParameter("dates", dates, "must not contain missing dates")
    if not (days.is_monotonic_increasing and days.is_unique):
        raise InvalidParameter(
            "dates", list(dates), "must be strictly increasing distinct days"
        )
    return days


def _check_counts(admission_counts, n_dates: int) -> np.ndarray:
    try:
        counts = np.asarray(admission_counts, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(
            "admission_counts", admission_counts, "must be numeric"
        ) from exc
    if counts.ndim != 1 or counts.shape[0] != n_dates:
        raise InvalidParameter(
            "admission_counts",
            admission_counts,
            f"must be a flat sequence with one count per date ({n_dates})",
        )
    if not np.all(np.isfinite(counts)):
        raise InvalidParameter("admission_counts", admission_counts, "must be finite")
    if np.any(counts < 0):
        raise InvalidParameter(
            "admission_counts", admission_counts, "must be non-negative"
        )
    if np.any(counts != np.floor(counts)):
        raise InvalidParameter(
            "admission_counts", admission_counts, "must be whole numbers"
        )
    return counts.astype(np.int64)


def _draw_stays(stay_sampler: Callable, n: int) -> np.ndarray:
    """Draw ``n`` stays in one call and check the sampler's contract."""
    draw = np.atleast_1d(np.asarray(stay_sampler(n)))
    if draw.ndim != 1 or draw.shape[0] != n:
        raise SamplerContractViolation(
            f"Length-of-stay sampler returned {draw.size} values for {n} admissions",
            requested=n,
            received=draw.shape,
        )
    if draw.dtype == bool or not np.issubdtype(draw.dtype, np.number):
        raise SamplerContractViolation(
            f"Length-of-stay sampler returned non-numeric values of type {draw.dtype}",
            requested=n,
            received=draw.dtype,
        )
    stays = draw.astype(float)
    if not np.all(np.isfinite(stays)):
        raise SamplerContractViolation(
            "Length-of-stay sampler returned non-finite values",
            requested=n,
            received=stays[~np.isfinite(stays)][:5].tolist(),
        )
    if np.any(stays <= 0):
        raise SamplerContractViolation(
            "Length-of-stay sampler returned non-positive values",
            requested=n,
            received=stays[stays <= 0][:5].tolist(),
        )
    if np.any(stays != np.floor(stays)):
        raise SamplerContractViolation(
            "Length-of-stay sampler returned non-integer values",
            requested=n,
            received=stays[stays != np.floor(stays)][:5].tolist(),
        )
    return stays


def _simulate_replicate(
    admission_days: np.ndarray, n_days: int, stay_sampler: Callable
) -> np.ndarray:
    """Return one replicate's bed counts for days ``0 .. n_days-1``.

    ``admission_days`` holds one day offset per individual admission.
    """
    if admission_days.size == 0:
        return np.zeros(n_days, dtype=np.int64)

    stays = _draw_stays(stay_sampler, admission_days.size)
    # stays beyond the horizon are cut at the last forecast date
    discharge_days = np.minimum(admission_days + np.minimum(stays, n_days), n_days)

    arrivals = np.bincount(admission_days, minlength=n_days + 1)
    departures = np.bincount(discharge_days.astype(np.int64), minlength=n_days + 1)
    return np.cumsum(arrivals - departures)[:n_days].astype(np.int64)


def _enable_verbose_logging() -> None:
    if not LOGGER.handlers:
        LOGGER.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter("%(message)s"))
        LOGGER.addHandler(handler)
        LOGGER.propagate = False


def simulate_occupancy(
    dates,
    admission_counts,
    stay_sampler: Callable,
    n_replicates: int = 10,
    cancel_event=None,
    verbose: bool = False,
) -> OccupancyDistribution:
    """
    Simulate the distribution of daily bed occupancy.

    Parameters
    ----------
    dates : sequence of date-like
        Non-empty, strictly increasing distinct days.
    admission_counts : sequence of int
        Admissions on each date. Zero-admission dates contribute nothing.
    stay_sampler : callable
        ``stay_sampler(n)`` must return ``n`` positive integer stays in days.
        It is called once per replicate with the total number of admissions.
    n_replicates : int, optional
        Number of replicate simulations, at least 1. Default is 10.
    cancel_event : object, optional
        Anything with an ``is_set()`` method, such as ``threading.Event``.
        Checked before each replicate.
    verbose : bool, optional
        If True, print progress messages to stdout.

    Returns
    -------
    OccupancyDistribution
        Bed counts for every day in ``[min(dates), max(dates)]``.

    Raises
    ------
    InvalidParameter
        If an argument violates its constraint.
    SamplerContractViolation
        If the sampler returns an invalid draw. The simulation is abandoned.
    SimulationCancelled
        If ``cancel_event`` is set before all replicates have run.

    Examples
    --------
    >>> dist = simulate_occupancy(["2020-03-01", "2020-03-02", "2020-03-03"],
    ...                           [3, 0, 0], lambda n: [2] * n, n_replicates=1)
    >>> dist.replicates[0].tolist()
    [3, 3, 0]
    """
    days = _check_dates(dates)
    counts = _check_counts(admission_counts, len(days))
    if not callable(stay_sampler):
        raise InvalidParameter("stay_sampler", stay_sampler, "must be callable")
    n_replicates = check_integer("n_replicates", n_replicates, minimum=1)
    if verbose:
        _enable_verbose_logging()

    horizon = pd.date_range(days[0], days[-1], freq="D", name="date")
    offsets = np.asarray((days - days[0]).days, dtype=np.int64)
    admission_days = np.repeat(offsets, counts)

    LOGGER.info(
        "Simulating occupancy for %s admissions over %s days with %s replicates",
        admission_days.size,
        len(horizon),
        n_replicates,
    )

    results = []
    for replicate in range(n_replicates):
        if cancel_event is not None and cancel_event.is_set():
            LOGGER.info("Simulation cancelled after %s replicates", replicate)
            raise SimulationCancelled(replicate, n_replicates)
        occupancy = _simulate_replicate(admission_days, len(horizon), stay_sampler)
        LOGGER.debug(
            "Replicate %s: peak occupancy %s", replicate, int(occupancy.max())
        )
        results.append(occupancy)

    replicates = pd.DataFrame(
        np.column_stack(results),
        index=horizon,
        columns=pd.RangeIndex(n_replicates, name="replicate"),
    )
    return OccupancyDistribution(replicates=replicates)
