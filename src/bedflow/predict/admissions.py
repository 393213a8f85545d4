"""
Forecast daily hospital admissions under exponential growth.

This submodule projects admissions forward from a single observed count at a
reference date. Uncertainty in the epidemic doubling time is expressed as a
symmetric error margin, which yields three growth scenarios:

- ``low``: growth rate from ``doubling_time + doubling_error`` (slowest growth)
- ``mean``: growth rate from ``doubling_time``
- ``high``: growth rate from ``doubling_time - doubling_error`` (fastest growth)

A longer doubling time means slower growth, so the *larger* doubling time
produces the *low* scenario.

Rounding
--------
Counts are rounded half-up (``floor(x + 0.5)``) once per day on the continuous
value ``n0 * exp(r * t)``. Growth rates are never rounded, so rounding error
does not compound over the horizon. The under-reporting correction of the
initial count is rounded the same way.

Functions
---------
forecast_admissions : function
    Produce low/mean/high admission trajectories over a forecast horizon.

growth_rate_from_doubling_time : function
    Convert a doubling time in days into an exponential growth rate.
"""

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from bedflow.errors import InvalidParameter
from bedflow.validation import (
    check_at_least,
    check_finite,
    check_fraction,
    check_integer,
    to_day,
)

LOGGER = logging.getLogger(__name__)

SCENARIOS = ("low", "mean", "high")

# largest integer a float64 holds exactly, so rounding stays exact
MAX_DAILY_ADMISSIONS = 2**53


def round_half_up(values):
    """Round to the nearest integer, with ties rounded towards +infinity."""
    return np.floor(np.asarray(values, dtype=float) + 0.5).astype(np.int64)


def growth_rate_from_doubling_time(doubling_time: float) -> float:
    """Convert a doubling time in days to a daily exponential growth rate.

    Parameters
    ----------
    doubling_time : float
        Days required for counts to double. Must be finite and non-zero.

    Returns
    -------
    float
        ``log(2) / doubling_time``
    """
    doubling_time = check_finite("doubling_time", doubling_time)
    if doubling_time == 0:
        raise InvalidParameter(
            "doubling_time", doubling_time, "must be non-zero to derive a growth rate"
        )
    return float(np.log(2) / doubling_time)


@dataclass(frozen=True)
class AdmissionForecast:
    """Daily admission trajectories for the low, mean and high scenarios.

    Parameters
    ----------
    start_date : pandas.Timestamp
        Reference date, the first day of the horizon.
    initial_admissions : int
        Admissions on day 0 after correcting for under-reporting.
    doubling_times : dict[str, float]
        Doubling time used for each scenario.
    growth_rates : dict[str, float]
        Exponential growth rate used for each scenario.
    table : pandas.DataFrame
        One row per day with columns ``date``, ``low``, ``mean`` and ``high``.
    """

    start_date: pd.Timestamp
    initial_admissions: int
    doubling_times: Dict[str, float]
    growth_rates: Dict[str, float]
    table: pd.DataFrame

    @property
    def dates(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self.table["date"], name="date")

    @property
    def horizon_days(self) -> int:
        return len(self.table)

    def trajectory(self, scenario: str) -> pd.Series:
        """Return the admissions of one scenario as a date-indexed Series."""
        if scenario not in SCENARIOS:
            raise InvalidParameter(
                "scenario", scenario, f"must be one of {list(SCENARIOS)}"
            )
        series = self.table.set_index("date")[scenario].copy()
        series.name = scenario
        return series

    def to_long(self) -> pd.DataFrame:
        """Return the forecast as rows of ``(date, scenario, admissions)``."""
        long_df = self.table.melt(
            id_vars="date",
            value_vars=list(SCENARIOS),
            var_name="scenario",
            value_name="admissions",
        )
        # melt emits scenario blocks in SCENARIOS order; a stable sort keeps it
        return long_df.sort_values("date", kind="stable").reset_index(drop=True)


def forecast_admissions(
    start_date,
    n_observed: float,
    doubling_time: float,
    doubling_error: float,
    horizon_days: int,
    reporting_fraction: float = 1,
) -> AdmissionForecast:
    """
    Forecast daily admissions for the low, mean and high growth scenarios.

    Parameters
    ----------
    start_date : date-like
        Reference date of the observed count. Normalised to midnight.
    n_observed : float
        Admissions observed at the reference date. Must be finite and >= 1.
    doubling_time : float
        Central estimate of the doubling time, in days. Must be positive.
    doubling_error : float
        Non-negative error margin on the doubling time. Must be smaller than
        ``doubling_time`` so every scenario grows.
    horizon_days : int
        Number of days to forecast, including the reference date. Must be >= 1,
        and the ``high`` scenario may not project more than
        ``MAX_DAILY_ADMISSIONS`` admissions on any day.
    reporting_fraction : float, optional
        Fraction of true admissions captured by the observed count, in (0, 1].
        Default is 1 (complete reporting).

    Returns
    -------
    AdmissionForecast
        Trajectories for each scenario over ``horizon_days`` consecutive days.

    Raises
    ------
    InvalidParameter
        If any argument violates its constraint. Nothing is computed in that case.

    Examples
    --------
    >>> forecast = forecast_admissions("2020-03-20", n_observed=65,
    ...                                doubling_time=5, doubling_error=1.5,
    ...                                horizon_days=14, reporting_fraction=0.8)
    >>> forecast.initial_admissions
    81
    """
    start = to_day("start_date", start_date)
    n_observed = check_at_least("n_observed", n_observed, 1)
    doubling_time = check_finite("doubling_time", doubling_time)
    doubling_error = check_at_least("doubling_error", doubling_error, 0)
    horizon_days = check_integer("horizon_days", horizon_days, minimum=1)
    reporting_fraction = check_fraction("reporting_fraction", reporting_fraction)

    if doubling_time <= 0:
        raise InvalidParameter("doubling_time", doubling_time, "must be positive")
    if doubling_time - doubling_error <= 0:
        raise InvalidParameter(
            "doubling_error",
            doubling_error,
            f"must be smaller than doubling_time={doubling_time} so the "
            "'high' scenario has a positive doubling time",
        )

    doubling_times = {
        "low": doubling_time + doubling_error,
        "mean": doubling_time,
        "high": doubling_time - doubling_error,
    }
    n0 = int(round_half_up(n_observed / reporting_fraction))
    growth_rates = {
        scenario: growth_rate_from_doubling_time(value)
        for scenario, value in doubling_times.items()
    }

    # the high scenario on the last day is the largest projected count
    peak = n0 * np.exp(growth_rates["high"] * (horizon_days - 1))
    if not np.isfinite(peak) or peak > MAX_DAILY_ADMISSIONS:
        raise InvalidParameter(
            "horizon_days",
            horizon_days,
            f"projects {peak:.3g} daily admissions in the 'high' scenario, "
            f"above the limit of {MAX_DAILY_ADMISSIONS}",
        )

    elapsed = np.arange(horizon_days)
    table = pd.DataFrame(
        {"date": pd.date_range(start, periods=horizon_days, freq="D")}
    )
    for scenario in SCENARIOS:
        table[scenario] = round_half_up(n0 * np.exp(growth_rates[scenario] * elapsed))

    LOGGER.info(
        "Forecast %s days of admissions from %s: initial admissions %s, "
        "growth rates low=%.4f mean=%.4f high=%.4f",
        horizon_days,
        start.date(),
        n0,
        growth_rates["low"],
        growth_rates["mean"],
        growth_rates["high"],
    )

    return AdmissionForecast(
        start_date=start,
        initial_admissions=n0,
        doubling_times=doubling_times,
        growth_rates=growth_rates,
        table=table,
    )
