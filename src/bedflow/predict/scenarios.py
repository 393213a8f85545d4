"""
Combine scenario occupancy distributions into one bed forecast.

The admission forecaster produces low, mean and high trajectories. Each one is
simulated separately and the resulting occupancy distributions are merged
onto a shared date axis, keyed by ``(date, scenario)``, so a renderer can draw
a central line and an uncertainty band without aligning dates itself.

Functions
---------
merge_scenarios : function
    Outer-join scenario distributions on dates and summarise them.

forecast_beds : function
    Run the full pipeline: admissions forecast, occupancy simulation per
    scenario, merge.

forecast_beds_from_config : function
    Run :func:`forecast_beds` from a :class:`bedflow.config.ForecastConfig`.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Mapping, Optional, Tuple

import pandas as pd

from bedflow.config import ForecastConfig
from bedflow.errors import InvalidParameter
from bedflow.los import get_los_sampler
from bedflow.predict.admissions import SCENARIOS, forecast_admissions
from bedflow.predict.occupancy import (
    DEFAULT_QUANTILES,
    OccupancyDistribution,
    simulate_occupancy,
)
from bedflow.validation import check_quantiles

LOGGER = logging.getLogger(__name__)

DEFAULT_BAND = (0.025, 0.975)


@dataclass(frozen=True)
class MergedForecast:
    """Bed occupancy forecast for several growth scenarios.

    Parameters
    ----------
    distributions : dict[str, OccupancyDistribution]
        Occupancy distribution per scenario, all on the same date axis.
    table : pandas.DataFrame
        Indexed by ``(date, scenario)`` with columns ``mean``, ``median``,
        ``lower`` and ``upper``.
    band : tuple of float
        Quantiles used for the ``lower`` and ``upper`` columns.
    """

    distributions: Dict[str, OccupancyDistribution]
    table: pd.DataFrame
    band: Tuple[float, float] = DEFAULT_BAND

    @property
    def scenarios(self) -> Tuple[str, ...]:
        return tuple(self.distributions)

    @property
    def dates(self) -> pd.DatetimeIndex:
        return next(iter(self.distributions.values())).dates

    def summary(self, quantiles: Iterable[float] = DEFAULT_QUANTILES) -> pd.DataFrame:
        """Mean and quantiles for every ``(date, scenario)`` pair."""
        frames = {
            scenario: dist.summary(quantiles)
            for scenario, dist in self.distributions.items()
        }
        return _stack_by_scenario(frames)

    def pooled(self) -> OccupancyDistribution:
        """All replicates of all scenarios as a single distribution.

        Replicate columns are labelled ``(scenario, replicate)``.
        """
        replicates = pd.concat(
            {s: d.replicates for s, d in self.distributions.items()},
            axis=1,
            names=["scenario", "replicate"],
        )
        return OccupancyDistribution(replicates=replicates)

    def ribbon(self, scenario: Optional[str] = None) -> pd.DataFrame:
        """Rows for a ribbon plot: central line plus band.

        With no ``scenario``, returns one row per date with the ``mean``
        scenario's median as the line (or the first scenario present) and
        the widest band across all scenarios.
        """
        if scenario is not None:
            if scenario not in self.distributions:
                raise InvalidParameter(
                    "scenario", scenario, f"must be one of {list(self.scenarios)}"
                )
            return self.table.xs(scenario, level="scenario")

        by_scenario = self.table.unstack("scenario")
        centre = "mean" if "mean" in self.scenarios else self.scenarios[0]
        return pd.DataFrame(
            {
                "median": by_scenario[("median", centre)],
                "lower": by_scenario["lower"].min(axis=1),
                "upper": by_scenario["upper"].max(axis=1),
            }
        )


def _stack_by_scenario(frames: Mapping[str, pd.DataFrame]) -> pd.DataFrame:
    stacked = pd.concat(frames, names=["scenario", "date"]).swaplevel(
        "scenario", "date"
    )
    dates = next(iter(frames.values())).index
    order = pd.MultiIndex.from_product(
        [dates, list(frames)], names=["date", "scenario"]
    )
    return stacked.reindex(order)


def merge_scenarios(
    distributions: Mapping[str, OccupancyDistribution],
    band: Iterable[float] = DEFAULT_BAND,
) -> MergedForecast:
    """
    Merge per-scenario occupancy distributions onto one date axis.

    Parameters
    ----------
    distributions : mapping of str to OccupancyDistribution
        Keys must be scenario names ("low", "mean", "high"); at least one is
        required.
    band : pair of float, optional
        Lower and upper quantiles for the uncertainty band. Default is
        (0.025, 0.975).

    Returns
    -------
    MergedForecast
        Distributions reindexed to the union of all dates, with days missing
        from a scenario filled with 0, and a summary table keyed by
        ``(date, scenario)``.
    """
    if not distributions:
        raise InvalidParameter(
            "distributions", distributions, "must contain at least one scenario"
        )
    unknown = set(distributions) - set(SCENARIOS)
    if unknown:
        raise InvalidParameter(
            "distributions",
            sorted(unknown),
            f"contains unknown scenarios; expected names from {list(SCENARIOS)}",
        )
    lower, upper = _check_band(band)

    all_dates = None
    for dist in distributions.values():
        all_dates = dist.dates if all_dates is None else all_dates.union(dist.dates)
    all_dates = pd.date_range(all_dates.min(), all_dates.max(), freq="D", name="date")

    aligned = {
        scenario: distributions[scenario].reindex(all_dates)
        for scenario in SCENARIOS
        if scenario in distributions
    }

    frames = {}
    for scenario, dist in aligned.items():
        bounds = dist.quantiles((lower, upper))
        frames[scenario] = pd.DataFrame(
            {
                "mean": dist.mean(),
                "median": dist.median(),
                "lower": bounds[lower],
                "upper": bounds[upper],
            }
        )

    return MergedForecast(
        distributions=aligned, table=_stack_by_scenario(frames), band=(lower, upper)
    )


def _check_band(band) -> Tuple[float, float]:
    values = check_quantiles("band", band)
    if len(values) != 2 or values[0] >= values[1]:
        raise InvalidParameter(
            "band", band, "must be a (lower, upper) pair with lower < upper"
        )
    return values[0], values[1]


def forecast_beds(
    start_date,
    n_observed: float,
    doubling_time: float,
    doubling_error: float,
    horizon_days: int,
    stay_sampler: Callable,
    reporting_fraction: float = 1,
    n_replicates: int = 10,
    band: Iterable[float] = DEFAULT_BAND,
    cancel_event=None,
) -> MergedForecast:
    """
    Forecast bed occupancy for the low, mean and high growth scenarios.

    Admissions are forecast with
    :func:`bedflow.predict.admissions.forecast_admissions`, occupancy is
    simulated once per scenario with
    :func:`bedflow.predict.occupancy.simulate_occupancy`, and the three
    distributions are merged with :func:`merge_scenarios`.

    Returns
    -------
    MergedForecast
    """
    admissions = forecast_admissions(
        start_date,
        n_observed=n_observed,
        doubling_time=doubling_time,
        doubling_error=doubling_error,
        horizon_days=horizon_days,
        reporting_fraction=reporting_fraction,
    )

    distributions = {}
    for scenario in SCENARIOS:
        trajectory = admissions.trajectory(scenario)
        LOGGER.info(
            "Simulating %s scenario: %s admissions in total",
            scenario,
            int(trajectory.sum()),
        )
        distributions[scenario] = simulate_occupancy(
            trajectory.index,
            trajectory.to_numpy(),
            stay_sampler,
            n_replicates=n_replicates,
            cancel_event=cancel_event,
        )
    return merge_scenarios(distributions, band=band)


def forecast_beds_from_config(
    config: ForecastConfig, care: Optional[str] = None, rng=None, cancel_event=None
) -> MergedForecast:
    """Run :func:`forecast_beds` with parameters from a ``ForecastConfig``.

    Parameters
    ----------
    config : ForecastConfig
        Forecast parameters.
    care : str, optional
        Care category for the length-of-stay sampler. Defaults to
        ``config.care``.
    rng : numpy.random.Generator or int, optional
        Random generator or seed. Defaults to ``config.seed``.

    Notes
    -----
    The smallest and largest of ``config.quantiles`` form the uncertainty
    band, so they must differ.
    """
    care = config.care if care is None else care
    rng = config.seed if rng is None else rng
    quantiles = check_quantiles("quantiles", config.quantiles)
    band = (min(quantiles), max(quantiles))
    if band[0] == band[1]:
        raise InvalidParameter(
            "quantiles",
            config.quantiles,
            "must contain at least two distinct values to form a band",
        )
    return forecast_beds(
        config.start_date,
        n_observed=config.n_observed,
        doubling_time=config.doubling_time,
        doubling_error=config.doubling_error,
        horizon_days=config.horizon_days,
        stay_sampler=get_los_sampler(care, rng=rng),
        reporting_fraction=config.reporting_fraction,
        n_replicates=config.n_replicates,
        band=band,
        cancel_event=cancel_event,
    )
