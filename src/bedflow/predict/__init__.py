"""Prediction module for bed occupancy forecasting.

This module provides the admission forecaster, the bed occupancy simulator
and the merge of growth scenarios into a single forecast.
"""

from bedflow.predict.admissions import (
    SCENARIOS,
    AdmissionForecast,
    forecast_admissions,
)
from bedflow.predict.occupancy import OccupancyDistribution, simulate_occupancy
from bedflow.predict.scenarios import (
    MergedForecast,
    forecast_beds,
    forecast_beds_from_config,
    merge_scenarios,
)

__all__ = [
    "SCENARIOS",
    "AdmissionForecast",
    "forecast_admissions",
    "OccupancyDistribution",
    "simulate_occupancy",
    "MergedForecast",
    "merge_scenarios",
    "forecast_beds",
    "forecast_beds_from_config",
]
