"""Forecast parameter sets and YAML configuration loading.

A configuration file holds a single mapping, optionally nested under a
``forecast`` key::

    forecast:
      start_date: 2020-03-20
      n_observed: 65
      doubling_time: 5
      doubling_error: 1.5
      horizon_days: 14
      reporting_fraction: 0.8
      n_replicates: 10
      care: critical
"""

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Tuple

import yaml

from bedflow.errors import InvalidParameter


@dataclass
class ForecastConfig:
    """Parameters for one bed occupancy forecast.

    Values are checked by the operations that use them, not here.
    """

    start_date: Any
    n_observed: float
    doubling_time: float
    doubling_error: float
    horizon_days: int
    reporting_fraction: float = 1.0
    n_replicates: int = 10
    care: str = "critical"
    quantiles: Tuple[float, ...] = field(default=(0.025, 0.5, 0.975))
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "ForecastConfig":
        """Create a configuration from a mapping of field names to values."""
        if not isinstance(config, Mapping):
            raise InvalidParameter("config", config, "must be a mapping")
        names = {f.name for f in fields(cls)}
        unknown = set(config) - names
        if unknown:
            raise InvalidParameter(
                "config", sorted(unknown), f"has unknown keys; expected {sorted(names)}"
            )
        required = {
            "start_date",
            "n_observed",
            "doubling_time",
            "doubling_error",
            "horizon_days",
        }
        missing = required - set(config)
        if missing:
            raise InvalidParameter("config", sorted(missing), "is missing required keys")

        values = dict(config)
        if "quantiles" in values:
            values["quantiles"] = tuple(values["quantiles"])
        return cls(**values)

    @classmethod
    def from_yaml(cls, config_path: str) -> "ForecastConfig":
        """Create a configuration from a YAML file.

        Parameters
        ----------
        config_path : str
            Path to a YAML file holding the parameters, either at the top
            level or under a ``forecast`` key.
        """
        with open(config_path, "r") as f:
            config = yaml.safe_load(f)

        if isinstance(config, Mapping) and "forecast" in config:
            config = config["forecast"]
        return cls.from_dict(config)
