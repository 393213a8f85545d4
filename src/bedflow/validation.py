"""Argument validation helpers shared across bedflow."""

import numbers
from typing import Any, Optional

import numpy as np
import pandas as pd

from bedflow.errors import InvalidParameter


def check_finite(name: str, value: Any) -> float:
    """Return ``value`` as a float, raising if it is not a finite real number.

    Parameters
    ----------
    name : str
        Argument name, used in the error message.
    value : Any
        Value to check. Booleans are rejected.

    Returns
    -------
    float
        The value converted to float.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(name, value, "must be a real number")
    value = float(value)
    if not np.isfinite(value):
        raise InvalidParameter(name, value, "must be finite")
    return value


def check_at_least(name: str, value: Any, minimum: float) -> float:
    value = check_finite(name, value)
    if value < minimum:
        raise InvalidParameter(name, value, f"must be >= {minimum}")
    return value


def check_fraction(name: str, value: Any) -> float:
    """Check that ``value`` lies in the half-open interval (0, 1]."""
    value = check_finite(name, value)
    if not 0.0 < value <= 1.0:
        raise InvalidParameter(name, value, "must be in (0, 1]")
    return value


def check_integer(name: str, value: Any, minimum: Optional[int] = None) -> int:
    """Return ``value`` as an int, raising if it is not integral.

    Integral floats such as ``10.0`` are accepted. Booleans, NaN and
    infinities are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidParameter(name, value, "must be an integer")
    if not np.isfinite(float(value)):
        raise InvalidParameter(name, value, "must be finite")
    if float(value) != int(value):
        raise InvalidParameter(name, value, "must be an integer")
    value = int(value)
    if minimum is not None and value < minimum:
        raise InvalidParameter(name, value, f"must be >= {minimum}")
    return value


def check_quantiles(name: str, quantiles) -> tuple:
    """Check a sequence of probabilities in [0, 1] and return it as a tuple."""
    values = tuple(check_finite(name, q) for q in np.atleast_1d(quantiles))
    if len(values) == 0:
        raise InvalidParameter(name, quantiles, "must contain at least one value")
    for q in values:
        if not 0.0 <= q <= 1.0:
            raise InvalidParameter(name, q, "must be in [0, 1]")
    return values


def to_day(name: str, value: Any) -> pd.Timestamp:
    """Convert a date-like value to a midnight ``pandas.Timestamp``."""
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameter(name, value, "must be a calendar date") from exc
    if pd.isna(timestamp):
        raise InvalidParameter(name, value, "must be a calendar date")
    return timestamp.normalize()
