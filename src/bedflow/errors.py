"""Exception types raised by the bedflow package.

All errors derive from :class:`BedflowError`. Parameter and sampler errors
also derive from :class:`ValueError` so callers that already catch
``ValueError`` keep working.
"""

from typing import Any


class BedflowError(Exception):
    """Base class for errors raised by bedflow."""


class InvalidParameter(BedflowError, ValueError):
    """An argument violates a documented numeric or structural constraint.

    Parameters
    ----------
    parameter : str
        Name of the offending argument.
    value : Any
        The value that was rejected.
    constraint : str
        Human-readable description of the violated constraint.
    """

    def __init__(self, parameter: str, value: Any, constraint: str):
        self.parameter = parameter
        self.value = value
        self.constraint = constraint
        super().__init__(f"{parameter} {constraint}; got {value!r}")


class SamplerContractViolation(BedflowError, ValueError):
    """A length-of-stay sampler returned an invalid draw.

    Raised when the sampler returns the wrong number of values, or values that
    are not finite positive integers.
    """

    def __init__(self, message: str, requested: int, received: Any = None):
        self.requested = requested
        self.received = received
        super().__init__(message)


class SimulationCancelled(BedflowError):
    """Raised when a simulation is cancelled between replicates."""

    def __init__(self, completed: int, requested: int):
        self.completed = completed
        self.requested = requested
        super().__init__(
            f"Simulation cancelled after {completed} of {requested} replicates"
        )
