"""
Exception and warning hierarchy for PyRobustest.

All exceptions inherit from PyRobustestError so callers can catch any
library-specific failure in one place. Non-fatal data-quality problems are
reported through warning categories so they can be filtered or escalated
with the standard ``warnings`` machinery.

Design principles:
    - Input problems fail fast, before any pairwise work starts
    - Exceptions carry diagnostic values as attributes
    - Messages state the offending value and what was expected
"""


class PyRobustestError(Exception):
    """Base exception for all PyRobustest errors."""
    pass


class ValidationError(PyRobustestError):
    """
    Input validation failed.

    Raised for missing vectors, bad option strings, too few observations
    and other problems detectable from the arguments alone.
    """
    pass


class DimensionError(ValidationError):
    """
    Sample lengths are inconsistent.

    Raised when a paired or correlation test receives x and y of
    different lengths.
    """
    pass


class NumericalError(PyRobustestError):
    """Base class for failures arising during the numerical computation."""
    pass


class DegenerateStatisticError(NumericalError):
    """
    The studentized statistic is undefined.

    Raised when the projection variance estimate is zero and the centred
    estimate is zero as well, so the statistic is 0/0.
    The variance tests also raise it when the squared centred values are
    constant, whatever the numerator.

    Attributes:
        statistic_name: Which statistic could not be formed
        numerator: Centred estimate that was to be studentized
        variance: Variance estimate (zero or negative)
    """

    def __init__(
        self,
        message: str,
        statistic_name: str | None = None,
        numerator: float | None = None,
        variance: float | None = None,
    ):
        super().__init__(message)
        self.statistic_name = statistic_name
        self.numerator = numerator
        self.variance = variance


class TiesWarning(UserWarning):
    """Ties were found and left in place; the test is only approximately calibrated."""
    pass


class DegenerateStatisticWarning(RuntimeWarning):
    """The variance estimate is zero, so the statistic is infinite."""
    pass
