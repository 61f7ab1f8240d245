"""
Core infrastructure shared by the calibrated tests.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    compute.timing: Section timer used by the backends
"""

from pyrobustest.core.result import Result
from pyrobustest.core.exceptions import (
    PyRobustestError,
    ValidationError,
    DimensionError,
    NumericalError,
    DegenerateStatisticError,
    TiesWarning,
    DegenerateStatisticWarning,
)

__all__ = [
    "Result",
    "PyRobustestError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "DegenerateStatisticError",
    "TiesWarning",
    "DegenerateStatisticWarning",
]
