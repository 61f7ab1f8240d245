"""
PyRobustest: asymptotically calibrated rank, correlation and variance tests.

Every statistic is studentized with a U-statistic (Hajek projection)
variance estimate, so the rejection probability under the null converges
to the nominal level whatever the shape of the data.

Submodules:
    hypothesis: rank_test, cor_test, var_test and their building blocks
    core: exceptions, result envelope, validation, timing
"""

__version__ = "0.1.0"

from pyrobustest import hypothesis
from pyrobustest.hypothesis import rank_test, cor_test, var_test

__all__ = [
    "__version__",
    "hypothesis",
    "rank_test",
    "cor_test",
    "var_test",
]
