"""
Hajek-projection variance estimators and studentization.

The sample variance of a U-statistic's projections estimates its
asymptotic variance without assuming anything about the data beyond the
null hypothesis being tested. Studentizing by these estimates is what
makes every test in this package asymptotically calibrated.

All variances use ddof=1.
"""

from __future__ import annotations

import math
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyrobustest.core.exceptions import DegenerateStatisticError
from pyrobustest.hypothesis._common import DEGENERATE_MESSAGE


def one_sample_variance(h: NDArray[np.floating[Any]]) -> float:
    """var(H); used for the signed-rank and Kendall projections."""
    return float(np.var(h, ddof=1))


def two_sample_variance(
    h: NDArray[np.floating[Any]], g: NDArray[np.floating[Any]],
) -> float:
    """var(H)/n + var(G)/m for the rank-sum statistic (H rows, G columns)."""
    return float(np.var(h, ddof=1) / len(h) + np.var(g, ddof=1) / len(g))


def spearman_variance(h: NDArray[np.floating[Any]]) -> float:
    """16 var(H) for the reduced Spearman projection."""
    return float(16.0 * np.var(h, ddof=1))


def studentize(
    numerator: float,
    variance: float,
    statistic_name: str,
    warnings_list: list[str],
) -> float:
    """
    numerator / sqrt(variance), with the degenerate cases made explicit.

    A zero variance with a non-zero numerator gives a signed infinity and
    appends a warning; zero over zero raises DegenerateStatisticError.
    """
    if variance > 0.0:
        return float(numerator / math.sqrt(variance))
    if numerator == 0.0 or not np.isfinite(numerator):
        raise DegenerateStatisticError(
            f"{statistic_name}: projection variance is {variance!r} and the "
            f"centred estimate is {numerator!r}; the statistic is undefined",
            statistic_name=statistic_name,
            numerator=float(numerator),
            variance=float(variance),
        )
    warnings_list.append(f"{DEGENERATE_MESSAGE} ({statistic_name})")
    return math.copysign(math.inf, numerator)
