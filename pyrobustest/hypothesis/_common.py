"""
Common types for the calibrated tests.

Defines the option vocabularies (alternatives, tie policies, correlation
methods), the numerical constants, and one frozen parameter payload per
test family. Payloads are pure data containers; each carries exactly the
fields its family defines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray


VALID_ALTERNATIVES = ("two-sided", "less", "greater")

# Synonyms accepted from callers, mapped to the canonical spelling.
ALTERNATIVE_ALIASES = {
    "two-sided": "two-sided",
    "two.sided": "two-sided",
    "t": "two-sided",
    "less": "less",
    "l": "less",
    "greater": "greater",
    "g": "greater",
}

VALID_TIE_POLICIES = ("none", "random")

VALID_COR_METHODS = ("pearson", "kendall", "spearman")

# Half-width of the uniform jitter added to tied values.
TIE_JITTER = 1e-5

# Smallest group for the variance tests: the squared centred values of two
# points are always equal, so their variance is zero.
MIN_VAR_GROUP_SIZE = 3

# Sample sizes covered by the tabulated Pearson null distribution.
PEARSON_TABLE_MIN_N = 3
PEARSON_TABLE_MAX_N = 129

# Monte Carlo draws per sample size when the reference table is simulated.
REFERENCE_DRAWS = 200_000

# Environment variable naming a persisted reference table (.npz).
REFERENCE_TABLE_ENV = "PYROBUSTEST_PEARSON_TABLE"

# Prefixes of the messages recorded in Result.warnings; solvers map them to
# warning categories.
TIES_MESSAGE = "The data contains ties"
DEGENERATE_MESSAGE = "Projection variance is zero; the statistic is infinite"


@dataclass(frozen=True)
class RankSumParams:
    """
    Calibrated Wilcoxon rank-sum (Mann-Whitney) test.

    Attributes
    ----------
    statistic : float
        Studentized (1/2 - mean(R)); positive when x tends to exceed y.
    p_value : float
    alternative : str
    estimate : float
        Mean of the comparison matrix R[i, j] = (y_j > x_i), the estimate
        of P(X < Y).
    ties_broken : bool
    n_x, n_y : int
    """
    statistic: float
    p_value: float
    alternative: str
    estimate: float
    ties_broken: bool
    n_x: int
    n_y: int


@dataclass(frozen=True)
class SignedRankParams:
    """
    Calibrated Wilcoxon signed-rank test (one-sample or paired).

    ``estimate`` is the off-diagonal mean of R[i, j] = (d_i + d_j > 0),
    the estimate of P(D_1 + D_2 > 0).
    """
    statistic: float
    p_value: float
    alternative: str
    estimate: float
    ties_broken: bool
    paired: bool
    n: int


@dataclass(frozen=True)
class PearsonParams:
    """
    Calibrated Pearson correlation test.

    ``p_value_method`` is "reference table" for n <= 129 and
    "student t" above.
    """
    statistic: float
    p_value: float
    alternative: str
    estimate: float
    conf_int: NDArray[np.floating[Any]]
    conf_level: float
    n: int
    p_value_method: str


@dataclass(frozen=True)
class KendallParams:
    """Calibrated Kendall tau test with an asymptotic confidence interval."""
    statistic: float
    p_value: float
    alternative: str
    estimate: float
    conf_int: NDArray[np.floating[Any]]
    conf_level: float
    ties_broken: bool
    n: int


@dataclass(frozen=True)
class SpearmanParams:
    """Calibrated Spearman rho test. No confidence interval is defined."""
    statistic: float
    p_value: float
    alternative: str
    estimate: float
    ties_broken: bool
    n: int


@dataclass(frozen=True)
class VarianceParams:
    """
    Calibrated two-sample variance test.

    Welch's t-test applied to squared centred values. ``estimate`` holds
    the mean squared deviation of each sample and ``conf_int`` covers
    var(x) - var(y).
    """
    statistic: float
    df: float
    p_value: float
    alternative: str
    estimate: dict[str, float]
    conf_int: NDArray[np.floating[Any]]
    conf_level: float


@dataclass(frozen=True)
class KSampleVarianceParams:
    """
    Calibrated k-sample variance test (Welch one-way ANOVA on squared
    residuals). Only the F statistic, its degrees of freedom and the
    p-value are defined.
    """
    statistic: float
    df: tuple[float, float]
    p_value: float
    n_groups: int


CalibratedParams = (
    RankSumParams | SignedRankParams | PearsonParams | KendallParams
    | SpearmanParams | VarianceParams | KSampleVarianceParams
)
