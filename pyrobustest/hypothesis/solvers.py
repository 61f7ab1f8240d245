"""
Solver entry points for the calibrated tests.

Provides rank_test(), cor_test() and var_test() (with the aliases
correlation_test and variance_test), plus split_by_group() for callers
holding long-format data.
"""

from __future__ import annotations

import warnings
from typing import Any, Literal, Sequence
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrobustest.core.exceptions import (
    ValidationError, DimensionError, TiesWarning, DegenerateStatisticWarning,
)
from pyrobustest.core.validation import check_array
from pyrobustest.hypothesis._common import TIES_MESSAGE
from pyrobustest.hypothesis._reference import ReferenceTable
from pyrobustest.hypothesis.design import CalibratedDesign
from pyrobustest.hypothesis.solution import CalibratedTestSolution
from pyrobustest.hypothesis.backends.cpu import CPUCalibratedBackend


BackendChoice = Literal['auto', 'cpu', 'gpu']


def _get_backend(backend: BackendChoice = 'cpu', reference_table: ReferenceTable | None = None):
    """Select backend for the calibrated tests."""
    if backend in ('cpu', 'auto'):
        return CPUCalibratedBackend(reference_table)
    if backend == 'gpu':
        from pyrobustest.hypothesis.backends.gpu import GPUCalibratedBackend
        return GPUCalibratedBackend(reference_table=reference_table)
    raise ValidationError(
        f"Unknown backend: {backend!r}. Use 'cpu' or 'gpu'."
    )


def _solve(design: CalibratedDesign, backend: BackendChoice,
           reference_table: ReferenceTable | None = None) -> CalibratedTestSolution:
    be = _get_backend(backend, reference_table)
    result = be.solve(design)
    for message in result.warnings:
        category = TiesWarning if message.startswith(TIES_MESSAGE) else DegenerateStatisticWarning
        warnings.warn(message, category, stacklevel=3)
    return CalibratedTestSolution(_result=result, _design=design)


def rank_test(
    x: ArrayLike | CalibratedDesign,
    y: ArrayLike | None = None,
    *,
    alternative: str = "two-sided",
    ties_break: Literal["none", "random"] = "none",
    paired: bool = False,
    seed: int | None = None,
    backend: BackendChoice = 'cpu',
) -> CalibratedTestSolution:
    """
    Calibrated Wilcoxon rank-sum or signed-rank test.

    Parameters
    ----------
    x : array-like or CalibratedDesign
        First sample.
    y : array-like or None
        Second sample. Independent of x unless paired=True; omitted for
        the one-sample signed-rank test on x.
    alternative : str
        "two-sided" (default), "less", or "greater" ("t", "l", "g" and
        "two.sided" are accepted). "less" means x tends to be smaller than
        y (rank-sum) or the differences are centred below zero
        (signed-rank).
    ties_break : str
        "none" (default) warns about ties and leaves them; "random" breaks
        them with a uniform jitter of half-width 1e-5.
    paired : bool
        If True, run the signed-rank test on x - y.
    seed : int or None
        Seed for the tie-breaking jitter. None draws fresh randomness.
    backend : str
        'cpu' (default) or 'gpu'.

    Returns
    -------
    CalibratedTestSolution
        statistic, p_value, estimate, ties_broken, ...

    Warns
    -----
    TiesWarning
        Ties present and ties_break="none".
    DegenerateStatisticWarning
        Projection variance is zero; the statistic is infinite.
    """
    if isinstance(x, CalibratedDesign):
        design = x
    else:
        design = CalibratedDesign.for_rank_test(
            x, y,
            paired=paired,
            alternative=alternative,
            ties_break=ties_break,
            seed=seed,
        )
    return _solve(design, backend)


def cor_test(
    x: ArrayLike | CalibratedDesign,
    y: ArrayLike | None = None,
    *,
    alternative: str = "two-sided",
    method: Literal["pearson", "kendall", "spearman"] = "pearson",
    ties_break: Literal["none", "random"] = "none",
    conf_level: float = 0.95,
    seed: int | None = None,
    reference_table: ReferenceTable | None = None,
    backend: BackendChoice = 'cpu',
) -> CalibratedTestSolution:
    """
    Calibrated Pearson, Kendall or Spearman correlation test.

    Parameters
    ----------
    x, y : array-like
        Paired samples of equal length, more than 2 complete pairs.
    alternative : str
        "two-sided" (default), "less", or "greater".
    method : str
        "pearson" (default), "kendall", or "spearman".
    ties_break : str
        Tie policy for Kendall and Spearman: "none" (default) or "random".
    conf_level : float
        Confidence level for the Pearson and Kendall intervals.
    seed : int or None
        Seed for the tie-breaking jitter.
    reference_table : ReferenceTable or None
        Pearson small-sample reference distribution. None uses the
        process-wide default.
    backend : str
        'cpu' (default) or 'gpu'.

    Returns
    -------
    CalibratedTestSolution
    """
    if isinstance(x, CalibratedDesign):
        design = x
    else:
        design = CalibratedDesign.for_cor_test(
            x, y,
            method=method,
            alternative=alternative,
            ties_break=ties_break,
            conf_level=conf_level,
            seed=seed,
        )
    return _solve(design, backend, reference_table)


def var_test(
    x: ArrayLike | Sequence[ArrayLike] | CalibratedDesign,
    y: ArrayLike | None = None,
    *,
    groups: ArrayLike | None = None,
    alternative: str = "two-sided",
    conf_level: float = 0.95,
    backend: BackendChoice = 'cpu',
) -> CalibratedTestSolution:
    """
    Calibrated test for equality of variances.

    Call shapes:
        var_test(x, y)              two-sample test
        var_test(values, groups=g)  grouped data; two levels give the
                                    two-sample test, more give k-sample
        var_test([g1, g2, g3])      k-sample test on a list of samples

    The k-sample test reports only the Welch F statistic, its degrees of
    freedom and the p-value.

    Parameters
    ----------
    alternative : str
        Two-sample only: "two-sided" (default), "less", or "greater" for
        var(x) - var(y).
    conf_level : float
        Two-sample only: level of the interval for var(x) - var(y).
    """
    if isinstance(x, CalibratedDesign):
        return _solve(x, backend)

    if groups is not None:
        if y is not None:
            raise ValidationError("pass either y or groups to var_test, not both")
        samples = list(split_by_group(x, groups).values())
        if len(samples) == 2:
            design = CalibratedDesign.for_var_test(
                samples[0], samples[1],
                alternative=alternative, conf_level=conf_level,
            )
        else:
            design = CalibratedDesign.for_k_sample_var_test(samples)
    elif y is not None:
        design = CalibratedDesign.for_var_test(
            x, y, alternative=alternative, conf_level=conf_level,
        )
    elif _is_sample_list(x):
        design = CalibratedDesign.for_k_sample_var_test(x)
    else:
        raise ValidationError("y (or groups) is required for var_test")

    return _solve(design, backend)


def split_by_group(
    values: ArrayLike,
    groups: ArrayLike,
) -> dict[str, NDArray[np.floating[Any]]]:
    """
    Split a response vector by a grouping vector.

    Returns
    -------
    dict
        Level (as str) -> values of that level, in input order. Levels are
        ordered by their original values, so numeric labels sort
        numerically.
    """
    v = check_array(values, "values").ravel()
    g = np.asarray(groups).ravel()
    if len(v) != len(g):
        raise DimensionError(
            f"Inconsistent lengths: values={len(v)}, groups={len(g)}"
        )
    return {str(level): v[g == level] for level in np.unique(g)}


def _is_sample_list(x: Any) -> bool:
    if not isinstance(x, (list, tuple)) or len(x) < 2:
        return False
    return all(np.ndim(s) == 1 for s in x)


correlation_test = cor_test
variance_test = var_test
