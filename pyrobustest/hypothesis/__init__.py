"""
Calibrated hypothesis tests.

Each statistic is studentized by a Hajek-projection variance estimate, so
the tests keep their nominal level under heteroscedasticity, unequal
shapes and dependence that the classical versions assume away.

Public API:
    rank_test(x, y)      - Wilcoxon rank-sum / signed-rank test
    cor_test(x, y)       - Pearson, Kendall or Spearman correlation test
    var_test(x, y)       - Two-sample or k-sample variance test
    split_by_group(v, g) - Split a response vector by group labels
"""

from pyrobustest.hypothesis.solvers import (
    rank_test, cor_test, var_test, correlation_test, variance_test,
    split_by_group,
)
from pyrobustest.hypothesis.design import CalibratedDesign
from pyrobustest.hypothesis._common import (
    CalibratedParams, RankSumParams, SignedRankParams, PearsonParams,
    KendallParams, SpearmanParams, VarianceParams, KSampleVarianceParams,
)
from pyrobustest.hypothesis._pairwise import PairwiseComparator
from pyrobustest.hypothesis._pvalue import PValueCalculator
from pyrobustest.hypothesis._reference import ReferenceTable, default_reference_table
from pyrobustest.hypothesis.solution import CalibratedTestSolution

__all__ = [
    "rank_test",
    "cor_test",
    "var_test",
    "correlation_test",
    "variance_test",
    "split_by_group",
    "CalibratedDesign",
    "CalibratedParams",
    "RankSumParams",
    "SignedRankParams",
    "PearsonParams",
    "KendallParams",
    "SpearmanParams",
    "VarianceParams",
    "KSampleVarianceParams",
    "PairwiseComparator",
    "PValueCalculator",
    "ReferenceTable",
    "default_reference_table",
    "CalibratedTestSolution",
]
