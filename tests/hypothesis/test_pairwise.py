"""
Tests for the pairwise comparison matrices.

Aggregates are checked against scipy's rank statistics on continuous
(tie-free) data.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from scipy import stats as sp_stats

from pyrobustest.hypothesis._pairwise import (
    PairwiseComparator,
    col_means,
    kendall_matrices,
    off_diagonal_mean,
    rank_sum_matrix,
    row_means,
    signed_rank_matrix,
    spearman_aggregate,
)


# ═══════════════════════════════════════════════════════════════════════
# Matrix construction
# ═══════════════════════════════════════════════════════════════════════


class TestMatrices:

    def test_rank_sum_orientation(self):
        r = rank_sum_matrix(np.array([1.0, 3.0]), np.array([2.0, 4.0]))
        assert_array_equal(r, [[True, True], [False, True]])

    def test_signed_rank_keeps_diagonal(self):
        r = signed_rank_matrix(np.array([-1.0, 2.0]))
        assert_array_equal(r, [[False, True], [True, True]])

    def test_off_diagonal_mean(self):
        r = signed_rank_matrix(np.array([-1.0, 2.0]))
        assert off_diagonal_mean(r) == 1.0

    def test_kendall_direction(self):
        m = kendall_matrices(np.array([1.0, 2.0]), np.array([1.0, 2.0]))
        assert_array_equal(m.direction, [[False, True], [False, False]])
        assert_array_equal(m.concordant, [[False, True], [True, False]])

    def test_projections(self):
        r = np.array([[True, False], [True, True]])
        assert_allclose(row_means(r), [0.5, 1.0])
        assert_allclose(col_means(r), [1.0, 0.5])


# ═══════════════════════════════════════════════════════════════════════
# Aggregates
# ═══════════════════════════════════════════════════════════════════════


class TestComparator:

    def test_rank_sum_mean_is_mann_whitney(self, two_samples):
        x, y = two_samples
        comparison = PairwiseComparator().rank_sum(x, y)
        u_y = sp_stats.mannwhitneyu(y, x).statistic
        assert comparison.mean == pytest.approx(u_y / (len(x) * len(y)))
        assert comparison.rows.shape == (len(x),)
        assert comparison.cols.shape == (len(y),)

    def test_kendall_tau_matches_scipy(self, correlated_pair):
        x, y = correlated_pair
        comparison = PairwiseComparator().kendall(x, y)
        assert comparison.tau == pytest.approx(
            sp_stats.kendalltau(x, y).statistic, rel=1e-12,
        )

    def test_kendall_perfect_concordance(self):
        x = np.arange(6.0)
        comparison = PairwiseComparator().kendall(x, x)
        assert comparison.tau == pytest.approx(1.0)
        assert comparison.projection == pytest.approx(np.full(6, 5.0 / 6.0))

    def test_kendall_perfect_discordance(self):
        x = np.arange(6.0)
        assert PairwiseComparator().kendall(x, -x).tau == pytest.approx(-1.0)

    def test_spearman_rho_matches_scipy(self, correlated_pair):
        x, y = correlated_pair
        n = len(x)
        aggregate = spearman_aggregate(x, y)
        rho = 3.0 * aggregate.sum_r / (n ** 3 - n)
        assert rho == pytest.approx(
            sp_stats.spearmanr(x, y).statistic, rel=1e-12,
        )
        assert aggregate.projection.shape == (n,)

    def test_spearman_invariant_to_monotone_transform(self, correlated_pair):
        x, y = correlated_pair
        a = spearman_aggregate(x, y)
        b = spearman_aggregate(np.exp(x), y ** 3)
        assert a.sum_r == b.sum_r
        assert_allclose(a.projection, b.projection)

    def test_signed_rank_symmetry(self, rng):
        d = rng.standard_normal(20)
        pos = PairwiseComparator().signed_rank(d)
        neg = PairwiseComparator().signed_rank(-d)
        assert pos.mean + neg.mean == pytest.approx(1.0)
