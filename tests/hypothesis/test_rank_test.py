"""
Tests for rank_test(): calibrated Wilcoxon rank-sum and signed-rank tests.
"""

import warnings

import numpy as np
import pytest
from numpy.testing import assert_array_equal
from scipy import stats as sp_stats

from pyrobustest.core.exceptions import (
    DegenerateStatisticWarning, DimensionError, TiesWarning, ValidationError,
)
from pyrobustest.hypothesis import CalibratedDesign, rank_test


# ═══════════════════════════════════════════════════════════════════════
# Rank-sum
# ═══════════════════════════════════════════════════════════════════════


class TestRankSum:

    def test_separated_samples_less(self):
        """x = 1..5 entirely below y = 6..10."""
        with pytest.warns(DegenerateStatisticWarning):
            result = rank_test([1, 2, 3, 4, 5], [6, 7, 8, 9, 10], alternative="less")
        assert result.estimate == 1.0
        assert result.statistic == -np.inf
        assert result.p_value == pytest.approx(0.0, abs=1e-12)

    def test_estimate_is_mann_whitney_proportion(self, two_samples):
        x, y = two_samples
        result = rank_test(x, y)
        u_y = sp_stats.mannwhitneyu(y, x).statistic
        assert result.estimate == pytest.approx(u_y / (len(x) * len(y)))

    def test_antisymmetry(self, two_samples):
        x, y = two_samples
        xy = rank_test(x, y)
        yx = rank_test(y, x)
        assert yx.statistic == pytest.approx(-xy.statistic)
        assert yx.estimate == pytest.approx(1.0 - xy.estimate)
        assert yx.p_value == pytest.approx(xy.p_value)

    def test_one_sided_complement(self, two_samples):
        x, y = two_samples
        less = rank_test(x, y, alternative="less")
        greater = rank_test(x, y, alternative="greater")
        assert less.p_value + greater.p_value == pytest.approx(1.0)

    def test_shift_detected(self, rng):
        x = rng.standard_normal(60)
        y = rng.standard_normal(60) + 1.5
        result = rank_test(x, y, alternative="less")
        assert result.statistic < 0
        assert result.p_value < 1e-4

    def test_cross_ties_warn(self):
        with pytest.warns(TiesWarning, match="between the two vectors"):
            result = rank_test([1.0, 2.0, 2.5, 4.0], [2.0, 3.0, 5.0])
        assert not result.ties_broken

    def test_within_sample_duplicates_are_not_cross_ties(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", TiesWarning)
            result = rank_test([1.0, 1.0, 2.0, 4.0], [3.0, 5.0, 6.0])
        assert not result.ties_broken

    def test_random_ties_break(self):
        x = np.array([1.0, 2.0, 2.5, 4.0])
        y = np.array([2.0, 3.0, 5.0])
        x_copy, y_copy = x.copy(), y.copy()
        with warnings.catch_warnings():
            warnings.simplefilter("error", TiesWarning)
            result = rank_test(x, y, ties_break="random", seed=1)
        assert result.ties_broken
        assert_array_equal(x, x_copy)
        assert_array_equal(y, y_copy)

    def test_seed_reproducible(self):
        x = [1.0, 2.0, 2.0, 3.0, 6.0]
        y = [2.0, 4.0, 5.0, 7.0]
        a = rank_test(x, y, ties_break="random", seed=11)
        b = rank_test(x, y, ties_break="random", seed=11)
        assert a.statistic == b.statistic

    def test_jitter_converges_to_untied_statistic(self):
        """Breaking a single tie moves the estimate by at most one comparison."""
        x = [1.0, 2.0, 3.5, 4.0]
        y = [2.0, 3.0, 5.0, 6.0]
        with pytest.warns(TiesWarning):
            tied = rank_test(x, y)
        broken = rank_test(x, y, ties_break="random", seed=4)
        assert abs(broken.estimate - tied.estimate) <= 1.0 / 16.0

    def test_affine_invariance(self, two_samples):
        x, y = two_samples
        a = rank_test(x, y)
        b = rank_test(4.0 * x + 3.0, 4.0 * y + 3.0)
        assert b.statistic == pytest.approx(a.statistic)
        assert b.estimate == a.estimate

    def test_nan_removed(self, two_samples):
        x, y = two_samples
        with_nan = np.append(x, np.nan)
        assert rank_test(with_nan, y).statistic == pytest.approx(
            rank_test(x, y).statistic,
        )

    def test_null_calibration(self):
        """Rejection rate under H0 with unequal shapes and scales."""
        rng = np.random.default_rng(2024)
        n_trials = 1000
        rejections = 0
        for _ in range(n_trials):
            x = rng.uniform(-0.5, 0.5, 50)
            y = rng.normal(0.0, 0.2, 50)
            if rank_test(x, y).p_value < 0.05:
                rejections += 1
        assert 0.025 <= rejections / n_trials <= 0.08


# ═══════════════════════════════════════════════════════════════════════
# Signed-rank
# ═══════════════════════════════════════════════════════════════════════


class TestSignedRank:

    def test_one_sample_shift(self, rng):
        x = rng.standard_normal(60) + 0.8
        result = rank_test(x, alternative="greater")
        assert result.test_type == "signed_rank"
        assert result.estimate > 0.5
        assert result.p_value < 1e-3

    def test_paired_equals_differences(self, rng):
        x = rng.standard_normal(30)
        y = rng.standard_normal(30)
        paired = rank_test(x, y, paired=True)
        diff = rank_test(x - y)
        assert paired.statistic == pytest.approx(diff.statistic)
        assert paired.params.paired
        assert not diff.params.paired

    def test_sign_flip(self, rng):
        d = rng.standard_normal(40) + 0.2
        pos = rank_test(d)
        neg = rank_test(-d)
        assert neg.statistic == pytest.approx(-pos.statistic)
        assert neg.estimate == pytest.approx(1.0 - pos.estimate)

    def test_duplicates_warn_with_none(self):
        with pytest.warns(TiesWarning):
            result = rank_test([1.0, 2.0, 2.0, 3.0])
        assert not result.ties_broken

    def test_duplicates_broken_with_random(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = rank_test([1.0, 2.0, 2.0, 3.0], ties_break="random", seed=0)
        assert result.ties_broken
        assert not any(issubclass(w.category, TiesWarning) for w in caught)

    def test_all_positive_is_infinite(self):
        with pytest.warns(DegenerateStatisticWarning):
            result = rank_test([1.0, 2.0, 3.5, 5.0])
        assert result.statistic == np.inf
        assert result.estimate == 1.0

    def test_paired_missing_y(self):
        with pytest.raises(ValidationError, match="'y' is missing"):
            rank_test([1.0, 2.0, 3.0], paired=True)

    def test_paired_length_mismatch(self):
        with pytest.raises(DimensionError):
            rank_test([1.0, 2.0, 3.0], [1.0, 2.0], paired=True)


# ═══════════════════════════════════════════════════════════════════════
# Input validation and dispatch
# ═══════════════════════════════════════════════════════════════════════


class TestRankTestValidation:

    def test_too_few_observations(self):
        with pytest.raises(ValidationError, match="at least 2"):
            rank_test([1.0])

    def test_invalid_alternative(self):
        with pytest.raises(ValidationError, match="alternative"):
            rank_test([1.0, 2.0], [3.0, 4.0], alternative="bigger")

    def test_alternative_alias(self, two_samples):
        x, y = two_samples
        assert rank_test(x, y, alternative="g").alternative == "greater"
        assert rank_test(x, y, alternative="two.sided").alternative == "two-sided"

    def test_invalid_ties_break(self):
        with pytest.raises(ValidationError, match="ties_break"):
            rank_test([1.0, 2.0], [3.0, 4.0], ties_break="average")

    def test_unknown_backend(self, two_samples):
        x, y = two_samples
        with pytest.raises(ValidationError, match="Unknown backend"):
            rank_test(x, y, backend="tpu")

    def test_design_passthrough(self, two_samples):
        x, y = two_samples
        design = CalibratedDesign.for_rank_test(x, y, alternative="less")
        assert rank_test(design).p_value == pytest.approx(
            rank_test(x, y, alternative="less").p_value,
        )

    def test_summary(self, two_samples):
        x, y = two_samples
        text = rank_test(x, y).summary()
        assert "Corrected Wilcoxon rank sum test" in text
        assert "p-value" in text
        assert "P(X<Y)" in text

    def test_summary_reports_broken_ties(self):
        text = rank_test([1.0, 2.0, 2.0, 3.0], ties_break="random", seed=0).summary()
        assert "randomly broken" in text
