"""
Tests for tie detection and random tie-breaking.
"""

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from pyrobustest.hypothesis._common import TIE_JITTER
from pyrobustest.hypothesis._ties import (
    break_ties, cross_ties, duplicated, resolve_ties,
)


class TestDetection:

    def test_duplicated_marks_later_occurrences(self):
        x = np.array([1.0, 2.0, 2.0, 3.0, 3.0, 3.0])
        assert_array_equal(
            duplicated(x), [False, False, True, False, True, True],
        )

    def test_duplicated_unsorted(self):
        x = np.array([3.0, 1.0, 3.0])
        assert_array_equal(duplicated(x), [False, False, True])

    def test_no_duplicates(self):
        assert not duplicated(np.array([1.0, 2.0, 3.0])).any()

    def test_cross_ties(self):
        x = np.array([1.0, 2.0, 3.0, 3.0])
        y = np.array([3.0, 4.0])
        assert_array_equal(cross_ties(x, y), [False, False, True, True])


class TestBreakTies:

    def test_none_policy_leaves_data(self):
        x = np.array([1.0, 2.0, 2.0, 3.0])
        result = resolve_ties(x, "none")
        assert result.ties_detected
        assert not result.ties_broken
        assert_array_equal(result.values, [1.0, 2.0, 2.0, 3.0])

    def test_random_policy_separates_duplicates(self):
        x = np.array([1.0, 2.0, 2.0, 3.0])
        result = resolve_ties(x, "random", np.random.default_rng(0))
        assert result.ties_detected
        assert result.ties_broken
        assert result.values[1] == 2.0
        assert result.values[2] != result.values[1]
        assert abs(result.values[2] - 2.0) <= TIE_JITTER

    def test_random_policy_does_not_mutate_input(self):
        x = np.array([1.0, 2.0, 2.0, 3.0])
        original = x.copy()
        resolve_ties(x, "random", np.random.default_rng(0))
        assert_array_equal(x, original)

    def test_unmasked_entries_untouched(self):
        x = np.array([5.0, 1.0, 5.0, 7.0])
        result = resolve_ties(x, "random", np.random.default_rng(1))
        assert_array_equal(result.values[[0, 1, 3]], [5.0, 1.0, 7.0])

    def test_no_ties_no_flags(self):
        result = resolve_ties(np.array([1.0, 2.0]), "random")
        assert not result.ties_detected
        assert not result.ties_broken

    def test_same_seed_same_jitter(self):
        x = np.array([2.0, 2.0, 2.0])
        a = resolve_ties(x, "random", np.random.default_rng(7))
        b = resolve_ties(x, "random", np.random.default_rng(7))
        assert_array_equal(a.values, b.values)

    def test_cross_mask(self):
        x = np.array([1.0, 2.0, 4.0])
        y = np.array([2.0, 3.0])
        result = break_ties(x, cross_ties(x, y), "random", np.random.default_rng(2))
        assert result.ties_broken
        assert result.values[1] not in y

    def test_unknown_policy(self):
        with pytest.raises(ValueError, match="Unknown tie policy"):
            resolve_ties(np.array([1.0, 1.0]), "average")
