"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pyrobustest.hypothesis import ReferenceTable


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture(scope="session")
def small_table():
    """Pearson reference table with fewer draws, shared across the session."""
    return ReferenceTable(n_draws=20_000)


@pytest.fixture
def two_samples(rng):
    """Two independent continuous samples of unequal size."""
    x = rng.standard_normal(25)
    y = rng.standard_normal(30) + 0.3
    return x, y


@pytest.fixture
def correlated_pair(rng):
    """Moderately correlated continuous pair, n = 40."""
    x = rng.standard_normal(40)
    y = 0.5 * x + rng.standard_normal(40)
    return x, y
