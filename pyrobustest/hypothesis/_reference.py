"""
Reference distribution of the studentized Pearson statistic.

For small samples the studentized Pearson statistic is far from Student t.
Its null distribution under bivariate independent normals is tabulated for
n = 3..129 as empirical quantiles at a fixed grid of 2201 probability
levels; p-values are then read off the resulting step function.

The grid is taken from a uniform 2e5-point grid: levels 10..39970 in steps
of 40, 40000..160000 in steps of 600, and 160040..200000 in steps of 40
(all divided by 2e5), so both tails are resolved finely.

Breakpoints come from a seeded simulation and are therefore identical on
every run with the same seed and draw count. A table can be saved to and
loaded from an .npz file. The default table loads the one installed with
the package when present; PYROBUSTEST_PEARSON_TABLE overrides it.
"""

from __future__ import annotations

import logging
import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping
import numpy as np
from numpy.typing import NDArray

from pyrobustest.core.exceptions import ValidationError
from pyrobustest.hypothesis._common import (
    PEARSON_TABLE_MIN_N, PEARSON_TABLE_MAX_N, REFERENCE_DRAWS,
    REFERENCE_TABLE_ENV,
)

logger = logging.getLogger(__name__)

DEFAULT_SEED = 129

# Full table written by tests/fixtures/generate_pearson_table.py and
# installed as package data.
BUNDLED_TABLE = Path(__file__).resolve().parent / "data" / "pearson_table.npz"

_CHUNK = 20_000


def probability_grid() -> NDArray[np.floating[Any]]:
    """The 2201 probability levels at which breakpoints are tabulated."""
    idx = np.concatenate([
        np.arange(10, 40_001, 40),
        np.arange(40_000, 160_001, 600),
        np.arange(160_040, 200_001, 40),
    ])
    return idx / 200_000.0


def pearson_statistic(
    x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]] | float:
    """
    Studentized Pearson statistic along the last axis.

    With x, y standardized and R = x * y:
        T = sum(R) / sqrt(sum(R^2) - sum(R)^2 / n)

    Works on 1D samples or on (draws, n) batches.
    """
    n = x.shape[-1]
    xs = (x - x.mean(axis=-1, keepdims=True)) / x.std(axis=-1, ddof=1, keepdims=True)
    ys = (y - y.mean(axis=-1, keepdims=True)) / y.std(axis=-1, ddof=1, keepdims=True)
    r = xs * ys
    num = r.sum(axis=-1)
    deno = np.sqrt(np.sum(r * r, axis=-1) - num * num / n)
    return num / deno


def simulate_breakpoints(
    n: int,
    n_draws: int = REFERENCE_DRAWS,
    seed: int = DEFAULT_SEED,
) -> NDArray[np.floating[Any]]:
    """
    Empirical quantiles of the Pearson statistic for sample size n.

    Draws n_draws independent standard-normal (x, y) samples of size n
    and returns the 'inverted_cdf' quantiles at probability_grid(), which
    is non-decreasing.
    """
    rng = np.random.default_rng([seed, n])
    stats = np.empty(n_draws, dtype=np.float64)
    for start in range(0, n_draws, _CHUNK):
        stop = min(start + _CHUNK, n_draws)
        x = rng.standard_normal((stop - start, n))
        y = rng.standard_normal((stop - start, n))
        stats[start:stop] = pearson_statistic(x, y)
    return np.quantile(stats, probability_grid(), method="inverted_cdf")


class ReferenceTable:
    """
    Immutable lookup of Pearson null breakpoints keyed by sample size.

    Entries not supplied at construction are simulated on first use and
    memoised; each entry is computed at most once and never changes
    afterwards, so a table can be shared freely between callers.

    Args:
        breakpoints: Optional precomputed {n: breakpoints} mapping
        n_draws: Monte Carlo draws per sample size for simulated entries
        seed: Base seed of the simulation
    """

    def __init__(
        self,
        breakpoints: Mapping[int, NDArray[np.floating[Any]]] | None = None,
        *,
        n_draws: int = REFERENCE_DRAWS,
        seed: int = DEFAULT_SEED,
    ):
        if n_draws < 1000:
            raise ValidationError(f"n_draws must be at least 1000, got {n_draws}")
        self._probabilities = probability_grid()
        self._probabilities.setflags(write=False)
        self._levels = np.concatenate([[0.0], self._probabilities])
        self._n_draws = int(n_draws)
        self._seed = int(seed)
        self._lock = threading.Lock()
        self._tables: dict[int, NDArray[np.floating[Any]]] = {}
        for n, x1 in (breakpoints or {}).items():
            self._tables[int(n)] = self._freeze(int(n), x1)

    def _freeze(self, n: int, x1: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        arr = np.array(x1, dtype=np.float64)
        if arr.shape != self._probabilities.shape:
            raise ValidationError(
                f"breakpoints for n={n}: expected shape {self._probabilities.shape}, "
                f"got {arr.shape}"
            )
        if np.any(np.diff(arr) < 0):
            raise ValidationError(f"breakpoints for n={n} are not non-decreasing")
        arr.setflags(write=False)
        return arr

    @property
    def probabilities(self) -> NDArray[np.floating[Any]]:
        return self._probabilities

    @property
    def n_draws(self) -> int:
        return self._n_draws

    @property
    def seed(self) -> int:
        return self._seed

    @staticmethod
    def covers(n: int) -> bool:
        """Whether n falls in the tabulated range 3..129."""
        return PEARSON_TABLE_MIN_N <= n <= PEARSON_TABLE_MAX_N

    def breakpoints(self, n: int) -> NDArray[np.floating[Any]]:
        """Read-only breakpoints for sample size n."""
        if not self.covers(n):
            raise ValidationError(
                f"reference table covers n in [{PEARSON_TABLE_MIN_N}, "
                f"{PEARSON_TABLE_MAX_N}], got n={n}"
            )
        with self._lock:
            table = self._tables.get(n)
            if table is None:
                logger.debug(
                    "Simulating Pearson reference distribution for n=%d (%d draws)",
                    n, self._n_draws,
                )
                table = self._freeze(
                    n, simulate_breakpoints(n, self._n_draws, self._seed),
                )
                self._tables[n] = table
        return table

    def cdf(self, n: int, t: float) -> float:
        """
        Step-function CDF of the statistic at t.

        Returns the probability level of the largest breakpoint <= t, or 0
        below the first breakpoint.
        """
        k = int(np.searchsorted(self.breakpoints(n), t, side="right"))
        return float(self._levels[k])

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write every entry n = 3..129 to an .npz file (simulating missing ones)."""
        ns = np.arange(PEARSON_TABLE_MIN_N, PEARSON_TABLE_MAX_N + 1)
        table = np.vstack([self.breakpoints(int(n)) for n in ns])
        np.savez_compressed(
            path, n=ns, breakpoints=table, probabilities=self._probabilities,
            n_draws=self._n_draws, seed=self._seed,
        )

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> ReferenceTable:
        """Load a table written by save()."""
        with np.load(Path(path)) as data:
            if not np.allclose(data["probabilities"], probability_grid()):
                raise ValidationError(
                    f"{path}: probability grid does not match this version"
                )
            entries = {
                int(n): row for n, row in zip(data["n"], data["breakpoints"])
            }
            return cls(
                entries, n_draws=int(data["n_draws"]), seed=int(data["seed"]),
            )

    def __repr__(self) -> str:
        return (
            f"ReferenceTable(n_draws={self._n_draws}, seed={self._seed}, "
            f"cached={sorted(self._tables)})"
        )


@lru_cache(maxsize=1)
def default_reference_table() -> ReferenceTable:
    """
    Process-wide default table.

    Resolution order: the file named by PYROBUSTEST_PEARSON_TABLE, then the
    table installed with the package (BUNDLED_TABLE), then a lazily
    simulated table with the default seed and draw count.
    """
    path = os.environ.get(REFERENCE_TABLE_ENV)
    if path:
        logger.debug("Loading Pearson reference table from %s", path)
        return ReferenceTable.load(path)
    if BUNDLED_TABLE.is_file():
        logger.debug("Loading bundled Pearson reference table %s", BUNDLED_TABLE)
        return ReferenceTable.load(BUNDLED_TABLE)
    return ReferenceTable()
