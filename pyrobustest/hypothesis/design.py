"""
CalibratedDesign: tagged-union request for the calibrated tests.

The call shape (paired flag, missing y, grouping labels) is resolved once
here into an explicit `test_type`; backends never re-inspect which
arguments were supplied. Immutable after construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence
import numpy as np
from numpy.typing import NDArray, ArrayLike

from pyrobustest.core.exceptions import ValidationError
from pyrobustest.core.validation import (
    check_array, check_1d, check_finite, check_consistent_length,
    check_min_samples,
)
from pyrobustest.hypothesis._common import (
    ALTERNATIVE_ALIASES, VALID_ALTERNATIVES, VALID_TIE_POLICIES,
    VALID_COR_METHODS, MIN_VAR_GROUP_SIZE,
)


def _validate_alternative(alternative: str) -> str:
    """Validate an alternative and return its canonical spelling."""
    canonical = ALTERNATIVE_ALIASES.get(alternative) if isinstance(alternative, str) else None
    if canonical is None:
        raise ValidationError(
            f"alternative must be one of {VALID_ALTERNATIVES} "
            f"(or 't', 'l', 'g'), got {alternative!r}"
        )
    return canonical


def _validate_ties_break(ties_break: str) -> str:
    if ties_break not in VALID_TIE_POLICIES:
        raise ValidationError(
            f"ties_break must be one of {VALID_TIE_POLICIES}, got {ties_break!r}"
        )
    return ties_break


def _validate_conf_level(conf_level: float) -> float:
    """Validate confidence level is in (0, 1)."""
    if not (0.0 < conf_level < 1.0):
        raise ValidationError(
            f"conf_level must be in (0, 1), got {conf_level}"
        )
    return float(conf_level)


def _to_sample(x: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """Convert to a 1D float64 sample with NaN removed."""
    arr = check_array(x, name)
    check_1d(arr, name)
    arr = arr[~np.isnan(arr)]
    check_finite(arr, name)
    return arr


def _to_pairs(
    x: ArrayLike, y: ArrayLike,
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
    """Convert two paired vectors, dropping pairs where either is NaN."""
    x_raw = check_array(x, "x")
    y_raw = check_array(y, "y")
    check_1d(x_raw, "x")
    check_1d(y_raw, "y")
    check_consistent_length(x_raw, y_raw, names=("x", "y"))
    mask = ~(np.isnan(x_raw) | np.isnan(y_raw))
    x_arr, y_arr = x_raw[mask], y_raw[mask]
    check_finite(x_arr, "x")
    check_finite(y_arr, "y")
    return x_arr, y_arr


@dataclass(frozen=True)
class CalibratedDesign:
    """
    Design for the calibrated tests.

    The `test_type` field identifies which fields are populated:

        rank_sum        x, y
        signed_rank     x (paired differences when paired=True)
        pearson         x, y
        kendall         x, y
        spearman        x, y
        var_two_sample  x, y
        var_k_sample    groups

    Do not construct directly; use the factory classmethods.
    """
    test_type: str

    _x: NDArray[np.floating[Any]] | None = None
    _y: NDArray[np.floating[Any]] | None = None
    _groups: tuple[NDArray[np.floating[Any]], ...] | None = None

    _alternative: str = "two-sided"
    _conf_level: float = 0.95
    _ties_break: str = "none"
    _paired: bool = False
    _seed: int | None = None

    _data_name: str = ""

    # --- Properties ---

    @property
    def x(self) -> NDArray[np.floating[Any]] | None:
        return self._x

    @property
    def y(self) -> NDArray[np.floating[Any]] | None:
        return self._y

    @property
    def groups(self) -> tuple[NDArray[np.floating[Any]], ...] | None:
        return self._groups

    @property
    def alternative(self) -> str:
        return self._alternative

    @property
    def conf_level(self) -> float:
        return self._conf_level

    @property
    def ties_break(self) -> str:
        return self._ties_break

    @property
    def paired(self) -> bool:
        return self._paired

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def data_name(self) -> str:
        return self._data_name

    @property
    def n_observations(self) -> int:
        if self._groups is not None:
            return int(sum(len(g) for g in self._groups))
        return len(self._x) + (len(self._y) if self._y is not None else 0)

    # --- Factory classmethods ---

    @classmethod
    def for_rank_test(
        cls,
        x: ArrayLike,
        y: ArrayLike | None = None,
        *,
        paired: bool = False,
        alternative: str = "two-sided",
        ties_break: str = "none",
        seed: int | None = None,
    ) -> CalibratedDesign:
        """
        Build design for rank_test().

        paired=True needs y and computes d = x - y (signed-rank on d).
        y=None runs the one-sample signed-rank test on x. Otherwise x and
        y are independent samples (rank-sum).
        """
        alternative = _validate_alternative(alternative)
        ties_break = _validate_ties_break(ties_break)

        if paired:
            if x is None:
                raise ValidationError("'x' is missing for paired test")
            if y is None:
                raise ValidationError("'y' is missing for paired test")
            x_arr, y_arr = _to_pairs(x, y)
            d = x_arr - y_arr
            check_min_samples(d, 2, "x - y")
            return cls(
                test_type="signed_rank",
                _x=d,
                _paired=True,
                _alternative=alternative,
                _ties_break=ties_break,
                _seed=seed,
                _data_name="x and y",
            )

        x_arr = _to_sample(x, "x")
        check_min_samples(x_arr, 2, "x")

        if y is None:
            return cls(
                test_type="signed_rank",
                _x=x_arr,
                _alternative=alternative,
                _ties_break=ties_break,
                _seed=seed,
                _data_name="x",
            )

        y_arr = _to_sample(y, "y")
        check_min_samples(y_arr, 2, "y")
        return cls(
            test_type="rank_sum",
            _x=x_arr,
            _y=y_arr,
            _alternative=alternative,
            _ties_break=ties_break,
            _seed=seed,
            _data_name="x and y",
        )

    @classmethod
    def for_cor_test(
        cls,
        x: ArrayLike,
        y: ArrayLike,
        *,
        method: str = "pearson",
        alternative: str = "two-sided",
        ties_break: str = "none",
        conf_level: float = 0.95,
        seed: int | None = None,
    ) -> CalibratedDesign:
        """
        Build design for cor_test().

        Raises
        ------
        DimensionError
            If x and y have different lengths.
        ValidationError
            If fewer than 3 complete pairs remain.
        """
        if method not in VALID_COR_METHODS:
            raise ValidationError(
                f"method must be one of {VALID_COR_METHODS}, got {method!r}"
            )
        alternative = _validate_alternative(alternative)
        ties_break = _validate_ties_break(ties_break)
        conf_level = _validate_conf_level(conf_level)

        if x is None or y is None:
            raise ValidationError("cor_test requires both x and y")
        x_arr, y_arr = _to_pairs(x, y)
        if len(x_arr) <= 2:
            raise ValidationError(
                f"lengths of 'x' and 'y' must be greater than 2, got {len(x_arr)}"
            )

        return cls(
            test_type=method,
            _x=x_arr,
            _y=y_arr,
            _alternative=alternative,
            _ties_break=ties_break,
            _conf_level=conf_level,
            _seed=seed,
            _data_name="x and y",
        )

    @classmethod
    def for_var_test(
        cls,
        x: ArrayLike,
        y: ArrayLike,
        *,
        alternative: str = "two-sided",
        conf_level: float = 0.95,
    ) -> CalibratedDesign:
        """Build design for the two-sample var_test()."""
        alternative = _validate_alternative(alternative)
        conf_level = _validate_conf_level(conf_level)

        x_arr = _to_sample(x, "x")
        y_arr = _to_sample(y, "y")
        check_min_samples(x_arr, MIN_VAR_GROUP_SIZE, "x")
        check_min_samples(y_arr, MIN_VAR_GROUP_SIZE, "y")

        return cls(
            test_type="var_two_sample",
            _x=x_arr,
            _y=y_arr,
            _alternative=alternative,
            _conf_level=conf_level,
            _data_name="x and y",
        )

    @classmethod
    def for_k_sample_var_test(
        cls,
        samples: Sequence[ArrayLike],
    ) -> CalibratedDesign:
        """
        Build design for the k-sample var_test().

        Parameters
        ----------
        samples : sequence of array-like
            One sample per group; at least 2 groups of at least 3
            observations each.
        """
        if samples is None or len(samples) < 2:
            raise ValidationError(
                "k-sample variance test needs at least 2 groups, "
                f"got {0 if samples is None else len(samples)}"
            )
        groups = []
        for i, s in enumerate(samples):
            arr = _to_sample(s, f"group {i}")
            check_min_samples(arr, MIN_VAR_GROUP_SIZE, f"group {i}")
            groups.append(arr)

        return cls(
            test_type="var_k_sample",
            _groups=tuple(groups),
            _data_name=f"{len(groups)} groups",
        )

    def __repr__(self) -> str:
        if self._groups is not None:
            sizes = [len(g) for g in self._groups]
            return f"CalibratedDesign(test_type={self.test_type!r}, group_sizes={sizes})"
        n_x = len(self._x) if self._x is not None else 0
        if self._y is not None:
            return (
                f"CalibratedDesign(test_type={self.test_type!r}, "
                f"n_x={n_x}, n_y={len(self._y)})"
            )
        return f"CalibratedDesign(test_type={self.test_type!r}, n={n_x})"
