"""
Pairwise comparison matrices and their projections.

Every rank statistic here is a U-statistic built from an n x n (or n x m)
matrix of pairwise indicators. Matrices are built with numpy broadcasting
in O(n^2) memory and are never modified after construction. Row and column
means of a matrix are its Hajek projections, one value per observation.

Conventions (entry [i, j]):

    rank-sum      y_j > x_i                      (n x m)
    signed-rank   d_j + d_i > 0                  (n x n, diagonal kept)
    Kendall       (x_j - x_i)(y_j - y_i) > 0     concordance
                  (x_j > x_i) & (y_j > y_i)      direction

Spearman uses a reduced aggregate instead of a stored indicator matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class KendallMatrices:
    """Concordance and direction indicator matrices for Kendall's tau."""
    concordant: NDArray[np.bool_]
    direction: NDArray[np.bool_]


@dataclass(frozen=True)
class SpearmanAggregate:
    """
    Reduced Spearman aggregate.

    Attributes:
        sum_r: S = sum_i a_i * b_i with a_i = sum_j sign(x_i - x_j) and
            b_i = sum_k sign(y_i - y_k); rho = 3 S / (n^3 - n)
        projection: H, one value per observation
    """
    sum_r: float
    projection: NDArray[np.floating[Any]]


def rank_sum_matrix(
    x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
) -> NDArray[np.bool_]:
    """R[i, j] = y_j > x_i, shape (len(x), len(y))."""
    return y[np.newaxis, :] > x[:, np.newaxis]


def signed_rank_matrix(d: NDArray[np.floating[Any]]) -> NDArray[np.bool_]:
    """R[i, j] = d_j + d_i > 0. The diagonal (2 d_i > 0) is kept."""
    return (d[np.newaxis, :] + d[:, np.newaxis]) > 0


def kendall_matrices(
    x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
) -> KendallMatrices:
    dx = x[np.newaxis, :] - x[:, np.newaxis]
    dy = y[np.newaxis, :] - y[:, np.newaxis]
    return KendallMatrices(
        concordant=(dx * dy) > 0,
        direction=(dx > 0) & (dy > 0),
    )


def spearman_aggregate(
    x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
) -> SpearmanAggregate:
    """
    Spearman sum and projection from the order-3 kernel
    sign(x_i - x_j) * sign(y_i - y_k).

    The projection of observation i averages the three conditional
    expectations of the kernel with i in each slot:

        A_i = abar_i * bbar_i
        B_i = mean_j sign(x_j - x_i) * bbar_j
        C_i = mean_j abar_j * sign(y_j - y_i)

    where abar, bbar are a, b divided by n - 1. H = (A + B + C) / 4, so
    16 * var(H) estimates the asymptotic variance of sqrt(n) * S / n^3.
    """
    n = len(x)
    sx = np.sign(x[:, np.newaxis] - x[np.newaxis, :])
    sy = np.sign(y[:, np.newaxis] - y[np.newaxis, :])
    a = sx.sum(axis=1)
    b = sy.sum(axis=1)
    sum_r = float(a @ b)

    abar = a / (n - 1)
    bbar = b / (n - 1)
    first = abar * bbar
    second = -(sx @ bbar) / (n - 1)
    third = -(sy @ abar) / (n - 1)
    return SpearmanAggregate(
        sum_r=sum_r,
        projection=(first + second + third) / 4.0,
    )


def row_means(r: NDArray[np.bool_]) -> NDArray[np.floating[Any]]:
    """Projection onto the row observations."""
    return r.mean(axis=1)


def col_means(r: NDArray[np.bool_]) -> NDArray[np.floating[Any]]:
    """Projection onto the column observations."""
    return r.mean(axis=0)


def off_diagonal_mean(r: NDArray[np.bool_]) -> float:
    """Mean of a square matrix excluding its diagonal."""
    n = r.shape[0]
    return float((r.sum() - np.trace(r)) / (n * (n - 1)))


@dataclass(frozen=True)
class RankSumComparison:
    """Mean of the rank-sum matrix and its row (H) and column (G) projections."""
    mean: float
    rows: NDArray[np.floating[Any]]
    cols: NDArray[np.floating[Any]]


@dataclass(frozen=True)
class SignedRankComparison:
    """Off-diagonal mean of the signed-rank matrix and its row projection."""
    mean: float
    rows: NDArray[np.floating[Any]]


@dataclass(frozen=True)
class KendallComparison:
    """Kendall's tau and the combined row + column projection."""
    tau: float
    projection: NDArray[np.floating[Any]]


class PairwiseComparator:
    """
    Builds the comparison matrices with numpy and reduces them to the
    aggregate and projections each statistic needs.

    Backends that build matrices elsewhere (e.g. on a GPU) provide the
    same four methods.
    """

    name = "numpy"

    def rank_sum(
        self, x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
    ) -> RankSumComparison:
        r = rank_sum_matrix(x, y)
        return RankSumComparison(
            mean=float(r.mean()), rows=row_means(r), cols=col_means(r),
        )

    def signed_rank(self, d: NDArray[np.floating[Any]]) -> SignedRankComparison:
        r = signed_rank_matrix(d)
        return SignedRankComparison(mean=off_diagonal_mean(r), rows=row_means(r))

    def kendall(
        self, x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
    ) -> KendallComparison:
        m = kendall_matrices(x, y)
        n = len(x)
        concordant = float(m.concordant.sum()) / (n * (n - 1))
        return KendallComparison(
            tau=2.0 * (concordant - 0.5),
            projection=row_means(m.direction) + col_means(m.direction),
        )

    def spearman(
        self, x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
    ) -> SpearmanAggregate:
        return spearman_aggregate(x, y)
