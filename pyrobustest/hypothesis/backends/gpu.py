"""
GPU backend for the calibrated tests.

The O(n^2) / O(n*m) comparison matrices are embarrassingly parallel: every
cell is independent and the reductions are plain row/column means. This
backend builds them with torch on CUDA or MPS and hands the projections
back to the CPU code, so statistics, p-values and intervals are computed
exactly as in the CPU backend.

Pearson and the variance tests are O(n) and do not use the comparator;
they run through the same code path with the same results.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyrobustest.core.compute.timing import Timer
from pyrobustest.hypothesis._pairwise import (
    RankSumComparison, SignedRankComparison, KendallComparison,
    SpearmanAggregate,
)
from pyrobustest.hypothesis._reference import ReferenceTable
from pyrobustest.hypothesis.backends.cpu import CPUCalibratedBackend


def _select_device(device: str) -> str:
    import torch

    if device != 'auto':
        return device
    if torch.cuda.is_available():
        return 'cuda'
    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        return 'mps'
    raise RuntimeError("No GPU available (need CUDA or MPS)")


class TorchPairwiseComparator:
    """
    PairwiseComparator built on torch tensors.

    MPS has no float64 support, so projections are computed in float32
    there and in float64 elsewhere.
    """

    def __init__(self, device: str):
        import torch

        self._torch = torch
        self._device = device
        self._dtype = torch.float32 if device == 'mps' else torch.float64

    @property
    def name(self) -> str:
        return f'torch_{self._device}'

    def _tensor(self, a: NDArray[np.floating[Any]]):
        return self._torch.as_tensor(a, dtype=self._dtype, device=self._device)

    @staticmethod
    def _numpy(t) -> NDArray[np.floating[Any]]:
        return t.detach().cpu().numpy().astype(np.float64)

    def rank_sum(self, x, y) -> RankSumComparison:
        xt, yt = self._tensor(x), self._tensor(y)
        r = (yt[None, :] > xt[:, None]).to(self._dtype)
        return RankSumComparison(
            mean=float(r.mean().item()),
            rows=self._numpy(r.mean(dim=1)),
            cols=self._numpy(r.mean(dim=0)),
        )

    def signed_rank(self, d) -> SignedRankComparison:
        dt = self._tensor(d)
        n = dt.shape[0]
        r = ((dt[None, :] + dt[:, None]) > 0).to(self._dtype)
        off_diagonal = (r.sum() - r.diagonal().sum()) / (n * (n - 1))
        return SignedRankComparison(
            mean=float(off_diagonal.item()),
            rows=self._numpy(r.mean(dim=1)),
        )

    def kendall(self, x, y) -> KendallComparison:
        xt, yt = self._tensor(x), self._tensor(y)
        n = xt.shape[0]
        dx = xt[None, :] - xt[:, None]
        dy = yt[None, :] - yt[:, None]
        concordant = ((dx * dy) > 0).to(self._dtype).sum() / (n * (n - 1))
        direction = ((dx > 0) & (dy > 0)).to(self._dtype)
        return KendallComparison(
            tau=2.0 * (float(concordant.item()) - 0.5),
            projection=self._numpy(direction.mean(dim=1) + direction.mean(dim=0)),
        )

    def spearman(self, x, y) -> SpearmanAggregate:
        xt, yt = self._tensor(x), self._tensor(y)
        n = xt.shape[0]
        sx = self._torch.sign(xt[:, None] - xt[None, :])
        sy = self._torch.sign(yt[:, None] - yt[None, :])
        a = sx.sum(dim=1)
        b = sy.sum(dim=1)
        abar = a / (n - 1)
        bbar = b / (n - 1)
        projection = (abar * bbar - (sx @ bbar) / (n - 1) - (sy @ abar) / (n - 1)) / 4.0
        return SpearmanAggregate(
            sum_r=float((a * b).sum().item()),
            projection=self._numpy(projection),
        )


class GPUCalibratedBackend(CPUCalibratedBackend):
    """
    GPU backend: torch comparison matrices, CPU statistics.

    Args:
        device: 'cuda', 'mps', or 'auto'
        reference_table: Pearson reference distribution (see CPU backend)
    """

    def __init__(
        self,
        device: str = 'auto',
        reference_table: ReferenceTable | None = None,
    ):
        self._device = _select_device(device)
        super().__init__(reference_table)

    def _make_comparator(self) -> TorchPairwiseComparator:
        return TorchPairwiseComparator(self._device)

    def _make_timer(self) -> Timer:
        return Timer(sync_cuda=self._device == 'cuda')

    @property
    def name(self) -> str:
        return f'gpu_{self._device}_calibrated'
