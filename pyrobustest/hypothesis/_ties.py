"""
Tie detection and random tie-breaking.

Rank statistics compare observations with strict inequalities, which are
ill-defined when values repeat. Under the "random" policy the repeated
values get a small uniform jitter so every comparison is strict; under
"none" the data are left alone and the caller reports a TiesWarning.

Functions here never modify their inputs; perturbed data are returned as
new arrays.

Known limitation: the jitter half-width (TIE_JITTER = 1e-5) does not scale
with the data. Samples whose distinct values are closer than about 2e-5 can
have originally distinct observations reordered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pyrobustest.hypothesis._common import TIE_JITTER


@dataclass(frozen=True)
class TieBreak:
    """Outcome of tie handling for one sample."""
    values: NDArray[np.floating[Any]]
    ties_detected: bool
    ties_broken: bool


def duplicated(x: NDArray[np.floating[Any]]) -> NDArray[np.bool_]:
    """
    Mask of repeated values within one sample.

    The first occurrence of each value is False, every later occurrence
    True, so jittering the masked entries leaves one copy exact.
    """
    mask = np.ones(len(x), dtype=bool)
    _, first_index = np.unique(x, return_index=True)
    mask[first_index] = False
    return mask


def cross_ties(
    x: NDArray[np.floating[Any]], y: NDArray[np.floating[Any]],
) -> NDArray[np.bool_]:
    """Mask of entries of x whose value also occurs in y."""
    return np.isin(x, y)


def break_ties(
    x: NDArray[np.floating[Any]],
    mask: NDArray[np.bool_],
    policy: str,
    rng: np.random.Generator | None = None,
) -> TieBreak:
    """
    Apply a tie policy to the entries of x selected by mask.

    Parameters
    ----------
    x : ndarray
        Sample; never modified.
    mask : ndarray of bool
        Entries that are tied (from duplicated() or cross_ties()).
    policy : str
        "none" leaves the data unchanged; "random" adds
        Uniform(-TIE_JITTER, TIE_JITTER) noise to the masked entries.
    rng : numpy.random.Generator or None
        Source of the jitter. A fresh default_rng() is used if None.

    Returns
    -------
    TieBreak
    """
    n_ties = int(np.sum(mask))
    if n_ties == 0:
        return TieBreak(values=x, ties_detected=False, ties_broken=False)
    if policy == "none":
        return TieBreak(values=x, ties_detected=True, ties_broken=False)
    if policy != "random":
        raise ValueError(f"Unknown tie policy: {policy!r}")

    if rng is None:
        rng = np.random.default_rng()
    values = x.copy()
    values[mask] = values[mask] + rng.uniform(-TIE_JITTER, TIE_JITTER, n_ties)
    return TieBreak(values=values, ties_detected=True, ties_broken=True)


def resolve_ties(
    x: NDArray[np.floating[Any]],
    policy: str,
    rng: np.random.Generator | None = None,
) -> TieBreak:
    """Detect and handle within-sample duplicates of x."""
    return break_ties(x, duplicated(x), policy, rng)
