"""
Message passing updates for Affinity Propagation.

All three updates mutate their target arrays in place. Each recomputes
every cell from the current matrices, then blends with the previous value
using the damping factor::

    new = damping * old + (1 - damping) * computed
"""

from __future__ import annotations

import numpy as np


def _damp(old: np.ndarray, computed: np.ndarray, damping_factor: float) -> None:
    """Blend *computed* into *old* in place: ``old = d * old + (1 - d) * computed``."""
    # The endpoints skip the arithmetic so infinite entries (N=1) never
    # meet a zero weight and turn into NaN.
    if damping_factor == 1.0:
        return
    if damping_factor == 0.0:
        old[...] = computed
        return
    old *= damping_factor
    old += (1.0 - damping_factor) * computed


def update_responsibilities(
    similarities: np.ndarray,
    availabilities: np.ndarray,
    responsibilities: np.ndarray,
    damping_factor: float,
) -> None:
    """
    Damped responsibility update, in place.

        r(i,k) = s(i,k) - max_{k' != k} [ a(i,k') + s(i,k') ]

    Only the two largest values of each row of ``a + s`` matter: the
    column holding the row maximum subtracts the runner-up, every other
    column subtracts the maximum.

    Args:
        similarities: (N, N) similarity matrix
        availabilities: (N, N) availabilities from the previous iteration
        responsibilities: (N, N) responsibilities, overwritten
        damping_factor: Weight of the previous value, in [0, 1]
    """
    n = similarities.shape[0]
    rows = np.arange(n)

    combined = availabilities + similarities
    best = np.argmax(combined, axis=1)
    first = combined[rows, best]
    combined[rows, best] = -np.inf
    second = combined.max(axis=1)

    computed = similarities - first[:, None]
    computed[rows, best] = similarities[rows, best] - second

    _damp(responsibilities, computed, damping_factor)


def update_availabilities(
    responsibilities: np.ndarray,
    availabilities: np.ndarray,
    damping_factor: float,
) -> None:
    """
    Damped availability update, in place.

        a(i,k) = min(0, r(k,k) + sum_{j != i,k} max(0, r(j,k)))   for i != k
        a(k,k) = sum_{j != k} max(0, r(j,k))

    Args:
        responsibilities: (N, N) responsibilities of the current iteration
        availabilities: (N, N) availabilities, overwritten
        damping_factor: Weight of the previous value, in [0, 1]
    """
    positive = np.maximum(responsibilities, 0.0)
    np.fill_diagonal(positive, 0.0)
    # Column support: sum over j != k of max(0, r(j,k))
    support = positive.sum(axis=0)

    computed = np.diag(responsibilities)[None, :] + (support[None, :] - positive)
    np.minimum(computed, 0.0, out=computed)
    np.fill_diagonal(computed, support)

    _damp(availabilities, computed, damping_factor)


def update_assignments(
    availabilities: np.ndarray,
    responsibilities: np.ndarray,
    assignments: np.ndarray,
) -> int:
    """
    Assign every point to ``argmax_k a(i,k) + r(i,k)``, in place.

    Ties go to the smallest index k.

    Returns:
        Number of points whose assignment changed
    """
    chosen = np.argmax(availabilities + responsibilities, axis=1)
    changed = int(np.count_nonzero(chosen != assignments))
    assignments[:] = chosen
    return changed
