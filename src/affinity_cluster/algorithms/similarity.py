"""
Similarity matrix construction for Affinity Propagation.

Similarity is the negated divergence, so a smaller divergence means a
larger similarity. The diagonal holds the negated self-divergence, the
single parameter that controls how many exemplars emerge: a smaller
self-divergence favors more clusters.
"""

from __future__ import annotations

from typing import Any, List, Sequence

import numpy as np

from .divergence import DivergenceFunction, pairwise_divergences


def similarity_from_divergences(divergences: np.ndarray, self_divergence: float) -> np.ndarray:
    """
    Negate a divergence matrix and set its diagonal to ``-self_divergence``.

    Args:
        divergences: Square (N, N) divergence matrix
        self_divergence: Divergence assigned to every point with itself

    Returns:
        New (N, N) similarity matrix

    Raises:
        ValueError: If the matrix is not square or holds non-finite values
    """
    D = np.asarray(divergences, dtype=np.float64)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ValueError(f"divergence matrix must be square, got shape {D.shape}")
    # Self-pairs are replaced below, so only off-diagonal entries must be finite
    bad = np.argwhere(~np.isfinite(D) & ~np.eye(D.shape[0], dtype=bool))
    if len(bad):
        i, j = (int(v) for v in bad[0])
        raise ValueError(f"divergence between examples {i} and {j} is not finite: {D[i, j]}")
    if not np.isfinite(self_divergence):
        raise ValueError(f"self_divergence must be finite, got {self_divergence}")

    S = -D
    np.fill_diagonal(S, -float(self_divergence))
    return S


def build_similarity_matrix(
    examples: Sequence[Any],
    divergence: DivergenceFunction,
    self_divergence: float,
    *,
    symmetric: bool = False,
) -> np.ndarray:
    """
    Build the N×N similarity matrix for a set of examples.

    ``S[i, j] = -divergence(x_i, x_j)`` for i != j and
    ``S[i, i] = -self_divergence`` regardless of what the divergence
    function returns for self-pairs.

    Args:
        examples: Items indexed 0..N-1
        divergence: ``(item, item) -> float`` callable
        self_divergence: Diagonal parameter
        symmetric: Evaluate only half of the pairs and mirror them

    Returns:
        Similarity matrix of shape (N, N)
    """
    D = pairwise_divergences(examples, divergence, symmetric=symmetric)
    return similarity_from_divergences(D, self_divergence)


def median_divergence(divergences: np.ndarray) -> float:
    """
    Median of the distinct divergence values in the lower triangle.

    The diagonal is included, matching the common "median similarity"
    preference heuristic. An even number of distinct values averages the
    two middle ones; an empty matrix yields 0.0.
    """
    D = np.asarray(divergences, dtype=np.float64)
    if D.size == 0:
        return 0.0
    values = np.unique(D[np.tril_indices(D.shape[0])])
    size = len(values)
    if size % 2 == 0:
        return float((values[size // 2] + values[size // 2 - 1]) / 2)
    return float(values[size // 2])


def divergence_quantiles(divergences: np.ndarray, quantiles: Sequence[float]) -> List[float]:
    """
    Quantiles of the off-diagonal divergences.

    Useful as candidate self-divergence values: low quantiles produce many
    small clusters, high quantiles a few large ones.

    Raises:
        ValueError: If a quantile is outside [0, 1] or there are fewer
            than two examples
    """
    D = np.asarray(divergences, dtype=np.float64)
    n = D.shape[0]
    if n < 2:
        raise ValueError(f"need at least 2 examples for divergence quantiles, got {n}")
    for q in quantiles:
        if not 0.0 <= q <= 1.0:
            raise ValueError(f"quantiles must be in [0, 1], got {q}")
    off_diagonal = D[~np.eye(n, dtype=bool)]
    return [float(v) for v in np.quantile(off_diagonal, list(quantiles))]
