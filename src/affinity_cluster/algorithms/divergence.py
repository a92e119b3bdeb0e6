"""
Divergence functions between data items.

A divergence is any callable ``(item, item) -> float`` where a lower value
means the items are more alike. Affinity Propagation negates divergences to
obtain similarities, so none of these functions need to be proper metrics.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Sequence

import numpy as np

DivergenceFunction = Callable[[Any, Any], float]


def euclidean_distance(a: Any, b: Any) -> float:
    """Euclidean (L2) distance between two vectors."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def squared_euclidean_distance(a: Any, b: Any) -> float:
    """Squared Euclidean distance between two vectors."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.dot(diff, diff))


def manhattan_distance(a: Any, b: Any) -> float:
    """Manhattan (L1) distance between two vectors."""
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.abs(diff).sum())


def cosine_distance(a: Any, b: Any) -> float:
    """Compute cosine distance between two vectors (1.0 for zero vectors)."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a < 1e-12 or norm_b < 1e-12:
        return 1.0
    return float(1.0 - np.dot(a, b) / (norm_a * norm_b))


DIVERGENCES: Dict[str, DivergenceFunction] = {
    "euclidean": euclidean_distance,
    "sqeuclidean": squared_euclidean_distance,
    "manhattan": manhattan_distance,
    "cosine": cosine_distance,
}


def get_divergence(name: str) -> DivergenceFunction:
    """
    Look up a built-in divergence function by name.

    Raises:
        ValueError: If *name* is not one of ``DIVERGENCES``.
    """
    try:
        return DIVERGENCES[name]
    except KeyError:
        raise ValueError(
            f"Unknown divergence '{name}'. Expected one of: {', '.join(sorted(DIVERGENCES))}"
        ) from None


class PrecomputedDivergence:
    """
    Divergence over integer indices into a precomputed N×N matrix.

    Lets the clusterer run over ``range(N)`` when the divergences are
    already known, e.g. when sweeping self-divergence values.
    """

    def __init__(self, divergences: np.ndarray):
        matrix = np.asarray(divergences, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(f"divergence matrix must be square, got shape {matrix.shape}")
        self.divergences = matrix

    def __call__(self, i: int, j: int) -> float:
        return float(self.divergences[i, j])

    def __deepcopy__(self, memo):
        result = PrecomputedDivergence(self.divergences.copy())
        memo[id(self)] = result
        return result


def pairwise_divergences(
    examples: Sequence[Any],
    divergence: DivergenceFunction,
    *,
    symmetric: bool = False,
) -> np.ndarray:
    """
    Evaluate *divergence* over every ordered pair of examples.

    Args:
        examples: Items indexed 0..N-1
        divergence: ``(item, item) -> float`` callable
        symmetric: If True, evaluate only the lower triangle (diagonal
            included) and mirror it

    Returns:
        Array of shape (N, N) with ``D[i, j] = divergence(examples[i], examples[j])``
    """
    n = len(examples)
    D = np.empty((n, n), dtype=np.float64)
    for i in range(n):
        x_i = examples[i]
        if symmetric:
            for j in range(i + 1):
                D[i, j] = D[j, i] = divergence(x_i, examples[j])
        else:
            for j in range(n):
                D[i, j] = divergence(x_i, examples[j])
    return D
