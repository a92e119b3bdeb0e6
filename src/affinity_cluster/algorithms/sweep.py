"""
Sweep orchestration for Affinity Propagation across self-divergence values.

The self-divergence decides how many clusters emerge but has no universal
default. A sweep computes the pairwise divergences once, then clusters the
same data at several self-divergence settings (explicit values or
quantiles of the observed divergences) and reports cluster counts,
convergence and silhouette quality for each.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..utils.logging_config import get_logger
from .affinity_propagation import (
    DEFAULT_CONVERGENCE_ITERATIONS,
    DEFAULT_DAMPING_FACTOR,
    DEFAULT_MAX_ITERATIONS,
    AffinityPropagation,
)
from .clustering import silhouette_score_precomputed
from .divergence import DivergenceFunction, PrecomputedDivergence, pairwise_divergences
from .similarity import divergence_quantiles, median_divergence

logger = get_logger(__name__)


@dataclass
class SweepConfig:
    """Configuration for a self-divergence sweep."""

    quantiles: Tuple[float, ...] = (0.1, 0.25, 0.5, 0.75, 0.9)
    self_divergences: Optional[Sequence[float]] = None  # overrides quantiles when set
    include_median: bool = True  # also run at the median divergence
    damping_factor: float = DEFAULT_DAMPING_FACTOR
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    convergence_iterations: int = DEFAULT_CONVERGENCE_ITERATIONS
    symmetric: bool = False
    compute_silhouette: bool = True


@dataclass
class SweepResult:
    """Results from a self-divergence sweep."""

    self_divergences: List[float]
    by_self_divergence: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    divergences: Optional[np.ndarray] = None

    def best(self) -> Optional[Dict[str, Any]]:
        """Entry with the highest silhouette among runs with 2+ clusters."""
        candidates = [
            entry
            for entry in self.by_self_divergence.values()
            if entry["n_clusters"] >= 2 and entry.get("silhouette") is not None
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda entry: entry["silhouette"])


def _candidate_self_divergences(D: np.ndarray, cfg: SweepConfig) -> List[float]:
    if cfg.self_divergences is not None:
        values = [float(v) for v in cfg.self_divergences]
    else:
        values = divergence_quantiles(D, cfg.quantiles)
    if cfg.include_median:
        values.append(median_divergence(D))
    # Unique, ascending
    return sorted(set(values))


def run_sweep(
    examples: Sequence[Any],
    divergence: DivergenceFunction,
    cfg: SweepConfig,
) -> SweepResult:
    """
    Run Affinity Propagation at several self-divergence values.

    Pipeline:
    1. Compute the N×N divergence matrix once
    2. Pick candidate self-divergences (explicit list, or quantiles of the
       off-diagonal divergences, plus the median if requested)
    3. For each candidate, cluster over the precomputed matrix and record
       cluster count, exemplars, labels, iterations, convergence and
       silhouette

    Args:
        examples: Items to cluster
        divergence: ``(item, item) -> float`` callable
        cfg: SweepConfig with parameters

    Returns:
        SweepResult keyed by the formatted self-divergence value

    Raises:
        ValueError: If fewer than two examples are given
    """
    examples = list(examples)
    n_samples = len(examples)
    if n_samples < 2:
        raise ValueError(f"A sweep needs at least 2 examples, got {n_samples}")

    # Step 1: Divergences
    D = pairwise_divergences(examples, divergence, symmetric=cfg.symmetric)

    # Step 2: Candidates
    candidates = _candidate_self_divergences(D, cfg)
    logger.info("Sweeping %d self-divergence values over %d examples", len(candidates), n_samples)

    # Step 3: Cluster at each setting
    learner = AffinityPropagation(
        PrecomputedDivergence(D),
        damping_factor=cfg.damping_factor,
        max_iterations=cfg.max_iterations,
        convergence_iterations=cfg.convergence_iterations,
    )
    indices = list(range(n_samples))
    by_self_divergence: Dict[str, Dict[str, Any]] = {}

    for self_divergence in candidates:
        learner.self_divergence = self_divergence
        run = learner.learn(indices)

        labels = run.labels
        entry: Dict[str, Any] = {
            "self_divergence": self_divergence,
            "n_clusters": run.n_clusters,
            "exemplars": [examples[k] for k in run.exemplar_indices],
            "exemplar_indices": run.exemplar_indices,
            "labels": labels,
            "n_iter": run.n_iter,
            "converged": run.converged,
            "status": run.status.value,
            "net_similarity": run.metadata.get("net_similarity"),
        }
        if cfg.compute_silhouette:
            entry["silhouette"] = silhouette_score_precomputed(labels, D)

        logger.debug(
            "self_divergence=%.6g -> %d clusters in %d iterations (%s)",
            self_divergence,
            run.n_clusters,
            run.n_iter,
            run.status.value,
        )
        by_self_divergence[f"{self_divergence:.6g}"] = entry

    return SweepResult(
        self_divergences=candidates,
        by_self_divergence=by_self_divergence,
        divergences=D,
    )
