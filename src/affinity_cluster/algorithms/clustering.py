"""
Cluster records, clustering results and quality metrics.

Provides the exemplar-centred cluster record produced by Affinity
Propagation, the result container returned by a run, and a silhouette
score over a precomputed divergence matrix.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

UNASSIGNED = -1


class ClusteringStatus(str, Enum):
    """How a clustering run ended."""

    CONVERGED = "converged"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    STOPPED = "stopped"


@dataclass
class CentroidCluster:
    """A cluster represented by one of its own members (the exemplar)."""

    index: int
    exemplar: Any
    members: List[Any] = field(default_factory=list)
    member_indices: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.members)


def build_clusters(examples: Sequence[Any], assignments: np.ndarray) -> Dict[int, CentroidCluster]:
    """
    Group examples by their assigned exemplar.

    Clusters are created lazily the first time an exemplar index is seen;
    members accumulate in scan order 0..N-1, so dict order is first-seen
    order.

    Args:
        examples: Items indexed 0..N-1
        assignments: (N,) exemplar index per example

    Returns:
        Mapping from exemplar index to its cluster
    """
    clusters: Dict[int, CentroidCluster] = {}
    for i, exemplar_index in enumerate(assignments):
        k = int(exemplar_index)
        if k == UNASSIGNED:
            continue
        cluster = clusters.get(k)
        if cluster is None:
            cluster = CentroidCluster(index=k, exemplar=examples[k])
            clusters[k] = cluster
        cluster.members.append(examples[i])
        cluster.member_indices.append(i)
    return clusters


@dataclass
class ClusteringResult:
    """Result of a single Affinity Propagation run."""

    clusters: List[CentroidCluster]
    assignments: np.ndarray
    n_iter: int
    changed_count: int
    status: ClusteringStatus
    self_divergence: float
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        """Initialize metadata if None."""
        if self.metadata is None:
            self.metadata = {}

    @property
    def converged(self) -> bool:
        return self.status is ClusteringStatus.CONVERGED

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    @property
    def exemplar_indices(self) -> List[int]:
        return [cluster.index for cluster in self.clusters]

    @property
    def labels(self) -> np.ndarray:
        """Cluster ordinal (position in ``clusters``) for every example."""
        labels = np.full(len(self.assignments), UNASSIGNED, dtype=int)
        for ordinal, cluster in enumerate(self.clusters):
            labels[cluster.member_indices] = ordinal
        return labels


def silhouette_score_precomputed(labels: np.ndarray, dist: np.ndarray) -> float:
    """
    Compute silhouette score using precomputed distance matrix.

    Silhouette score measures how well-separated clusters are.
    Higher is better (range [-1, 1]). A single cluster scores 0.0.

    Args:
        labels: Cluster assignments
        dist: Precomputed distance matrix of shape (n_samples, n_samples)

    Returns:
        Mean silhouette score
    """
    labels = np.asarray(labels)
    n = len(labels)
    unique = np.unique(labels)
    if len(unique) <= 1:
        return 0.0

    sil = np.zeros(n, dtype=np.float64)
    for i in range(n):
        same_mask = labels == labels[i]
        same_count = same_mask.sum()
        if same_count <= 1:
            continue
        a = dist[i, same_mask].sum() / (same_count - 1)
        b = min(dist[i, labels == c].mean() for c in unique if c != labels[i])
        denom = max(a, b)
        sil[i] = (b - a) / denom if denom > 0 else 0.0
    return float(np.mean(sil))


def exemplar_net_similarity(
    similarities: np.ndarray, assignments: np.ndarray
) -> Optional[float]:
    """
    Net similarity of an assignment: ``sum_i S[i, assignments[i]]``.

    Self-assigned exemplars contribute their preference (the diagonal).
    Returns None if any point is unassigned.
    """
    assignments = np.asarray(assignments)
    if np.any(assignments == UNASSIGNED):
        return None
    return float(similarities[np.arange(len(assignments)), assignments].sum())
