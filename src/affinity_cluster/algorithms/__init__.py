"""
Algorithm Core Library - Affinity Propagation clustering.

This module provides the exemplar clustering engine, its building blocks
(divergences, similarity matrix, message updates) and a self-divergence
sweep. Designed for reuse and testing.
"""

from .divergence import (
    DIVERGENCES,
    DivergenceFunction,
    PrecomputedDivergence,
    cosine_distance,
    euclidean_distance,
    get_divergence,
    manhattan_distance,
    pairwise_divergences,
    squared_euclidean_distance,
)
from .similarity import (
    build_similarity_matrix,
    divergence_quantiles,
    median_divergence,
    similarity_from_divergences,
)
from .messages import update_assignments, update_availabilities, update_responsibilities
from .clustering import (
    CentroidCluster,
    ClusteringResult,
    ClusteringStatus,
    build_clusters,
    silhouette_score_precomputed,
)
from .affinity_propagation import (
    AffinityPropagation,
    IterationListener,
    LearnerState,
    affinity_propagation,
)
from .sweep import SweepConfig, SweepResult, run_sweep

__all__ = [
    # Divergences
    "DIVERGENCES",
    "DivergenceFunction",
    "PrecomputedDivergence",
    "cosine_distance",
    "euclidean_distance",
    "get_divergence",
    "manhattan_distance",
    "pairwise_divergences",
    "squared_euclidean_distance",
    # Similarity matrix
    "build_similarity_matrix",
    "divergence_quantiles",
    "median_divergence",
    "similarity_from_divergences",
    # Message passing
    "update_assignments",
    "update_availabilities",
    "update_responsibilities",
    # Clusters and results
    "CentroidCluster",
    "ClusteringResult",
    "ClusteringStatus",
    "build_clusters",
    "silhouette_score_precomputed",
    # Learner
    "AffinityPropagation",
    "IterationListener",
    "LearnerState",
    "affinity_propagation",
    # Sweep orchestration
    "SweepConfig",
    "SweepResult",
    "run_sweep",
]
