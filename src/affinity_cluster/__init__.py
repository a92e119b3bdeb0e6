"""
Affinity Cluster - Core Package

Exemplar clustering by message passing (Affinity Propagation) over any
item type with a pluggable divergence function.

This package provides:
- Divergence functions and similarity matrix construction
- The Affinity Propagation learner and a one-call wrapper
- A sweep over self-divergence values
- Environment-based configuration and logging helpers
"""

__version__ = "0.1.0"

from .algorithms import (
    AffinityPropagation,
    CentroidCluster,
    ClusteringResult,
    ClusteringStatus,
    SweepConfig,
    SweepResult,
    affinity_propagation,
    run_sweep,
)

__all__ = [
    "AffinityPropagation",
    "CentroidCluster",
    "ClusteringResult",
    "ClusteringStatus",
    "SweepConfig",
    "SweepResult",
    "affinity_propagation",
    "run_sweep",
]
