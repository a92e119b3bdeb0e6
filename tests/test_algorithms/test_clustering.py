"""
Tests for cluster records, results and quality metrics.
"""

import numpy as np
import pytest

from affinity_cluster.algorithms.clustering import (
    CentroidCluster,
    ClusteringResult,
    ClusteringStatus,
    build_clusters,
    exemplar_net_similarity,
    silhouette_score_precomputed,
)


# ------------------------------------------------------------------
# build_clusters
# ------------------------------------------------------------------


def test_build_clusters_first_seen_order():
    """Clusters appear in the order their exemplar is first chosen."""
    examples = ["a", "b", "c", "d", "e"]
    assignments = np.array([3, 3, 1, 3, 1])

    clusters = build_clusters(examples, assignments)

    assert list(clusters) == [3, 1]
    assert clusters[3].exemplar == "d"
    assert clusters[3].members == ["a", "b", "d"]
    assert clusters[3].member_indices == [0, 1, 3]
    assert clusters[1].exemplar == "b"
    assert clusters[1].members == ["c", "e"]
    assert len(clusters[1]) == 2


def test_build_clusters_partition():
    """Every example lands in exactly one cluster."""
    rng = np.random.default_rng(3)
    assignments = rng.integers(0, 10, size=40)
    examples = list(range(40))

    clusters = build_clusters(examples, assignments)

    members = sorted(i for c in clusters.values() for i in c.member_indices)
    assert members == examples


def test_build_clusters_skips_unassigned():
    clusters = build_clusters(["a", "b"], np.array([-1, -1]))
    assert clusters == {}


# ------------------------------------------------------------------
# ClusteringResult
# ------------------------------------------------------------------


def test_clustering_result_properties():
    clusters = [
        CentroidCluster(index=2, exemplar="c", members=["a", "c"], member_indices=[0, 2]),
        CentroidCluster(index=1, exemplar="b", members=["b"], member_indices=[1]),
    ]
    result = ClusteringResult(
        clusters=clusters,
        assignments=np.array([2, 1, 2]),
        n_iter=4,
        changed_count=0,
        status=ClusteringStatus.CONVERGED,
        self_divergence=1.0,
    )

    assert result.converged
    assert result.n_clusters == 2
    assert result.exemplar_indices == [2, 1]
    np.testing.assert_array_equal(result.labels, [0, 1, 0])
    assert result.metadata == {}


def test_clustering_result_not_converged():
    result = ClusteringResult(
        clusters=[],
        assignments=np.array([], dtype=int),
        n_iter=100,
        changed_count=3,
        status=ClusteringStatus.MAX_ITERATIONS_REACHED,
        self_divergence=0.0,
    )
    assert not result.converged
    assert result.n_clusters == 0


# ------------------------------------------------------------------
# Metrics
# ------------------------------------------------------------------


def test_silhouette_score_precomputed():
    """Test silhouette score with precomputed distances."""
    points = np.array([[0.0], [0.1], [5.0], [5.1]])
    dist = np.abs(points - points.T)
    labels = np.array([0, 0, 1, 1])

    score = silhouette_score_precomputed(labels, dist)

    assert -1 <= score <= 1
    assert score > 0.9


def test_silhouette_single_cluster_is_zero():
    dist = np.ones((3, 3)) - np.eye(3)
    assert silhouette_score_precomputed(np.zeros(3, dtype=int), dist) == 0.0


def test_silhouette_singletons_score_zero():
    """Points alone in their cluster contribute 0."""
    dist = np.array([[0.0, 1.0], [1.0, 0.0]])
    assert silhouette_score_precomputed(np.array([0, 1]), dist) == 0.0


def test_exemplar_net_similarity():
    S = np.array([
        [-2.0, -1.0, -9.0],
        [-1.0, -2.0, -9.0],
        [-9.0, -9.0, -2.0],
    ])
    assert exemplar_net_similarity(S, np.array([1, 1, 2])) == pytest.approx(-5.0)
    assert exemplar_net_similarity(S, np.array([1, -1, 2])) is None
