"""
Command-line driver: cluster the rows of a numeric CSV file.

Usage:
    affinity-cluster points.csv --metric sqeuclidean --self-divergence 15.5
    affinity-cluster points.csv --quantile 0.5 --damping 0.7
    affinity-cluster points.csv --sweep

Prints a JSON document to stdout; progress goes to the log on stderr.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

import numpy as np

from .algorithms import (
    DIVERGENCES,
    AffinityPropagation,
    PrecomputedDivergence,
    SweepConfig,
    divergence_quantiles,
    get_divergence,
    median_divergence,
    pairwise_divergences,
    run_sweep,
)
from .config import config
from .utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def load_points(path: str) -> np.ndarray:
    """Load a comma-separated numeric file as an (n_points, n_dims) array."""
    points = np.loadtxt(path, delimiter=",", dtype=np.float64, ndmin=2)
    return points


def build_parser() -> argparse.ArgumentParser:
    defaults = config.clustering
    parser = argparse.ArgumentParser(
        prog="affinity-cluster",
        description="Cluster the rows of a CSV file with Affinity Propagation.",
    )
    parser.add_argument("input", help="CSV file with one numeric row per point")
    parser.add_argument(
        "--metric",
        choices=sorted(DIVERGENCES),
        default="euclidean",
        help="Divergence between points (default: euclidean)",
    )
    choice = parser.add_mutually_exclusive_group()
    choice.add_argument(
        "--self-divergence",
        type=float,
        default=defaults.self_divergence,
        help="Self-divergence; smaller values give more clusters (default: median divergence)",
    )
    choice.add_argument(
        "--quantile",
        type=float,
        help="Use this quantile of the pairwise divergences as self-divergence",
    )
    parser.add_argument("--damping", type=float, default=defaults.damping_factor,
                        help=f"Damping factor in [0, 1] (default: {defaults.damping_factor})")
    parser.add_argument("--max-iterations", type=int, default=defaults.max_iterations,
                        help=f"Iteration limit (default: {defaults.max_iterations})")
    parser.add_argument("--convergence-iterations", type=int, default=defaults.convergence_iterations,
                        help=f"Unchanged steps needed to converge (default: {defaults.convergence_iterations})")
    parser.add_argument("--sweep", action="store_true",
                        help="Sweep self-divergence over divergence quantiles instead of a single run")
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")
    return parser


def _cluster(points: np.ndarray, args: argparse.Namespace) -> Dict[str, Any]:
    divergence = get_divergence(args.metric)
    rows = list(points)

    self_divergence = args.self_divergence
    if args.quantile is not None or self_divergence is None:
        # Derived self-divergences need every divergence; cluster row indices
        # over that matrix instead of evaluating it a second time
        D = pairwise_divergences(rows, divergence)
        if args.quantile is not None:
            self_divergence = divergence_quantiles(D, [args.quantile])[0]
            logger.info("Using the %.2f quantile divergence %.6g as self-divergence", args.quantile, self_divergence)
        else:
            self_divergence = median_divergence(D)
            logger.info("Using median divergence %.6g as self-divergence", self_divergence)
        divergence = PrecomputedDivergence(D)
        rows = list(range(len(points)))

    learner = AffinityPropagation(
        divergence,
        self_divergence=self_divergence,
        damping_factor=args.damping,
        max_iterations=args.max_iterations,
        convergence_iterations=args.convergence_iterations,
    )
    result = learner.learn(rows)
    if result is None:
        return {"clusters": [], "n_clusters": 0}
    return {
        "self_divergence": result.self_divergence,
        "n_clusters": result.n_clusters,
        "n_iter": result.n_iter,
        "converged": result.converged,
        "status": result.status.value,
        "clusters": [
            {
                "exemplar_index": cluster.index,
                "exemplar": points[cluster.index].tolist(),
                "member_indices": cluster.member_indices,
            }
            for cluster in result.clusters
        ],
        "labels": result.labels.tolist(),
    }


def _sweep(points: np.ndarray, args: argparse.Namespace) -> Dict[str, Any]:
    cfg = SweepConfig(
        damping_factor=args.damping,
        max_iterations=args.max_iterations,
        convergence_iterations=args.convergence_iterations,
    )
    result = run_sweep(list(points), get_divergence(args.metric), cfg)
    runs: List[Dict[str, Any]] = []
    for entry in result.by_self_divergence.values():
        runs.append({
            "self_divergence": entry["self_divergence"],
            "n_clusters": entry["n_clusters"],
            "exemplar_indices": entry["exemplar_indices"],
            "n_iter": entry["n_iter"],
            "converged": entry["converged"],
            "silhouette": entry.get("silhouette"),
        })
    best = result.best()
    return {
        "runs": runs,
        "best_self_divergence": None if best is None else best["self_divergence"],
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        points = load_points(args.input)
    except (OSError, ValueError) as e:
        logger.error("Could not read %s: %s", args.input, e)
        return 1

    try:
        output = _sweep(points, args) if args.sweep else _cluster(points, args)
    except ValueError as e:
        logger.error("Clustering failed: %s", e)
        return 2

    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
