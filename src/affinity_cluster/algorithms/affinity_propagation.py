"""
Affinity Propagation clustering.

Clusters items by passing "responsibility" and "availability" messages
between every pair of points until each point settles on an exemplar.

Reference: Brendan J. Frey and Delbert Dueck, "Clustering by Passing
Messages Between Data Points", Science 315 (5814), 972-976, 2007.

Typical use::

    learner = AffinityPropagation(euclidean_distance, self_divergence=4.0)
    result = learner.learn(points)
    for cluster in result.clusters:
        print(cluster.exemplar, len(cluster.members))
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Protocol, runtime_checkable

import numpy as np

from ..utils.logging_config import get_logger
from .clustering import (
    UNASSIGNED,
    CentroidCluster,
    ClusteringResult,
    ClusteringStatus,
    build_clusters,
    exemplar_net_similarity,
)
from .divergence import DivergenceFunction, PrecomputedDivergence, pairwise_divergences
from .messages import update_assignments, update_availabilities, update_responsibilities
from .similarity import median_divergence, similarity_from_divergences

logger = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 100
DEFAULT_SELF_DIVERGENCE = 0.0
DEFAULT_DAMPING_FACTOR = 0.5
DEFAULT_CONVERGENCE_ITERATIONS = 1


class LearnerState(str, Enum):
    """Lifecycle of a single clustering run."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERATIONS_REACHED = "max_iterations_reached"
    DONE = "done"


class NamedValue(NamedTuple):
    name: str
    value: Any


@runtime_checkable
class IterationListener(Protocol):
    """Observer notified between the steps of a run."""

    def algorithm_started(self, learner: "AffinityPropagation") -> None: ...
    def step_started(self, learner: "AffinityPropagation") -> None: ...
    def step_ended(self, learner: "AffinityPropagation") -> None: ...
    def algorithm_ended(self, learner: "AffinityPropagation") -> None: ...


class AffinityPropagation:
    """
    Exemplar clustering by damped message passing.

    The run is a small state machine (see ``LearnerState``):
    ``initialize()`` builds the similarity matrix, each ``step()`` updates
    responsibilities, then availabilities, then assignments, and
    ``cleanup()`` releases the matrices. ``learn()`` drives the whole
    sequence, stopping when no assignment changed for
    ``convergence_iterations`` consecutive steps or when
    ``max_iterations`` steps have run.

    Args:
        divergence: ``(item, item) -> float`` callable; lower is more alike
        self_divergence: Divergence of each point with itself. Smaller
            values produce more clusters.
        damping_factor: Weight given to the previous message value, in [0, 1]
        max_iterations: Upper bound on the number of steps
        convergence_iterations: Consecutive unchanged steps required to
            declare convergence
        symmetric: Evaluate only half of the divergence pairs
    """

    def __init__(
        self,
        divergence: Optional[DivergenceFunction] = None,
        self_divergence: float = DEFAULT_SELF_DIVERGENCE,
        damping_factor: float = DEFAULT_DAMPING_FACTOR,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        convergence_iterations: int = DEFAULT_CONVERGENCE_ITERATIONS,
        *,
        symmetric: bool = False,
        listeners: Optional[Iterable[IterationListener]] = None,
    ):
        self.divergence = divergence
        self.self_divergence = self_divergence
        self.damping_factor = damping_factor
        self.max_iterations = max_iterations
        self.convergence_iterations = convergence_iterations
        self.symmetric = symmetric
        self._listeners: List[IterationListener] = list(listeners or [])
        self._stop_requested = False
        self._reset_run_state()

    @classmethod
    def from_config(cls, clustering_config, divergence: Optional[DivergenceFunction] = None, **kwargs):
        """
        Build a learner from a ``ClusteringConfig``.

        An unset ``self_divergence`` in the config keeps the class default.
        """
        self_divergence = clustering_config.self_divergence
        if self_divergence is None:
            self_divergence = DEFAULT_SELF_DIVERGENCE
        return cls(
            divergence,
            self_divergence=self_divergence,
            damping_factor=clustering_config.damping_factor,
            max_iterations=clustering_config.max_iterations,
            convergence_iterations=clustering_config.convergence_iterations,
            **kwargs,
        )

    def _reset_run_state(self) -> None:
        self._state = LearnerState.UNINITIALIZED
        self._status: Optional[ClusteringStatus] = None
        self._iteration = 0
        self._stable_steps = 0
        self.examples: Optional[List[Any]] = None
        self.similarities: Optional[np.ndarray] = None
        self.responsibilities: Optional[np.ndarray] = None
        self.availabilities: Optional[np.ndarray] = None
        self.assignments: Optional[np.ndarray] = None
        self.changed_count = 0
        self._clusters: Optional[Dict[int, CentroidCluster]] = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def damping_factor(self) -> float:
        return self._damping_factor

    @damping_factor.setter
    def damping_factor(self, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"The damping factor must be between 0.0 and 1.0, got {value}")
        self._damping_factor = float(value)

    @property
    def self_divergence(self) -> float:
        return self._self_divergence

    @self_divergence.setter
    def self_divergence(self, value: float) -> None:
        value = float(value)
        if not np.isfinite(value):
            raise ValueError(f"self_divergence must be finite, got {value}")
        self._self_divergence = value

    @property
    def max_iterations(self) -> int:
        return self._max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"max_iterations must be >= 1, got {value}")
        self._max_iterations = int(value)

    @property
    def convergence_iterations(self) -> int:
        return self._convergence_iterations

    @convergence_iterations.setter
    def convergence_iterations(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"convergence_iterations must be >= 1, got {value}")
        self._convergence_iterations = int(value)

    def add_listener(self, listener: IterationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: IterationListener) -> None:
        self._listeners.remove(listener)

    @property
    def listeners(self) -> List[IterationListener]:
        return list(self._listeners)

    # ------------------------------------------------------------------
    # Observable run state
    # ------------------------------------------------------------------

    @property
    def state(self) -> LearnerState:
        return self._state

    @property
    def status(self) -> Optional[ClusteringStatus]:
        """Outcome of the last finished run, None while running or before."""
        return self._status

    @property
    def converged(self) -> bool:
        return self._status is ClusteringStatus.CONVERGED

    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def example_count(self) -> int:
        return 0 if self.examples is None else len(self.examples)

    @property
    def clusters(self) -> Optional[Dict[int, CentroidCluster]]:
        return self._clusters

    @property
    def performance(self) -> NamedValue:
        """Progress observable: assignments changed in the last step."""
        return NamedValue("number changed", self.changed_count)

    def get_result(self) -> Optional[List[CentroidCluster]]:
        """Current clusters in first-seen order, or None before any step."""
        if self._clusters is None:
            return None
        return list(self._clusters.values())

    # ------------------------------------------------------------------
    # Algorithm
    # ------------------------------------------------------------------

    def learn(self, data: Optional[Iterable[Any]]) -> Optional[ClusteringResult]:
        """
        Cluster *data* from scratch.

        Returns:
            ClusteringResult, or None when *data* is empty or None
        """
        # Reset before algorithm_started so a stop() issued there is kept
        self._stop_requested = False
        self._reset_run_state()
        self._fire("algorithm_started")
        try:
            if not self.initialize(data):
                logger.warning("Affinity propagation received no examples; nothing to cluster")
                return None

            keep_going = True
            while (
                keep_going
                and not self._stop_requested
                and self._iteration < self.max_iterations
            ):
                self._fire("step_started")
                keep_going = self.step()
                self._fire("step_ended")

            if keep_going:
                if self._stop_requested:
                    self._status = ClusteringStatus.STOPPED
                    logger.info("Affinity propagation stopped on request after %d iterations", self._iteration)
                else:
                    self._status = ClusteringStatus.MAX_ITERATIONS_REACHED
                    self._state = LearnerState.MAX_ITERATIONS_REACHED
                    logger.warning(
                        "Affinity propagation did not converge in %d iterations (%d assignments changed in the last one)",
                        self.max_iterations,
                        self.changed_count,
                    )

            result = self._build_result()
            self.cleanup()
            logger.info(
                "Affinity propagation finished: %d examples, %d clusters, %d iterations, status=%s",
                len(result.assignments),
                result.n_clusters,
                result.n_iter,
                result.status.value,
            )
            return result
        finally:
            self._fire("algorithm_ended")

    def initialize(self, data: Optional[Iterable[Any]]) -> bool:
        """
        Prepare a run: copy the examples and build the similarity matrix.

        Returns:
            False if there is nothing to cluster, True when ready to step

        Raises:
            ValueError: If no divergence is set or a divergence is not finite
        """
        self._reset_run_state()
        examples = [] if data is None else list(data)
        if not examples:
            return False
        if self.divergence is None:
            raise ValueError("A divergence function must be set before clustering")

        n = len(examples)
        divergences = pairwise_divergences(examples, self.divergence, symmetric=self.symmetric)
        self.examples = examples
        self.similarities = similarity_from_divergences(divergences, self.self_divergence)
        self.responsibilities = np.zeros((n, n), dtype=np.float64)
        self.availabilities = np.zeros((n, n), dtype=np.float64)
        self.assignments = np.full(n, UNASSIGNED, dtype=int)
        self.changed_count = n
        self._clusters = {}
        self._state = LearnerState.READY
        logger.debug("Initialized affinity propagation over %d examples", n)
        return True

    def step(self) -> bool:
        """
        Run one full iteration.

        Returns:
            True if the run should keep going, False once converged

        Raises:
            RuntimeError: If called before a successful ``initialize()``
        """
        if self.similarities is None:
            raise RuntimeError("initialize() must succeed before step() is called")

        self._state = LearnerState.ITERATING
        self._iteration += 1
        self.update_responsibilities()
        self.update_availabilities()
        self.update_assignments()

        if self.changed_count == 0:
            self._stable_steps += 1
        else:
            self._stable_steps = 0
        logger.debug(
            "Iteration %d: %d assignments changed, %d clusters",
            self._iteration,
            self.changed_count,
            len(self._clusters),
        )

        if self._stable_steps >= self.convergence_iterations:
            self._state = LearnerState.CONVERGED
            self._status = ClusteringStatus.CONVERGED
            return False
        return True

    def update_responsibilities(self) -> None:
        update_responsibilities(
            self.similarities, self.availabilities, self.responsibilities, self.damping_factor
        )

    def update_availabilities(self) -> None:
        update_availabilities(self.responsibilities, self.availabilities, self.damping_factor)

    def update_assignments(self) -> None:
        """Reassign every example and rebuild the clusters."""
        self.changed_count = update_assignments(
            self.availabilities, self.responsibilities, self.assignments
        )
        self._clusters = build_clusters(self.examples, self.assignments)

    def stop(self) -> None:
        """Ask a running ``learn()`` to finish after the current step."""
        self._stop_requested = True

    def cleanup(self) -> None:
        """Release the examples and matrices; keep assignments and clusters."""
        self.examples = None
        self.similarities = None
        self.responsibilities = None
        self.availabilities = None
        self._state = LearnerState.DONE

    def _build_result(self) -> ClusteringResult:
        net_similarity = None
        if self.similarities is not None:
            net_similarity = exemplar_net_similarity(self.similarities, self.assignments)
        return ClusteringResult(
            clusters=self.get_result() or [],
            assignments=self.assignments.copy(),
            n_iter=self._iteration,
            changed_count=self.changed_count,
            status=self._status,
            self_divergence=self.self_divergence,
            metadata={
                "damping_factor": self.damping_factor,
                "max_iterations": self.max_iterations,
                "convergence_iterations": self.convergence_iterations,
                "net_similarity": net_similarity,
            },
        )

    def _fire(self, event: str) -> None:
        for listener in list(self._listeners):
            getattr(listener, event)(self)

    # ------------------------------------------------------------------
    # Copying
    # ------------------------------------------------------------------

    def clone(self) -> "AffinityPropagation":
        """
        Independent copy of the configuration.

        The divergence is deep-copied; run state (examples, matrices,
        assignments, clusters) is not carried over.
        """
        result = copy.copy(self)
        result.divergence = copy.deepcopy(self.divergence)
        result._listeners = list(self._listeners)
        result._stop_requested = False
        result._reset_run_state()
        return result


def affinity_propagation(
    examples: Iterable[Any],
    divergence: DivergenceFunction,
    *,
    self_divergence: Optional[float] = None,
    damping_factor: float = DEFAULT_DAMPING_FACTOR,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    convergence_iterations: int = DEFAULT_CONVERGENCE_ITERATIONS,
    symmetric: bool = False,
) -> Optional[ClusteringResult]:
    """
    Cluster *examples* with Affinity Propagation in one call.

    Args:
        examples: Items to cluster
        divergence: ``(item, item) -> float`` callable
        self_divergence: Diagonal parameter; None uses the median divergence
        damping_factor: Message damping in [0, 1]
        max_iterations: Upper bound on iterations
        convergence_iterations: Consecutive unchanged steps for convergence
        symmetric: Evaluate only half of the divergence pairs

    Returns:
        ClusteringResult, or None when *examples* is empty
    """
    examples = list(examples)
    if self_divergence is not None or not examples:
        learner = AffinityPropagation(
            divergence,
            self_divergence=DEFAULT_SELF_DIVERGENCE if self_divergence is None else self_divergence,
            damping_factor=damping_factor,
            max_iterations=max_iterations,
            convergence_iterations=convergence_iterations,
            symmetric=symmetric,
        )
        return learner.learn(examples)

    # The median needs every divergence; cluster over the same matrix
    D = pairwise_divergences(examples, divergence, symmetric=symmetric)
    self_divergence = median_divergence(D)
    logger.info("Using median divergence %.6g as self-divergence", self_divergence)

    learner = AffinityPropagation(
        PrecomputedDivergence(D),
        self_divergence=self_divergence,
        damping_factor=damping_factor,
        max_iterations=max_iterations,
        convergence_iterations=convergence_iterations,
    )
    result = learner.learn(range(len(examples)))
    result.clusters = list(build_clusters(examples, result.assignments).values())
    return result
