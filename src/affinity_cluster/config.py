"""
Configuration management for Affinity Cluster.

Loads configuration from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from affinity_cluster.config import config

    # Clustering defaults
    damping = config.clustering.damping_factor

    # Logging
    level = config.log_level
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


@dataclass
class ClusteringConfig:
    """Default parameters for an Affinity Propagation run."""
    damping_factor: float = 0.5
    max_iterations: int = 100
    convergence_iterations: int = 1
    self_divergence: Optional[float] = None

    def __post_init__(self):
        """Validate ranges."""
        if not 0.0 <= self.damping_factor <= 1.0:
            raise ValueError(
                f"damping_factor must be between 0.0 and 1.0, got {self.damping_factor}"
            )
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.convergence_iterations < 1:
            raise ValueError(
                f"convergence_iterations must be >= 1, got {self.convergence_iterations}"
            )


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.clustering = ClusteringConfig(
            damping_factor=_env_float("AFFINITY_DAMPING_FACTOR", 0.5),
            max_iterations=_env_int("AFFINITY_MAX_ITERATIONS", 100),
            convergence_iterations=_env_int("AFFINITY_CONVERGENCE_ITERATIONS", 1),
            self_divergence=_env_float("AFFINITY_SELF_DIVERGENCE", None),
        )
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()


# Global config instance
config = Config()
