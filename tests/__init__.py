"""
Test suite for Affinity Cluster.

This package contains all tests organized by component:
- test_algorithms/: Divergences, message passing, the learner and sweeps
- test_utils/: Logging helpers
- test_config.py, test_cli.py: Configuration and the command-line driver
"""
