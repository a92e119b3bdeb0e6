"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest


@pytest.fixture
def two_groups():
    """
    Two tight vertical triples ten units apart.

    The middle point of each triple is the natural exemplar.
    """
    return [
        np.array([0.0, 0.0]),
        np.array([0.0, 1.0]),
        np.array([0.0, 2.0]),
        np.array([10.0, 0.0]),
        np.array([10.0, 1.0]),
        np.array([10.0, 2.0]),
    ]


@pytest.fixture
def three_blobs():
    """
    25 two-dimensional points in three loose groups.

    With squared Euclidean divergence, self-divergence 15.561256 and
    damping 0.5, points 2, 6 and 19 become exemplars of 9, 8 and 8 members.
    """
    data = [
        (-2.341500, 3.696800),
        (-1.109200, 3.111700),
        (-1.566900, 1.835100),
        (-2.658500, 0.664900),
        (-4.031700, 2.845700),
        (-3.081000, 2.101100),
        (2.588000, 1.781900),
        (3.292300, 3.058500),
        (4.031700, 1.622300),
        (3.081000, -0.611700),
        (0.264100, 0.398900),
        (1.320400, 2.207400),
        (0.193700, 3.643600),
        (1.954200, -0.505300),
        (1.637300, 1.409600),
        (-0.123200, -1.516000),
        (-1.355600, -3.058500),
        (0.017600, -4.016000),
        (1.003500, -3.590400),
        (0.017600, -2.420200),
        (-1.531700, -0.930900),
        (-1.144400, 0.505300),
        (0.616200, -1.516000),
        (1.707700, -2.207400),
        (2.095100, 3.430900),
    ]
    return [np.array(p) for p in data]


@pytest.fixture
def random_matrices():
    """Random similarity, availability and responsibility matrices (N=7)."""
    rng = np.random.default_rng(42)
    n = 7
    S = -rng.random((n, n)) * 10
    A = np.minimum(rng.standard_normal((n, n)), 0.0)
    R = rng.standard_normal((n, n))
    return S, A, R
