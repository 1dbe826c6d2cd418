"""
Shared fixtures for the knndist tests.

Most scenarios use cases placed on a line so the distances are easy to
read off by hand.
"""

import numpy as np
import pytest

from knndist import build_distance_matrix


@pytest.fixture
def line_points():
    """Four cases at positions 0, 1, 2 and 10."""
    return [0, 1, 2, 10]


@pytest.fixture
def line_dist(line_points):
    return build_distance_matrix(line_points)


@pytest.fixture
def wide_line_dist():
    """Cases at 0, 1, 2, 10 and 50; case 4 is a far-away extra training case."""
    return build_distance_matrix([0, 1, 2, 10, 50])


@pytest.fixture
def tied_line_dist():
    """Training cases at 2, 4 and 6 around a test case at 3 (index 3)."""
    return build_distance_matrix([2, 4, 6, 3])


@pytest.fixture
def random_points():
    rng = np.random.default_rng(0)
    return rng.normal(size=(30, 4))
