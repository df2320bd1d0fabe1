"""Shared test fixtures for mapper_cover tests.

This module provides:
1. Point clouds in one and two dimensional filter spaces
2. Small hand-checkable covers (disjoint and overlapping)
3. Assertion helpers for level sets
"""

import numpy as np
import pytest

from mapper_cover.grid_bounds import fixed_grid_bounds, grid_index_set


# ==============================================================================
# POINT CLOUDS
# ==============================================================================


@pytest.fixture
def points_1d():
    """Eleven evenly spaced points on [0, 10], shape (11, 1)."""
    return np.linspace(0.0, 10.0, 11)[:, np.newaxis]


@pytest.fixture
def points_2d():
    """200 reproducible points in the unit square, shape (200, 2)."""
    rng = np.random.default_rng(42)
    return rng.uniform(0.0, 1.0, size=(200, 2))


# ==============================================================================
# COVERS
# ==============================================================================


@pytest.fixture
def disjoint_bounds_1d():
    """Five touching unit bins on [0, 5], shape (5, 2)."""
    edges = np.arange(6, dtype=float)
    return np.stack((edges[:-1], edges[1:]), axis=1)


@pytest.fixture
def fixed_bounds_2d():
    """3 x 4 fixed grid with 25% overlap over the unit square."""
    n_intervals = np.array([3, 4])
    index_set = grid_index_set(n_intervals)
    return fixed_grid_bounds(index_set, 0.25, n_intervals, [0.0, 0.0], [1.0, 1.0])


# ==============================================================================
# ASSERTION HELPERS
# ==============================================================================


def brute_force_members(points, row):
    """Indices of the points inside a single bounds row, exact bounds."""
    n_dims = points.shape[1]
    lower, upper = row[:n_dims], row[n_dims:]
    return np.flatnonzero(np.all((points >= lower) & (points <= upper), axis=1))
