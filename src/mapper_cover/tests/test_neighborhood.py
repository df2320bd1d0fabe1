import numpy as np
import pytest

from mapper_cover.adjacency import valid_pairs
from mapper_cover.exceptions import InvalidGridParameterError
from mapper_cover.grid_bounds import fixed_grid_bounds, grid_index_set
from mapper_cover.intersection import cover_map
from mapper_cover.neighborhood import (
    fixed_cover_neighborhood,
    max_index_deviation,
    neighborhood_candidate_table,
)


@pytest.mark.parametrize(
    "overlap, expected",
    [(0.0, 1), (0.2, 1), (0.55, 2), (0.7, 3), (0.9, 6)],
)
def test_max_index_deviation(overlap, expected):
    """Interval length is 1 / (1 - overlap) base lengths."""
    assert max_index_deviation(overlap, 6)[0] == expected


def test_max_index_deviation_per_dimension():
    np.testing.assert_array_equal(max_index_deviation([0.0, 0.6], [3, 8]), [1, 2])


@pytest.mark.parametrize("overlap", [0.0, 0.3, 0.6])
@pytest.mark.parametrize("n_intervals", [[4], [3, 3], [2, 4]])
def test_neighborhood_covers_all_intersecting_pairs(overlap, n_intervals):
    """Every pair of distinct bins that intersects is a candidate neighbor."""
    index_set = grid_index_set(n_intervals)
    n_dims = len(n_intervals)
    bounds = fixed_grid_bounds(
        index_set, overlap, n_intervals, np.zeros(n_dims), np.ones(n_dims)
    )
    pairs = cover_map(bounds, bounds)
    intersecting = {tuple(p) for p in pairs.tolist() if p[0] < p[1]}
    candidates = {tuple(p) for p in fixed_cover_neighborhood(overlap, n_intervals).tolist()}
    assert intersecting <= candidates


def test_neighborhood_lexicographic_order():
    pairs = fixed_cover_neighborhood(0.0, [2, 2])
    np.testing.assert_array_equal(
        pairs, [[0, 1], [0, 2], [0, 3], [1, 2], [1, 3], [2, 3]]
    )


def test_candidate_table_roundtrip():
    pairs = fixed_cover_neighborhood(0.2, 4)
    table = neighborhood_candidate_table(pairs, n_bins=4)
    np.testing.assert_array_equal(table, [[0, 1], [1, 2], [2, 3], [3, -1]])
    np.testing.assert_array_equal(valid_pairs(table), pairs)


def test_invalid_overlap():
    with pytest.raises(InvalidGridParameterError):
        fixed_cover_neighborhood(1.0, 4)
