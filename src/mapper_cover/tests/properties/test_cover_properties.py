"""Property-based tests for cover construction and intersection.

These tests use Hypothesis to check invariants that should hold for every
valid cover: symmetric intersection, containment of assigned points, and the
geometry of fixed overlapping grids.
"""

import hypothesis.extra.numpy as npst
import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mapper_cover.adjacency import valid_pairs
from mapper_cover.grid_bounds import fixed_grid_bounds, grid_index_set
from mapper_cover.intersection import cover_map
from mapper_cover.membership import UNASSIGNED, iso_aligned_level_sets, level_set_index

EPS = np.finfo(np.float64).eps

finite_coordinates = st.floats(
    min_value=-100.0, max_value=100.0, allow_nan=False, allow_infinity=False
)


@st.composite
def box_bounds(draw, n_dims, min_bins=0, max_bins=15):
    """Generate a bounds matrix of valid boxes, shape (n_bins, 2 * n_dims)."""
    n_bins = draw(st.integers(min_value=min_bins, max_value=max_bins))
    lower = draw(npst.arrays(np.float64, (n_bins, n_dims), elements=finite_coordinates))
    widths = draw(
        npst.arrays(
            np.float64,
            (n_bins, n_dims),
            elements=st.floats(min_value=0.0, max_value=50.0, allow_nan=False),
        )
    )
    return np.concatenate((lower, lower + widths), axis=1)


@st.composite
def cover_pair(draw, max_dims=3):
    """Two covers over the same filter space."""
    n_dims = draw(st.integers(min_value=1, max_value=max_dims))
    return draw(box_bounds(n_dims)), draw(box_bounds(n_dims))


@st.composite
def candidate_table(draw, max_bins=10, max_width=6):
    """A sentinel-padded table whose first column holds each row's own id."""
    n_bins = draw(st.integers(min_value=0, max_value=max_bins))
    width = draw(st.integers(min_value=0, max_value=max_width))
    candidates = draw(
        npst.arrays(
            np.int_,
            (n_bins, width),
            elements=st.integers(min_value=-1, max_value=max(n_bins - 1, 0)),
        )
    )
    return np.concatenate((np.arange(n_bins)[:, np.newaxis], candidates), axis=1)


@pytest.mark.property
class TestIntersectionProperties:
    @given(cover_pair())
    def test_intersection_is_symmetric(self, covers):
        """Property: swapping the covers transposes the pair list."""
        cover1, cover2 = covers
        forward = cover_map(cover1, cover2)
        backward = cover_map(cover2, cover1)[:, ::-1]
        order = np.lexsort((backward[:, 1], backward[:, 0]))
        np.testing.assert_array_equal(forward, backward[order])

    @given(cover_pair())
    def test_sorted_matches_brute_force(self, covers):
        """Property: endpoint pruning never changes the pair list."""
        cover1, cover2 = covers
        np.testing.assert_array_equal(
            cover_map(cover1, cover2, method="sorted"),
            cover_map(cover1, cover2, method="brute"),
        )

    @given(cover_pair())
    def test_pairs_really_intersect(self, covers):
        """Property: every reported pair overlaps in every dimension."""
        cover1, cover2 = covers
        n_dims = cover1.shape[1] // 2
        for i, j in cover_map(cover1, cover2):
            assert np.all(cover1[i, :n_dims] <= cover2[j, n_dims:])
            assert np.all(cover2[j, :n_dims] <= cover1[i, n_dims:])


@pytest.mark.property
class TestCompactionProperties:
    @given(candidate_table())
    def test_one_edge_per_non_sentinel_entry(self, table):
        """Property: compaction keeps exactly the non-sentinel candidates."""
        edges = valid_pairs(table)
        assert edges.shape == (np.count_nonzero(table[:, 1:] != -1), 2)
        assert not np.any(edges == -1)

    @given(candidate_table())
    def test_sources_are_row_ids_in_order(self, table):
        """Property: edge sources come from the id column, rows in order."""
        edges = valid_pairs(table)
        assert np.all(np.diff(edges[:, 0]) >= 0)
        assert set(edges[:, 0].tolist()) <= set(table[:, 0].tolist())


@pytest.mark.property
class TestMembershipProperties:
    @given(
        box_bounds(n_dims=2, min_bins=1),
        npst.arrays(np.float64, (20, 2), elements=finite_coordinates),
    )
    def test_assigned_points_lie_in_their_bin(self, bounds, points):
        """Property: an assigned point is inside its bin up to eps."""
        bin_ind = level_set_index(points, bounds)
        assigned = bin_ind != UNASSIGNED
        rows = bounds[bin_ind[assigned]]
        inside = points[assigned]
        assert np.all(inside >= rows[:, :2] - EPS)
        assert np.all(inside <= rows[:, 2:] + EPS)

    @given(
        box_bounds(n_dims=2, min_bins=1),
        npst.arrays(np.float64, (20, 2), elements=finite_coordinates),
    )
    def test_last_containing_bin_wins(self, bounds, points):
        """Property: a point gets the highest-numbered bin that contains it."""
        bin_ind = level_set_index(points, bounds)
        contains = np.all(
            (points[:, np.newaxis] >= bounds[np.newaxis, :, :2] - EPS)
            & (points[:, np.newaxis] <= bounds[np.newaxis, :, 2:] + EPS),
            axis=2,
        )
        expected = np.where(
            contains.any(axis=1),
            contains.shape[1] - 1 - np.argmax(contains[:, ::-1], axis=1),
            UNASSIGNED,
        )
        np.testing.assert_array_equal(bin_ind, expected)

    @given(
        box_bounds(n_dims=3),
        npst.arrays(np.float64, (10, 3), elements=finite_coordinates),
    )
    def test_saved_bounds_roundtrip(self, bounds, points):
        """Property: iso-aligned level sets keep their input bounds."""
        level_sets = iso_aligned_level_sets(points, bounds)
        assert len(level_sets) == len(bounds)
        for level_set, row in zip(level_sets, bounds):
            np.testing.assert_array_equal(level_set.bounds.bounds_row, row)


@pytest.mark.property
class TestFixedGridProperties:
    @given(
        overlap=st.floats(min_value=0.0, max_value=0.95),
        n_intervals=st.integers(min_value=2, max_value=12),
        filter_min=st.floats(min_value=-1e3, max_value=1e3),
        filter_len=st.floats(min_value=1e-2, max_value=1e3),
    )
    @settings(max_examples=50)
    def test_adjacent_bins_share_overlap_fraction(
        self, overlap, n_intervals, filter_min, filter_len
    ):
        """Property: adjacent bins overlap by exactly overlap * interval length."""
        bounds = fixed_grid_bounds(
            grid_index_set(n_intervals), overlap, n_intervals, filter_min, filter_len
        )
        interval_length = bounds[:, 1] - bounds[:, 0]
        shared = bounds[:-1, 1] - bounds[1:, 0]
        tolerance = 1e-9 * (abs(filter_min) + filter_len)
        np.testing.assert_allclose(
            shared, overlap * interval_length[:-1], rtol=1e-9, atol=tolerance
        )

    @given(
        overlap=st.floats(min_value=0.0, max_value=0.95),
        n_intervals=st.integers(min_value=1, max_value=12),
    )
    def test_grid_covers_filter_range(self, overlap, n_intervals):
        """Property: the union of bins spans [filter_min, filter_min + filter_len]."""
        bounds = fixed_grid_bounds(
            grid_index_set(n_intervals), overlap, n_intervals, 2.0, 5.0
        )
        assert bounds[0, 0] <= 2.0 + 1e-12
        assert bounds[-1, 1] >= 7.0 - 1e-12
        assert np.all(bounds[1:, 0] <= bounds[:-1, 1] + 1e-12)

    @given(st.lists(st.integers(min_value=1, max_value=5), min_size=1, max_size=3))
    def test_index_set_enumerates_grid(self, n_intervals):
        """Property: every grid coordinate appears exactly once."""
        index_set = grid_index_set(n_intervals)
        assert len(index_set) == np.prod(n_intervals)
        assert len(np.unique(index_set, axis=0)) == len(index_set)
        assert np.all(index_set < np.asarray(n_intervals))
