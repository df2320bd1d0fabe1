"""Tests for edge compaction and adjacency lists."""

import networkx as nx
import numpy as np
import pytest

from mapper_cover.adjacency import (
    adjacency_to_graph,
    candidates_to_rows,
    check_candidate_table,
    edgelist_to_adjacency,
    edgelist_to_sparse,
    rows_to_candidates,
    valid_pairs,
)
from mapper_cover.exceptions import MalformedCandidateTableError, ValidationError


@pytest.fixture
def candidate_table():
    return np.array(
        [
            [0, 1, 3, -1],
            [1, 2, -1, -1],
            [2, -1, -1, -1],
            [3, 0, 1, 2],
        ]
    )


@pytest.mark.unit
class TestValidPairs:
    def test_row_major_then_column_major(self, candidate_table):
        np.testing.assert_array_equal(
            valid_pairs(candidate_table),
            [[0, 1], [0, 3], [1, 2], [3, 0], [3, 1], [3, 2]],
        )

    def test_count_and_no_sentinel(self, candidate_table):
        edges = valid_pairs(candidate_table)
        assert len(edges) == np.count_nonzero(candidate_table[:, 1:] != -1)
        assert not np.any(edges == -1)

    def test_custom_sentinel(self):
        table = np.array([[0, 9, 1], [1, 0, 9]])
        np.testing.assert_array_equal(valid_pairs(table, sentinel=9), [[0, 1], [1, 0]])

    def test_nan_padding(self):
        table = np.array([[0.0, 1.0, np.nan], [1.0, np.nan, np.nan]])
        edges = valid_pairs(table, sentinel=np.nan)
        np.testing.assert_array_equal(edges, [[0, 1]])
        assert edges.dtype.kind == "i"

    @pytest.mark.parametrize("sentinel", [None, -1])
    def test_none_padding(self, sentinel):
        table = np.array([[0, 1, None], [1, None, None]], dtype=object)
        edges = valid_pairs(table, sentinel=sentinel)
        np.testing.assert_array_equal(edges, [[0, 1]])
        assert edges.dtype.kind == "i"

    def test_masked_table(self):
        table = np.ma.masked_array([[0, 1, 2]], mask=[[False, False, True]])
        np.testing.assert_array_equal(valid_pairs(table, sentinel=None), [[0, 1]])

    def test_no_candidates(self):
        assert valid_pairs(np.array([[0], [1]])).shape == (0, 2)

    def test_malformed_table(self):
        with pytest.raises(MalformedCandidateTableError):
            valid_pairs(np.array([0, 1, 2]))


@pytest.mark.unit
class TestCandidateRows:
    def test_rows_roundtrip(self, candidate_table):
        rows = candidates_to_rows(candidate_table)
        assert rows == [(0, [1, 3]), (1, [2]), (2, []), (3, [0, 1, 2])]
        np.testing.assert_array_equal(rows_to_candidates(rows), candidate_table)

    def test_rows_from_none_padded_table(self):
        table = np.array([[0, 2, 1], [1, None, None], [2, 0, None]], dtype=object)
        assert candidates_to_rows(table, sentinel=None) == [(0, [2, 1]), (1, []), (2, [0])]

    def test_rows_to_candidates_width(self):
        table = rows_to_candidates([(0, [1])], width=3)
        np.testing.assert_array_equal(table, [[0, 1, -1, -1]])

    def test_rows_to_candidates_width_too_small(self):
        with pytest.raises(ValidationError):
            rows_to_candidates([(0, [1, 2])], width=1)

    def test_check_candidate_table(self, candidate_table):
        check_candidate_table(candidate_table)
        with pytest.raises(MalformedCandidateTableError):
            check_candidate_table(candidate_table[::-1])

    def test_valid_pairs_does_not_check_own_ids(self, candidate_table):
        edges = valid_pairs(candidate_table[::-1])
        assert edges[0].tolist() == [3, 0]


@pytest.mark.unit
class TestAdjacency:
    def test_small_edge_list(self):
        assert edgelist_to_adjacency([(1, 2), (1, 3), (2, 3)]) == {1: [2, 3], 2: [3]}

    def test_keys_sorted_values_in_edge_order(self):
        adjacency = edgelist_to_adjacency([(5, 1), (2, 9), (5, 0), (2, 4)])
        assert list(adjacency) == [2, 5]
        assert adjacency == {2: [9, 4], 5: [1, 0]}

    def test_empty_edge_list(self):
        assert edgelist_to_adjacency(np.empty((0, 2), dtype=int)) == {}

    def test_compaction_pipeline(self, candidate_table):
        adjacency = edgelist_to_adjacency(valid_pairs(candidate_table))
        assert adjacency == {0: [1, 3], 1: [2], 3: [0, 1, 2]}
        assert 2 not in adjacency

    def test_graph_view(self):
        graph = adjacency_to_graph({0: [1, 2], 1: [2]}, n_bins=4)
        assert isinstance(graph, nx.Graph)
        assert set(graph.nodes) == {0, 1, 2, 3}
        assert graph.number_of_edges() == 3

    def test_directed_graph_view(self):
        graph = adjacency_to_graph({0: [1], 1: [0]}, directed=True)
        assert isinstance(graph, nx.DiGraph)
        assert graph.number_of_edges() == 2

    def test_sparse_view(self):
        matrix = edgelist_to_sparse([(0, 1), (0, 1), (2, 0)], n_bins=3)
        np.testing.assert_array_equal(
            matrix.toarray(),
            [[False, True, False], [False, False, False], [True, False, False]],
        )

    def test_sparse_view_out_of_range(self):
        with pytest.raises(ValidationError):
            edgelist_to_sparse([(0, 3)], n_bins=3)
