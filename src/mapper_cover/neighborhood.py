"""
Candidate neighbors of the bins of a fixed overlapping grid.

On a fixed grid, two bins whose grid coordinates differ by ``k`` along a
dimension intersect along it exactly when ``k * base_length`` does not exceed
the overlapped interval length. The largest admissible ``k`` depends only on
the overlap fraction, so the pairs of bins that can intersect are known from
the grid structure alone, before any point is binned.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from mapper_cover._validation import as_n_intervals, ensure_overlap_fraction
from mapper_cover.adjacency import rows_to_candidates
from mapper_cover.grid_bounds import grid_index_set


def max_index_deviation(overlap: Any, n_intervals: Any) -> NDArray[np.int_]:
    """
    Largest grid-coordinate difference at which fixed-grid bins still intersect.

    Parameters
    ----------
    overlap : float or array_like, shape (n_dims,)
        Overlap fraction in ``[0, 1)``.
    n_intervals : int or array_like, shape (n_dims,)

    Returns
    -------
    max_dev : NDArray[np.int_], shape (n_dims,)

    Examples
    --------
    >>> max_index_deviation(0.0, 5)
    array([1])
    >>> max_index_deviation(0.6, 5)
    array([2])
    """
    n_intervals = np.atleast_1d(n_intervals)
    n_dims = n_intervals.size
    n_intervals = as_n_intervals(n_intervals, n_dims)
    overlap = ensure_overlap_fraction(overlap, n_dims)

    # In units of the base interval length
    interval_length = 1.0 + overlap / (1.0 - overlap)
    max_dev = np.empty(n_dims, dtype=np.int_)
    for dim_ind in range(n_dims):
        critical_dist = 1.0 + np.arange(1, n_intervals[dim_ind])
        max_dev[dim_ind] = (
            np.searchsorted(critical_dist, interval_length[dim_ind], side="right") + 1
        )
    return max_dev


def fixed_cover_neighborhood(overlap: Any, n_intervals: Any) -> NDArray[np.int_]:
    """
    Pairs of fixed-grid bins that may intersect.

    Bins are numbered as in :func:`~mapper_cover.grid_bounds.grid_index_set`.

    Parameters
    ----------
    overlap : float or array_like, shape (n_dims,)
    n_intervals : int or array_like, shape (n_dims,)

    Returns
    -------
    pairs : NDArray[np.int_], shape (n_pairs, 2)
        0-based ``(i, j)`` rows with ``i < j`` in lexicographic order.

    Examples
    --------
    >>> fixed_cover_neighborhood(0.2, 3).tolist()
    [[0, 1], [1, 2]]
    """
    index_set = grid_index_set(n_intervals)
    max_dev = max_index_deviation(overlap, n_intervals)

    from_ind, to_ind = np.triu_indices(index_set.shape[0], k=1)
    deviation = np.abs(index_set[from_ind] - index_set[to_ind])
    is_neighbor = np.all(deviation <= max_dev, axis=1)
    return np.stack((from_ind[is_neighbor], to_ind[is_neighbor]), axis=1).astype(
        np.int_
    )


def neighborhood_candidate_table(
    pairs: Any, n_bins: int, sentinel: int = -1
) -> NDArray[np.int_]:
    """
    Arrange neighbor pairs as a sentinel-padded candidate table.

    Row ``i`` holds ``i`` followed by the ``j`` of every pair ``(i, j)``, in
    pair order, padded with ``sentinel`` to the width of the longest row.
    """
    pairs = np.asarray(pairs, dtype=np.int_).reshape(-1, 2)
    rows = [(bin_id, []) for bin_id in range(n_bins)]
    for from_ind, to_ind in pairs.tolist():
        rows[from_ind][1].append(to_ind)
    return rows_to_candidates(rows, sentinel=sentinel)
