"""
Derive bin boxes from compact grid parameters.

Two grid flavors are supported:

- **Fixed overlapping grid** (:func:`fixed_grid_bounds`). The filter range of
  each dimension is split into ``n_intervals`` base intervals of length
  ``base_length = filter_len / n_intervals``. Every bin is centered on its base
  interval and widened to ``base_length / (1 - overlap)`` so that two
  grid-adjacent bins share exactly ``overlap`` of their length.
- **Restrained grid** (:func:`restrained_grid_bounds`). Bins start at
  ``filter_min + grid_coord * step_size`` and have an explicit
  ``interval_length``. Step and length are independent, which lets an external
  refinement policy tune them freely.

The ``*_level_sets`` functions fold membership into the same pass and return
one :class:`~mapper_cover.membership.LevelSet` per grid coordinate.

Grid coordinates are 0-based.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any

import numpy as np
from numpy.typing import NDArray

from mapper_cover._validation import (
    as_index_set,
    as_n_intervals,
    as_points,
    broadcast_to_dims,
    ensure_all_finite,
    ensure_matching_dimensions,
    ensure_overlap_fraction,
    ensure_positive_vector,
)
from mapper_cover.exceptions import DimensionMismatchError
from mapper_cover.membership import LevelSet, iso_aligned_level_sets

logger = getLogger(__name__)


def grid_index_set(n_intervals: Any) -> NDArray[np.int_]:
    """
    All grid coordinates of a full grid.

    The first dimension varies fastest, so bin ``i`` of the returned index set
    is ``np.unravel_index(i, n_intervals, order="F")``.

    Parameters
    ----------
    n_intervals : int or sequence of int
        Number of intervals per dimension.

    Returns
    -------
    index_set : NDArray[np.int_], shape (prod(n_intervals), n_dims)

    Examples
    --------
    >>> grid_index_set([2, 2]).tolist()
    [[0, 0], [1, 0], [0, 1], [1, 1]]
    """
    n_intervals = np.atleast_1d(n_intervals)
    n_intervals = as_n_intervals(n_intervals, n_intervals.size)
    n_bins = int(np.prod(n_intervals))
    return np.stack(
        np.unravel_index(np.arange(n_bins), tuple(n_intervals), order="F"), axis=1
    ).astype(np.int_)


def overlap_to_interval_length(
    overlap: Any, n_intervals: Any, filter_len: Any
) -> NDArray[np.float64]:
    """
    Interval length giving grid-adjacent bins the requested overlap fraction.

    ``interval_length = base_length + base_length * overlap / (1 - overlap)``

    Examples
    --------
    >>> overlap_to_interval_length(0.2, 5, 10.0)
    array([2.5])
    """
    filter_len = np.atleast_1d(np.asarray(filter_len, dtype=np.float64))
    n_dims = filter_len.size
    overlap = ensure_overlap_fraction(overlap, n_dims)
    n_intervals = as_n_intervals(n_intervals, n_dims)
    base_length = filter_len / n_intervals
    return base_length + (base_length * overlap) / (1.0 - overlap)


def interval_length_to_overlap(
    interval_length: Any, n_intervals: Any, filter_len: Any
) -> NDArray[np.float64]:
    """
    Overlap fraction implied by an interval length on a fixed grid.

    Inverse of :func:`overlap_to_interval_length`:
    ``overlap = 1 - base_length / interval_length``.
    """
    filter_len = np.atleast_1d(np.asarray(filter_len, dtype=np.float64))
    n_dims = filter_len.size
    interval_length = ensure_positive_vector(interval_length, n_dims, "interval_length")
    n_intervals = as_n_intervals(n_intervals, n_dims)
    base_length = filter_len / n_intervals
    return 1.0 - base_length / interval_length


def fixed_grid_bounds(
    index_set: Any,
    overlap: Any,
    n_intervals: Any,
    filter_min: Any,
    filter_len: Any,
) -> NDArray[np.float64]:
    """
    Bounds of the bins of a fixed overlapping grid.

    Parameters
    ----------
    index_set : array_like, shape (n_bins, n_dims)
        0-based grid coordinates, each in ``[0, n_intervals)``.
    overlap : float or array_like, shape (n_dims,)
        Overlap fraction in ``[0, 1)``.
    n_intervals : int or array_like, shape (n_dims,)
        Number of base intervals per dimension.
    filter_min : float or array_like, shape (n_dims,)
        Lower end of the filter range.
    filter_len : float or array_like, shape (n_dims,)
        Length of the filter range. Must be positive.

    Returns
    -------
    bounds : NDArray[np.float64], shape (n_bins, 2 * n_dims)
        Minimums followed by maximums, one row per grid coordinate.

    Raises
    ------
    InvalidGridParameterError
        If the overlap, interval count, filter length or a grid coordinate is
        out of range.

    Examples
    --------
    >>> fixed_grid_bounds([[0], [1]], 0.2, 5, 0.0, 10.0)
    array([[-0.25,  2.25],
           [ 1.75,  4.25]])
    """
    filter_len = np.atleast_1d(np.asarray(filter_len, dtype=np.float64))
    n_dims = filter_len.size
    filter_len = ensure_positive_vector(filter_len, n_dims, "filter_len")
    filter_min = broadcast_to_dims(filter_min, n_dims, "filter_min")
    ensure_all_finite(filter_min, "filter_min")
    overlap = ensure_overlap_fraction(overlap, n_dims)
    n_intervals = as_n_intervals(n_intervals, n_dims)
    index_set = as_index_set(index_set, n_dims, n_intervals)

    base_length = filter_len / n_intervals
    interval_length = base_length + (base_length * overlap) / (1.0 - overlap)
    half_width = interval_length / 2.0

    centroids = filter_min + index_set * base_length + base_length / 2.0
    return np.concatenate((centroids - half_width, centroids + half_width), axis=1)


def restrained_grid_bounds(
    index_set: Any,
    interval_length: Any,
    step_size: Any,
    filter_min: Any,
) -> NDArray[np.float64]:
    """
    Bounds of the bins of a grid with explicit interval length and step size.

    ``min = filter_min + grid_coord * step_size``,
    ``max = min + interval_length``.

    Parameters
    ----------
    index_set : array_like, shape (n_bins, n_dims)
        0-based grid coordinates.
    interval_length : float or array_like, shape (n_dims,)
        Width of every bin. Must be positive.
    step_size : float or array_like, shape (n_dims,)
        Distance between consecutive bin minimums. Must be positive.
    filter_min : float or array_like, shape (n_dims,)
        Lower end of the filter range.

    Returns
    -------
    bounds : NDArray[np.float64], shape (n_bins, 2 * n_dims)
    """
    filter_min = np.atleast_1d(np.asarray(filter_min, dtype=np.float64))
    n_dims = filter_min.size
    ensure_all_finite(filter_min, "filter_min")
    interval_length = ensure_positive_vector(interval_length, n_dims, "interval_length")
    step_size = ensure_positive_vector(step_size, n_dims, "step_size")
    index_set = as_index_set(index_set, n_dims)

    level_set_min = filter_min + index_set * step_size
    return np.concatenate((level_set_min, level_set_min + interval_length), axis=1)


def _filter_range_to_min_len(
    filter_range: Any, filter_len: Any = None
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split a ``(2, n_dims)`` filter range into its minimum and length."""
    filter_range = np.asarray(filter_range, dtype=np.float64)
    if filter_range.ndim == 1:
        filter_range = filter_range[:, np.newaxis]
    if filter_range.ndim != 2 or filter_range.shape[0] != 2:
        # Accept the (n_dims, 2) orientation as well
        if filter_range.ndim == 2 and filter_range.shape[1] == 2:
            filter_range = filter_range.T
        else:
            raise DimensionMismatchError(
                "filter_range must hold a minimum and a maximum per dimension",
                expected="shape (2, n_dims)",
                got=f"shape {filter_range.shape}",
            )
    filter_min = filter_range[0]
    if filter_len is None:
        filter_len = filter_range[1] - filter_range[0]
    return filter_min, broadcast_to_dims(filter_len, filter_min.size, "filter_len")


def fixed_level_sets(
    filter_values: Any,
    index_set: Any,
    overlap: Any,
    n_intervals: Any,
    filter_range: Any,
    filter_len: Any = None,
    disable_progress_bar: bool = False,
) -> list[LevelSet]:
    """
    Build the bins of a fixed overlapping grid together with their points.

    Parameters
    ----------
    filter_values : array_like, shape (n_points, n_dims)
    index_set : array_like, shape (n_bins, n_dims)
        0-based grid coordinates.
    overlap : float or array_like, shape (n_dims,)
    n_intervals : int or array_like, shape (n_dims,)
    filter_range : array_like, shape (2, n_dims)
        Row 0 holds the filter minimums, row 1 the maximums.
    filter_len : float or array_like, shape (n_dims,), optional
        Defaults to ``filter_range[1] - filter_range[0]``.
    disable_progress_bar : bool, default=False

    Returns
    -------
    level_sets : list of LevelSet
        One per grid coordinate, with bounds. Membership uses inclusive
        bounds and no tolerance.
    """
    filter_values = as_points(filter_values, "filter_values")
    filter_min, filter_len = _filter_range_to_min_len(filter_range, filter_len)
    bounds = fixed_grid_bounds(index_set, overlap, n_intervals, filter_min, filter_len)
    ensure_matching_dimensions(filter_values, bounds)
    logger.info(
        "Building %d fixed level sets over %d points", bounds.shape[0], len(filter_values)
    )
    return iso_aligned_level_sets(
        filter_values,
        bounds,
        save_bounds=True,
        disable_progress_bar=disable_progress_bar,
    )


def restrained_level_sets(
    filter_values: Any,
    index_set: Any,
    interval_length: Any,
    step_size: Any,
    filter_min: Any,
    disable_progress_bar: bool = False,
) -> list[LevelSet]:
    """
    Build the bins of a restrained grid together with their points.

    See :func:`restrained_grid_bounds` for the geometry and
    :func:`fixed_level_sets` for the return value.
    """
    filter_values = as_points(filter_values, "filter_values")
    bounds = restrained_grid_bounds(index_set, interval_length, step_size, filter_min)
    ensure_matching_dimensions(filter_values, bounds)
    logger.info(
        "Building %d restrained level sets over %d points",
        bounds.shape[0],
        len(filter_values),
    )
    return iso_aligned_level_sets(
        filter_values,
        bounds,
        save_bounds=True,
        disable_progress_bar=disable_progress_bar,
    )
