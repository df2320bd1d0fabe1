"""
Box-expansion distances on a uniform one dimensional grid.

A single filter dimension is split into ``n_intervals`` contiguous bins of
equal width. For a point sitting in bin ``pos`` (1-based), the distance to a
bin ``target`` that does not contain it is how far that bin would have to grow
to reach the point:

- bins below the point grow upward; the distance is the point's distance to
  the lower boundary of its own bin plus the width of the bins in between,
- bins above the point grow downward; the distance is the point's distance to
  the upper boundary of its own bin plus the width of the bins in between.

Adaptive cover policies use these distances to decide which neighboring bin
to expand or merge toward.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, NamedTuple

import numpy as np
from numpy.typing import NDArray

from mapper_cover._validation import ensure_positive_vector, ensure_same_length
from mapper_cover.exceptions import InvalidGridParameterError, ValidationError

logger = getLogger(__name__)


class BoxDistances(NamedTuple):
    """Target bin positions and the matching expansion distances.

    Both arrays have shape ``(n_points, n_intervals - 1)``.
    """

    target_positions: NDArray[np.int_]
    target_distances: NDArray[np.float64]


def dist_to_boxes(
    positions: Any,
    interval_length: float,
    n_intervals: int,
    dist_to_lower: Any,
    dist_to_upper: Any,
    nearest_offset: bool = True,
) -> BoxDistances:
    """
    Distance from every point to every bin that does not contain it.

    Parameters
    ----------
    positions : array_like of int, shape (n_points,)
        1-based bin position of each point, in ``[1, n_intervals]``.
    interval_length : float
        Width of every bin. Must be positive.
    n_intervals : int
        Number of bins. Must be positive.
    dist_to_lower : array_like, shape (n_points,)
        Distance from each point to the lower boundary of its bin.
    dist_to_upper : array_like, shape (n_points,)
        Distance from each point to the upper boundary of its bin.
    nearest_offset : bool, default=True
        If True, the offset counts the bins strictly between ``target`` and
        ``pos``: ``(|target - pos| - 1) * interval_length``. If False, the
        offset is ``|target - pos - 1| * interval_length`` for every target,
        which agrees above ``pos`` but adds two extra intervals below it.

    Returns
    -------
    BoxDistances
        ``target_positions[i]`` lists ``{1, ..., n_intervals} - {positions[i]}``
        in ascending order and ``target_distances[i]`` the distance to each:
        the offset added to ``dist_to_lower`` for targets below ``pos`` and to
        ``dist_to_upper`` otherwise.

    Raises
    ------
    DimensionMismatchError
        If the per-point arrays differ in length.
    ValidationError
        If a position falls outside ``[1, n_intervals]``.

    Examples
    --------
    >>> result = dist_to_boxes([2], 1.0, 4, [0.2], [0.3])
    >>> result.target_positions.tolist()
    [[1, 3, 4]]
    >>> np.round(result.target_distances, 10).tolist()
    [[0.2, 0.3, 1.3]]
    """
    positions = np.atleast_1d(np.asarray(positions)).ravel()
    dist_to_lower = np.atleast_1d(np.asarray(dist_to_lower, dtype=np.float64)).ravel()
    dist_to_upper = np.atleast_1d(np.asarray(dist_to_upper, dtype=np.float64)).ravel()
    n_points = ensure_same_length(
        {
            "positions": positions,
            "dist_to_lower": dist_to_lower,
            "dist_to_upper": dist_to_upper,
        }
    )
    interval_length = float(
        ensure_positive_vector(interval_length, 1, "interval_length")[0]
    )
    if int(n_intervals) != n_intervals or n_intervals < 1:
        raise InvalidGridParameterError(
            "The number of intervals must be a positive integer",
            got=f"n_intervals = {n_intervals}",
        )
    n_intervals = int(n_intervals)
    if positions.size and (
        np.any(positions != np.round(positions))
        or positions.min() < 1
        or positions.max() > n_intervals
    ):
        raise ValidationError(
            "Bin positions must be integers in [1, n_intervals]",
            expected=f"positions in [1, {n_intervals}]",
            got=f"positions in [{positions.min()}, {positions.max()}]",
            hint="Positions are 1-based",
        )
    positions = positions.astype(np.int_)

    all_positions = np.arange(1, n_intervals + 1)
    # Row i: every position except positions[i], ascending
    is_target = all_positions[np.newaxis, :] != positions[:, np.newaxis]
    target_positions = np.broadcast_to(all_positions, (n_points, n_intervals))[
        is_target
    ].reshape(n_points, n_intervals - 1)

    current = positions[:, np.newaxis]
    if nearest_offset:
        n_between = np.abs(target_positions - current) - 1
    else:
        n_between = np.abs(target_positions - current - 1)
    offset = n_between * interval_length
    target_distances = np.where(
        target_positions < current,
        dist_to_lower[:, np.newaxis] + offset,
        dist_to_upper[:, np.newaxis] + offset,
    )

    logger.debug(
        "Computed box distances for %d points over %d intervals", n_points, n_intervals
    )
    return BoxDistances(target_positions.astype(np.int_), target_distances)
