"""
Assign points to the bins of a cover.

Two membership flavors are provided:

- :func:`level_set_index` gives every point a single bin id, for covers that
  are meant to be disjoint. Boundaries are widened by one machine epsilon so
  that points lying on a shared face are not lost to rounding, and when a point
  still matches several bins the :class:`TieBreak` policy decides the winner.
- :func:`iso_aligned_level_sets` returns, for every box, the indices of all
  points inside it. Boundaries are tested exactly (zero tolerance), so a point
  may belong to zero, one or several level sets.

The two paths use different default tolerances. This mirrors the behavior the
downstream Mapper code was built against; both tolerances can be set through
:class:`MembershipPolicy`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from logging import getLogger
from typing import Any, Optional, Sequence

import numpy as np
import scipy.sparse
from numpy.typing import NDArray
from tqdm.autonotebook import tqdm

from mapper_cover._validation import as_bounds, as_points, ensure_matching_dimensions
from mapper_cover.box import Box
from mapper_cover.exceptions import ValidationError

logger = getLogger(__name__)

UNASSIGNED = -1


class TieBreak(enum.Enum):
    """Which bin wins when a point satisfies several bins' bounds.

    Bins are always visited in cover order.
    """

    LAST_MATCH_WINS = "last"
    FIRST_MATCH_WINS = "first"


@dataclass(frozen=True, slots=True)
class MembershipPolicy:
    """
    Boundary tolerance and tie-break rule for membership tests.

    Attributes
    ----------
    tolerance : float
        Slack subtracted from every lower bound and added to every upper bound.
    tie_break : TieBreak
        Winner among several matching bins (disjoint assignment only).
    """

    tolerance: float = 0.0
    tie_break: TieBreak = TieBreak.LAST_MATCH_WINS

    def __post_init__(self) -> None:
        if not np.isfinite(self.tolerance) or self.tolerance < 0:
            raise ValidationError(
                "Invalid membership tolerance",
                expected="finite tolerance >= 0",
                got=f"tolerance = {self.tolerance}",
            )
        if not isinstance(self.tie_break, TieBreak):
            object.__setattr__(self, "tie_break", TieBreak(self.tie_break))

    @classmethod
    def disjoint(cls) -> "MembershipPolicy":
        """Defaults of the disjoint path: one machine epsilon, last match wins."""
        return cls(tolerance=float(np.finfo(np.float64).eps))

    @classmethod
    def overlapping(cls) -> "MembershipPolicy":
        """Defaults of the overlapping path: exact boundaries."""
        return cls(tolerance=0.0)


@dataclass(frozen=True, slots=True)
class LevelSet:
    """
    The points of a point cloud that fall inside one bin.

    Attributes
    ----------
    points : NDArray[np.int_]
        Sorted 0-based indices of the contained points.
    bounds : Box or None
        The bin's box, if it was kept.
    """

    points: NDArray[np.int_]
    bounds: Optional[Box] = None

    def __len__(self) -> int:
        return len(self.points)


def _in_box_mask(
    points: NDArray[np.float64],
    lower: NDArray[np.float64],
    upper: NDArray[np.float64],
    tolerance: float = 0.0,
) -> NDArray[np.bool_]:
    """Inclusive per-dimension range test of every point against one box."""
    return np.all((points >= lower - tolerance) & (points <= upper + tolerance), axis=1)


def level_set_index(
    points: Any,
    bounds: Any,
    policy: Optional[MembershipPolicy] = None,
) -> NDArray[np.int_]:
    """
    Assign every point to a single bin of a (nominally disjoint) cover.

    Parameters
    ----------
    points : array_like, shape (n_points, n_dims)
        Filter values.
    bounds : array_like, shape (n_bins, 2 * n_dims)
        Bin boxes in cover order, minimums first.
    policy : MembershipPolicy, optional
        Defaults to :meth:`MembershipPolicy.disjoint`.

    Returns
    -------
    bin_ind : NDArray[np.int_], shape (n_points,)
        0-based bin id of each point, ``-1`` where no bin contains it.

    Raises
    ------
    DimensionMismatchError
        If ``points.shape[1] != bounds.shape[1] / 2``.

    Examples
    --------
    >>> level_set_index([0.5, 1.5, 3.0], [[0.0, 1.0], [1.0, 2.0]])
    array([ 0,  1, -1])
    """
    points = as_points(points)
    bounds = as_bounds(bounds)
    n_dims = ensure_matching_dimensions(points, bounds)
    points = points.reshape(-1, n_dims)
    policy = MembershipPolicy.disjoint() if policy is None else policy

    bin_ind = np.full(points.shape[0], UNASSIGNED, dtype=np.int_)
    for bin_id, row in enumerate(bounds):
        is_inside = _in_box_mask(points, row[:n_dims], row[n_dims:], policy.tolerance)
        if policy.tie_break is TieBreak.FIRST_MATCH_WINS:
            is_inside &= bin_ind == UNASSIGNED
        bin_ind[is_inside] = bin_id

    logger.debug(
        "Assigned %d of %d points to %d bins",
        np.count_nonzero(bin_ind != UNASSIGNED),
        points.shape[0],
        bounds.shape[0],
    )
    return bin_ind


def iso_aligned_level_sets(
    points: Any,
    bounds: Any,
    save_bounds: bool = True,
    policy: Optional[MembershipPolicy] = None,
    disable_progress_bar: bool = False,
) -> list[LevelSet]:
    """
    Collect the points inside each of a set of iso-aligned boxes.

    Iso-aligned boxes have edges parallel to the coordinate axes. The boxes may
    overlap; a point is reported in every box containing it.

    Parameters
    ----------
    points : array_like, shape (n_points, n_dims)
        Filter values.
    bounds : array_like, shape (n_bins, 2 * n_dims)
        Box bounds, minimums first.
    save_bounds : bool, default=True
        Attach each input box to its level set, unchanged.
    policy : MembershipPolicy, optional
        Defaults to :meth:`MembershipPolicy.overlapping`. The tie-break rule
        is not used.
    disable_progress_bar : bool, default=False

    Returns
    -------
    level_sets : list of LevelSet, length n_bins

    Raises
    ------
    DimensionMismatchError
        If ``points.shape[1] != bounds.shape[1] / 2``.
    """
    points = as_points(points)
    bounds = as_bounds(bounds)
    n_dims = ensure_matching_dimensions(points, bounds)
    points = points.reshape(-1, n_dims)
    policy = MembershipPolicy.overlapping() if policy is None else policy

    level_sets = []
    for row in tqdm(
        bounds, unit="level set", desc="Level sets", disable=disable_progress_bar
    ):
        is_inside = _in_box_mask(points, row[:n_dims], row[n_dims:], policy.tolerance)
        box = Box.from_bounds_row(row) if save_bounds else None
        level_sets.append(LevelSet(np.flatnonzero(is_inside), box))

    return level_sets


def level_set_membership_matrix(
    level_sets: Sequence[LevelSet], n_points: int
) -> scipy.sparse.csr_array:
    """
    Pullback of a cover as a sparse boolean matrix.

    Parameters
    ----------
    level_sets : sequence of LevelSet
    n_points : int
        Number of points in the underlying point cloud.

    Returns
    -------
    membership : scipy.sparse.csr_array, shape (n_bins, n_points)
        ``membership[i, j]`` is True if point ``j`` lies in bin ``i``.
    """
    n_bins = len(level_sets)
    row_ind = np.concatenate(
        [np.full(len(ls.points), i, dtype=np.int_) for i, ls in enumerate(level_sets)]
        or [np.empty(0, dtype=np.int_)]
    )
    col_ind = np.concatenate(
        [np.asarray(ls.points, dtype=np.int_) for ls in level_sets]
        or [np.empty(0, dtype=np.int_)]
    )
    if col_ind.size and (col_ind.max() >= n_points or col_ind.min() < 0):
        raise ValidationError(
            "Level set refers to a point outside the point cloud",
            expected=f"point indices in [0, {n_points})",
            got=f"indices in [{col_ind.min()}, {col_ind.max()}]",
        )
    data = np.ones(col_ind.size, dtype=bool)
    return scipy.sparse.csr_array((data, (row_ind, col_ind)), shape=(n_bins, n_points))
