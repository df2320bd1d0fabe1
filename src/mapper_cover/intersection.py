"""
Intersections between the bins of two covers.

Two boxes intersect when their intervals overlap (touching counts) in every
dimension. :func:`cover_map` reports every intersecting pair ``(i, j)`` with
``i`` a bin of the first cover and ``j`` a bin of the second, which is how
bins of two differently parameterized covers of the same filter space are
related to each other.
"""

from __future__ import annotations

from logging import getLogger
from typing import Literal, Optional

import numpy as np
from numpy.typing import NDArray

from mapper_cover.box import CoverLike, cover_to_bounds
from mapper_cover.exceptions import DimensionMismatchError, ValidationError

logger = getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024


def _split_bounds(
    bounds: NDArray[np.float64],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    n_dims = bounds.shape[1] // 2
    return bounds[:, :n_dims], bounds[:, n_dims:]


def _brute_force_pairs(
    bounds1: NDArray[np.float64],
    bounds2: NDArray[np.float64],
    chunk_size: int,
) -> NDArray[np.int_]:
    """Test every pair, ``chunk_size`` rows of the first cover at a time."""
    min1, max1 = _split_bounds(bounds1)
    min2, max2 = _split_bounds(bounds2)

    pairs = []
    for start in range(0, bounds1.shape[0], chunk_size):
        stop = start + chunk_size
        is_intersecting = np.all(
            (min1[start:stop, np.newaxis, :] <= max2[np.newaxis])
            & (max1[start:stop, np.newaxis, :] >= min2[np.newaxis]),
            axis=2,
        )
        from_ind, to_ind = np.nonzero(is_intersecting)
        pairs.append(np.stack((from_ind + start, to_ind), axis=1))

    return np.concatenate(pairs, axis=0) if pairs else np.empty((0, 2), dtype=np.int_)


def _sorted_endpoint_pairs(
    bounds1: NDArray[np.float64], bounds2: NDArray[np.float64]
) -> NDArray[np.int_]:
    """Prune candidates on the first dimension with sorted minimums.

    Boxes of the second cover whose first-dimension minimum exceeds the
    query's maximum can never intersect; they form a suffix of the boxes
    sorted by minimum and are skipped with a binary search.
    """
    min1, max1 = _split_bounds(bounds1)
    min2, max2 = _split_bounds(bounds2)

    order = np.argsort(min2[:, 0], kind="stable")
    sorted_min = min2[order, 0]

    pairs = []
    for from_ind in range(bounds1.shape[0]):
        n_candidates = np.searchsorted(sorted_min, max1[from_ind, 0], side="right")
        candidates = np.sort(order[:n_candidates])
        is_intersecting = np.all(
            (min1[from_ind] <= max2[candidates]) & (max1[from_ind] >= min2[candidates]),
            axis=1,
        )
        to_ind = candidates[is_intersecting]
        pairs.append(np.stack((np.full_like(to_ind, from_ind), to_ind), axis=1))

    return np.concatenate(pairs, axis=0) if pairs else np.empty((0, 2), dtype=np.int_)


def cover_map(
    cover1: CoverLike,
    cover2: CoverLike,
    n_dims: Optional[int] = None,
    method: Literal["brute", "sorted"] = "brute",
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> NDArray[np.int_]:
    """
    All pairs of intersecting bins between two covers.

    Parameters
    ----------
    cover1, cover2 : sequence of Box or array_like, shape (n_bins, 2 * n_dims)
        The two covers. Bounds matrices hold minimums first.
    n_dims : int, optional
        Expected dimensionality of both covers.
    method : {"brute", "sorted"}, default="brute"
        ``"brute"`` scans all ``n1 * n2`` pairs. ``"sorted"`` skips pairs that
        are separated along the first dimension. Both return the same array.
    chunk_size : int, default=1024
        Rows of ``cover1`` tested at once by the brute-force scan.

    Returns
    -------
    pairs : NDArray[np.int_], shape (n_pairs, 2)
        0-based ``(bin of cover1, bin of cover2)`` rows, ordered by the first
        column, then the second. Each pair appears once.

    Raises
    ------
    DimensionMismatchError
        If the covers (or ``n_dims``) disagree on dimensionality.

    Examples
    --------
    >>> cover_map([[0.0, 1.0], [1.0, 2.0]], [[0.5, 1.5]]).tolist()
    [[0, 0], [1, 0]]
    """
    bounds1 = cover_to_bounds(cover1, "cover1")
    bounds2 = cover_to_bounds(cover2, "cover2")

    # An empty sequence of boxes has width 0 and no known dimensionality
    widths = sorted({b.shape[1] for b in (bounds1, bounds2) if b.shape[1] > 0})
    if len(widths) > 1:
        raise DimensionMismatchError(
            "Covers must have the same dimensionality",
            got=f"{bounds1.shape[1] // 2} and {bounds2.shape[1] // 2} dimensions",
        )
    if n_dims is not None and widths and widths[0] != 2 * n_dims:
        raise DimensionMismatchError(
            "Cover dimensionality does not match n_dims",
            expected=f"{n_dims} dimension(s)",
            got=f"{widths[0] // 2} dimension(s)",
        )
    if chunk_size < 1:
        raise ValidationError("chunk_size must be positive", got=f"{chunk_size}")
    if method not in ("brute", "sorted"):
        raise ValidationError(
            f"Unknown cover map method {method!r}",
            expected="'brute' or 'sorted'",
        )

    if bounds1.shape[0] == 0 or bounds2.shape[0] == 0:
        return np.empty((0, 2), dtype=np.int_)

    if method == "brute":
        pairs = _brute_force_pairs(bounds1, bounds2, chunk_size)
    else:
        pairs = _sorted_endpoint_pairs(bounds1, bounds2)

    logger.debug(
        "Found %d intersecting pairs between covers of %d and %d bins",
        len(pairs),
        bounds1.shape[0],
        bounds2.shape[0],
    )
    return pairs.astype(np.int_)
