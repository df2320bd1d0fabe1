"""Axis-aligned boxes and conversions between covers and bounds matrices.

A cover is an ordered sequence of :class:`Box` objects; the position of a box
in the sequence is its bin id. The array form of a cover is a bounds matrix of
shape ``(n_bins, 2 * n_dims)`` whose rows hold the per-dimension minimums
followed by the per-dimension maximums.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from mapper_cover._validation import as_bounds
from mapper_cover.exceptions import DataError, DimensionMismatchError


@dataclass(frozen=True, slots=True)
class Box:
    """
    A d-dimensional axis-aligned region ``[min_k, max_k]`` per dimension.

    Attributes
    ----------
    min : NDArray[np.float64], shape (n_dims,)
        Lower bound of each dimension.
    max : NDArray[np.float64], shape (n_dims,)
        Upper bound of each dimension.
    """

    min: NDArray[np.float64]
    max: NDArray[np.float64]

    def __post_init__(self) -> None:
        lower = np.array(self.min, dtype=np.float64, ndmin=1)
        upper = np.array(self.max, dtype=np.float64, ndmin=1)
        if lower.ndim != 1 or lower.shape != upper.shape:
            raise DimensionMismatchError(
                "Box minimum and maximum must be 1-D vectors of equal length",
                got=f"min shape {lower.shape}, max shape {upper.shape}",
            )
        if np.any(np.isnan(lower)) or np.any(np.isnan(upper)):
            raise DataError("Found NaN values in box bounds", data_name="box")
        if np.any(lower > upper):
            raise DataError(
                "Box minimum exceeds maximum",
                data_name="box",
                hint=f"min = {lower.tolist()}, max = {upper.tolist()}",
            )
        lower.setflags(write=False)
        upper.setflags(write=False)
        object.__setattr__(self, "min", lower)
        object.__setattr__(self, "max", upper)

    @classmethod
    def from_bounds_row(cls, row: Any) -> "Box":
        """Build a box from a ``[min_0, ..., min_{d-1}, max_0, ..., max_{d-1}]`` row."""
        row = np.asarray(row, dtype=np.float64).ravel()
        if row.size % 2 != 0:
            raise DimensionMismatchError(
                "A bounds row must have an even number of entries",
                got=f"{row.size} entries",
            )
        n_dims = row.size // 2
        return cls(row[:n_dims], row[n_dims:])

    @classmethod
    def from_matrix(cls, matrix: Any) -> "Box":
        """Build a box from a ``(2, n_dims)`` matrix of minimums over maximums."""
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.ndim != 2 or matrix.shape[0] != 2:
            raise DimensionMismatchError(
                "A box matrix must have two rows (minimums, maximums)",
                got=f"array with shape {matrix.shape}",
            )
        return cls(matrix[0], matrix[1])

    @property
    def n_dims(self) -> int:
        return self.min.shape[0]

    @property
    def bounds_row(self) -> NDArray[np.float64]:
        """The box as a single ``2 * n_dims`` row."""
        return np.concatenate((self.min, self.max))

    @property
    def widths(self) -> NDArray[np.float64]:
        return self.max - self.min

    def as_matrix(self) -> NDArray[np.float64]:
        """The box as a ``(2, n_dims)`` matrix of minimums over maximums."""
        return np.stack((self.min, self.max))

    def contains(self, points: Any, tolerance: float = 0.0) -> NDArray[np.bool_]:
        """Test which points lie inside the box, bounds inclusive.

        Parameters
        ----------
        points : array_like, shape (n_points, n_dims)
        tolerance : float, optional
            Slack added outside both bounds, by default 0.0

        Returns
        -------
        NDArray[np.bool_], shape (n_points,)
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, self.n_dims)
        return np.all(
            (points >= self.min - tolerance) & (points <= self.max + tolerance), axis=1
        )

    def intersects(self, other: "Box") -> bool:
        """True if the boxes overlap (or touch) in every dimension."""
        if other.n_dims != self.n_dims:
            raise DimensionMismatchError(
                "Boxes must have the same dimensionality",
                got=f"{self.n_dims} and {other.n_dims}",
            )
        return bool(np.all((self.min <= other.max) & (self.max >= other.min)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return np.array_equal(self.min, other.min) and np.array_equal(
            self.max, other.max
        )

    def __hash__(self) -> int:
        return hash((self.min.tobytes(), self.max.tobytes()))

    def __repr__(self) -> str:
        return f"Box(min={self.min.tolist()}, max={self.max.tolist()})"


Cover = Sequence[Box]
CoverLike = Union[Cover, NDArray[np.float64]]


def bounds_to_boxes(bounds: Any) -> list[Box]:
    """Split a ``(n_bins, 2 * n_dims)`` bounds matrix into a list of boxes."""
    bounds = as_bounds(bounds)
    return [Box.from_bounds_row(row) for row in bounds]


def boxes_to_bounds(cover: Cover) -> NDArray[np.float64]:
    """Stack a sequence of boxes into a ``(n_bins, 2 * n_dims)`` bounds matrix.

    An empty cover has no dimensionality and returns an array of shape (0, 0).
    """
    if len(cover) == 0:
        return np.empty((0, 0), dtype=np.float64)
    n_dims = {box.n_dims for box in cover}
    if len(n_dims) > 1:
        raise DimensionMismatchError(
            "All boxes in a cover must have the same dimensionality",
            got=f"dimensionalities {sorted(n_dims)}",
        )
    return np.stack([box.bounds_row for box in cover])


def cover_to_bounds(cover: CoverLike, name: str = "cover") -> NDArray[np.float64]:
    """Accept either a sequence of boxes or a bounds matrix and return the matrix."""
    if not isinstance(cover, np.ndarray):
        cover = list(cover)
        if not cover or isinstance(cover[0], Box):
            return boxes_to_bounds(cover)
        cover = np.asarray(cover, dtype=np.float64)
    if cover.size == 0:
        n_cols = cover.shape[1] if cover.ndim == 2 else 0
        return np.empty((0, n_cols), dtype=np.float64)
    return as_bounds(cover, name)
