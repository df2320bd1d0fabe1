"""Internal validation utilities for cover inputs.

These functions normalize user-provided arrays into the shapes the cover
builders expect and raise the package exceptions when they cannot.

These functions are for internal use only (note the leading underscore in module name).
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from mapper_cover.exceptions import (
    DataError,
    DimensionMismatchError,
    InvalidGridParameterError,
    ValidationError,
)


def as_points(points: Any, name: str = "points") -> NDArray[np.float64]:
    """Convert a point cloud to a float array of shape (n_points, n_dims).

    A 1-D array is treated as ``n_points`` points in a one dimensional
    filter space.

    Parameters
    ----------
    points : array_like
        Point coordinates.
    name : str, optional
        Name of the array for error messages, by default "points"

    Returns
    -------
    NDArray[np.float64], shape (n_points, n_dims)

    Raises
    ------
    ValidationError
        If the array has more than two dimensions.

    Examples
    --------
    >>> as_points([0.0, 1.0, 2.0]).shape
    (3, 1)
    """
    arr = np.asarray(points, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr[:, np.newaxis]
    if arr.ndim != 2:
        raise ValidationError(
            f"{name} must be a 1-D or 2-D array",
            expected="array with shape (n_points, n_dims)",
            got=f"array with shape {arr.shape}",
        )
    return arr


def as_bounds(bounds: Any, name: str = "bounds") -> NDArray[np.float64]:
    """Convert a bounds matrix to a float array of shape (n_bins, 2 * n_dims).

    Each row holds the minimums of a box followed by its maximums.

    Parameters
    ----------
    bounds : array_like
        Bounds matrix. A 1-D array is treated as a single box.
    name : str, optional
        Name of the array for error messages, by default "bounds"

    Returns
    -------
    NDArray[np.float64], shape (n_bins, 2 * n_dims)

    Raises
    ------
    ValidationError
        If the array is not 2-D or has an odd number of columns.
    DataError
        If the array has non-finite values or any minimum exceeds its maximum.
    """
    arr = np.asarray(bounds, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr[np.newaxis, :]
    if arr.ndim != 2 or arr.shape[1] % 2 != 0 or arr.shape[1] == 0:
        raise ValidationError(
            f"{name} must be a 2-D array with an even number of columns",
            expected="array with shape (n_bins, 2 * n_dims)",
            got=f"array with shape {arr.shape}",
            hint="Place the per-dimension minimums first, then the maximums",
            example=f"    {name} = np.array([[0.0, 0.0, 1.0, 1.0]])  # one unit square",
        )
    ensure_all_finite(arr, name)
    n_dims = arr.shape[1] // 2
    inverted = arr[:, :n_dims] > arr[:, n_dims:]
    if np.any(inverted):
        bad_rows = np.flatnonzero(inverted.any(axis=1))
        raise DataError(
            f"Found boxes whose minimum exceeds their maximum in rows {bad_rows.tolist()}",
            data_name=name,
            hint="Every box must satisfy min <= max in every dimension",
        )
    return arr


def ensure_matching_dimensions(
    points: NDArray[np.float64], bounds: NDArray[np.float64]
) -> int:
    """Verify that the point dimension equals the bounds width divided by two.

    An empty point set carries no coordinates and matches any bounds.

    Returns
    -------
    int
        The shared dimensionality.

    Raises
    ------
    DimensionMismatchError
        If the dimensions disagree.
    """
    n_dims = bounds.shape[1] // 2
    if points.size and points.shape[1] != n_dims:
        raise DimensionMismatchError(
            "dimension of points != dimension of bounds matrix / 2",
            expected=f"points with {n_dims} column(s)",
            got=f"points with {points.shape[1]} column(s)",
        )
    return n_dims


def ensure_same_length(arrays: dict[str, NDArray[Any]]) -> int:
    """Verify that parallel 1-D arrays share their length."""
    lengths = {name: len(arr) for name, arr in arrays.items()}
    if len(set(lengths.values())) > 1:
        raise DimensionMismatchError(
            "Parallel arrays must have the same length",
            expected="equal lengths",
            got=", ".join(f"len({name}) = {n}" for name, n in lengths.items()),
        )
    return next(iter(lengths.values()), 0)


def ensure_all_finite(arr: np.ndarray, name: str) -> None:
    """Verify all array elements are finite (no NaN or Inf).

    Parameters
    ----------
    arr : np.ndarray
        Array to check
    name : str
        Name of the array for error messages

    Raises
    ------
    DataError
        If array contains NaN or Inf values

    Examples
    --------
    >>> ensure_all_finite(np.array([1.0, 2.0]), "data")  # OK
    >>> ensure_all_finite(np.array([1.0, np.nan]), "data")  # Raises
    """
    if not np.all(np.isfinite(arr)):
        n_nan = np.sum(np.isnan(arr))
        n_inf = np.sum(np.isinf(arr))
        raise DataError(
            f"Found non-finite values in {name}",
            data_name=name,
            hint=f"Array contains {n_nan} NaN value(s) and {n_inf} Inf value(s). Check your data for missing or invalid values.",
        )


def broadcast_to_dims(value: Any, n_dims: int, name: str) -> NDArray[np.float64]:
    """Repeat a scalar along every dimension or check a per-dimension vector.

    Raises
    ------
    DimensionMismatchError
        If a vector is given whose length is not ``n_dims``.
    """
    arr = np.atleast_1d(np.asarray(value, dtype=np.float64))
    if arr.ndim != 1:
        raise ValidationError(
            f"{name} must be a scalar or a 1-D vector",
            got=f"array with shape {arr.shape}",
        )
    if arr.size == 1 and n_dims > 1:
        arr = np.repeat(arr, n_dims)
    if arr.size != n_dims:
        raise DimensionMismatchError(
            f"{name} must be a single scalar or a vector with one entry per filter dimension",
            expected=f"length {n_dims}",
            got=f"length {arr.size}",
        )
    return arr


def ensure_overlap_fraction(overlap: Any, n_dims: int) -> NDArray[np.float64]:
    """Verify the overlap fraction lies in [0, 1) for every dimension.

    Raises
    ------
    InvalidGridParameterError
        If any overlap is negative, at least 1, or not finite.

    Examples
    --------
    >>> ensure_overlap_fraction(0.2, 2)
    array([0.2, 0.2])
    """
    arr = broadcast_to_dims(overlap, n_dims, "overlap")
    if not np.all(np.isfinite(arr)) or np.any(arr < 0.0) or np.any(arr >= 1.0):
        raise InvalidGridParameterError(
            "Invalid overlap fraction",
            expected="0 <= overlap < 1 in every dimension",
            got=f"overlap = {arr.tolist()}",
            hint="An overlap of 1 makes the interval length infinite",
        )
    return arr


def ensure_positive_vector(value: Any, n_dims: int, name: str) -> NDArray[np.float64]:
    """Verify a scalar or per-dimension vector is strictly positive and finite.

    Raises
    ------
    InvalidGridParameterError
        If any entry is zero, negative, or not finite.
    """
    arr = broadcast_to_dims(value, n_dims, name)
    if not np.all(np.isfinite(arr)) or np.any(arr <= 0.0):
        raise InvalidGridParameterError(
            f"Invalid value for {name}",
            expected=f"{name} > 0 in every dimension",
            got=f"{name} = {arr.tolist()}",
            hint="Zero or negative sizes produce empty or inverted bins",
        )
    return arr


def as_n_intervals(n_intervals: Any, n_dims: int) -> NDArray[np.int_]:
    """Convert the requested number of intervals to a positive int vector.

    Raises
    ------
    InvalidGridParameterError
        If any count is not a positive integer.
    """
    arr = broadcast_to_dims(n_intervals, n_dims, "n_intervals")
    if np.any(arr < 1) or np.any(arr != np.round(arr)):
        raise InvalidGridParameterError(
            "The number of intervals must be a positive integer in every dimension",
            expected="n_intervals >= 1",
            got=f"n_intervals = {arr.tolist()}",
        )
    return arr.astype(np.int_)


def as_index_set(
    index_set: Any, n_dims: int | None = None, n_intervals: NDArray[np.int_] | None = None
) -> NDArray[np.int_]:
    """Convert grid coordinates to an int array of shape (n_bins, n_dims).

    Parameters
    ----------
    index_set : array_like
        0-based grid coordinates, one row per bin.
    n_dims : int, optional
        Expected number of columns.
    n_intervals : NDArray[np.int_], optional
        If given, every coordinate must lie in ``[0, n_intervals)``.

    Raises
    ------
    DimensionMismatchError
        If the number of columns differs from ``n_dims``.
    InvalidGridParameterError
        If coordinates are not integers or fall outside the grid.
    """
    arr = np.asarray(index_set)
    if arr.ndim == 1:
        arr = arr[:, np.newaxis]
    if arr.ndim != 2:
        raise ValidationError(
            "index_set must be a 2-D array of grid coordinates",
            expected="array with shape (n_bins, n_dims)",
            got=f"array with shape {arr.shape}",
        )
    if arr.size and not np.all(arr == np.round(arr)):
        raise InvalidGridParameterError(
            "Grid coordinates must be integers", got=f"index_set = {arr.tolist()}"
        )
    arr = arr.astype(np.int_)
    if n_dims is not None and arr.shape[1] != n_dims:
        raise DimensionMismatchError(
            "index_set must have one column per filter dimension",
            expected=f"{n_dims} column(s)",
            got=f"{arr.shape[1]} column(s)",
        )
    if n_intervals is not None and arr.size:
        out_of_range = (arr < 0) | (arr >= n_intervals)
        if np.any(out_of_range):
            bad_rows = np.flatnonzero(out_of_range.any(axis=1))
            raise InvalidGridParameterError(
                "Grid coordinates out of range",
                expected=f"0 <= index < {n_intervals.tolist()}",
                got=f"out-of-range coordinates in rows {bad_rows.tolist()}",
                hint="Grid coordinates are 0-based",
            )
    return arr
