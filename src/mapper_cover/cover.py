"""
Interval covers of a filter space.

:class:`FixedIntervalCover` spreads ``n_intervals`` equally spaced, overlapping
bins over the range of the filter values in every dimension. It is a two
parameter family (number of intervals, percent overlap) whose Mapper may be
thought of as a relaxed Reeb graph.

:class:`RestrainedIntervalCover` places bins of an explicit ``interval_length``
every ``step_size`` starting at the filter minimum, with as many bins as are
needed to reach the filter maximum.

Both follow a fit-then-query pattern: ``fit(filter_values)`` records the
filter range and the grid index set, after which bounds, level sets and
candidate neighbors can be requested.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from mapper_cover._validation import (
    as_n_intervals,
    as_points,
    broadcast_to_dims,
    ensure_all_finite,
    ensure_positive_vector,
)
from mapper_cover.exceptions import InvalidGridParameterError, ValidationError
from mapper_cover.grid_bounds import (
    fixed_grid_bounds,
    grid_index_set,
    interval_length_to_overlap,
    overlap_to_interval_length,
    restrained_grid_bounds,
    restrained_level_sets,
)
from mapper_cover.membership import LevelSet, iso_aligned_level_sets
from mapper_cover.neighborhood import fixed_cover_neighborhood

logger = getLogger(__name__)

# Padding on each side of a fixed cover bin so that the extreme filter values
# are covered despite rounding in the centroid arithmetic.
_COVER_PADDING = float(np.sqrt(np.finfo(np.float64).eps))


@dataclass(eq=False)
class _IntervalCover(ABC):
    """Fitted state shared by the interval covers."""

    filter_values_: Optional[NDArray[np.float64]] = field(init=False, default=None)
    filter_min_: Optional[NDArray[np.float64]] = field(init=False, default=None)
    filter_len_: Optional[NDArray[np.float64]] = field(init=False, default=None)
    index_set_: Optional[NDArray[np.int_]] = field(init=False, default=None)
    level_sets_: Optional[list[LevelSet]] = field(init=False, default=None)

    _is_fitted: bool = field(init=False, default=False)

    @property
    def n_dims(self) -> int:
        self._check_fitted()
        return self.filter_min_.shape[0]

    @property
    def n_bins(self) -> int:
        self._check_fitted()
        return self.index_set_.shape[0]

    def _check_fitted(self) -> None:
        if not self._is_fitted:
            raise ValidationError(
                f"{type(self).__name__} has not been fitted",
                hint="Call fit(filter_values) first",
            )

    def _fit_filter_range(self, filter_values: Any) -> NDArray[np.float64]:
        filter_values = as_points(filter_values, "filter_values")
        if filter_values.shape[0] == 0:
            raise ValidationError(
                "Cannot fit a cover to an empty set of filter values",
                expected="at least one point",
            )
        ensure_all_finite(filter_values, "filter_values")
        self.filter_values_ = filter_values
        self.filter_min_ = filter_values.min(axis=0)
        self.filter_len_ = filter_values.max(axis=0) - self.filter_min_
        self.level_sets_ = None
        return filter_values

    def _resolve_index(self, index: Any) -> NDArray[np.int_]:
        """Rows of the index set selected by a bin id or a grid coordinate."""
        self._check_fitted()
        if index is None:
            return self.index_set_
        if np.ndim(index) == 1:
            coordinate = np.asarray(index, dtype=np.int_).reshape(1, -1)
            is_match = np.all(self.index_set_ == coordinate, axis=1)
            if not np.any(is_match):
                raise ValidationError(
                    "Grid coordinate is not part of the index set",
                    got=f"index = {coordinate.ravel().tolist()}",
                )
            return self.index_set_[is_match]
        bin_id = int(index)
        if not 0 <= bin_id < self.n_bins:
            raise ValidationError(
                "Bin id out of range",
                expected=f"0 <= index < {self.n_bins}",
                got=f"index = {bin_id}",
            )
        return self.index_set_[[bin_id]]

    @abstractmethod
    def interval_bounds(self, index: Any = None) -> NDArray[np.float64]:
        """Bounds of the selected bins, shape (n_selected, 2 * n_dims)."""
        ...

    def construct_cover(self, index: Any = None) -> list[LevelSet]:
        """
        Level sets of the fitted filter values.

        Parameters
        ----------
        index : int or sequence of int, optional
            A bin id, or a grid coordinate. If None, the whole cover is built
            and cached in ``level_sets_``.

        Returns
        -------
        level_sets : list of LevelSet
        """
        self._check_fitted()
        if index is None and self.level_sets_ is not None:
            return self.level_sets_
        if index is not None and self.level_sets_ is not None:
            rows = self._resolve_index(index)
            is_match = np.all(self.index_set_[:, np.newaxis] == rows, axis=2).any(axis=1)
            return [self.level_sets_[i] for i in np.flatnonzero(is_match)]

        level_sets = self._construct_level_sets(index)
        if index is None:
            self.level_sets_ = level_sets
        return level_sets

    def _construct_level_sets(self, index: Any) -> list[LevelSet]:
        return iso_aligned_level_sets(self.filter_values_, self.interval_bounds(index))


@dataclass(eq=False)
class FixedIntervalCover(_IntervalCover):
    """
    Equally spaced, equally overlapping interval bins in every dimension.

    Parameters
    ----------
    n_intervals : int or sequence of int, default=10
        Number of bins per dimension. A scalar is repeated for every dimension.
    percent_overlap : float or sequence of float, default=20.0
        Overlap between grid-adjacent bins, as a percentage in ``[0, 100)``.

    Attributes (Fitted)
    --------------------
    filter_min_, filter_len_ : NDArray[np.float64], shape (n_dims,)
        Range of the fitted filter values.
    n_intervals_ : NDArray[np.int_], shape (n_dims,)
    overlap_ : NDArray[np.float64], shape (n_dims,)
        Overlap as a fraction.
    index_set_ : NDArray[np.int_], shape (n_bins, n_dims)
        Grid coordinate of every bin, first dimension varying fastest.

    Examples
    --------
    >>> cover = FixedIntervalCover(n_intervals=5, percent_overlap=20.0)
    >>> cover = cover.fit(np.linspace(0.0, 10.0, 11))
    >>> cover.n_bins
    5
    """

    n_intervals: Union[int, Sequence[int]] = 10
    percent_overlap: Union[float, Sequence[float]] = 20.0

    n_intervals_: Optional[NDArray[np.int_]] = field(init=False, default=None)
    overlap_: Optional[NDArray[np.float64]] = field(init=False, default=None)

    def fit(self, filter_values: Any) -> "FixedIntervalCover":
        """Record the filter range and build the full index set."""
        filter_values = self._fit_filter_range(filter_values)
        n_dims = filter_values.shape[1]

        percent_overlap = broadcast_to_dims(self.percent_overlap, n_dims, "percent_overlap")
        if np.any(percent_overlap < 0) or np.any(percent_overlap >= 100):
            raise InvalidGridParameterError(
                "The percent overlap must be a percentage between [0, 100)",
                got=f"percent_overlap = {percent_overlap.tolist()}",
            )
        self.overlap_ = percent_overlap / 100.0
        self.n_intervals_ = as_n_intervals(self.n_intervals, n_dims)
        self.index_set_ = grid_index_set(self.n_intervals_)
        self._is_fitted = True

        logger.info("Fitted %s", self.format())
        return self

    def interval_bounds(self, index: Any = None) -> NDArray[np.float64]:
        """
        Bounds of the selected bins, padded by ``sqrt(eps)`` on each side.

        Along a dimension where every filter value is the same, all bins
        collapse onto that value and only the padding gives them width.

        Returns
        -------
        bounds : NDArray[np.float64], shape (n_selected, 2 * n_dims)
        """
        index_set = self._resolve_index(index)
        is_constant = self.filter_len_ == 0.0
        bounds = fixed_grid_bounds(
            index_set,
            self.overlap_,
            self.n_intervals_,
            self.filter_min_,
            np.where(is_constant, 1.0, self.filter_len_),
        )
        n_dims = self.n_dims
        constant_dims = np.flatnonzero(is_constant)
        bounds[:, constant_dims] = self.filter_min_[constant_dims]
        bounds[:, n_dims + constant_dims] = self.filter_min_[constant_dims]
        bounds[:, :n_dims] -= _COVER_PADDING
        bounds[:, n_dims:] += _COVER_PADDING
        return bounds

    def neighborhood(self) -> NDArray[np.int_]:
        """Pairs of bin ids ``(i, j)``, ``i < j``, that may intersect."""
        self._check_fitted()
        return fixed_cover_neighborhood(self.overlap_, self.n_intervals_)

    def overlap_to_interval_length(self, percent_overlap: Any) -> NDArray[np.float64]:
        """Interval length giving the fitted grid the requested percent overlap."""
        self._check_fitted()
        return overlap_to_interval_length(
            np.asarray(percent_overlap, dtype=np.float64) / 100.0,
            self.n_intervals_,
            self.filter_len_,
        )

    def interval_length_to_percent_overlap(
        self, interval_length: Any
    ) -> NDArray[np.float64]:
        """Percent overlap of the fitted grid for a given interval length."""
        self._check_fitted()
        return 100.0 * interval_length_to_overlap(
            interval_length, self.n_intervals_, self.filter_len_
        )

    def format(self) -> str:
        n_intervals = np.atleast_1d(self.n_intervals)
        percent_overlap = np.atleast_1d(self.percent_overlap)
        return (
            "Cover: (typename = Fixed Interval, "
            f"number intervals = [{', '.join(str(int(n)) for n in n_intervals)}], "
            f"percent overlap = [{', '.join(f'{p:.3g}' for p in percent_overlap)}]%)"
        )

    def __str__(self) -> str:
        return self.format()


@dataclass(eq=False)
class RestrainedIntervalCover(_IntervalCover):
    """
    Bins of a fixed width placed at a fixed step from the filter minimum.

    Parameters
    ----------
    interval_length : float or sequence of float, default=1.0
        Width of every bin. Must be positive.
    step_size : float or sequence of float, default=1.0
        Distance between consecutive bin minimums. Must be positive.

    Attributes (Fitted)
    --------------------
    n_intervals_ : NDArray[np.int_], shape (n_dims,)
        Smallest number of steps for the last bin to reach the filter maximum.
    index_set_ : NDArray[np.int_], shape (n_bins, n_dims)
    """

    interval_length: Union[float, Sequence[float]] = 1.0
    step_size: Union[float, Sequence[float]] = 1.0

    interval_length_: Optional[NDArray[np.float64]] = field(init=False, default=None)
    step_size_: Optional[NDArray[np.float64]] = field(init=False, default=None)
    n_intervals_: Optional[NDArray[np.int_]] = field(init=False, default=None)

    def fit(self, filter_values: Any) -> "RestrainedIntervalCover":
        """Record the filter range and build the index set reaching its maximum."""
        filter_values = self._fit_filter_range(filter_values)
        n_dims = filter_values.shape[1]
        self.interval_length_ = ensure_positive_vector(
            self.interval_length, n_dims, "interval_length"
        )
        self.step_size_ = ensure_positive_vector(self.step_size, n_dims, "step_size")

        n_steps = np.ceil((self.filter_len_ - self.interval_length_) / self.step_size_)
        self.n_intervals_ = np.maximum(n_steps, 0).astype(np.int_) + 1
        self.index_set_ = grid_index_set(self.n_intervals_)
        self._is_fitted = True

        logger.info(
            "Fitted restrained interval cover with %d bins over %d dimension(s)",
            self.n_bins,
            n_dims,
        )
        return self

    def interval_bounds(self, index: Any = None) -> NDArray[np.float64]:
        """Bounds of the selected bins, shape (n_selected, 2 * n_dims)."""
        index_set = self._resolve_index(index)
        return restrained_grid_bounds(
            index_set, self.interval_length_, self.step_size_, self.filter_min_
        )

    def _construct_level_sets(self, index: Any) -> list[LevelSet]:
        return restrained_level_sets(
            self.filter_values_,
            self._resolve_index(index),
            self.interval_length_,
            self.step_size_,
            self.filter_min_,
        )
