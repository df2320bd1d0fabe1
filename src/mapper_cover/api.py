"""
Host-facing entry points with 1-based ids.

The rest of the package numbers bins and points from 0. Host environments that
number from 1 call these wrappers instead: bin ids in intersection pairs and
disjoint assignments, and point indices in level sets, are shifted by one on
the way out. Unassigned points keep the ``-1`` sentinel. Grid coordinates
(``index_set``) stay 0-based, and candidate tables and edge lists are passed
through unchanged because their ids are produced by the host.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray

from mapper_cover.adjacency import edgelist_to_adjacency, valid_pairs
from mapper_cover.box import CoverLike
from mapper_cover.box_distance import BoxDistances, dist_to_boxes
from mapper_cover.grid_bounds import fixed_level_sets, restrained_level_sets
from mapper_cover.intersection import cover_map
from mapper_cover.membership import (
    UNASSIGNED,
    LevelSet,
    iso_aligned_level_sets,
    level_set_index,
)


def _one_based(level_sets: List[LevelSet]) -> List[LevelSet]:
    return [replace(ls, points=ls.points + 1) for ls in level_sets]


def build_fixed_cover(
    filter_values: Any,
    index_set: Any,
    overlap: Any,
    n_intervals: Any,
    filter_range: Any,
    filter_len: Any = None,
) -> List[LevelSet]:
    """Fixed overlapping grid level sets; point indices are 1-based."""
    return _one_based(
        fixed_level_sets(
            filter_values, index_set, overlap, n_intervals, filter_range, filter_len
        )
    )


def build_restrained_cover(
    filter_values: Any,
    index_set: Any,
    interval_length: Any,
    step_size: Any,
    filter_min: Any,
) -> List[LevelSet]:
    """Restrained grid level sets; point indices are 1-based."""
    return _one_based(
        restrained_level_sets(
            filter_values, index_set, interval_length, step_size, filter_min
        )
    )


def build_iso_aligned_cover(
    points: Any, bounds: Any, save_bounds: bool = True
) -> List[LevelSet]:
    """Level sets of caller-supplied boxes; point indices are 1-based."""
    return _one_based(iso_aligned_level_sets(points, bounds, save_bounds=save_bounds))


def disjoint_index(points: Any, bounds: Any) -> NDArray[np.int_]:
    """1-based bin id of every point, ``-1`` where no bin contains it."""
    bin_ind = level_set_index(points, bounds)
    return np.where(bin_ind == UNASSIGNED, UNASSIGNED, bin_ind + 1)


def intersect_covers(
    cover1: CoverLike, cover2: CoverLike, n_dims: Optional[int] = None
) -> NDArray[np.int_]:
    """Intersecting ``(bin of cover1, bin of cover2)`` pairs, 1-based."""
    return cover_map(cover1, cover2, n_dims=n_dims) + 1


def compact_candidates(table: Any, sentinel: Any = -1) -> NDArray[np.int_]:
    """Non-sentinel ``(source, candidate)`` pairs of a candidate table."""
    return valid_pairs(table, sentinel=sentinel)


def build_adjacency(edges: Any) -> Dict[int, List[int]]:
    """Destinations of every source id, keys ascending."""
    return edgelist_to_adjacency(edges)


def box_distances(
    positions: Any,
    interval_length: float,
    n_intervals: int,
    dist_to_lower: Any,
    dist_to_upper: Any,
) -> BoxDistances:
    """Box-expansion distances for 1-based bin positions."""
    return dist_to_boxes(
        positions, interval_length, n_intervals, dist_to_lower, dist_to_upper
    )
