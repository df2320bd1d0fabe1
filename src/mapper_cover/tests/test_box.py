import numpy as np
import pytest

from mapper_cover.box import (
    Box,
    bounds_to_boxes,
    boxes_to_bounds,
    cover_to_bounds,
)
from mapper_cover.exceptions import DataError, DimensionMismatchError


def test_box_from_bounds_row():
    box = Box.from_bounds_row([0.0, 1.0, 2.0, 3.0])
    np.testing.assert_array_equal(box.min, [0.0, 1.0])
    np.testing.assert_array_equal(box.max, [2.0, 3.0])
    assert box.n_dims == 2


def test_box_bounds_row_inverse():
    row = np.array([-0.25, 1.75, 2.25, 4.25])
    np.testing.assert_array_equal(Box.from_bounds_row(row).bounds_row, row)


def test_box_matrix_form():
    box = Box([0.0, 1.0], [2.0, 3.0])
    np.testing.assert_array_equal(box.as_matrix(), [[0.0, 1.0], [2.0, 3.0]])
    assert Box.from_matrix(box.as_matrix()) == box


def test_box_is_immutable():
    box = Box([0.0], [1.0])
    with pytest.raises(ValueError):
        box.min[0] = 5.0


def test_degenerate_box_allowed():
    box = Box([1.0], [1.0])
    np.testing.assert_array_equal(box.widths, [0.0])


def test_inverted_box_raises():
    with pytest.raises(DataError):
        Box([1.0, 0.0], [0.0, 1.0])


def test_mismatched_box_raises():
    with pytest.raises(DimensionMismatchError):
        Box([0.0, 0.0], [1.0])


def test_box_contains_inclusive():
    box = Box([0.0, 0.0], [1.0, 1.0])
    points = np.array([[0.0, 0.0], [1.0, 1.0], [0.5, 1.0 + 1e-12], [2.0, 0.5]])
    np.testing.assert_array_equal(box.contains(points), [True, True, False, False])
    np.testing.assert_array_equal(
        box.contains(points, tolerance=1e-9), [True, True, True, False]
    )


def test_box_intersects_touching():
    assert Box([0.0], [1.0]).intersects(Box([1.0], [2.0]))
    assert not Box([0.0], [1.0]).intersects(Box([1.5], [2.0]))
    assert not Box([0.0, 0.0], [1.0, 1.0]).intersects(Box([0.5, 2.0], [0.7, 3.0]))


def test_bounds_boxes_roundtrip(fixed_bounds_2d):
    boxes = bounds_to_boxes(fixed_bounds_2d)
    assert len(boxes) == 12
    np.testing.assert_array_equal(boxes_to_bounds(boxes), fixed_bounds_2d)


def test_boxes_to_bounds_mixed_dims_raises():
    with pytest.raises(DimensionMismatchError):
        boxes_to_bounds([Box([0.0], [1.0]), Box([0.0, 0.0], [1.0, 1.0])])


def test_cover_to_bounds_accepts_lists_and_arrays(disjoint_bounds_1d):
    from_array = cover_to_bounds(disjoint_bounds_1d)
    from_list = cover_to_bounds(disjoint_bounds_1d.tolist())
    from_boxes = cover_to_bounds(bounds_to_boxes(disjoint_bounds_1d))
    np.testing.assert_array_equal(from_array, from_list)
    np.testing.assert_array_equal(from_array, from_boxes)
    assert cover_to_bounds([]).shape[0] == 0
