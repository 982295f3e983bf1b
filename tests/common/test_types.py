"""Unit tests for common rectangle type."""

import numpy as np
import pytest

from src.common.types import Rect


class TestRectConstruction:
    """Test Rect construction and validation."""

    def test_keyword_construction(self):
        """Test construction from edges."""
        rect = Rect(left=10, top=20, right=110, bottom=50)

        assert rect.width == 100.0
        assert rect.height == 30.0
        assert rect.area == 3000.0

    def test_invalid_horizontal_order(self):
        """Test right < left is rejected."""
        with pytest.raises(ValueError, match="left"):
            Rect(left=100, top=0, right=10, bottom=10)

    def test_invalid_vertical_order(self):
        """Test bottom < top is rejected."""
        with pytest.raises(ValueError, match="top"):
            Rect(left=0, top=50, right=10, bottom=10)

    def test_from_xywh(self):
        """Test construction from origin and size."""
        rect = Rect.from_xywh(5, 10, 20, 30)
        assert rect.to_tuple() == (5.0, 10.0, 25.0, 40.0)

    def test_from_tuple(self):
        """Test construction from (left, top, right, bottom) tuple."""
        rect = Rect.from_tuple((1, 2, 3, 4))
        assert rect.to_tuple() == (1.0, 2.0, 3.0, 4.0)

    def test_from_tuple_wrong_length(self):
        """Test tuple with wrong element count is rejected."""
        with pytest.raises(ValueError, match="Expected tuple with 4 elements"):
            Rect.from_tuple((1, 2, 3))

    def test_from_points_quadrilateral(self):
        """Test bounding rect of a tilted 4-corner OCR box."""
        points = np.array([[12, 8], [98, 10], [100, 32], [10, 30]], dtype=np.float32)

        rect = Rect.from_points(points)

        assert rect.to_tuple() == (10.0, 8.0, 100.0, 32.0)

    def test_from_points_nested_lists(self):
        """Test plain nested lists are accepted."""
        rect = Rect.from_points([[0, 0], [4, 0], [4, 2], [0, 2]])
        assert rect.width == 4.0
        assert rect.height == 2.0

    def test_from_points_bad_shape(self):
        """Test malformed point arrays are rejected."""
        with pytest.raises(ValueError, match="Expected points of shape"):
            Rect.from_points([1, 2, 3, 4])

        with pytest.raises(ValueError, match="Expected points of shape"):
            Rect.from_points([])

    def test_immutable(self):
        """Test Rect is frozen."""
        rect = Rect(left=0, top=0, right=1, bottom=1)
        with pytest.raises(Exception):
            rect.left = 5


class TestRectGeometry:
    """Test Rect geometric helpers."""

    def test_centers(self):
        """Test center coordinates."""
        rect = Rect(left=0, top=10, right=100, bottom=30)
        assert rect.center_x == 50.0
        assert rect.center_y == 20.0

    def test_is_empty(self):
        """Test zero-width and zero-height rects are empty."""
        assert Rect(left=5, top=0, right=5, bottom=10).is_empty
        assert Rect(left=0, top=5, right=10, bottom=5).is_empty
        assert not Rect(left=0, top=0, right=1, bottom=1).is_empty

    def test_intersection_overlap(self):
        """Test intersection of overlapping rects."""
        a = Rect(left=10, top=20, right=110, bottom=50)
        b = Rect(left=60, top=0, right=200, bottom=40)

        overlap = a.intersection(b)

        assert overlap == Rect(left=60, top=20, right=110, bottom=40)

    def test_intersection_contained(self):
        """Test intersection with a fully contained rect is that rect."""
        outer = Rect(left=0, top=0, right=100, bottom=100)
        inner = Rect(left=10, top=10, right=20, bottom=20)

        assert outer.intersection(inner) == inner

    def test_intersection_disjoint(self):
        """Test disjoint rects have no intersection."""
        a = Rect(left=0, top=0, right=10, bottom=10)
        b = Rect(left=20, top=20, right=30, bottom=30)

        assert a.intersection(b) is None

    def test_intersection_touching_edge(self):
        """Test rects sharing only an edge do not intersect."""
        a = Rect(left=0, top=0, right=10, bottom=10)
        b = Rect(left=10, top=0, right=20, bottom=10)

        assert a.intersection(b) is None

    def test_repr(self):
        """Test string representation lists all edges."""
        rect = Rect(left=1, top=2, right=3, bottom=4)
        assert repr(rect) == "Rect(left=1.0, top=2.0, right=3.0, bottom=4.0)"
