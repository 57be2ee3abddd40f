"""
Tests for the drawable primitives and their shared capabilities.
"""
import inspect

import numpy as np
import pytest

from vectorsketch.config import PICK_TOLERANCE
from vectorsketch.model.geometry_primitives import (
    BoundingBox, Drawable, Point, Polygon, Segment, Triangle, Vertex, validate_color,
)


class TestColor:

    def test_valid_color(self):
        assert validate_color(255, 89, 94) == (255, 89, 94, 255)

    @pytest.mark.parametrize("rgba", [(256, 0, 0, 255), (0, -1, 0, 255), (0, 0, 0, 300)])
    def test_out_of_range(self, rgba):
        with pytest.raises(ValueError):
            validate_color(*rgba)

    def test_set_color_on_every_kind(self):
        for primitive in (Point(0, 0), Segment(0, 0, 1, 1), Polygon()):
            primitive.set_color(1, 2, 3, 4)
            assert primitive.color == (1, 2, 3, 4)


class TestVertexAndBox:

    def test_vertex_difference(self):
        delta = Vertex(7, 2) - Vertex(3, 5)
        assert delta == Vertex(4, -3)
        assert tuple(delta) == (4, -3)

    def test_bounding_box_around(self):
        box = BoundingBox.around([(3, 1), (-2, 5), (0, -4)])
        assert box == BoundingBox(-2, -4, 3, 5)

    def test_padded_corners(self):
        corners = BoundingBox(0, 0, 10, 5).padded(4).corners()
        assert corners == [(-4, -4), (14, -4), (14, 9), (-4, 9)]


class TestPoint:

    def test_is_drawable(self):
        assert isinstance(Point(0, 0), Drawable)

    def test_identity_not_value_equality(self):
        assert Point(1, 1) != Point(1, 1)

    def test_move_and_box(self):
        point = Point(1, 2)
        point.set_position(5, 5)
        point.translate(1, -1)
        assert point.bounding_box() == BoundingBox(6, 4, 6, 4)
        np.testing.assert_array_equal(point.vertices(), [[6, 4]])


class TestSegment:

    def test_endpoint_accessors(self):
        segment = Segment(1, 2, 3, 4)
        assert (segment.x1, segment.y1, segment.x2, segment.y2) == (1, 2, 3, 4)
        np.testing.assert_array_equal(segment.midpoint, [2, 3])

    def test_degenerate(self):
        assert Segment(5, 5, 5, 5).is_degenerate()
        assert not Segment(5, 5, 5, 6).is_degenerate()

    def test_set_position_keeps_transform_state(self):
        segment = Segment(0, 0, 10, 0)
        segment.translate(0, 5)
        segment.set_position(0, 0, 20, 0)
        np.testing.assert_allclose(segment.current, [[0, 5], [20, 5]])

    def test_vertices_are_a_copy(self):
        segment = Segment(0, 0, 10, 0)
        segment.vertices()[0, 0] = 99
        assert segment.x1 == 0

    def test_hit_test_follows_current_coordinates(self):
        segment = Segment(0, 0, 100, 0)
        segment.rotate(90.0)
        assert segment.hit_test(50, 20)
        assert not segment.hit_test(20, 0)


class TestPolygon:

    def test_ring_sorted_and_triangulated(self):
        polygon = Polygon.from_vertices([(10, 10), (0, 0), (10, 0), (0, 10)])
        assert polygon.is_valid
        assert polygon.vertex_count == 4
        assert len(polygon.triangles) == 2
        assert polygon.area() == pytest.approx(100.0)
        # Click order is kept separately from the sorted ring
        assert polygon.raw[0] == (10.0, 10.0)

    def test_triangles_index_the_arena(self):
        polygon = Polygon.from_vertices([(0, 0), (10, 5), (0, 10), (3, 5)])
        assert polygon.current_triangles().shape == (2, 3, 2)
        for triangle in polygon.triangles:
            assert isinstance(triangle, Triangle)
            np.testing.assert_array_equal(
                triangle.corners(polygon.current), polygon.current[list(triangle.indices)]
            )
        assert polygon.area() == pytest.approx(35.0)

    def test_concave_pick(self):
        polygon = Polygon.from_vertices([(0, 0), (10, 5), (0, 10), (3, 5)])
        assert polygon.hit_test(5, 5)
        assert not polygon.hit_test(1, 5)

    def test_growing_vertex_by_vertex(self):
        polygon = Polygon()
        polygon.add_vertex(0, 0)
        polygon.add_vertex(10, 0)
        assert not polygon.is_valid
        assert polygon.triangles == []
        polygon.add_vertex(5, 10)
        assert polygon.is_valid
        assert polygon.area() == pytest.approx(50.0)

    def test_rubber_band_vertex(self):
        polygon = Polygon.from_vertices([(0, 0), (10, 0), (10, 0)])
        assert polygon.vertex_count == 2
        polygon.update_last_vertex(10, 10)
        assert polygon.area() == pytest.approx(50.0)
        polygon.remove_last_vertex()
        assert polygon.raw == [(0.0, 0.0), (10.0, 0.0)]
        assert not polygon.is_valid

    def test_empty_polygon_edits_are_programming_errors(self):
        with pytest.raises(AssertionError):
            Polygon().remove_last_vertex()
        with pytest.raises(AssertionError):
            Polygon().update_last_vertex(1, 1)

    def test_bounding_box(self):
        polygon = Polygon.from_vertices([(0, 0), (10, 5), (0, 10), (3, 5)])
        assert polygon.bounding_box() == BoundingBox(0, 0, 10, 10)

    def test_shared_corners_transform_once(self):
        polygon = Polygon.from_vertices([(0, 0), (6, 1), (8, 5), (4, 9), (-1, 6)])
        assert len(polygon.current) == 5
        assert polygon.current_triangles().shape == (3, 3, 2)

    def test_hit_test_matches_drawable_signature(self):
        params = inspect.signature(Polygon.hit_test).parameters
        assert params["tolerance"].default == PICK_TOLERANCE
        polygon = Polygon.from_vertices([(0, 0), (10, 0), (10, 10), (0, 10)])
        # Filled shapes ignore the tolerance
        assert polygon.hit_test(5, 5, 0.5)
        assert not polygon.hit_test(12, 5, 50.0)
