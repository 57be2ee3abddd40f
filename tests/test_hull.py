"""
Tests for the divide-and-conquer convex hull.
"""
import numpy as np
import pytest

from vectorsketch.model.geometry_utils import cross, signed_area
from vectorsketch.model.hull import convex_hull, jitter_duplicates, merge_hulls


def monotone_chain(points):
    """Reference hull used to cross-check the merge hull."""
    pts = sorted(map(tuple, np.asarray(points, dtype=float).tolist()))
    lower, upper = [], []
    for p in pts:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)
    for p in reversed(pts):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)
    return lower[:-1] + upper[:-1]


def as_set(points):
    return {tuple(p) for p in np.asarray(points).tolist()}


class TestSmallInputs:

    def test_square_with_interior_point(self):
        hull = convex_hull([(0, 0), (4, 0), (4, 4), (0, 4), (2, 2)])
        assert as_set(hull) == {(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)}

    @pytest.mark.parametrize("points", [
        [],
        [(3, 4)],
        [(0, 0), (5, 5)],
        [(0, 0), (5, 0), (2, 7)],
    ])
    def test_three_or_fewer_points_returned_unchanged(self, points):
        hull = convex_hull(points)
        np.testing.assert_array_equal(hull, np.asarray(points, dtype=float).reshape(-1, 2))

    def test_input_not_mutated(self):
        pts = np.array([(4, 4), (0, 0), (2, 2), (4, 0), (0, 4)], dtype=float)
        before = pts.copy()
        convex_hull(pts)
        np.testing.assert_array_equal(pts, before)


class TestRandomPointSets:

    @pytest.mark.parametrize("n", [4, 5, 8, 13, 50, 200])
    def test_matches_reference_hull(self, rng, n):
        for _ in range(5):
            pts = rng.uniform(-100.0, 100.0, size=(n, 2))
            hull = convex_hull(pts)
            assert as_set(hull) == as_set(monotone_chain(pts))

    def test_hull_is_convex_and_counter_clockwise(self, rng):
        pts = rng.uniform(0.0, 500.0, size=(100, 2))
        hull = convex_hull(pts)
        m = len(hull)
        assert signed_area(hull) > 0
        for i in range(m):
            assert cross(hull[i], hull[(i + 1) % m], hull[(i + 2) % m]) > 0

    def test_every_input_point_contained(self, rng):
        pts = rng.normal(0.0, 30.0, size=(80, 2))
        hull = convex_hull(pts)
        m = len(hull)
        for p in pts:
            for i in range(m):
                assert cross(hull[i], hull[(i + 1) % m], p) >= -1e-9

    def test_hull_vertices_come_from_input(self, rng):
        pts = rng.uniform(-1.0, 1.0, size=(40, 2))
        assert as_set(convex_hull(pts)) <= as_set(pts)


def assert_hull_properties(hull, pts):
    m = len(hull)
    assert as_set(hull) <= as_set(pts)
    if m >= 3:
        for i in range(m):
            assert cross(hull[i], hull[(i + 1) % m], hull[(i + 2) % m]) > 0
        for p in pts:
            for i in range(m):
                assert cross(hull[i], hull[(i + 1) % m], p) >= 0


class TestCollinearInput:

    def test_shared_x_column_keeps_its_end_points(self):
        pts = [(0, 1), (0, 4), (1, 4), (3, 0), (3, 1), (3, 2), (3, 3)]
        hull = convex_hull(pts)
        assert as_set(hull) == {(0.0, 1.0), (0.0, 4.0), (1.0, 4.0), (3.0, 3.0), (3.0, 0.0)}

    def test_vertical_column(self):
        pts = [(3, y) for y in range(6)]
        assert as_set(convex_hull(pts)) == {(3.0, 0.0), (3.0, 5.0)}

    def test_horizontal_row(self):
        pts = [(x, 7) for x in (4, 0, 2, 1, 3)]
        assert as_set(convex_hull(pts)) == {(0.0, 7.0), (4.0, 7.0)}

    def test_points_on_hull_edges_are_dropped(self):
        pts = [(0, 0), (1, 0), (2, 0), (2, 1), (2, 2), (0, 2), (0, 1), (1, 1)]
        assert as_set(convex_hull(pts)) == {(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)}

    def test_vertical_edge_split_across_halves(self):
        hull = convex_hull([(0, 0), (0, 1), (0, 2), (1, 1)])
        assert as_set(hull) == {(0.0, 0.0), (0.0, 2.0), (1.0, 1.0)}

    @pytest.mark.parametrize("n", [4, 6, 9, 15, 30])
    def test_integer_grid_matches_reference_hull(self, rng, n):
        checked = 0
        for _ in range(40):
            pts = np.unique(rng.integers(0, 5, size=(n, 2)), axis=0).astype(float)
            if len(pts) < 4:
                continue
            hull = convex_hull(pts)
            assert as_set(hull) == as_set(monotone_chain(pts))
            assert_hull_properties(hull, pts)
            checked += 1
        assert checked > 0


class TestMerge:

    def test_merge_two_triangles(self):
        left = np.array([(0, 0), (2, 1), (0, 4)], dtype=float)
        right = np.array([(5, 0), (7, 2), (5, 4)], dtype=float)
        merged = merge_hulls(left, right)
        assert as_set(merged) == {(0.0, 0.0), (0.0, 4.0), (5.0, 0.0), (7.0, 2.0), (5.0, 4.0)}

    def test_merge_two_point_halves(self):
        merged = merge_hulls(np.array([(0, 0), (0, 4)], dtype=float), np.array([(4, 0), (4, 4)], dtype=float))
        assert as_set(merged) == {(0.0, 0.0), (0.0, 4.0), (4.0, 0.0), (4.0, 4.0)}


class TestJitter:

    def test_distinct_points_untouched(self):
        pts = [(0, 0), (1, 0), (0, 1)]
        np.testing.assert_array_equal(jitter_duplicates(pts), np.asarray(pts, dtype=float))

    def test_duplicates_are_perturbed_slightly(self):
        pts = [(1, 1), (1, 1), (1, 1), (5, 5)]
        out = jitter_duplicates(pts, magnitude=1e-3, rng=np.random.default_rng(0))
        np.testing.assert_array_equal(out[0], [1, 1])
        np.testing.assert_array_equal(out[3], [5, 5])
        assert len(as_set(out)) == 4
        assert np.all(np.abs(out[1:3] - 1.0) <= 1e-3)

    def test_seeded_generator_is_reproducible(self):
        pts = [(2, 2)] * 5
        a = jitter_duplicates(pts, rng=np.random.default_rng(42))
        b = jitter_duplicates(pts, rng=np.random.default_rng(42))
        np.testing.assert_array_equal(a, b)

    def test_hull_of_jittered_duplicates(self):
        pts = [(0, 0), (4, 0), (4, 4), (0, 4), (4, 4), (0, 0)]
        hull = convex_hull(jitter_duplicates(pts, rng=np.random.default_rng(3)))
        corners = np.array([(0, 0), (4, 0), (4, 4), (0, 4)], dtype=float)
        for corner in corners:
            assert np.min(np.abs(hull - corner).max(axis=1)) <= 1e-3
        for vertex in hull:
            assert np.min(np.abs(corners - vertex).max(axis=1)) <= 1e-3
