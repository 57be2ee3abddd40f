from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from math import pi
import numpy as np

from vectorsketch.config import COINCIDENT_EPS

if TYPE_CHECKING:
    from numpy import typing as npt

Coord = Sequence[float]


def deg2rad(degrees: float) -> float:
    return degrees * pi / 180


def as_points(points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Coerce any sequence of (x, y) pairs into an (N, 2) float array."""
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    return arr.reshape(-1, 2)


def orient(p1: Coord, p2: Coord, p3: Coord) -> float:
    """
    Orientation of the triple (p1, p2, p3).

    Zero means collinear. In a y-up frame a negative value is a
    counter-clockwise (left) turn and a positive value a clockwise one.
    """
    return (p2[1] - p1[1]) * (p3[0] - p2[0]) - (p2[0] - p1[0]) * (p3[1] - p2[1])


def cross(o: Coord, a: Coord, b: Coord) -> float:
    """z-component of (a - o) x (b - o); positive for a counter-clockwise turn."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def centroid(points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Arithmetic mean of the points."""
    pts = as_points(points)
    assert len(pts) > 0, "centroid of an empty point set"
    return pts.mean(axis=0)


def dedupe_vertices(
    points: npt.ArrayLike,
    eps: float = COINCIDENT_EPS
) -> npt.NDArray[np.float64]:
    """
    Drop vertices that coincide (within `eps` on both axes) with an earlier one.
    Keeps first-occurrence order.
    """
    pts = as_points(points)
    kept: list[npt.NDArray[np.float64]] = []
    for p in pts:
        if any(abs(p[0] - q[0]) <= eps and abs(p[1] - q[1]) <= eps for q in kept):
            continue
        kept.append(p)
    if not kept:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(kept, dtype=np.float64)


def angular_order(
    points: npt.ArrayLike,
    center: Coord | None = None
) -> npt.NDArray[np.int64]:
    """
    Indices that sort the points by polar angle around `center` (default: their
    centroid), ties broken by squared distance from it.
    """
    pts = as_points(points)
    if len(pts) == 0:
        return np.empty(0, dtype=np.int64)
    c = centroid(pts) if center is None else np.asarray(center, dtype=np.float64)
    d = pts - c
    angles = np.arctan2(d[:, 1], d[:, 0])
    dist2 = d[:, 0] ** 2 + d[:, 1] ** 2
    # lexsort sorts by the last key first
    return np.lexsort((dist2, angles))


def angular_sort(points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Return the points reordered into a ring of ascending polar angle."""
    pts = as_points(points)
    return pts[angular_order(pts)]


def point_in_triangle(p: Coord, a: Coord, b: Coord, c: Coord) -> bool:
    """True iff `p` lies strictly inside triangle abc (either winding)."""
    d1 = cross(a, b, p)
    d2 = cross(b, c, p)
    d3 = cross(c, a, p)
    return (d1 > 0 and d2 > 0 and d3 > 0) or (d1 < 0 and d2 < 0 and d3 < 0)


def signed_area(ring: npt.ArrayLike) -> float:
    """Shoelace area of a closed ring; positive for counter-clockwise winding."""
    pts = as_points(ring)
    if len(pts) < 3:
        return 0.0
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_area(ring: npt.ArrayLike) -> float:
    return abs(signed_area(ring))


def triangle_area(a: Coord, b: Coord, c: Coord) -> float:
    return abs(cross(a, b, c)) / 2.0
