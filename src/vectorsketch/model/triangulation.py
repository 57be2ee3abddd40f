"""
Polygon Triangulation
=====================
Ear-clipping decomposition of the simple ring produced by the angular sort.

A polygon's vertices are first deduplicated and sorted by polar angle around
their centroid (`sort_ring`), which always yields a non self-intersecting
ring regardless of click order. `triangulate` then clips ears until three
vertices remain, returning index triples into that ring.
"""
from __future__ import annotations

import logging
from math import degrees
from typing import TYPE_CHECKING, Sequence

import numpy as np

from vectorsketch.config import COINCIDENT_EPS
from vectorsketch.model.geometry_utils import (
    angular_sort, as_points, cross, dedupe_vertices, point_in_triangle, signed_area
)

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

TriangleIndices = tuple[int, int, int]


def sort_ring(points: npt.ArrayLike, eps: float = COINCIDENT_EPS) -> npt.NDArray[np.float64]:
    """Deduplicate coincident vertices and order the rest by polar angle."""
    return angular_sort(dedupe_vertices(points, eps))


def _angle_between(u: npt.NDArray[np.float64], v: npt.NDArray[np.float64]) -> float:
    """Unsigned angle in degrees; a zero-length vector subtends nothing."""
    nu = np.linalg.norm(u)
    nv = np.linalg.norm(v)
    if nu == 0.0 or nv == 0.0:
        return 0.0
    # Rounding can push |cos| slightly past 1
    cos_a = np.clip(np.dot(u, v) / (nu * nv), -1.0, 1.0)
    return degrees(float(np.arccos(cos_a)))


def subtended_angle_sum(
    prev: Sequence[float],
    mid: Sequence[float],
    nxt: Sequence[float],
    center: Sequence[float]
) -> float:
    """
    Sum of the angles at `mid` between each neighbour and the ring centroid.
    For a vertex whose centroid ray falls inside its corner this is the
    interior angle, so a value below 180 marks a convex vertex.
    """
    m = np.asarray(mid, dtype=np.float64)
    to_center = np.asarray(center, dtype=np.float64) - m
    return (
        _angle_between(np.asarray(prev, dtype=np.float64) - m, to_center)
        + _angle_between(np.asarray(nxt, dtype=np.float64) - m, to_center)
    )


def is_ear(
    ring: npt.NDArray[np.float64],
    prev: int,
    mid: int,
    nxt: int,
    others: Sequence[int],
    center: Sequence[float],
    winding: float = 1.0,
    *,
    check_angle: bool = True
) -> bool:
    """
    Whether triangle (prev, mid, nxt) can be clipped from the ring.

    Args:
        ring: (N, 2) vertex array.
        prev, mid, nxt: Indices of three consecutive ring vertices.
        others: Indices of the remaining ring vertices.
        center: Centroid used for the convexity test.
        winding: +1 for a counter-clockwise ring, -1 for clockwise.
        check_angle: Apply the subtended-angle convexity test.
    """
    a, b, c = ring[prev], ring[mid], ring[nxt]
    if cross(a, b, c) * winding <= 0.0:
        return False
    if check_angle and subtended_angle_sum(a, b, c, center) >= 180.0:
        return False
    return not any(point_in_triangle(ring[o], a, b, c) for o in others)


def _find_ear(
    ring: npt.NDArray[np.float64],
    remaining: list[int],
    winding: float
) -> int:
    """Position (in `remaining`) of the first vertex of a clippable triple."""
    m = len(remaining)
    center = ring[remaining].mean(axis=0)

    def triples():
        for i in range(m):
            tri = (remaining[i], remaining[(i + 1) % m], remaining[(i + 2) % m])
            others = [v for v in remaining if v not in tri]
            yield i, tri, others

    for check_angle in (True, False):
        for i, (p, q, r), others in triples():
            if is_ear(ring, p, q, r, others, center, winding, check_angle=check_angle):
                return i

    # Collinear or numerically flat ring: take any triple turning the right way
    for i, (p, q, r), _ in triples():
        if cross(ring[p], ring[q], ring[r]) * winding > 0.0:
            return i

    logger.debug("No ear found in %d-vertex ring, clipping the first triple.", m)
    return 0


def triangulate(ring: npt.ArrayLike) -> list[TriangleIndices]:
    """
    Ear-clip a simple ring.

    Args:
        ring: Vertices in ring order (typically the output of `sort_ring`).

    Returns:
        Exactly n - 2 index triples into `ring`.
    """
    pts = as_points(ring)
    n = len(pts)
    assert n >= 3, f"triangulate needs at least 3 vertices, got {n}"

    winding = 1.0 if signed_area(pts) >= 0.0 else -1.0
    remaining = list(range(n))
    triangles: list[TriangleIndices] = []

    while len(remaining) > 3:
        m = len(remaining)
        i = _find_ear(pts, remaining, winding)
        triangles.append((remaining[i], remaining[(i + 1) % m], remaining[(i + 2) % m]))
        del remaining[(i + 1) % m]

    triangles.append((remaining[0], remaining[1], remaining[2]))
    return triangles
