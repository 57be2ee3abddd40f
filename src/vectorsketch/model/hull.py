"""
Convex Hull (Divide and Conquer)
================================
Merge-hull over a set of 2D vertices.

The input is split at the x-median, both halves are hulled recursively, and
the two sub-hulls are stitched together along their lower and upper
tangents. The recursion never mutates its input: every call receives and
returns its own arrays.

All rotational directions below are stated for a y-up frame; the returned
ring is ordered by ascending polar angle (counter-clockwise when y points up).
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import numpy as np

from vectorsketch.config import HULL_DUPLICATE_EPS, HULL_JITTER
from vectorsketch.model.geometry_utils import angular_sort, as_points, orient

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def _extends(anchor: npt.NDArray[np.float64], end: npt.NDArray[np.float64], candidate: npt.NDArray[np.float64]) -> bool:
    """Whether `candidate` lies on the line `anchor -> end`, beyond `end`."""
    return orient(anchor, end, candidate) == 0 and float(np.dot(candidate - end, end - anchor)) > 0


def _lower_tangent(
    left: npt.NDArray[np.float64],
    right: npt.NDArray[np.float64],
    a: int,
    b: int
) -> tuple[int, int]:
    """
    Walk the bridge `left[a] -> right[b]` down until no vertex of either
    hull lies below it. The left pointer moves backward, the right forward.
    Vertices lying on the bridge itself push its ends outward, so collinear
    extremes are never lost.
    """
    n1, n2 = len(left), len(right)
    done = False
    while not done:
        done = True
        while True:
            nxt = right[(b + 1) % n2]
            if not (orient(left[a], right[b], nxt) > 0 or _extends(left[a], right[b], nxt)):
                break
            b = (b + 1) % n2
        while True:
            prv = left[(a - 1) % n1]
            if not (orient(left[a], right[b], prv) > 0 or _extends(right[b], left[a], prv)):
                break
            a = (a - 1) % n1
            done = False
    return a, b


def _upper_tangent(
    left: npt.NDArray[np.float64],
    right: npt.NDArray[np.float64],
    a: int,
    b: int
) -> tuple[int, int]:
    """Mirror of `_lower_tangent`: left pointer forward, right pointer backward."""
    n1, n2 = len(left), len(right)
    done = False
    while not done:
        done = True
        while True:
            prv = right[(b - 1) % n2]
            if not (orient(left[a], right[b], prv) < 0 or _extends(left[a], right[b], prv)):
                break
            b = (b - 1) % n2
        while True:
            nxt = left[(a + 1) % n1]
            if not (orient(left[a], right[b], nxt) < 0 or _extends(right[b], left[a], nxt)):
                break
            a = (a + 1) % n1
            done = False
    return a, b


def _walk(ring: npt.NDArray[np.float64], start: int, stop: int) -> list[npt.NDArray[np.float64]]:
    """Vertices from `start` to `stop` inclusive, moving forward around the ring."""
    n = len(ring)
    out = [ring[start]]
    i = start
    while i != stop:
        i = (i + 1) % n
        out.append(ring[i])
    return out


def merge_hulls(
    left: npt.NDArray[np.float64],
    right: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """
    Merge two convex hulls separated by a vertical line (left entirely before
    right in (x, y) order).
    """
    left = angular_sort(left)
    right = angular_sort(right)

    # Lexicographic extremes so shared x coordinates still separate cleanly
    a0 = int(np.lexsort((left[:, 1], left[:, 0]))[-1])
    b0 = int(np.lexsort((right[:, 1], right[:, 0]))[0])

    lower_a, lower_b = _lower_tangent(left, right, a0, b0)
    upper_a, upper_b = _upper_tangent(left, right, a0, b0)

    chain = _walk(left, upper_a, lower_a) + _walk(right, lower_b, upper_b)
    return _drop_collinear(np.array(chain, dtype=np.float64))


def _drop_collinear(ring: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Remove ring vertices lying on the edge between their neighbours. A fully
    collinear ring collapses to its two lexicographic extremes.
    """
    if len(ring) <= 2:
        return ring
    n = len(ring)
    if all(orient(ring[i - 1], ring[i], ring[(i + 1) % n]) == 0 for i in range(n)):
        order = np.lexsort((ring[:, 1], ring[:, 0]))
        return ring[[order[0], order[-1]]]

    kept = list(ring)
    changed = True
    while changed and len(kept) > 2:
        changed = False
        m = len(kept)
        for i in range(m):
            if orient(kept[i - 1], kept[i], kept[(i + 1) % m]) == 0:
                del kept[i]
                changed = True
                break
    return np.array(kept, dtype=np.float64)


def _hull(points: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """`points` must arrive in (x, y) order."""
    if len(points) == 3 and orient(points[0], points[1], points[2]) == 0:
        # Sorted and collinear: the middle point cannot be a hull vertex
        return points[[0, 2]].copy()
    if len(points) <= 3:
        return points.copy()
    mid = len(points) // 2
    return merge_hulls(_hull(points[:mid]), _hull(points[mid:]))


def convex_hull(points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Convex hull of a point set.

    Args:
        points: (N, 2) coordinates. Duplicates should be removed or jittered
            beforehand (see `jitter_duplicates`).

    Returns:
        The hull vertices as an (M, 2) ring of ascending polar angle. Points
        lying on a hull edge are not reported; collinear input yields its two
        end points. Inputs of three or fewer points come back unchanged.
    """
    pts = as_points(points)
    if len(pts) <= 3:
        return pts.copy()
    order = np.lexsort((pts[:, 1], pts[:, 0]))
    hull = angular_sort(_hull(pts[order]))
    logger.debug("Convex hull: %d input vertices -> %d hull vertices", len(pts), len(hull))
    return hull


def jitter_duplicates(
    points: npt.ArrayLike,
    magnitude: float = HULL_JITTER,
    eps: float = HULL_DUPLICATE_EPS,
    rng: Optional[np.random.Generator] = None
) -> npt.NDArray[np.float64]:
    """
    Perturb every vertex that (nearly) coincides with an earlier one by a
    small random offset, so the tangent search never meets exact repeats.
    """
    pts = as_points(points).copy()
    if rng is None:
        rng = np.random.default_rng()
    jittered = 0
    for i in range(1, len(pts)):
        earlier = pts[:i]
        close = np.all(np.abs(earlier - pts[i]) <= eps, axis=1)
        if close.any():
            pts[i] = pts[i] + rng.uniform(-magnitude, magnitude, size=2)
            jittered += 1
    if jittered:
        logger.debug("Jittered %d near-duplicate hull vertices", jittered)
    return pts
