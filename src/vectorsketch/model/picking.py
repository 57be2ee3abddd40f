"""
Hit-Testing (Picking)
=====================
Tolerance-based tests deciding whether a pointer position targets a primitive.

* Points: axis-aligned tolerance square.
* Segments: outcode clipping of the segment against the tolerance square.
* Polygons: odd-even ray casting against the sorted ring.

`pick` walks a collection from the most recently created primitive to the
oldest, so the topmost (last drawn) one wins on overlap.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Collection, Optional, Protocol, Sequence, TypeVar

from vectorsketch.config import PICK_TOLERANCE, RAY_EPSILON, RAY_X_NUDGE
from vectorsketch.model.geometry_utils import as_points

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Outcode bits
INSIDE = 0
LEFT = 1
RIGHT = 2
BELOW = 4
ABOVE = 8


class Pickable(Protocol):
    def hit_test(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool: ...


P = TypeVar("P", bound=Pickable)


def point_hit(px: float, py: float, qx: float, qy: float, tolerance: float = PICK_TOLERANCE) -> bool:
    return abs(qx - px) < tolerance and abs(qy - py) < tolerance


def outcode(x: float, y: float, xmin: float, ymin: float, xmax: float, ymax: float) -> int:
    code = INSIDE
    if x < xmin:
        code |= LEFT
    elif x > xmax:
        code |= RIGHT
    if y < ymin:
        code |= BELOW
    elif y > ymax:
        code |= ABOVE
    return code


def segment_hit(
    x1: float, y1: float, x2: float, y2: float,
    qx: float, qy: float,
    tolerance: float = PICK_TOLERANCE
) -> bool:
    """
    Whether segment (x1, y1)-(x2, y2) crosses the square of half-width
    `tolerance` centred on (qx, qy).

    An endpoint inside the square accepts, two endpoints sharing an outside
    region reject. Otherwise the outside endpoint is slid along the segment
    onto the square boundary and the test repeats.
    """
    xmin, xmax = qx - tolerance, qx + tolerance
    ymin, ymax = qy - tolerance, qy + tolerance

    code1 = outcode(x1, y1, xmin, ymin, xmax, ymax)
    code2 = outcode(x2, y2, xmin, ymin, xmax, ymax)

    vertical = x1 == x2
    slope = 0.0 if vertical else (y2 - y1) / (x2 - x1)

    # Each pass pins one more coordinate to the boundary, four passes suffice
    for _ in range(4):
        if code1 == INSIDE or code2 == INSIDE:
            return True
        if code1 & code2:
            return False

        # Project whichever endpoint is outside; code1 is non-zero here
        code = code1
        if code & ABOVE:
            y = ymax
            x = x1 if vertical else x1 + (y - y1) / slope
        elif code & BELOW:
            y = ymin
            x = x1 if vertical else x1 + (y - y1) / slope
        elif code & RIGHT:
            x = xmax
            y = y1 + slope * (x - x1)
        else:  # LEFT
            x = xmin
            y = y1 + slope * (x - x1)

        x1, y1 = x, y
        code1 = outcode(x1, y1, xmin, ymin, xmax, ymax)

    return code1 == INSIDE


def polygon_hit(ring: npt.ArrayLike, qx: float, qy: float) -> bool:
    """
    Odd-even point-in-polygon test with a horizontal ray towards +x.

    The query is nudged off vertex heights so the ray never passes exactly
    through a ring vertex.
    """
    pts = as_points(ring)
    n = len(pts)
    if n < 3:
        return False

    if any(qy == y for y in pts[:, 1]):
        qy += RAY_EPSILON
    qx += RAY_X_NUDGE

    crossings = 0
    for i in range(n):
        ax, ay = pts[i]
        bx, by = pts[(i + 1) % n]
        # Horizontal edges never satisfy the straddle test
        if (ay > qy) != (by > qy):
            x_cross = ax + (qy - ay) * (bx - ax) / (by - ay)
            if qx < x_cross:
                crossings += 1
    return crossings % 2 == 1


def pick(
    candidates: Sequence[P],
    x: float,
    y: float,
    ignore: Optional[Collection[object]] = None,
    tolerance: float = PICK_TOLERANCE
) -> Optional[P]:
    """
    Return the most recently created candidate hit at (x, y), if any.

    Args:
        candidates: Primitives in creation order.
        x, y: Query position.
        ignore: Primitives to skip (compared by identity).
        tolerance: Half-width of the pick region.
    """
    skip = {id(p) for p in ignore} if ignore else set()
    for candidate in reversed(candidates):
        if id(candidate) in skip:
            continue
        if candidate.hit_test(x, y, tolerance):
            return candidate
    return None
