"""
Transform Engine
================
Affine operations applied to segments and polygons.

Every primitive keeps *reference* coordinates and recomputes its *current*
coordinates from them on each call:

    current = pivot + s * R(theta) * (reference - pivot)  (+ offset for segments)

so repeated edits never accumulate floating-point drift. Mirroring is the
exception: the reflected shape becomes the new reference and the rotation,
scale and offset state resets to identity.

The math helpers here operate on (N, 2) numpy arrays; the public operations
(`translate`, `rotate`, `scale`, `mirror`) dispatch to the primitive's own
implementation.
"""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from vectorsketch.config import COINCIDENT_EPS, TRIG_PRECISION
from vectorsketch.model.geometry_utils import as_points, deg2rad

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@runtime_checkable
class Movable(Protocol):
    def translate(self, dx: float, dy: float) -> None: ...


@runtime_checkable
class Transformable(Movable, Protocol):
    """Primitives that carry rotation/scale state on top of reference coordinates."""
    def rotate(self, degrees: float) -> None: ...
    def scale(self, factor: float) -> None: ...
    def mirror(self, line_p1: Sequence[float], line_p2: Sequence[float]) -> None: ...
    def transform(self) -> None: ...


def rotation_matrix(
    degrees: float,
    precision: Optional[int] = TRIG_PRECISION
) -> npt.NDArray[np.float64]:
    """
    Counter-clockwise 2x2 rotation matrix.

    Args:
        degrees: Rotation angle in degrees.
        precision: Number of decimals kept for sin/cos. None keeps full precision.
    """
    theta = deg2rad(degrees)
    cos_a = math.cos(theta)
    sin_a = math.sin(theta)
    if precision is not None:
        cos_a = round(cos_a, precision)
        sin_a = round(sin_a, precision)
    return np.array([[cos_a, -sin_a], [sin_a, cos_a]], dtype=np.float64)


def rotate_and_scale(
    points: npt.ArrayLike,
    degrees: float,
    factor: float,
    pivot: Sequence[float],
    precision: Optional[int] = TRIG_PRECISION
) -> npt.NDArray[np.float64]:
    """
    Rotate by `degrees` and scale by `factor` about `pivot`.

    Returns:
        A new (N, 2) array; the input is left untouched.
    """
    pts = as_points(points)
    if len(pts) == 0:
        return pts.copy()
    p = np.asarray(pivot, dtype=np.float64)
    m = factor * rotation_matrix(degrees, precision)
    return p + (pts - p) @ m.T


def reflect_across_line(
    points: npt.ArrayLike,
    line_p1: Sequence[float],
    line_p2: Sequence[float],
    precision: Optional[int] = None
) -> npt.NDArray[np.float64]:
    """
    Reflect points across the infinite line through `line_p1` and `line_p2`.

    The reflection is built from elementary steps: move `line_p1` to the
    origin, rotate by -theta so the line lies on the x-axis, negate y,
    rotate back by +theta and move the origin back to `line_p1`.

    Raises:
        ValueError: If the two line points coincide.
    """
    p1 = np.asarray(line_p1, dtype=np.float64)
    p2 = np.asarray(line_p2, dtype=np.float64)
    direction = p2 - p1
    if math.hypot(direction[0], direction[1]) <= COINCIDENT_EPS:
        raise ValueError("Mirror line needs two distinct points.")

    theta = math.degrees(math.atan2(direction[1], direction[0]))

    local = as_points(points) - p1
    local = local @ rotation_matrix(-theta, precision).T
    local[:, 1] = -local[:, 1]
    local = local @ rotation_matrix(theta, precision).T
    return local + p1


# ------------------------------------------------------------------------------
# Public operations
# ------------------------------------------------------------------------------
def translate(primitive: Movable, dx: float, dy: float) -> None:
    primitive.translate(dx, dy)


def _require_transformable(primitive: object, operation: str) -> Transformable:
    if not isinstance(primitive, Transformable):
        raise TypeError(f"{type(primitive).__name__} does not support {operation}.")
    return primitive


def rotate(primitive: Transformable, degrees: float) -> None:
    """Rotate about the primitive's reference centroid, relative to its current angle."""
    _require_transformable(primitive, "rotation").rotate(degrees)


def scale(primitive: Transformable, factor: float) -> None:
    """Multiply the primitive's scale factor; the pivot is its reference centroid."""
    _require_transformable(primitive, "scaling").scale(factor)


def mirror(
    primitive: Transformable,
    line_p1: Sequence[float],
    line_p2: Sequence[float]
) -> None:
    _require_transformable(primitive, "mirroring").mirror(line_p1, line_p2)
    logger.debug("Mirrored %r across %s -> %s", primitive, tuple(line_p1), tuple(line_p2))
