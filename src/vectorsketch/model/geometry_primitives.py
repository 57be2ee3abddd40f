"""
Drawable Primitives for the editor scene.

Three kinds share one capability interface (`Drawable`): colour, bounding
box, picking and translation. Segments and polygons additionally keep
reference coordinates plus rotation/scale state and derive their current
coordinates from them (see `vectorsketch.model.transforms`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import TYPE_CHECKING, Iterable, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from vectorsketch.config import COINCIDENT_EPS, DEFAULT_COLOR, PICK_TOLERANCE, Color
from vectorsketch.model.picking import point_hit, polygon_hit, segment_hit
from vectorsketch.model.transforms import reflect_across_line, rotate_and_scale
from vectorsketch.model.triangulation import sort_ring, triangulate

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def validate_color(r: int, g: int, b: int, a: int = 255) -> Color:
    """Check and pack an RGBA colour with 0-255 integer components."""
    color = (r, g, b, a)
    for component in color:
        if not 0 <= component <= 255:
            raise ValueError(f"Colour component out of range 0-255: {color}")
    return tuple(int(c) for c in color)  # type: ignore[return-value]


@dataclass
class Vertex:
    """A 2D coordinate. No identity beyond its position."""
    x: float
    y: float

    def __sub__(self, other: Vertex) -> Vertex:
        return Vertex(self.x - other.x, self.y - other.y)

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(frozen=True)
class BoundingBox:
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @staticmethod
    def around(points: npt.ArrayLike) -> BoundingBox:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        assert len(pts) > 0, "bounding box of an empty point set"
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        return BoundingBox(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))

    def padded(self, amount: float) -> BoundingBox:
        return BoundingBox(self.xmin - amount, self.ymin - amount, self.xmax + amount, self.ymax + amount)

    def corners(self) -> list[tuple[float, float]]:
        """Counter-clockwise, starting at (xmin, ymin)."""
        return [
            (self.xmin, self.ymin),
            (self.xmax, self.ymin),
            (self.xmax, self.ymax),
            (self.xmin, self.ymax),
        ]


@runtime_checkable
class Drawable(Protocol):
    """Capability interface every primitive kind implements directly."""
    color: Color

    def set_color(self, r: int, g: int, b: int, a: int = 255) -> None: ...
    def bounding_box(self) -> BoundingBox: ...
    def hit_test(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool: ...
    def translate(self, dx: float, dy: float) -> None: ...
    def vertices(self) -> npt.NDArray[np.float64]: ...


# ------------------------------------------------------------------------------
# Point
# ------------------------------------------------------------------------------
@dataclass(eq=False)
class Point:
    """A single vertex with a colour. Only ever moved by translation."""
    x: float
    y: float
    color: Color = DEFAULT_COLOR

    def set_color(self, r: int, g: int, b: int, a: int = 255) -> None:
        self.color = validate_color(r, g, b, a)

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def translate(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def vertices(self) -> npt.NDArray[np.float64]:
        return np.array([[self.x, self.y]], dtype=np.float64)

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.x, self.y)

    def hit_test(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        return point_hit(self.x, self.y, x, y, tolerance)


# ------------------------------------------------------------------------------
# Segment
# ------------------------------------------------------------------------------
class Segment:
    """
    A straight segment between two endpoints.

    The reference endpoints are set at creation (or by `set_position`); the
    current endpoints are always recomputed from them as

        rotate_and_scale(reference, angle, scale, pivot=reference midpoint) + offset
    """

    def __init__(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color = DEFAULT_COLOR,
    ) -> None:
        self.reference = np.array([[x1, y1], [x2, y2]], dtype=np.float64)
        self.current = self.reference.copy()
        self.angle: float = 0.0
        self.scale_factor: float = 1.0
        self.offset = np.zeros(2, dtype=np.float64)
        self.color: Color = color

    def __repr__(self) -> str:
        (x1, y1), (x2, y2) = self.current
        return f"{self.__class__.__name__}(({x1:g}, {y1:g}) -> ({x2:g}, {y2:g}))"

    @property
    def x1(self) -> float:
        return float(self.current[0, 0])

    @property
    def y1(self) -> float:
        return float(self.current[0, 1])

    @property
    def x2(self) -> float:
        return float(self.current[1, 0])

    @property
    def y2(self) -> float:
        return float(self.current[1, 1])

    @property
    def midpoint(self) -> npt.NDArray[np.float64]:
        """Midpoint of the reference endpoints; the rotation/scale pivot."""
        return self.reference.mean(axis=0)

    @property
    def length(self) -> float:
        d = self.current[1] - self.current[0]
        return math.hypot(d[0], d[1])

    def is_degenerate(self, eps: float = COINCIDENT_EPS) -> bool:
        d = self.reference[1] - self.reference[0]
        return abs(d[0]) <= eps and abs(d[1]) <= eps

    def set_color(self, r: int, g: int, b: int, a: int = 255) -> None:
        self.color = validate_color(r, g, b, a)

    def set_position(self, x1: float, y1: float, x2: float, y2: float) -> None:
        """Replace the reference endpoints; the transform state is kept."""
        self.reference = np.array([[x1, y1], [x2, y2]], dtype=np.float64)
        self.transform()

    # ---- transforms ----

    def transform(self) -> None:
        self.current = rotate_and_scale(
            self.reference, self.angle, self.scale_factor, self.midpoint
        ) + self.offset

    def translate(self, dx: float, dy: float) -> None:
        self.offset = self.offset + np.array([dx, dy], dtype=np.float64)
        self.transform()

    def rotate(self, degrees: float) -> None:
        self.angle += degrees
        self.transform()

    def set_rotation(self, degrees: float) -> None:
        self.angle = degrees
        self.transform()

    def scale(self, factor: float) -> None:
        self.set_scale(self.scale_factor * factor)

    def set_scale(self, factor: float) -> None:
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")
        self.scale_factor = factor
        self.transform()

    def mirror(self, line_p1: Sequence[float], line_p2: Sequence[float]) -> None:
        """Reflect the current endpoints; they become the new reference."""
        self.reference = reflect_across_line(self.current, line_p1, line_p2)
        self.angle = 0.0
        self.scale_factor = 1.0
        self.offset = np.zeros(2, dtype=np.float64)
        self.current = self.reference.copy()

    # ---- Drawable ----

    def vertices(self) -> npt.NDArray[np.float64]:
        return self.current.copy()

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.around(self.current)

    def hit_test(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        (x1, y1), (x2, y2) = self.current
        return segment_hit(x1, y1, x2, y2, x, y, tolerance)


# ------------------------------------------------------------------------------
# Polygon
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Triangle:
    """Three indices into the owning polygon's vertex arena."""
    a: int
    b: int
    c: int

    @property
    def indices(self) -> tuple[int, int, int]:
        return self.a, self.b, self.c

    def corners(self, arena: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        return arena[list(self.indices)]


@dataclass(eq=False)
class Polygon:
    """
    A filled polygon grown vertex by vertex.

    `raw` keeps the vertices in click order. The derived ring is the
    deduplicated, angularly sorted version of it and is stored once as a
    vertex arena (`reference` / `current`); triangles index into the arena so
    every shared corner is transformed exactly once.
    """
    color: Color = DEFAULT_COLOR
    raw: list[tuple[float, float]] = field(default_factory=list)
    angle: float = 0.0
    scale_factor: float = 1.0

    reference: npt.NDArray[np.float64] = field(init=False, repr=False)
    current: npt.NDArray[np.float64] = field(init=False, repr=False)
    triangles: list[Triangle] = field(init=False, repr=False)
    centroid: npt.NDArray[np.float64] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.raw = [(float(x), float(y)) for x, y in self.raw]
        self._rebuild()

    @classmethod
    def from_vertices(cls, vertices: Iterable[Sequence[float]], color: Color = DEFAULT_COLOR) -> Polygon:
        return cls(color=color, raw=[(v[0], v[1]) for v in vertices])

    # ---- derived data ----

    def _rebuild(self, source: Optional[npt.ArrayLike] = None) -> None:
        """
        Re-sort the ring, re-triangulate and re-derive current coordinates.

        Args:
            source: Vertices to rebuild from; defaults to the raw click list.
        """
        ring = sort_ring(self.raw if source is None else source)
        self.reference = ring
        self.triangles = [Triangle(*t) for t in triangulate(ring)] if len(ring) >= 3 else []
        self.centroid = ring.mean(axis=0) if len(ring) else np.zeros(2, dtype=np.float64)
        self.transform()

    @property
    def is_valid(self) -> bool:
        """At least three distinct vertices."""
        return len(self.reference) >= 3

    @property
    def vertex_count(self) -> int:
        return len(self.reference)

    def reference_triangles(self) -> npt.NDArray[np.float64]:
        """(T, 3, 2) reference corners of every triangle."""
        return self._corners(self.reference)

    def current_triangles(self) -> npt.NDArray[np.float64]:
        """(T, 3, 2) current corners of every triangle."""
        return self._corners(self.current)

    def _corners(self, arena: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        if not self.triangles:
            return np.empty((0, 3, 2), dtype=np.float64)
        return np.stack([t.corners(arena) for t in self.triangles])

    def area(self) -> float:
        """Total area of the current triangles."""
        tri = self.current_triangles()
        if len(tri) == 0:
            return 0.0
        u = tri[:, 1] - tri[:, 0]
        v = tri[:, 2] - tri[:, 0]
        return float(np.abs(u[:, 0] * v[:, 1] - u[:, 1] * v[:, 0]).sum() / 2.0)

    # ---- editing ----

    def add_vertex(self, x: float, y: float) -> None:
        self.raw.append((float(x), float(y)))
        self._rebuild()

    def update_last_vertex(self, x: float, y: float) -> None:
        """Move the most recent vertex (the rubber band while drawing)."""
        assert self.raw, "update_last_vertex on an empty polygon"
        self.raw[-1] = (float(x), float(y))
        self._rebuild()

    def remove_last_vertex(self) -> None:
        assert self.raw, "remove_last_vertex on an empty polygon"
        self.raw.pop()
        self._rebuild()

    def set_color(self, r: int, g: int, b: int, a: int = 255) -> None:
        self.color = validate_color(r, g, b, a)

    # ---- transforms ----

    def transform(self) -> None:
        self.current = rotate_and_scale(self.reference, self.angle, self.scale_factor, self.centroid)

    def translate(self, dx: float, dy: float) -> None:
        """Bake the delta into the reference vertices, then re-sort and re-triangulate."""
        delta = np.array([dx, dy], dtype=np.float64)
        self.raw = [(x + dx, y + dy) for x, y in self.raw]
        # One arena row per unique vertex, however many triangles share it
        self._rebuild(self.reference + delta)

    def rotate(self, degrees: float) -> None:
        self.angle += degrees
        self.transform()

    def set_rotation(self, degrees: float) -> None:
        self.angle = degrees
        self.transform()

    def scale(self, factor: float) -> None:
        self.set_scale(self.scale_factor * factor)

    def set_scale(self, factor: float) -> None:
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")
        self.scale_factor = factor
        self.transform()

    def mirror(self, line_p1: Sequence[float], line_p2: Sequence[float]) -> None:
        """Reflect the current ring; it becomes the new reference with identity state."""
        mirrored = reflect_across_line(self.current, line_p1, line_p2)
        self.raw = [(float(x), float(y)) for x, y in mirrored]
        self.angle = 0.0
        self.scale_factor = 1.0
        self._rebuild()

    # ---- Drawable ----

    def vertices(self) -> npt.NDArray[np.float64]:
        """Current ring vertices."""
        return self.current.copy()

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.around(self.current)

    def hit_test(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        # Inside/outside only; the tolerance is unused for filled shapes
        return polygon_hit(self.current, x, y)
