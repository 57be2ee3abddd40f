"""
Scene (Data Model)
==================
This module defines the container owning every drawable primitive.

Why is this file needed?
------------------------
1. Ownership: Each primitive kind lives in exactly one typed collection, so
   deleting a primitive means removing it from one list.
2. Batching: The renderer asks for one flattened position/colour buffer per
   kind (`snapshot`) instead of walking primitives itself.
3. Decoupling: The editor store (and tests) pass a Scene around explicitly;
   there is no process-wide registry of primitives.

Classes:
    RenderSnapshot: Flattened render buffers per primitive kind.
    Scene: The primitive collections plus picking and hull helpers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Collection, Iterator, Optional, Sequence, Union

import numpy as np

from vectorsketch.config import DEFAULT_COLOR, PICK_TOLERANCE, Color
from vectorsketch.model.geometry_primitives import Point, Polygon, Segment
from vectorsketch.model.hull import convex_hull, jitter_duplicates
from vectorsketch.model.picking import pick

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

Primitive = Union[Point, Segment, Polygon]


def _color_buffer(colors: list[Color], repeat: int) -> npt.NDArray[np.uint8]:
    """RGBA bytes, each colour repeated once per emitted vertex."""
    if not colors:
        return np.empty(0, dtype=np.uint8)
    return np.repeat(np.array(colors, dtype=np.uint8), repeat, axis=0).ravel()


@dataclass
class RenderSnapshot:
    """
    Current (not reference) coordinates, flattened the way a vertex buffer
    expects them: x0, y0, x1, y1, ... as float32 and r, g, b, a per vertex as uint8.
    Polygons are emitted as independent triangles.
    """
    point_positions: npt.NDArray[np.float32]
    point_colors: npt.NDArray[np.uint8]
    segment_positions: npt.NDArray[np.float32]
    segment_colors: npt.NDArray[np.uint8]
    polygon_positions: npt.NDArray[np.float32]
    polygon_colors: npt.NDArray[np.uint8]

    @property
    def point_vertex_count(self) -> int:
        return len(self.point_positions) // 2

    @property
    def segment_vertex_count(self) -> int:
        return len(self.segment_positions) // 2

    @property
    def polygon_vertex_count(self) -> int:
        return len(self.polygon_positions) // 2


@dataclass
class Scene:
    """One typed collection per primitive kind, each in creation order."""
    points: list[Point] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)

    # ---- creation / deletion ----

    def add_point(self, x: float, y: float, color: Color = DEFAULT_COLOR) -> Point:
        point = Point(x, y, color)
        self.points.append(point)
        return point

    def add_segment(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        color: Color = DEFAULT_COLOR
    ) -> Optional[Segment]:
        """Create a segment; coincident endpoints are discarded and yield None."""
        segment = Segment(x1, y1, x2, y2, color)
        if segment.is_degenerate():
            logger.debug("Discarding zero-length segment at (%g, %g)", x1, y1)
            return None
        self.segments.append(segment)
        return segment

    def begin_segment(self, x: float, y: float, color: Color = DEFAULT_COLOR) -> Segment:
        """Start a drag-to-draw segment; both endpoints begin at (x, y)."""
        segment = Segment(x, y, x, y, color)
        self.segments.append(segment)
        return segment

    def add_polygon(
        self,
        vertices: Sequence[Sequence[float]] = (),
        color: Color = DEFAULT_COLOR
    ) -> Polygon:
        """Create a polygon. It may still be under construction, so it is not pruned."""
        polygon = Polygon.from_vertices(vertices, color)
        self.polygons.append(polygon)
        return polygon

    def _collection_for(self, primitive: Primitive) -> list:
        if isinstance(primitive, Point):
            return self.points
        if isinstance(primitive, Segment):
            return self.segments
        if isinstance(primitive, Polygon):
            return self.polygons
        raise TypeError(f"Unknown primitive type: {type(primitive).__name__}")

    def delete(self, primitive: Primitive) -> bool:
        """Remove a primitive from its collection. Returns False if it was not present."""
        collection = self._collection_for(primitive)
        for i, item in enumerate(collection):
            if item is primitive:
                del collection[i]
                return True
        return False

    def prune_segment(self, segment: Segment) -> bool:
        """Delete the segment if its endpoints coincide. Returns True if removed."""
        if segment.is_degenerate():
            logger.debug("Pruning zero-length segment %r", segment)
            return self.delete(segment)
        return False

    def prune_polygon(self, polygon: Polygon) -> bool:
        """Delete the polygon if it has fewer than 3 distinct vertices. Returns True if removed."""
        if not polygon.is_valid:
            logger.debug("Pruning polygon with %d distinct vertices", polygon.vertex_count)
            return self.delete(polygon)
        return False

    def clear(self) -> None:
        self.points.clear()
        self.segments.clear()
        self.polygons.clear()
        logger.info("Scene cleared.")

    def __contains__(self, primitive: object) -> bool:
        try:
            collection = self._collection_for(primitive)  # type: ignore[arg-type]
        except TypeError:
            return False
        return any(item is primitive for item in collection)

    def __iter__(self) -> Iterator[Primitive]:
        yield from self.points
        yield from self.segments
        yield from self.polygons

    def counts(self, exclude: Optional[Collection[object]] = None) -> dict[str, int]:
        skip = {id(p) for p in exclude} if exclude else set()
        return {
            "points": sum(id(p) not in skip for p in self.points),
            "segments": sum(id(s) not in skip for s in self.segments),
            "polygons": sum(id(p) not in skip for p in self.polygons),
        }

    # ---- picking ----

    def pick_point(
        self, x: float, y: float,
        ignore: Optional[Collection[object]] = None,
        tolerance: float = PICK_TOLERANCE
    ) -> Optional[Point]:
        return pick(self.points, x, y, ignore, tolerance)

    def pick_segment(
        self, x: float, y: float,
        ignore: Optional[Collection[object]] = None,
        tolerance: float = PICK_TOLERANCE
    ) -> Optional[Segment]:
        return pick(self.segments, x, y, ignore, tolerance)

    def pick_polygon(
        self, x: float, y: float,
        ignore: Optional[Collection[object]] = None,
        tolerance: float = PICK_TOLERANCE
    ) -> Optional[Polygon]:
        return pick(self.polygons, x, y, ignore, tolerance)

    def pick(
        self, x: float, y: float,
        ignore: Optional[Collection[object]] = None,
        tolerance: float = PICK_TOLERANCE
    ) -> Optional[Primitive]:
        """Points win over segments, segments over polygons."""
        for picker in (self.pick_point, self.pick_segment, self.pick_polygon):
            hit = picker(x, y, ignore, tolerance)
            if hit is not None:
                return hit
        return None

    # ---- convex hull ----

    def hull_vertices(self, exclude: Optional[Collection[object]] = None) -> npt.NDArray[np.float64]:
        """Current coordinates of every point, segment endpoint and polygon ring vertex."""
        skip = {id(p) for p in exclude} if exclude else set()
        chunks = [p.vertices() for p in self if id(p) not in skip]
        if not chunks:
            return np.empty((0, 2), dtype=np.float64)
        return np.concatenate(chunks, axis=0)

    def convex_hull(
        self,
        exclude: Optional[Collection[object]] = None,
        rng: Optional[np.random.Generator] = None
    ) -> npt.NDArray[np.float64]:
        """
        Hull over all scene geometry.

        Args:
            exclude: Transient primitives (hover box, previous hull edges) to leave out.
            rng: Random generator for the duplicate jitter; a fresh one by default.
        """
        return convex_hull(jitter_duplicates(self.hull_vertices(exclude), rng=rng))

    # ---- rendering ----

    def snapshot(self) -> RenderSnapshot:
        point_xy = [(p.x, p.y) for p in self.points]
        segment_xy = [s.current for s in self.segments]
        polygon_tris = [(poly.current_triangles(), poly.color) for poly in self.polygons]

        triangles = [tri for tri, _ in polygon_tris if len(tri)]
        polygon_positions = (
            np.concatenate(triangles, axis=0).astype(np.float32).ravel()
            if triangles else np.empty(0, dtype=np.float32)
        )
        polygon_colors: list[Color] = []
        for tri, color in polygon_tris:
            polygon_colors.extend([color] * (3 * len(tri)))

        return RenderSnapshot(
            point_positions=np.array(point_xy, dtype=np.float32).ravel(),
            point_colors=_color_buffer([p.color for p in self.points], 1),
            segment_positions=(
                np.concatenate(segment_xy, axis=0).astype(np.float32).ravel()
                if segment_xy else np.empty(0, dtype=np.float32)
            ),
            segment_colors=_color_buffer([s.color for s in self.segments], 2),
            polygon_positions=polygon_positions,
            polygon_colors=_color_buffer(polygon_colors, 1),
        )
