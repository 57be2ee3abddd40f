from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np
from PySide6.QtCore import QObject, Signal

from vectorsketch.config import HOVER_BOX_PADDING, HOVER_COLOR, HULL_COLOR, PALETTE, Color
from vectorsketch.model.geometry_primitives import Polygon, Segment, Vertex
from vectorsketch.model.scene import Primitive, Scene
from vectorsketch.model import transforms

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class ToolMode(StrEnum):
    """What a click on the canvas does."""
    POINT = "point"
    SEGMENT = "segment"
    POLYGON = "polygon"
    SELECT = "select"


@dataclass
class DrawingState:
    """Primitives being drawn by an unfinished gesture."""
    segment: Optional[Segment] = None
    polygon: Optional[Polygon] = None
    drag_origin: Optional[Vertex] = None


class EditorStore(QObject):
    """
    Central editor state with signals for view sync.

    Receives pointer gestures as plain calls, routes them to the scene and
    keeps the transient overlays (hover box, hull edges) in step with it.
    """
    scene_changed = Signal(object)
    counts_changed = Signal(object)
    selection_changed = Signal(object)
    hover_changed = Signal(object)
    tool_changed = Signal(object)

    def __init__(self, scene: Optional[Scene] = None, rng: Optional[np.random.Generator] = None) -> None:
        super().__init__()
        self.scene = scene if scene is not None else Scene()
        self.tool = ToolMode.POINT
        self.color_name = "black"
        self.color: Color = PALETTE[self.color_name]
        self.drawing = DrawingState()
        self.hovered: Optional[Primitive] = None
        self.selected: Optional[Primitive] = None
        self.hull_enabled = False
        self.pointer = Vertex(0.0, 0.0)
        self._hover_box: list[Segment] = []
        self._hull_edges: list[Segment] = []
        self._rng = rng

    # ---- settings ----

    def set_tool(self, tool: ToolMode) -> None:
        tool = ToolMode(tool)
        if tool == self.tool:
            return
        self._abandon_gestures()
        if tool != ToolMode.SELECT:
            self._set_hovered(None)
            self._set_selected(None)
        self.tool = tool
        self.tool_changed.emit(tool)
        self._changed()

    def set_color(self, name: str) -> None:
        """Pick a palette colour; an active selection is recoloured too."""
        if name not in PALETTE:
            raise KeyError(f"No colour named '{name}' in the palette")
        self.color_name = name
        self.color = PALETTE[name]
        if self.selected is not None:
            self.selected.set_color(*self.color)
            self._changed()

    def set_hull_enabled(self, enabled: bool) -> None:
        self.hull_enabled = enabled
        self._changed()

    @property
    def overlay(self) -> list[Segment]:
        """Programmatic segments that are neither pickable nor part of the hull."""
        return self._hover_box + self._hull_edges

    # ---- pointer gestures ----

    def pointer_move(self, x: float, y: float) -> None:
        self.pointer = Vertex(x, y)

        if self.drawing.segment is not None:
            (x1, y1), _ = self.drawing.segment.reference
            self.drawing.segment.set_position(x1, y1, x, y)
        elif self.drawing.polygon is not None:
            self.drawing.polygon.update_last_vertex(x, y)
        elif self.tool == ToolMode.SELECT:
            if self.drawing.drag_origin is not None and self.selected is not None:
                delta = self.pointer - self.drawing.drag_origin
                transforms.translate(self.selected, delta.x, delta.y)
                self.drawing.drag_origin = self.pointer
            else:
                self._set_hovered(self.scene.pick(x, y, ignore=self.overlay))
        else:
            return
        self._changed()

    def pointer_down(self, x: float, y: float, ctrl: bool = False, shift: bool = False) -> None:
        if ctrl or shift:
            return
        self.pointer = Vertex(x, y)

        if self.tool == ToolMode.SEGMENT and self.drawing.segment is None:
            self.drawing.segment = self.scene.begin_segment(x, y, self.color)
            self._changed()
        elif self.tool == ToolMode.SELECT:
            self._set_selected(self.scene.pick(x, y, ignore=self.overlay))
            if self.selected is not None:
                self.drawing.drag_origin = self.pointer
            self._changed()

    def pointer_up(self, x: float, y: float) -> None:
        self.pointer = Vertex(x, y)
        if self.drawing.segment is not None:
            self.scene.prune_segment(self.drawing.segment)
            self.drawing.segment = None
            self._changed()
        self.drawing.drag_origin = None

    def pointer_leave(self) -> None:
        self.pointer_up(*self.pointer)

    def click(self, x: float, y: float, ctrl: bool = False, shift: bool = False) -> None:
        """A full press/release at one position."""
        if shift:
            return
        self.pointer = Vertex(x, y)

        if self.tool == ToolMode.POINT and not ctrl:
            self.scene.add_point(x, y, self.color)
        elif self.tool == ToolMode.POLYGON:
            polygon = self.drawing.polygon
            if polygon is None:
                if ctrl:
                    return
                # Fixed vertex plus a rubber-band vertex that follows the pointer
                self.drawing.polygon = self.scene.add_polygon([(x, y), (x, y)], self.color)
            elif not ctrl:
                polygon.update_last_vertex(x, y)
                polygon.add_vertex(x, y)
            else:
                # The rubber band becomes the final vertex
                polygon.update_last_vertex(x, y)
                self._close_polygon()
        else:
            return
        self._changed()

    def finish_polygon(self) -> None:
        """Closing keystroke: drop the rubber-band vertex and finalize."""
        polygon = self.drawing.polygon
        if polygon is None:
            return
        polygon.remove_last_vertex()
        self._close_polygon()
        self._changed()

    def _close_polygon(self) -> None:
        polygon = self.drawing.polygon
        self.drawing.polygon = None
        if polygon is not None and self.scene.prune_polygon(polygon):
            logger.info("Polygon discarded: fewer than 3 distinct vertices.")

    def _abandon_gestures(self) -> None:
        if self.drawing.polygon is not None:
            self.drawing.polygon.remove_last_vertex()
            self._close_polygon()
        if self.drawing.segment is not None:
            self.scene.prune_segment(self.drawing.segment)
            self.drawing.segment = None
        self.drawing.drag_origin = None

    # ---- selection ----

    def _set_hovered(self, primitive: Optional[Primitive]) -> None:
        if primitive is not self.hovered:
            self.hovered = primitive
            self.hover_changed.emit(primitive)

    def _set_selected(self, primitive: Optional[Primitive]) -> None:
        if primitive is not self.selected:
            self.selected = primitive
            self.selection_changed.emit(primitive)

    def select(self, primitive: Optional[Primitive]) -> None:
        if primitive is not None and primitive not in self.scene:
            raise ValueError(f"{primitive!r} is not part of the scene")
        self._set_selected(primitive)
        self._changed()

    def translate_selection(self, dx: float, dy: float) -> None:
        if self.selected is None:
            return
        transforms.translate(self.selected, dx, dy)
        self._changed()

    def rotate_selection(self, degrees: float) -> None:
        if isinstance(self.selected, transforms.Transformable):
            transforms.rotate(self.selected, degrees)
            self._changed()

    def scale_selection(self, factor: float) -> None:
        if isinstance(self.selected, transforms.Transformable):
            transforms.scale(self.selected, factor)
            self._changed()

    def mirror_selection(self, line_p1: Sequence[float], line_p2: Sequence[float]) -> None:
        if isinstance(self.selected, transforms.Transformable):
            transforms.mirror(self.selected, line_p1, line_p2)
            self._changed()

    def delete_selection(self) -> None:
        if self.selected is not None:
            self.delete(self.selected)

    def delete(self, primitive: Primitive) -> None:
        """Remove a primitive and every transient reference to it."""
        self.scene.delete(primitive)
        if self.drawing.polygon is primitive:
            self.drawing.polygon = None
        if self.drawing.segment is primitive:
            self.drawing.segment = None
        if self.hovered is primitive:
            self._set_hovered(None)
        if self.selected is primitive:
            self.drawing.drag_origin = None
            self._set_selected(None)
        self._changed()

    def clear(self) -> None:
        self.scene.clear()
        self.drawing = DrawingState()
        self._hover_box = []
        self._hull_edges = []
        self._set_hovered(None)
        self._set_selected(None)
        self._changed()

    # ---- derived state ----

    def hull(self) -> npt.NDArray[np.float64]:
        """Hull over the scene, leaving out the overlay segments."""
        return self.scene.convex_hull(exclude=self.overlay, rng=self._rng)

    def counts(self) -> dict[str, int]:
        return self.scene.counts(exclude=self.overlay)

    def _replace_overlay(self, old: list[Segment], corners: Sequence[Sequence[float]], color: Color) -> list[Segment]:
        for segment in old:
            self.scene.delete(segment)
        edges: list[Segment] = []
        n = len(corners)
        if n < 2:
            return edges
        pairs = [(0, 1)] if n == 2 else [(i, (i + 1) % n) for i in range(n)]
        for i, j in pairs:
            (x1, y1), (x2, y2) = corners[i], corners[j]
            segment = self.scene.add_segment(x1, y1, x2, y2, color)
            if segment is not None:
                edges.append(segment)
        return edges

    def _refresh_overlays(self) -> None:
        target = self.selected if self.selected is not None else self.hovered
        box = target.bounding_box().padded(HOVER_BOX_PADDING).corners() if target is not None else []
        self._hover_box = self._replace_overlay(self._hover_box, box, HOVER_COLOR)

        hull = self.hull() if self.hull_enabled else np.empty((0, 2))
        self._hull_edges = self._replace_overlay(self._hull_edges, hull.tolist(), HULL_COLOR)

    def _changed(self) -> None:
        self._refresh_overlays()
        self.scene_changed.emit(self.scene)
        self.counts_changed.emit(self.counts())
