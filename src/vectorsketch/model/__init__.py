"""
The MODEL layer is the geometry engine: primitives, picking, triangulation,
convex hull and transforms.
It has NO knowledge of the GUI (Qt) or of any rendering API.
"""
from vectorsketch.model.geometry_primitives import BoundingBox, Point, Polygon, Segment, Triangle, Vertex
from vectorsketch.model.scene import RenderSnapshot, Scene

__all__ = [
    "BoundingBox",
    "Point",
    "Polygon",
    "RenderSnapshot",
    "Scene",
    "Segment",
    "Triangle",
    "Vertex",
]
