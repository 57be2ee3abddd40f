"""Command-line demo: builds a small scene and logs what the engine derives from it."""
import logging

import numpy as np

from vectorsketch.config import PALETTE
from vectorsketch.logging_config import setup_logging
from vectorsketch.model import transforms
from vectorsketch.model.scene import Scene

logger = logging.getLogger("vectorsketch.demo")


def main() -> None:
    setup_logging(level=logging.DEBUG)

    scene = Scene()
    scene.add_point(20.0, 30.0, PALETTE["red"])
    scene.add_point(140.0, 10.0, PALETTE["red"])
    segment = scene.add_segment(0.0, 0.0, 100.0, 0.0, PALETTE["blue"])
    # Clicked out of order on purpose; the angular sort fixes the ring
    polygon = scene.add_polygon([(60, 60), (0, 0), (60, 0), (0, 60), (30, 90)], PALETTE["green"])

    logger.info("Polygon ring: %s", polygon.vertices().tolist())
    logger.info("Triangles: %d, area %.1f", len(polygon.triangles), polygon.area())

    transforms.rotate(segment, 90.0)
    logger.info("Segment after 90 deg rotation: %r", segment)

    logger.info("Pick (50, 3): %r", scene.pick(50.0, 3.0))
    logger.info("Pick (30, 30): %r", scene.pick(30.0, 30.0))

    hull = scene.convex_hull(rng=np.random.default_rng(0))
    logger.info("Convex hull: %s", np.round(hull, 3).tolist())

    snapshot = scene.snapshot()
    logger.info(
        "Render buffers: %d point, %d segment, %d polygon vertices",
        snapshot.point_vertex_count, snapshot.segment_vertex_count, snapshot.polygon_vertex_count,
    )


if __name__ == "__main__":
    main()
