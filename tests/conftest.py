"""
Shared fixtures for the vectorsketch tests.

Provides scenes, sample polygons and an editor store bound to a
Qt core application.
"""
import logging

import numpy as np
import pytest

from vectorsketch.model.scene import Scene


# ── Helpers ──────────────────────────────────────────────────────────────

def star_polygon(rng: np.random.Generator, n: int) -> np.ndarray:
    """Random star-shaped vertex set, shuffled so click order is arbitrary."""
    angles = np.sort(rng.uniform(0.0, 2.0 * np.pi, n))
    radii = rng.uniform(20.0, 100.0, n)
    pts = np.c_[radii * np.cos(angles), radii * np.sin(angles)]
    return pts[rng.permutation(n)]


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def make_star():
    return star_polygon


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def square_scene(scene):
    """Four corner points of a 4x4 square plus its centre."""
    for x, y in [(0, 0), (4, 0), (4, 4), (0, 4), (2, 2)]:
        scene.add_point(x, y)
    return scene


@pytest.fixture(scope="session")
def qt_core_app():
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def store(qt_core_app):
    from vectorsketch.app.state import EditorStore
    return EditorStore(rng=np.random.default_rng(7))


@pytest.fixture
def clean_package_logger():
    logger = logging.getLogger("vectorsketch")
    saved_level = logger.level
    yield logger
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(saved_level)
