"""
Configuration & Global Constants
================================
This module serves as the central registry for the numeric tolerances and
default values shared by the geometry engine and the editor store.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (pick radii, epsilons, rounding
   precision) scattered throughout the code.
2. Consistency: Picking, triangulation and the hull all agree on what
   "coincident" means because they read the same constants.

Exports:
    PICK_TOLERANCE (float): Half-width of the picking square around the pointer.
    TRIG_PRECISION (int | None): Decimal digits kept for sin/cos in rotations.
    PALETTE (dict): Named RGBA colours offered by the editor.
"""
from typing import Dict, Optional, Tuple

Color = Tuple[int, int, int, int]

# Picking
PICK_TOLERANCE: float = 6.0
RAY_EPSILON: float = 1e-3  # query y nudge when it lies exactly on a ring vertex
RAY_X_NUDGE: float = 1e-4

# Geometry
COINCIDENT_EPS: float = 1e-9
TRIG_PRECISION: Optional[int] = 3  # None -> full precision

# Convex hull
HULL_JITTER: float = 1e-3
HULL_DUPLICATE_EPS: float = 1e-6

# Editor
HOVER_BOX_PADDING: float = 4.0

DEFAULT_COLOR: Color = (0, 0, 0, 255)

PALETTE: Dict[str, Color] = {
    "red": (255, 89, 94, 255),
    "yellow": (255, 202, 58, 255),
    "green": (138, 201, 38, 255),
    "blue": (25, 130, 196, 255),
    "purple": (106, 76, 147, 255),
    "black": (0, 0, 0, 255),
}

HOVER_COLOR: Color = (160, 160, 160, 255)
HULL_COLOR: Color = (25, 130, 196, 128)
