"""Geometry kernel over normalized landmark positions.

This module is pure logic with NO I/O. Coincident points produce NaN rather
than raising; callers gate on visibility before trusting a measurement.
"""

from __future__ import annotations

import math
from typing import Protocol

from form_tracker.core.types import Point


class HasXY(Protocol):
    """Anything carrying normalized x/y coordinates (Point, Landmark)."""

    @property
    def x(self) -> float: ...

    @property
    def y(self) -> float: ...


def calculate_angle(a: HasXY, b: HasXY, c: HasXY) -> float:
    """Unsigned interior angle at vertex ``b`` in degrees, within [0, 180].

    Args:
        a: First end point
        b: Vertex
        c: Second end point

    Returns:
        Angle a-b-c in degrees (NaN if b coincides with a or c)
    """
    if (a.x == b.x and a.y == b.y) or (c.x == b.x and c.y == b.y):
        return math.nan

    radians = math.atan2(c.y - b.y, c.x - b.x) - math.atan2(a.y - b.y, a.x - b.x)
    angle = abs(math.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def calculate_distance(a: HasXY, b: HasXY) -> float:
    """Euclidean distance in the image plane."""
    return math.hypot(b.x - a.x, b.y - a.y)


def vertical_distance(a: HasXY, b: HasXY) -> float:
    """Absolute Y delta."""
    return abs(a.y - b.y)


def horizontal_distance(a: HasXY, b: HasXY) -> float:
    """Absolute X delta."""
    return abs(a.x - b.x)


def average(*values: float) -> float:
    """Arithmetic mean (NaN for no values)."""
    if not values:
        return math.nan
    return sum(values) / len(values)


def in_range(value: float, low: float, high: float) -> bool:
    """Inclusive range check. NaN is never in range."""
    return low <= value <= high


def midpoint(a: HasXY, b: HasXY) -> Point:
    """Center point between two positions (used for left/right averages)."""
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)
