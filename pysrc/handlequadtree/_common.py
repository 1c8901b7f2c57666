# _common.py
"""Common utilities and type aliases shared across the index modules."""

from __future__ import annotations

import math
from typing import Any, Protocol

# Type aliases
Point = tuple[float, float]
"""2D point as (x, y)."""

Bounds = tuple[float, float, float, float]
"""Axis-aligned rectangle as (min_x, min_y, max_x, max_y)."""

Segment = tuple[Point, Point]
"""Line segment as ((x0, y0), (x1, y1))."""


class Positioned(Protocol):
    """Anything that can report where it currently is."""

    def position(self) -> Point: ...


def _is_np_array(x: Any) -> bool:
    """
    Check if x is a NumPy array without importing NumPy.

    This allows type checking without forcing NumPy as a hard dependency.

    Args:
        x: Object to check.

    Returns:
        True if x is a NumPy array.
    """
    mod = getattr(x.__class__, "__module__", "")
    return mod.startswith("numpy") and hasattr(x, "ndim") and hasattr(x, "shape")


def validate_point(pos: Any, name: str = "position") -> Point:
    """
    Validate and normalize a point to a tuple of two floats.

    Args:
        pos: Point as a sequence of 2 numbers.
        name: Argument name used in the error message.

    Returns:
        Validated point as tuple.

    Raises:
        ValueError: If the point does not hold exactly two finite numbers.
    """
    if type(pos) is not tuple:
        pos = tuple(pos)
    if len(pos) != 2:
        raise ValueError(f"{name} must be a tuple of two numeric values (x, y)")
    x, y = float(pos[0]), float(pos[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"{name} must be finite, got ({x}, {y})")
    return (x, y)


def validate_region_corners(top_left: Any, bot_right: Any) -> tuple[Point, Point]:
    """
    Validate the two corners of a region.

    Args:
        top_left: Corner with the smallest coordinates.
        bot_right: Corner with the largest coordinates.

    Returns:
        Both corners as validated point tuples.

    Raises:
        ValueError: If a corner is malformed or the corners are inverted.
    """
    tl = validate_point(top_left, "top_left")
    br = validate_point(bot_right, "bot_right")
    if tl[0] > br[0] or tl[1] > br[1]:
        raise ValueError(
            f"top_left {tl} must not exceed bot_right {br} on either axis"
        )
    return tl, br


def validate_capacity(capacity: Any) -> int:
    """Leaf capacity must be a positive integer."""
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
    return capacity


def validate_min_size(min_size: Any) -> float:
    """Minimum splittable edge length must be a positive, finite number."""
    value = float(min_size)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"min_size must be a positive number, got {min_size!r}")
    return value


def validate_radius(r: Any) -> float:
    """Search radius must be a non-negative number."""
    value = float(r)
    if math.isnan(value) or value < 0:
        raise ValueError(f"radius must be >= 0, got {r!r}")
    return value
