# _region.py
"""Axis-aligned regions and the quadrant mapping used when a node splits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from ._common import Bounds, Point, Segment


class Quadrant(IntEnum):
    """
    Position of a child region inside its parent.

    The value is the child's index in an internal node. y grows downward,
    so "top" is the half with the smaller y.
    """

    TOP_LEFT = 0
    BOTTOM_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_RIGHT = 3

    @property
    def is_left(self) -> bool:
        return self in (Quadrant.TOP_LEFT, Quadrant.BOTTOM_LEFT)

    @property
    def is_top(self) -> bool:
        return self in (Quadrant.TOP_LEFT, Quadrant.TOP_RIGHT)


@dataclass(frozen=True)
class Region:
    """
    Inclusive axis-aligned rectangle.

    Attributes:
        top_left: Corner with the smallest x and y.
        bot_right: Corner with the largest x and y.
    """

    top_left: Point
    bot_right: Point

    def __post_init__(self) -> None:
        (x0, y0), (x1, y1) = self.top_left, self.bot_right
        if x0 > x1 or y0 > y1:
            raise ValueError(
                f"top_left {self.top_left} must not exceed bot_right {self.bot_right}"
            )

    @property
    def bounds(self) -> Bounds:
        """Region as (min_x, min_y, max_x, max_y)."""
        return (*self.top_left, *self.bot_right)

    @property
    def width(self) -> float:
        return self.bot_right[0] - self.top_left[0]

    @property
    def height(self) -> float:
        return self.bot_right[1] - self.top_left[1]

    @property
    def midpoint(self) -> Point:
        return (
            (self.top_left[0] + self.bot_right[0]) / 2.0,
            (self.top_left[1] + self.bot_right[1]) / 2.0,
        )

    def contains(self, pos: Point) -> bool:
        """True if pos lies inside the region or on its boundary."""
        x, y = pos
        return (
            self.top_left[0] <= x <= self.bot_right[0]
            and self.top_left[1] <= y <= self.bot_right[1]
        )

    def can_split(self, min_size: float) -> bool:
        """Both edges must be longer than min_size."""
        return self.width > min_size and self.height > min_size

    def route(self, pos: Point) -> Quadrant:
        """
        Pick the quadrant that owns pos.

        Points on the midpoint lines belong to the left and top halves.
        """
        mid_x, mid_y = self.midpoint
        x, y = pos
        if x <= mid_x:
            return Quadrant.TOP_LEFT if y <= mid_y else Quadrant.BOTTOM_LEFT
        return Quadrant.TOP_RIGHT if y <= mid_y else Quadrant.BOTTOM_RIGHT

    def quadrant_region(self, quadrant: Quadrant) -> Region:
        """Build the child region for one quadrant, split about the midpoint."""
        (x0, y0), (x1, y1) = self.top_left, self.bot_right
        mid_x, mid_y = self.midpoint
        left, right = (x0, mid_x) if quadrant.is_left else (mid_x, x1)
        top, bottom = (y0, mid_y) if quadrant.is_top else (mid_y, y1)
        return Region((left, top), (right, bottom))

    def split(self) -> list[Region]:
        """All four child regions, indexed by Quadrant."""
        return [self.quadrant_region(q) for q in Quadrant]

    def nearest_point(self, pos: Point) -> Point:
        """Clamp pos into the region componentwise."""
        (x0, y0), (x1, y1) = self.top_left, self.bot_right
        x, y = pos
        return (min(max(x, x0), x1), min(max(y, y0), y1))

    def overlaps_circle(self, center: Point, r: float) -> bool:
        """
        Conservative circle test against the nearest point of the region.

        Admits regions that only partially overlap the circle.
        """
        nx, ny = self.nearest_point(center)
        dx = nx - center[0]
        dy = ny - center[1]
        return dx * dx + dy * dy <= r * r

    def edges(self) -> list[Segment]:
        """The four boundary edges."""
        tl, br = self.top_left, self.bot_right
        bl = (tl[0], br[1])
        tr = (br[0], tl[1])
        return [(tl, bl), (tl, tr), (br, bl), (br, tr)]
