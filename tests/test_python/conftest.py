import random

import pytest

from handlequadtree import QuadTree


class Body:
    """Minimal positioned item used across the tests."""

    __slots__ = ("name", "x", "y")

    def __init__(self, x: float, y: float, name=None):
        self.x = x
        self.y = y
        self.name = name

    def position(self):
        return (self.x, self.y)

    def __repr__(self):
        return f"Body({self.x!r}, {self.y!r}, name={self.name!r})"


def corners(bounds):
    """Split (min_x, min_y, max_x, max_y) into (top_left, bot_right)."""
    x0, y0, x1, y1 = bounds
    return (x0, y0), (x1, y1)


def make_tree(bounds, capacity=4, min_size=0.5):
    tl, br = corners(bounds)
    return QuadTree(capacity, min_size, tl, br)


@pytest.fixture
def bounds():
    return (0.0, 0.0, 100.0, 100.0)


@pytest.fixture
def rng():
    return random.Random(20240611)
