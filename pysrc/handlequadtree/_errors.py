# _errors.py
"""Exceptions raised by the index."""

from __future__ import annotations

from ._common import Bounds, Point


class InsertError(ValueError):
    """
    A position lies outside the region covered by the index.

    Subclasses ValueError so callers that treat out-of-bounds inserts as bad
    arguments keep working.

    Attributes:
        pos: The rejected position.
        bounds: The bounds it was checked against.
    """

    def __init__(self, pos: Point, bounds: Bounds) -> None:
        self.pos = pos
        self.bounds = bounds
        bx0, by0, bx1, by1 = bounds
        super().__init__(
            f"Position {pos!r} is outside bounds ({bx0}, {by0}, {bx1}, {by1})"
        )
