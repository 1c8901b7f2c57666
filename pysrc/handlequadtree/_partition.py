# _partition.py
"""SpatialPartition - recursive quadtree node that stores handles only."""

from __future__ import annotations

import logging
from bisect import bisect_left, insort
from collections.abc import Iterator

from ._common import Bounds, Point, Segment
from ._errors import InsertError
from ._region import Quadrant, Region

logger = logging.getLogger(__name__)


class SpatialPartition:
    """
    One node of the quadtree.

    A node starts as a leaf holding an ascending list of handles. Once a leaf
    at capacity receives another handle and its region is still larger than
    ``min_size`` on both axes, it splits into four children (indexed by
    Quadrant) and hands its handles back to the caller for re-routing. A node
    never turns back into a leaf.

    Positions are not stored. Callers pass the position with every insert
    and remove, and the node only uses it to route.

    Args:
        region: Area this node is responsible for.
        capacity: Max number of handles in a leaf before it splits.
        min_size: Edge length at or below which a leaf refuses to split.
    """

    __slots__ = ("_capacity", "_children", "_handles", "_min_size", "_region")

    def __init__(self, region: Region, capacity: int, min_size: float):
        self._region = region
        self._capacity = capacity
        self._min_size = min_size
        self._handles: list[int] = []
        self._children: list[SpatialPartition] | None = None

    # ---- Properties ----

    @property
    def region(self) -> Region:
        return self._region

    @property
    def is_leaf(self) -> bool:
        return self._children is None

    @property
    def children(self) -> list[SpatialPartition] | None:
        return self._children

    @property
    def handles(self) -> list[int]:
        """Handles held directly by this node. Always empty for internal nodes."""
        return list(self._handles)

    # ---- Insertion ----

    def insert(self, pos: Point, handle: int) -> list[int]:
        """
        File a handle under the leaf that owns pos.

        Args:
            pos: Position used for routing.
            handle: Handle to store.

        Returns:
            Handles that must be re-routed by the caller. Empty unless a leaf
            split; after a split it holds the leaf's former handles followed
            by ``handle`` itself.

        Raises:
            InsertError: If pos is outside this node's region.
        """
        if not self._region.contains(pos):
            raise InsertError(pos, self._region.bounds)

        if self._children is not None:
            return self._children[self._region.route(pos)].insert(pos, handle)

        if len(self._handles) < self._capacity or not self._region.can_split(
            self._min_size
        ):
            insort(self._handles, handle)
            return []

        pending = self.split()
        pending.append(handle)
        return pending

    def split(self) -> list[int]:
        """
        Turn this leaf into an internal node with four empty children.

        Returns:
            The handles this leaf held, now orphaned until re-routed.
        """
        if self._children is not None:
            raise RuntimeError("Internal error: split called on an internal node")

        self._children = [
            SpatialPartition(sub, self._capacity, self._min_size)
            for sub in self._region.split()
        ]
        orphaned, self._handles = self._handles, []
        logger.debug(
            "Split region %s, %d handles to re-route",
            self._region.bounds,
            len(orphaned),
        )
        return orphaned

    # ---- Queries ----

    def search_radius(self, pos: Point, r: float) -> list[int]:
        """
        Return every handle in a leaf whose region overlaps the circle.

        Whole leaves are returned, so the result can include handles outside
        the circle. Order is leaf order, children visited in Quadrant order.
        """
        if self._children is None:
            return list(self._handles)

        found: list[int] = []
        for child in self._children:
            if child._region.overlaps_circle(pos, r):
                found.extend(child.search_radius(pos, r))
        return found

    # ---- Deletion ----

    def remove(self, handle: int, pos: Point) -> int | None:
        """
        Remove a handle from the leaf that owns pos.

        Returns:
            The removed handle, or None if pos is outside this node or the
            handle is not in that leaf.
        """
        if not self._region.contains(pos):
            return None

        if self._children is not None:
            return self._children[self._region.route(pos)].remove(handle, pos)

        handles = self._handles
        idx = bisect_left(handles, handle)
        if idx < len(handles) and handles[idx] == handle:
            return handles.pop(idx)
        return None

    def discard(self, handle: int) -> bool:
        """
        Remove a handle from whichever leaf holds it, without routing.

        Visits every leaf. Used when the position the handle was filed under
        is not known.
        """
        for leaf in self.leaves():
            handles = leaf._handles
            idx = bisect_left(handles, handle)
            if idx < len(handles) and handles[idx] == handle:
                del handles[idx]
                return True
        return False

    # ---- Diagnostics ----

    def lines(self) -> list[Segment]:
        """Boundary edges of this node followed by those of every descendant."""
        out = self._region.edges()
        if self._children is not None:
            for child in self._children:
                out.extend(child.lines())
        return out

    def boundaries(self) -> list[Bounds]:
        """Bounds of this node and every descendant, depth-first."""
        out = [self._region.bounds]
        if self._children is not None:
            for child in self._children:
                out.extend(child.boundaries())
        return out

    def leaves(self) -> Iterator[SpatialPartition]:
        if self._children is None:
            yield self
            return
        for child in self._children:
            yield from child.leaves()

    def child(self, quadrant: Quadrant) -> SpatialPartition:
        if self._children is None:
            raise ValueError("leaf nodes have no children")
        return self._children[quadrant]

    def depth(self) -> int:
        """Number of levels below and including this node."""
        if self._children is None:
            return 1
        return 1 + max(child.depth() for child in self._children)

    def __len__(self) -> int:
        return sum(len(leaf._handles) for leaf in self.leaves())

    def __repr__(self) -> str:
        kind = "leaf" if self._children is None else "internal"
        return (
            f"SpatialPartition({kind}, bounds={self._region.bounds}, "
            f"handles={len(self)})"
        )
