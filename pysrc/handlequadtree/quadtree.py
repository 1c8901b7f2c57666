# quadtree.py
"""QuadTree - radius-searchable spatial index over caller-owned items."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Generic, TypeVar

from ._common import (
    Bounds,
    Point,
    Positioned,
    Segment,
    _is_np_array,
    validate_capacity,
    validate_min_size,
    validate_point,
    validate_radius,
    validate_region_corners,
)
from ._errors import InsertError
from ._handle_store import HandleStore
from ._insert_result import InsertResult
from ._partition import SpatialPartition
from ._region import Region

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Positioned)


class QuadTree(Generic[T]):
    """
    Spatial index for items that know their own position.

    Items are stored in a side map under integer handles. The tree itself
    only routes handles, so moving an item never copies it. Because the tree
    cannot see motion, callers must call ``reinsert`` after an item moves.

    Performance characteristics:
        Inserts: average O(log n)
        Radius queries: average O(log n + k) where k is candidates visited

    Thread-safety:
        Instances are not thread-safe. Use external synchronization if you
        mutate the same tree from multiple threads.

    Args:
        capacity: Max number of handles per leaf before splitting.
        min_size: Leaves whose width or height is at or below this never split.
        top_left: Corner of the indexed region with the smallest coordinates.
        bot_right: Corner of the indexed region with the largest coordinates.

    Raises:
        ValueError: If parameters are invalid.

    Example:
        ```python
        qt = QuadTree(capacity=8, min_size=0.5, top_left=(0, 0), bot_right=(100, 100))
        handle = qt.insert(ball)
        ball.x += 3.0
        qt.reinsert(handle, old_pos)
        near = qt.search_radius((50.0, 50.0), 10.0)
        ```
    """

    __slots__ = (
        "_capacity",
        "_min_size",
        "_region",
        "_store",
        "_stranded",
        "_tree",
    )

    # ---- Initialization ----

    def __init__(
        self,
        capacity: int,
        min_size: float,
        top_left: Point,
        bot_right: Point,
    ):
        tl, br = validate_region_corners(top_left, bot_right)
        self._capacity = validate_capacity(capacity)
        self._min_size = validate_min_size(min_size)
        self._region = Region(tl, br)

        self._tree = SpatialPartition(self._region, self._capacity, self._min_size)
        self._store: HandleStore[T] = HandleStore()
        self._stranded: set[int] = set()

    @property
    def bounds(self) -> Bounds:
        """Indexed region as (min_x, min_y, max_x, max_y)."""
        return self._region.bounds

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def min_size(self) -> float:
        return self._min_size

    @property
    def stranded_handles(self) -> list[int]:
        """
        Handles whose items are tracked but not filed in the tree.

        A split re-routes displaced handles with their item's current
        position. Items that moved out of bounds without ``reinsert`` cannot
        be re-filed and end up here until ``reinsert`` or ``remove``.
        """
        return sorted(self._stranded)

    # ---- Insertion ----

    def insert(self, item: T, pos: Point | None = None) -> int:
        """
        Insert a single item.

        Args:
            item: Object exposing ``position()``.
            pos: Position to file the item under. Defaults to
                ``item.position()``.

        Returns:
            The handle assigned to the item.

        Raises:
            InsertError: If the position is outside the tree bounds. No
                handle is consumed in that case.

        Note:
            A split triggered by this insert may find older items that moved
            out of bounds without ``reinsert``. The new item is still
            inserted; the older handles are logged and listed in
            ``stranded_handles``.
        """
        pos = validate_point(item.position() if pos is None else pos)
        self._check_in_bounds(pos)

        handle = self._store.alloc_handle()
        self._store.add(handle, item)
        self._file(handle, pos)
        return handle

    def insert_many(
        self, items: Iterable[T], positions: Sequence[Point] | None = None
    ) -> InsertResult:
        """
        Bulk insert items with contiguous handles.

        Every position is checked before anything is inserted.

        Args:
            items: Objects exposing ``position()``.
            positions: Optional positions aligned with items. Defaults to
                each item's ``position()``.

        Returns:
            InsertResult with count, start_id, end_id, and any handles
            stranded by splits during the batch.

        Raises:
            ValueError: If positions length doesn't match items length.
            InsertError: If any position is outside bounds.
        """
        items = list(items)
        if positions is None:
            positions = [item.position() for item in items]
        elif len(positions) != len(items):
            raise ValueError("positions length must match items length")

        points = [validate_point(p) for p in positions]
        for p in points:
            self._check_in_bounds(p)

        if not items:
            return InsertResult(start_id=self._store.next_handle, count=0)

        handles = self._store.alloc_range(len(items))
        stranded: list[int] = []
        for handle, item, p in zip(handles, items, points):
            self._store.add(handle, item)
            stranded.extend(self._file(handle, p))

        return InsertResult(
            start_id=handles.start,
            count=len(handles),
            stranded=tuple(sorted(set(stranded))),
        )

    def insert_many_np(self, items: Iterable[T], positions: Any) -> InsertResult:
        """
        Bulk insert items whose positions come from a NumPy array.

        Args:
            items: Objects exposing ``position()``.
            positions: Array of shape (N, 2), one row per item.

        Returns:
            InsertResult with count, start_id, and end_id.

        Raises:
            TypeError: If positions is not a NumPy array.
            ValueError: If the array shape is wrong or lengths differ.
            InsertError: If any position is outside bounds.
            ImportError: If NumPy is not installed.
        """
        if not _is_np_array(positions):
            raise TypeError("insert_many_np requires a NumPy array")

        import numpy as np

        if not isinstance(positions, np.ndarray):
            raise TypeError("insert_many_np requires a NumPy array")

        if positions.size == 0:
            positions = positions.reshape(0, 2)
        if positions.ndim != 2 or positions.shape[1] != 2:
            raise ValueError(
                f"positions must have shape (N, 2), got {positions.shape}"
            )

        return self.insert_many(items, [tuple(row) for row in positions.tolist()])

    def reinsert(self, handle: int, old_pos: Point) -> None:
        """
        Re-file an item after it moved.

        The item's current ``position()`` is used as the new location.

        Args:
            handle: Handle returned by insert.
            old_pos: Position the handle was last filed under.

        Raises:
            KeyError: If the handle is unknown.
            InsertError: If the new position is outside bounds. The handle
                stays filed under old_pos in that case.
        """
        item = self._store.by_handle(handle)
        if item is None:
            raise KeyError(f"Handle {handle} not found in quadtree")

        new_pos = validate_point(item.position())
        self._check_in_bounds(new_pos)

        if handle in self._stranded:
            self._stranded.discard(handle)
        elif self._tree.remove(handle, validate_point(old_pos, "old_pos")) is None:
            # Not where the caller said; make sure it is not filed anywhere else.
            if self._tree.discard(handle):
                logger.debug("Handle %d was not filed under %r", handle, old_pos)

        self._file(handle, new_pos)

    def _check_in_bounds(self, pos: Point) -> None:
        if not self._region.contains(pos):
            raise InsertError(pos, self._region.bounds)

    def _file(self, handle: int, pos: Point) -> list[int]:
        """
        Route one handle, then re-route everything displaced by splits.

        Displaced handles use their item's current position. Those whose
        item moved out of bounds are left unfiled and recorded as stranded.

        Returns:
            The handles stranded by this call.
        """
        pending = self._tree.insert(pos, handle)
        if not pending:
            return []

        rerouted = 0
        stranded: list[int] = []
        while pending:
            h = pending.pop()
            if h == handle:
                p = pos
            else:
                p = validate_point(self._store.require(h).position())
            try:
                pending.extend(self._tree.insert(p, h))
            except InsertError:
                stranded.append(h)
            rerouted += 1

        logger.debug("Re-routed %d handles after inserting %d", rerouted, handle)

        if stranded:
            self._stranded.update(stranded)
            logger.warning(
                "%d handles moved outside %s without reinsert and could not be "
                "re-filed: %s",
                len(stranded),
                self._region.bounds,
                stranded,
            )
        return stranded

    # ---- Queries ----

    def search_radius(self, pos: Point, r: float) -> list[T]:
        """
        Return every item within distance r of pos.

        Membership is exact: an item is returned iff the squared distance
        from its current position to pos is <= r * r.

        Args:
            pos: Centre of the query circle.
            r: Radius, >= 0.

        Returns:
            List of items. Order is unspecified.
        """
        cx, cy = validate_point(pos)
        r = validate_radius(r)
        r2 = r * r

        out: list[T] = []
        for item in self._store.get_many(self._tree.search_radius((cx, cy), r)):
            x, y = item.position()
            dx = x - cx
            dy = y - cy
            if dx * dx + dy * dy <= r2:
                out.append(item)
        return out

    def search_radius_ids(self, pos: Point, r: float) -> list[int]:
        """
        Return handles in every leaf that overlaps the query circle.

        Fast path without the exact distance check, so the result can
        include handles outside the circle.
        """
        return self._tree.search_radius(validate_point(pos), validate_radius(r))

    def search_radius_ids_np(self, pos: Point, r: float) -> Any:
        """
        Same as search_radius_ids, as an int64 NumPy array.

        Raises:
            ImportError: If NumPy is not installed.
        """
        import numpy as np

        return np.asarray(self.search_radius_ids(pos, r), dtype=np.int64)

    # ---- Deletion ----

    def remove(self, handle: int, pos: Point) -> T | None:
        """
        Remove an item by handle and the position it is filed under.

        Args:
            handle: Handle returned by insert.
            pos: Position the handle was last filed under.

        Returns:
            The removed item, or None if the handle was not found there.
            Stranded handles are not filed anywhere, so they are removed
            regardless of pos.
        """
        if handle in self._stranded:
            self._stranded.discard(handle)
            return self._store.pop(handle)
        if self._tree.remove(handle, validate_point(pos)) is None:
            return None
        return self._store.pop(handle)

    def clear(self) -> None:
        """
        Empty the tree in place, preserving bounds, capacity, and min_size.

        Handles are not reused afterwards.
        """
        self._tree = SpatialPartition(self._region, self._capacity, self._min_size)
        self._store.clear()
        self._stranded.clear()

    # ---- Object Management ----

    def get(self, handle: int) -> T | None:
        """Return the item stored under handle, or None."""
        return self._store.by_handle(handle)

    def get_all_items(self) -> list[T]:
        """Return all items in ascending handle order."""
        return [item for _, item in self._store.items()]

    # ---- Utilities ----

    def __len__(self) -> int:
        """Return the number of items in the tree."""
        return len(self._store)

    def __contains__(self, handle: object) -> bool:
        return handle in self._store

    def __iter__(self) -> Iterator[tuple[int, T]]:
        """Iterate over (handle, item) pairs in ascending handle order."""
        return self._store.items()

    def lines(self) -> list[Segment]:
        """
        Return the boundary edges of every node. Useful for visualization.
        """
        return self._tree.lines()

    def get_all_node_boundaries(self) -> list[Bounds]:
        """Return all node boundaries in the tree. Useful for visualization."""
        return self._tree.boundaries()

    def get_inner_max_depth(self) -> int:
        """Return the current depth of the tree. A lone root leaf is depth 1."""
        return self._tree.depth()

    def leaf_handles(self) -> list[list[int]]:
        """Handle lists of every leaf, in traversal order."""
        return [leaf.handles for leaf in self._tree.leaves()]

    def __repr__(self) -> str:
        return (
            f"QuadTree(capacity={self._capacity}, min_size={self._min_size}, "
            f"bounds={self._region.bounds}, items={len(self)})"
        )
