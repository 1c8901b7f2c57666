# _handle_store.py
"""HandleStore - stable integer handles mapped to caller-owned items."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class HandleStore(Generic[T]):
    """
    Owns the handle -> item association.

    Handles come from a counter that only moves forward, so a handle is never
    handed out twice, even after removal or clear().
    """

    __slots__ = ("_items", "_next_handle")

    def __init__(self) -> None:
        self._items: dict[int, T] = {}
        self._next_handle = 0

    @property
    def next_handle(self) -> int:
        """The handle the next alloc_handle() call will return."""
        return self._next_handle

    def alloc_handle(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    def alloc_range(self, count: int) -> range:
        """Reserve ``count`` contiguous handles."""
        start = self._next_handle
        self._next_handle += count
        return range(start, start + count)

    def add(self, handle: int, item: T) -> None:
        self._items[handle] = item

    def by_handle(self, handle: int) -> T | None:
        return self._items.get(handle)

    def require(self, handle: int) -> T:
        """
        Look up an item that the tree claims to hold.

        Raises:
            RuntimeError: If the handle has no item, which means the tree and
                the store disagree.
        """
        try:
            return self._items[handle]
        except KeyError:
            raise RuntimeError("Internal error: missing tracked item") from None

    def get_many(self, handles: Iterable[int]) -> list[T]:
        return [self.require(h) for h in handles]

    def pop(self, handle: int) -> T | None:
        return self._items.pop(handle, None)

    def clear(self) -> None:
        """Drop every item. The handle counter keeps its value."""
        self._items.clear()

    def items(self) -> Iterator[tuple[int, T]]:
        """(handle, item) pairs in ascending handle order."""
        return iter(sorted(self._items.items(), key=lambda kv: kv[0]))

    def __contains__(self, handle: object) -> bool:
        return handle in self._items

    def __len__(self) -> int:
        return len(self._items)
