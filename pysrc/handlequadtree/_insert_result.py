"""InsertResult - handles handed out by a bulk insert."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InsertResult:
    """
    Handles assigned by insert_many. They are always contiguous.

    Attributes:
        start_id: First handle assigned. For an empty insert, the handle the
            next insert will receive.
        count: Number of items inserted.
        stranded: Previously inserted handles that a split during this call
            could not re-file because their item had moved out of bounds.
    """

    start_id: int
    count: int
    stranded: tuple[int, ...] = ()

    @property
    def end_id(self) -> int:
        """Last handle assigned (inclusive); start_id - 1 when nothing was inserted."""
        return self.start_id + self.count - 1

    @property
    def ids(self) -> range:
        return range(self.start_id, self.start_id + self.count)

    def __len__(self) -> int:
        return self.count
