"""handlequadtree - adaptive quadtree for radius queries over moving items."""

from ._common import Bounds, Point, Positioned, Segment
from ._errors import InsertError
from ._handle_store import HandleStore
from ._insert_result import InsertResult
from ._partition import SpatialPartition
from ._region import Quadrant, Region
from .quadtree import QuadTree

__all__ = [
    "Bounds",
    "HandleStore",
    "InsertError",
    "InsertResult",
    "Point",
    "Positioned",
    "Quadrant",
    "QuadTree",
    "Region",
    "Segment",
    "SpatialPartition",
]
