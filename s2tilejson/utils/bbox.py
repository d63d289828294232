"""Running bounding-box accumulation for tile index and lon-lat extents.

Both the tile-index boxes (per zoom, per face) and the geographic lon-lat
box of a tile set are grown the same way: start from an inverted sentinel
box and repeatedly take the element-wise minimum of the lower-left corner
and the element-wise maximum of the upper-right corner. The result is the
smallest enclosing box over every observed input, independent of the order
in which inputs arrive.

Example:
    Grow a box from a couple of tile positions:
        >>> from s2tilejson.utils.bbox import BBox
        >>> box = BBox.empty()
        >>> box.include_point(22, 37)
        >>> box.include_point(20, 40)
        >>> box.to_list()
        [20, 37, 22, 40]

    Merge two partial boxes built by separate workers:
        >>> a = BBox(-60, -20, 5, 60)
        >>> b = BBox(-120, -7, 44, 72)
        >>> a.merge(b).to_list()
        [-120, -20, 44, 72]
"""

from __future__ import annotations

import dataclasses
import math
from typing import Any

Number = int | float


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


@dataclasses.dataclass
class BBox:
    """Axis-aligned box stored as (left, bottom, right, top).

    The box is not normalized while accumulating: an empty box holds
    (+inf, +inf, -inf, -inf) until the first update.

    Attributes:
        left: Minimum x (or longitude).
        bottom: Minimum y (or latitude).
        right: Maximum x (or longitude).
        top: Maximum y (or latitude).
    """

    left: Number
    bottom: Number
    right: Number
    top: Number

    @classmethod
    def empty(cls) -> BBox:
        """Return the sentinel box that every update widens."""
        return cls(math.inf, math.inf, -math.inf, -math.inf)

    @classmethod
    def from_sequence(cls, value: Any) -> BBox | None:
        """Build a box from a 4-number sequence, or None if malformed."""
        if not isinstance(value, list | tuple) or len(value) != 4:
            return None
        if not all(_is_number(v) for v in value):
            return None
        return cls(*value)

    def widen(
        self,
        left: Number,
        bottom: Number,
        right: Number,
        top: Number,
    ) -> None:
        """Grow the box in place so it encloses the given box."""
        self.left = min(self.left, left)
        self.bottom = min(self.bottom, bottom)
        self.right = max(self.right, right)
        self.top = max(self.top, top)

    def include_point(self, x: Number, y: Number) -> None:
        """Grow the box in place so it encloses a single point."""
        self.widen(x, y, x, y)

    def merge(self, other: BBox) -> BBox:
        """Return a new box enclosing both this box and ``other``."""
        merged = self.copy()
        merged.widen(other.left, other.bottom, other.right, other.top)
        return merged

    def is_empty(self) -> bool:
        """Whether no update has been applied since the sentinel."""
        return self.left > self.right or self.bottom > self.top

    def copy(self) -> BBox:
        return dataclasses.replace(self)

    def to_list(self) -> list[Number]:
        return [self.left, self.bottom, self.right, self.top]

