"""Tile geometry: directions, rectangles and line-relative frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple

Tile = Tuple[int, int]


class Direction(Enum):
    """Cardinal direction; y grows southwards."""

    NORTH = "north"
    EAST = "east"
    SOUTH = "south"
    WEST = "west"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept a Direction, its value, or a single-letter abbreviation."""
        if isinstance(value, Direction):
            return value
        text = str(value).strip().lower()
        for direction in cls:
            if text in (direction.value, direction.value[0]):
                return direction
        raise ValueError(f"Unknown direction '{value}'")

    @property
    def vector(self) -> Tile:
        return _VECTORS[self]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Direction.NORTH, Direction.SOUTH)

    @property
    def axis(self) -> str:
        return "NS" if self.is_vertical else "EW"


_VECTORS = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}

_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


@dataclass(frozen=True)
class Rect:
    """Axis-aligned block of tiles; ``left``/``top`` is the first tile."""

    left: int
    top: int
    width: int
    height: int

    @classmethod
    def from_corners(cls, left: int, top: int, right: int, bottom: int) -> "Rect":
        """Build from inclusive corner tiles."""
        return cls(left, top, right - left + 1, bottom - top + 1)

    @property
    def right(self) -> int:
        """Last tile column (inclusive)."""
        return self.left + self.width - 1

    @property
    def bottom(self) -> int:
        """Last tile row (inclusive)."""
        return self.top + self.height - 1

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def tiles(self) -> Iterator[Tile]:
        for y in range(self.top, self.top + self.height):
            for x in range(self.left, self.left + self.width):
                yield (x, y)

    def contains_tile(self, tile: Tile) -> bool:
        x, y = tile
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def contains(self, other: "Rect") -> bool:
        return (
            other.left >= self.left
            and other.top >= self.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def intersects(self, other: "Rect") -> bool:
        if self.is_empty or other.is_empty:
            return False
        return not (
            other.left > self.right
            or other.right < self.left
            or other.top > self.bottom
            or other.bottom < self.top
        )

    def expanded(self, margin: int) -> "Rect":
        return Rect(
            self.left - margin,
            self.top - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def union(self, other: "Rect") -> "Rect":
        return Rect.from_corners(
            min(self.left, other.left),
            min(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )


@dataclass(frozen=True)
class AxisFrame:
    """Line-relative coordinates for one flow direction.

    ``along`` runs parallel to the line, ``cross`` perpendicular to it. Both
    are plain world coordinates (y and x for a north/south line), so the
    frame never moves tiles; ``sign`` says which way the stream travels
    along the axis.
    """

    direction: Direction

    @property
    def sign(self) -> int:
        return 1 if self.direction in (Direction.SOUTH, Direction.EAST) else -1

    def to_tile(self, along: int, cross: int) -> Tile:
        if self.direction.is_vertical:
            return (cross, along)
        return (along, cross)

    def along_of(self, tile: Tile) -> int:
        return tile[1] if self.direction.is_vertical else tile[0]

    def cross_of(self, tile: Tile) -> int:
        return tile[0] if self.direction.is_vertical else tile[1]

    def rect(self, along: int, cross: int, along_len: int, cross_len: int) -> Rect:
        left, top = self.to_tile(along, cross)
        if self.direction.is_vertical:
            return Rect(left, top, cross_len, along_len)
        return Rect(left, top, along_len, cross_len)

    def along_range(self, rect: Rect) -> Tuple[int, int]:
        if self.direction.is_vertical:
            return rect.top, rect.bottom
        return rect.left, rect.right

    def cross_range(self, rect: Rect) -> Tuple[int, int]:
        if self.direction.is_vertical:
            return rect.left, rect.right
        return rect.top, rect.bottom

    def along_size(self, size: Tile) -> int:
        """Extent of a (width, height) footprint along the line."""
        return size[1] if self.direction.is_vertical else size[0]

    def cross_size(self, size: Tile) -> int:
        return size[0] if self.direction.is_vertical else size[1]

    def step(self, along: int, tiles: int) -> int:
        """Move ``tiles`` along the flow (negative moves upstream)."""
        return along + self.sign * tiles

    def flow_key(self, along: int) -> int:
        """Sort key that orders along-coordinates upstream first."""
        return along * self.sign

    def facing(self, cross_sign: int) -> Direction:
        """Direction pointing towards increasing (+1) or decreasing cross."""
        if self.direction.is_vertical:
            return Direction.EAST if cross_sign > 0 else Direction.WEST
        return Direction.SOUTH if cross_sign > 0 else Direction.NORTH
