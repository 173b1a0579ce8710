"""Externally visible planning results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from mine_planner.src.common.constants import DEFAULT_QUALITY, PLAN_TAG
from mine_planner.src.common.geometry import Direction, Rect, Tile


class PlaceholderKind(Enum):
    UNIT = "unit"
    LINE_SEGMENT = "line_segment"
    POWER = "power"
    EMITTER = "emitter"
    FLUID_SEGMENT = "fluid_segment"


# Lower values lose collisions
COLLISION_PRIORITY: Dict[PlaceholderKind, int] = {
    PlaceholderKind.EMITTER: 0,
    PlaceholderKind.POWER: 1,
    PlaceholderKind.FLUID_SEGMENT: 2,
    PlaceholderKind.LINE_SEGMENT: 3,
    PlaceholderKind.UNIT: 4,
}


@dataclass(frozen=True)
class Placeholder:
    """A marker describing what to build and where."""

    name: str
    position: Tile  # top-left tile
    size: Tile = (1, 1)
    kind: PlaceholderKind = PlaceholderKind.UNIT
    direction: Optional[Direction] = None
    io_type: Optional[str] = None  # "input"/"output" for bridge endpoints
    quality: str = DEFAULT_QUALITY
    modules: Tuple[str, ...] = ()
    removal_tag: Optional[str] = PLAN_TAG

    @property
    def rect(self) -> Rect:
        return Rect(self.position[0], self.position[1], self.size[0], self.size[1])

    @property
    def center(self) -> Tuple[float, float]:
        return (
            self.position[0] + self.size[0] / 2.0,
            self.position[1] + self.size[1] / 2.0,
        )

    def tiles(self) -> Iterator[Tile]:
        return self.rect.tiles()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "position": {"x": self.position[0], "y": self.position[1]},
            "size": {"width": self.size[0], "height": self.size[1]},
            "quality": self.quality,
        }
        if self.direction is not None:
            data["direction"] = self.direction.value
        if self.io_type is not None:
            data["io_type"] = self.io_type
        if self.modules:
            data["modules"] = list(self.modules)
        if self.removal_tag is not None:
            data["tag"] = self.removal_tag
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Placeholder":
        position = data["position"]
        size = data.get("size", {"width": 1, "height": 1})
        direction = data.get("direction")
        return cls(
            name=data["name"],
            position=(int(position["x"]), int(position["y"])),
            size=(int(size["width"]), int(size["height"])),
            kind=PlaceholderKind(data.get("kind", PlaceholderKind.UNIT.value)),
            direction=Direction.parse(direction) if direction else None,
            io_type=data.get("io_type"),
            quality=data.get("quality", DEFAULT_QUALITY),
            modules=tuple(data.get("modules", ())),
            removal_tag=data.get("tag"),
        )


@dataclass(frozen=True)
class DeconstructOrder:
    """An existing entity the plan needs cleared."""

    name: str
    position: Tile
    size: Tile = (1, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "position": {"x": self.position[0], "y": self.position[1]},
            "size": {"width": self.size[0], "height": self.size[1]},
        }


@dataclass
class Plan:
    """Forward planning result."""

    placeholders: List[Placeholder] = field(default_factory=list)
    dropped_count: int = 0
    deconstruct: List[DeconstructOrder] = field(default_factory=list)
    excluded_count: int = 0

    def by_kind(self, kind: PlaceholderKind) -> List[Placeholder]:
        return [p for p in self.placeholders if p.kind is kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "placeholders": [p.to_dict() for p in self.placeholders],
            "dropped_count": self.dropped_count,
            "deconstruct": [order.to_dict() for order in self.deconstruct],
            "excluded_count": self.excluded_count,
        }


@dataclass
class RemovalList:
    """Reverse ghost-removal result."""

    placeholders: List[Placeholder] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.placeholders)

    def to_dict(self) -> Dict[str, Any]:
        return {"placeholders": [p.to_dict() for p in self.placeholders]}
