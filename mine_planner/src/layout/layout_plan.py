from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from mine_planner.src.common.geometry import Direction, Rect, Tile

"""Data structures produced by the layout stages."""


@dataclass
class UnitAnchor:
    """A placed extraction unit.

    ``direction`` is the side the unit outputs to, facing its line;
    ``drop`` is the line tile it exhausts onto.
    """

    position: Tile  # top-left tile
    size: Tile  # world (width, height) after rotation
    direction: Direction
    line_index: int
    flow_direction: Direction
    drop: Tile
    material: str
    modules: Tuple[str, ...] = ()
    fluid_required: bool = False
    emitter_count: int = 0

    @property
    def rect(self) -> Rect:
        return Rect(self.position[0], self.position[1], self.size[0], self.size[1])

    @property
    def center(self) -> Tuple[float, float]:
        return (
            self.position[0] + self.size[0] / 2.0,
            self.position[1] + self.size[1] / 2.0,
        )


@dataclass(frozen=True)
class LineSlot:
    """A line tile column and the pair of unit columns facing it.

    Cross coordinates: the left column starts at ``pair_start``, the line sits
    at ``cross`` and the right column ends at ``pair_end``.
    """

    index: int
    direction: Direction
    pair_start: int
    cross: int
    pair_end: int
    along_shift: int = 0


class SegmentKind(Enum):
    PLAIN = "plain"
    ENTRY = "entry"  # stream dives under
    EXIT = "exit"  # stream surfaces


@dataclass(frozen=True)
class LineSegment:
    position: Tile
    direction: Direction
    kind: SegmentKind = SegmentKind.PLAIN


@dataclass(frozen=True)
class BridgePair:
    """Linked bridge endpoints; ``entry`` is upstream of ``exit``."""

    entry: Tile
    exit: Tile
    direction: Direction


@dataclass
class Line:
    """A routed transport line in flow order."""

    index: int
    direction: Direction
    segments: List[LineSegment] = field(default_factory=list)
    bridges: List[BridgePair] = field(default_factory=list)
    free_tiles: List[Tile] = field(default_factory=list)  # under bridge spans

    @property
    def tiles(self) -> List[Tile]:
        return [segment.position for segment in self.segments]


@dataclass(frozen=True)
class PowerAnchor:
    """A power node; ``unit_index`` is set only for the fixed per-unit rule."""

    position: Tile
    node_type: str
    line_index: int
    unit_index: Optional[int] = None
    size: Tile = (1, 1)
    relay: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.position[0], self.position[1], self.size[0], self.size[1])


@dataclass(frozen=True)
class EmitterAnchor:
    position: Tile
    emitter_type: str
    size: Tile
    affected_units: Tuple[int, ...]
    modules: Tuple[str, ...] = ()

    @property
    def rect(self) -> Rect:
        return Rect(self.position[0], self.position[1], self.size[0], self.size[1])


@dataclass(frozen=True)
class FluidSegment:
    position: Tile
    fluid_segment_type: str
    line_index: int


@dataclass
class LayoutPlan:
    """Everything the layout stages produced for one region."""

    units: List[UnitAnchor] = field(default_factory=list)
    slots: List[LineSlot] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    power: List[PowerAnchor] = field(default_factory=list)
    emitters: List[EmitterAnchor] = field(default_factory=list)
    fluid: List[FluidSegment] = field(default_factory=list)

    def units_on_line(self, line_index: int) -> List[int]:
        """Indices of the units bound to ``line_index``."""
        return [i for i, unit in enumerate(self.units) if unit.line_index == line_index]

    def power_on_line(self, line_index: int) -> List[PowerAnchor]:
        return [anchor for anchor in self.power if anchor.line_index == line_index]

    def occupied_tiles(self) -> Dict[Tile, str]:
        """Tile -> owner label for every ground-occupying element."""
        owners: Dict[Tile, str] = {}
        for i, unit in enumerate(self.units):
            for tile in unit.rect.tiles():
                owners[tile] = f"unit:{i}"
        for line in self.lines:
            for tile in line.tiles:
                owners[tile] = f"line:{line.index}"
        for anchor in self.power:
            for tile in anchor.rect.tiles():
                owners[tile] = "power"
        for segment in self.fluid:
            owners[segment.position] = "fluid"
        for emitter in self.emitters:
            for tile in emitter.rect.tiles():
                owners[tile] = "emitter"
        return owners
