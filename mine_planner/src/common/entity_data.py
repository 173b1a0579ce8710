"""Entity data extraction from draftsman, plus the compatibility catalog."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple
import math

from draftsman.data import entities as entity_data

from .exceptions import IncompatibleConfiguration


def _box(half: float) -> list:
    return [[-half, -half], [half, half]]


# Vanilla prototype values in the same shape draftsman stores them, so the
# helper below reads both sources identically.
BUILTIN_PROTOTYPES: Dict[str, Dict[str, Any]] = {
    "burner-mining-drill": {
        "type": "mining-drill",
        "collision_box": _box(0.7),
        "resource_searching_radius": 0.99,
        "module_slots": 0,
    },
    "electric-mining-drill": {
        "type": "mining-drill",
        "collision_box": _box(1.4),
        "resource_searching_radius": 2.49,
        "module_slots": 3,
        "input_fluid_box": {"pipe_connections": []},
    },
    "big-mining-drill": {
        "type": "mining-drill",
        "collision_box": _box(2.4),
        "resource_searching_radius": 4.49,
        "module_slots": 4,
        "input_fluid_box": {"pipe_connections": []},
    },
    "small-electric-pole": {
        "type": "electric-pole",
        "collision_box": _box(0.15),
        "supply_area_distance": 2.5,
        "maximum_wire_distance": 7.5,
    },
    "medium-electric-pole": {
        "type": "electric-pole",
        "collision_box": _box(0.15),
        "supply_area_distance": 3.5,
        "maximum_wire_distance": 9,
    },
    "big-electric-pole": {
        "type": "electric-pole",
        "collision_box": _box(0.65),
        "supply_area_distance": 2,
        "maximum_wire_distance": 30,
    },
    "substation": {
        "type": "electric-pole",
        "collision_box": _box(0.7),
        "supply_area_distance": 9,
        "maximum_wire_distance": 18,
    },
    "beacon": {
        "type": "beacon",
        "collision_box": _box(1.2),
        "supply_area_distance": 3,
        "module_slots": 2,
    },
    "transport-belt": {"type": "transport-belt", "collision_box": _box(0.4)},
    "fast-transport-belt": {"type": "transport-belt", "collision_box": _box(0.4)},
    "express-transport-belt": {"type": "transport-belt", "collision_box": _box(0.4)},
    "turbo-transport-belt": {"type": "transport-belt", "collision_box": _box(0.4)},
    "underground-belt": {
        "type": "underground-belt",
        "collision_box": _box(0.4),
        "max_distance": 5,
    },
    "fast-underground-belt": {
        "type": "underground-belt",
        "collision_box": _box(0.4),
        "max_distance": 7,
    },
    "express-underground-belt": {
        "type": "underground-belt",
        "collision_box": _box(0.4),
        "max_distance": 9,
    },
    "turbo-underground-belt": {
        "type": "underground-belt",
        "collision_box": _box(0.4),
        "max_distance": 11,
    },
    "pipe": {"type": "pipe", "collision_box": _box(0.29)},
}


@dataclass(frozen=True)
class FootprintSpec:
    """Extraction unit footprint.

    ``width`` runs along the line the unit exhausts onto, ``height`` away
    from it; the unit is rotated so its output side faces the line.
    """

    name: str
    width: int
    height: int
    mining_radius: float
    fluid_input: bool
    module_slots: int
    quality: str = "normal"

    @property
    def mining_diameter(self) -> int:
        return 2 * math.floor(self.mining_radius) + 1


@dataclass(frozen=True)
class NodeSpec:
    """Power node stats."""

    name: str
    width: int
    height: int
    supply_distance: float
    wire_reach: float


@dataclass(frozen=True)
class EmitterSpec:
    """Effect emitter stats."""

    name: str
    width: int
    height: int
    supply_distance: int
    module_slots: int


@dataclass(frozen=True)
class SegmentSpec:
    """Transport segment with its bridging variant."""

    name: str
    bridge_type: Optional[str]
    bridge_max_distance: int


class EntityDataHelper:
    """Helper to extract entity information from a prototype table."""

    def __init__(self, prototypes: Dict[str, Dict[str, Any]]):
        self.prototypes = prototypes

    def has(self, prototype: str) -> bool:
        return prototype in self.prototypes

    def get_footprint(self, prototype: str) -> Tuple[int, int]:
        """Get entity footprint size.

        Args:
            prototype: Entity prototype name (e.g., "electric-mining-drill")

        Returns:
            (width, height) in tiles
        """
        try:
            entity_info = self.prototypes.get(prototype, {})

            width = entity_info.get("tile_width")
            height = entity_info.get("tile_height")

            if width is not None and height is not None:
                return (max(1, int(width)), max(1, int(height)))

            collision_box = entity_info.get("collision_box")
            if collision_box:
                width = max(1, math.ceil(collision_box[1][0] - collision_box[0][0]))
                height = max(1, math.ceil(collision_box[1][1] - collision_box[0][1]))
                return (width, height)

            return (1, 1)

        except Exception:
            return (1, 1)

    def get_number(self, prototype: str, key: str) -> Optional[float]:
        """Read a numeric stat, or None when the prototype lacks it."""
        try:
            value = self.prototypes.get(prototype, {}).get(key)
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def get_module_slots(self, prototype: str) -> int:
        entity_info = self.prototypes.get(prototype, {})
        slots = entity_info.get("module_slots")
        if slots is None:
            # Factorio 1.1 data nests the slot count
            slots = entity_info.get("module_specification", {}).get("module_slots", 0)
        try:
            return int(slots)
        except (TypeError, ValueError):
            return 0

    def has_fluid_input(self, prototype: str) -> bool:
        return bool(self.prototypes.get(prototype, {}).get("input_fluid_box"))


def derive_bridge_type(segment_type: str) -> Optional[str]:
    """Underground variant for a belt tier (``fast-transport-belt`` -> ``fast-underground-belt``)."""
    if "transport-belt" not in segment_type:
        return None
    return segment_type.replace("transport-belt", "underground-belt")


class EntityCatalog:
    """Resolves configured identifiers into the stats the planner needs.

    ``legal`` is the set of identifiers currently unlocked; the planner
    trusts what it is given and only asks the catalog for stats.
    """

    def __init__(
        self,
        prototypes: Dict[str, Dict[str, Any]],
        legal: Optional[Iterable[str]] = None,
    ):
        self.helper = EntityDataHelper(prototypes)
        self.legal = frozenset(legal) if legal is not None else None

    @classmethod
    def builtin(cls, legal: Optional[Iterable[str]] = None) -> "EntityCatalog":
        return cls(BUILTIN_PROTOTYPES, legal)

    @classmethod
    def from_draftsman(cls, legal: Optional[Iterable[str]] = None) -> "EntityCatalog":
        """Catalog over the prototype data bundled with draftsman."""
        return cls(entity_data.raw, legal)

    def is_legal(self, name: str) -> bool:
        if self.legal is None:
            return self.helper.has(name)
        return name in self.legal

    def _require(self, name: str, role: str) -> None:
        if not self.helper.has(name):
            raise IncompatibleConfiguration(f"Unknown {role} type '{name}'")

    def unit(self, name: str, quality: str = "normal") -> FootprintSpec:
        self._require(name, "unit")
        radius = self.helper.get_number(name, "resource_searching_radius")
        if radius is None:
            raise IncompatibleConfiguration(
                f"'{name}' has no mining radius and cannot be used as a unit"
            )
        width, height = self.helper.get_footprint(name)
        return FootprintSpec(
            name=name,
            width=width,
            height=height,
            mining_radius=radius,
            fluid_input=self.helper.has_fluid_input(name),
            module_slots=self.helper.get_module_slots(name),
            quality=quality,
        )

    def node(self, name: str) -> NodeSpec:
        self._require(name, "power node")
        supply = self.helper.get_number(name, "supply_area_distance")
        reach = self.helper.get_number(name, "maximum_wire_distance")
        if supply is None or reach is None:
            raise IncompatibleConfiguration(f"'{name}' is not a power node")
        width, height = self.helper.get_footprint(name)
        return NodeSpec(name, width, height, supply, reach)

    def emitter(self, name: str) -> EmitterSpec:
        self._require(name, "emitter")
        supply = self.helper.get_number(name, "supply_area_distance")
        if supply is None:
            raise IncompatibleConfiguration(f"'{name}' has no effect radius")
        width, height = self.helper.get_footprint(name)
        return EmitterSpec(
            name, width, height, int(supply), self.helper.get_module_slots(name)
        )

    def segment(self, name: str, bridge_type: Optional[str] = None) -> SegmentSpec:
        self._require(name, "segment")
        bridge = bridge_type or derive_bridge_type(name)
        if bridge is None or not self.helper.has(bridge):
            return SegmentSpec(name, None, 0)
        distance = self.helper.get_number(bridge, "max_distance")
        return SegmentSpec(name, bridge, int(distance) if distance else 0)

    def fluid_segment(self, name: str) -> str:
        self._require(name, "fluid segment")
        return name
