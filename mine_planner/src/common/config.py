"""Planner configuration passed explicitly into every planning call."""

from dataclasses import dataclass, fields, asdict
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from .constants import (
    DEFAULT_COLLISION_DROP_RATIO,
    DEFAULT_FLUID_SEGMENT_TYPE,
    DEFAULT_MAX_EMITTERS,
    DEFAULT_NODE_TYPE,
    DEFAULT_PREFERRED_EMITTERS,
    DEFAULT_QUALITY,
    DEFAULT_SEGMENT_TYPE,
    DEFAULT_UNIT_TYPE,
    MAX_EMITTERS_PER_UNIT,
    MIN_EMITTERS_PER_UNIT,
)
from .exceptions import IncompatibleConfiguration
from .geometry import Direction


class PackingStrategy(Enum):
    DENSE = "dense"
    STAGGERED = "staggered"

    @classmethod
    def parse(cls, value: "str | PackingStrategy") -> "PackingStrategy":
        if isinstance(value, PackingStrategy):
            return value
        text = str(value).strip().lower()
        if text in _LEGACY_MODES:
            return _LEGACY_MODES[text]
        try:
            return cls(text)
        except ValueError:
            raise IncompatibleConfiguration(f"Unknown packing strategy '{value}'")


# Mode names of older saved settings
_LEGACY_MODES = {
    "productivity": PackingStrategy.DENSE,
    "efficient": PackingStrategy.STAGGERED,
    "normal": PackingStrategy.STAGGERED,
}

_LEGACY_ORIENTATIONS = {"NS": Direction.SOUTH, "EW": Direction.EAST}


def coerce_modules(value: Optional[Sequence[str]]) -> Tuple[str, ...]:
    """Accept a sequence of module names or a comma separated string."""
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(value)


@dataclass(frozen=True)
class PlannerConfig:
    """Everything a planning call needs besides the region and the catalog.

    Optional entity types (``segment_type``, ``node_type``, ``emitter_type``,
    ``fluid_segment_type``) may be None, in which case that stage places
    nothing.
    """

    unit_type: str = DEFAULT_UNIT_TYPE
    strategy: PackingStrategy = PackingStrategy.STAGGERED
    flow_direction: Direction = Direction.SOUTH
    segment_type: Optional[str] = DEFAULT_SEGMENT_TYPE
    bridge_type: Optional[str] = None
    node_type: Optional[str] = DEFAULT_NODE_TYPE
    emitter_type: Optional[str] = None
    fluid_segment_type: Optional[str] = DEFAULT_FLUID_SEGMENT_TYPE
    max_emitters_per_unit: int = DEFAULT_MAX_EMITTERS
    preferred_emitters_per_unit: int = DEFAULT_PREFERRED_EMITTERS
    non_destructive: bool = False
    modules: Tuple[str, ...] = ()
    emitter_modules: Tuple[str, ...] = ()
    material: Optional[str] = None
    quality: str = DEFAULT_QUALITY
    collision_drop_ratio: float = DEFAULT_COLLISION_DROP_RATIO

    def __post_init__(self) -> None:
        # Frozen, so normalized values go through object.__setattr__
        object.__setattr__(self, "strategy", PackingStrategy.parse(self.strategy))
        try:
            direction = Direction.parse(self.flow_direction)
        except ValueError as exc:
            raise IncompatibleConfiguration(str(exc))
        object.__setattr__(self, "flow_direction", direction)
        object.__setattr__(self, "modules", coerce_modules(self.modules))
        object.__setattr__(self, "emitter_modules", coerce_modules(self.emitter_modules))

        if not MIN_EMITTERS_PER_UNIT <= self.max_emitters_per_unit <= MAX_EMITTERS_PER_UNIT:
            raise IncompatibleConfiguration(
                f"max_emitters_per_unit must be within "
                f"{MIN_EMITTERS_PER_UNIT}..{MAX_EMITTERS_PER_UNIT}, "
                f"got {self.max_emitters_per_unit}"
            )
        if not 0 <= self.preferred_emitters_per_unit <= MAX_EMITTERS_PER_UNIT:
            raise IncompatibleConfiguration(
                f"preferred_emitters_per_unit must be within 0..{MAX_EMITTERS_PER_UNIT}, "
                f"got {self.preferred_emitters_per_unit}"
            )
        if not 0.0 <= self.collision_drop_ratio <= 1.0:
            raise IncompatibleConfiguration(
                f"collision_drop_ratio must be within 0..1, got {self.collision_drop_ratio}"
            )
        if not self.unit_type:
            raise IncompatibleConfiguration("unit_type is required")

    @property
    def effective_emitter_target(self) -> int:
        """Per-unit emitter target: the preferred count, or the cap when unset."""
        preferred = self.preferred_emitters_per_unit
        if 0 < preferred < self.max_emitters_per_unit:
            return preferred
        return self.max_emitters_per_unit

    def unit_modules(self, slots: int) -> Tuple[str, ...]:
        return self.modules[:slots]

    def emitter_module_list(self, slots: int) -> Tuple[str, ...]:
        return self.emitter_modules[:slots]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlannerConfig":
        """Build a config from plain settings, accepting the legacy keys."""
        values = dict(data)
        if "flow_direction" not in values and "belt_orientation" in values:
            orientation = str(values["belt_orientation"]).upper()
            if orientation not in _LEGACY_ORIENTATIONS:
                raise IncompatibleConfiguration(
                    f"Unknown belt orientation '{values['belt_orientation']}'"
                )
            values["flow_direction"] = _LEGACY_ORIENTATIONS[orientation]
        if "strategy" not in values and "placement_mode" in values:
            values["strategy"] = values["placement_mode"]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known - {"belt_orientation", "placement_mode"})
        if unknown:
            raise IncompatibleConfiguration(
                f"Unknown configuration key(s): {', '.join(unknown)}"
            )
        return cls(**{k: v for k, v in values.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["strategy"] = self.strategy.value
        data["flow_direction"] = self.flow_direction.value
        data["modules"] = list(self.modules)
        data["emitter_modules"] = list(self.emitter_modules)
        return data
