"""Plan emission: placeholders, obstruction handling, ghost removal and
blueprint export."""

from .plan import (
    COLLISION_PRIORITY,
    DeconstructOrder,
    Placeholder,
    PlaceholderKind,
    Plan,
    RemovalList,
)
from .obstruction_marker import ObstructionAction, ObstructionMarker, classify_obstruction
from .plan_emitter import PlanEmitter, collision_threshold, resolve_collisions
from .ghost_remover import GhostRemover
from .blueprint_exporter import BlueprintExporter

__all__ = [
    "COLLISION_PRIORITY",
    "DeconstructOrder",
    "Placeholder",
    "PlaceholderKind",
    "Plan",
    "RemovalList",
    "ObstructionAction",
    "ObstructionMarker",
    "classify_obstruction",
    "PlanEmitter",
    "collision_threshold",
    "resolve_collisions",
    "GhostRemover",
    "BlueprintExporter",
]
