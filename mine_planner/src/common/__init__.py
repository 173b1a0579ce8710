"""Common utilities shared across planner stages."""

from .diagnostics import PlanDiagnostics, DiagnosticSeverity
from .exceptions import (
    PlanErrorKind,
    PlanningError,
    EmptyRegion,
    NoValidPlacement,
    IncompatibleConfiguration,
    CollisionOverflow,
    InternalPlannerError,
)
from .geometry import Tile, Direction, Rect, AxisFrame
from .config import PlannerConfig, PackingStrategy
from .entity_data import (
    EntityCatalog,
    EntityDataHelper,
    FootprintSpec,
    NodeSpec,
    EmitterSpec,
    SegmentSpec,
    BUILTIN_PROTOTYPES,
)
from .constants import *

__all__ = [
    "PlanDiagnostics",
    "DiagnosticSeverity",
    # Errors
    "PlanErrorKind",
    "PlanningError",
    "EmptyRegion",
    "NoValidPlacement",
    "IncompatibleConfiguration",
    "CollisionOverflow",
    "InternalPlannerError",
    # Geometry
    "Tile",
    "Direction",
    "Rect",
    "AxisFrame",
    # Configuration and catalog
    "PlannerConfig",
    "PackingStrategy",
    "EntityCatalog",
    "EntityDataHelper",
    "FootprintSpec",
    "NodeSpec",
    "EmitterSpec",
    "SegmentSpec",
    "BUILTIN_PROTOTYPES",
    # Constants
    "PLAN_TAG",
    "LINE_MARGIN",
    "EMITTER_MARGIN",
]
