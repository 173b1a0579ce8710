"""Shared constants across the planner."""

# Tag stamped on every emitted placeholder; the ghost remover selects by it
PLAN_TAG = "mine-planner"

# Footprint expansion around the selected region
LINE_MARGIN = 1  # lines, power nodes and fluid segments
EMITTER_MARGIN = 3  # emitters and ghost removal

# Footprints at least this long on the line axis need bridged lines
BRIDGE_FOOTPRINT_THRESHOLD = 3

# Emitter limits per unit
MIN_EMITTERS_PER_UNIT = 1
MAX_EMITTERS_PER_UNIT = 12
DEFAULT_MAX_EMITTERS = 4
DEFAULT_PREFERRED_EMITTERS = 1

# Collision pass
DEFAULT_COLLISION_DROP_RATIO = 0.25
MIN_COLLISION_DROP_THRESHOLD = 4

# Default entity choices
DEFAULT_UNIT_TYPE = "electric-mining-drill"
DEFAULT_SEGMENT_TYPE = "transport-belt"
DEFAULT_NODE_TYPE = "medium-electric-pole"
DEFAULT_FLUID_SEGMENT_TYPE = "pipe"
DEFAULT_QUALITY = "normal"

# Obstruction classes
IGNORED_OBSTRUCTION_TYPES = frozenset(
    {
        "resource",
        "character",
        "entity-ghost",
        "tile-ghost",
        "elevated-straight-rail",
        "elevated-half-diagonal-rail",
        "elevated-curved-rail-a",
        "elevated-curved-rail-b",
    }
)
NATURAL_OBSTRUCTION_TYPES = frozenset({"tree", "simple-entity", "cliff"})
PERMANENT_OBSTRUCTION_TYPES = frozenset({"rail-ramp", "rail-support"})
