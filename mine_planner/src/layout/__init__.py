"""Layout Planning Module
=========================

This package turns a region of extraction points into placed elements:

1. Grid packing – extraction unit anchors on a paired-column lattice.
2. Line routing – transport segments and bridge pairs per line.
3. Power placement – fixed per-unit nodes or spaced service-lane nodes.
4. Fluid routing – segments chaining unit fluid inputs.
5. Emitter filling – capacity-bounded effect emitters.

The resulting :class:`LayoutPlan` is consumed by the emission package.
"""

from .region import Region, ExtractionPoint, Obstruction
from .layout_plan import (
    LayoutPlan,
    UnitAnchor,
    LineSlot,
    Line,
    LineSegment,
    SegmentKind,
    BridgePair,
    PowerAnchor,
    EmitterAnchor,
    FluidSegment,
)
from .grid_packer import GridPacker, LatticeSpacing, SPACING_RULES
from .line_router import LineRouter
from .power_planner import PowerPlacer, FixedPatternRule, SpacingRule
from .fluid_router import FluidRouter
from .emitter_filler import EmitterFiller
from .tile_grid import TileGrid
from .planner import LayoutPlanner

__all__ = [
    # Core planning
    "LayoutPlanner",
    "LayoutPlan",
    # Input
    "Region",
    "ExtractionPoint",
    "Obstruction",
    # Data structures
    "UnitAnchor",
    "LineSlot",
    "Line",
    "LineSegment",
    "SegmentKind",
    "BridgePair",
    "PowerAnchor",
    "EmitterAnchor",
    "FluidSegment",
    # Stages (for advanced use)
    "GridPacker",
    "LatticeSpacing",
    "SPACING_RULES",
    "LineRouter",
    "PowerPlacer",
    "FixedPatternRule",
    "SpacingRule",
    "FluidRouter",
    "EmitterFiller",
    "TileGrid",
]
