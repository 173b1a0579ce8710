"""Extraction unit packing on a paired-column lattice."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from mine_planner.src.common.config import PackingStrategy
from mine_planner.src.common.constants import BRIDGE_FOOTPRINT_THRESHOLD
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import FootprintSpec
from mine_planner.src.common.geometry import AxisFrame, Direction
from .layout_plan import LineSlot, UnitAnchor
from .region import Region


@dataclass(frozen=True)
class LatticeSpacing:
    """Pitches of the unit lattice in line-relative coordinates."""

    along_pitch: int
    pair_pitch: int  # cross distance between consecutive line pairs
    stagger: int  # along offset applied to odd-indexed lines


def dense_spacing(footprint: FootprintSpec) -> LatticeSpacing:
    along, cross = footprint.width, footprint.height
    pair = 2 * cross + 1
    if along < BRIDGE_FOOTPRINT_THRESHOLD:
        pair += 1  # service lane for power nodes
    return LatticeSpacing(along, pair, 0)


def staggered_spacing(footprint: FootprintSpec) -> LatticeSpacing:
    along, cross = footprint.width, footprint.height
    diameter = footprint.mining_diameter
    along_pitch = max(along, diameter)
    extra = max(0, diameter - cross)
    if along < BRIDGE_FOOTPRINT_THRESHOLD:
        extra = max(1, extra)
    return LatticeSpacing(along_pitch, 2 * cross + 1 + extra, along_pitch // 2)


SPACING_RULES: Dict[PackingStrategy, Callable[[FootprintSpec], LatticeSpacing]] = {
    PackingStrategy.DENSE: dense_spacing,
    PackingStrategy.STAGGERED: staggered_spacing,
}


class GridPacker:
    """Compute unit anchors for one region.

    Units come in pairs of columns facing a shared one-tile line. The lattice
    starts at the region's minimum corner whatever the flow direction, so
    reversing flow keeps every unit where it was.
    """

    def __init__(
        self,
        region: Region,
        footprint: FootprintSpec,
        strategy: PackingStrategy,
        flow_direction: Direction,
        diagnostics: PlanDiagnostics,
        material: Optional[str] = None,
        modules: Tuple[str, ...] = (),
    ) -> None:
        self.region = region
        self.footprint = footprint
        self.strategy = strategy
        self.frame = AxisFrame(flow_direction)
        self.diagnostics = diagnostics
        self.material = material
        self.modules = modules
        self.spacing = SPACING_RULES[strategy](footprint)

    def pack(self) -> Tuple[List[UnitAnchor], List[LineSlot]]:
        """Return anchors (line order, then flow order) and the lines they use."""
        frame = self.frame
        along_size = self.footprint.width
        cross_size = self.footprint.height
        along_lo, along_hi = frame.along_range(self.region.bounds)
        cross_lo, cross_hi = frame.cross_range(self.region.bounds)

        anchors: List[UnitAnchor] = []
        slots: List[LineSlot] = []
        skipped = 0

        pair_index = 0
        pair_start = cross_lo
        while pair_start + cross_size - 1 <= cross_hi:
            shift = self.spacing.stagger if pair_index % 2 else 0
            slot = LineSlot(
                index=pair_index,
                direction=frame.direction,
                pair_start=pair_start,
                cross=pair_start + cross_size,
                pair_end=pair_start + 2 * cross_size,
                along_shift=shift,
            )
            columns = (
                (pair_start, frame.facing(1)),
                (slot.cross + 1, frame.facing(-1)),
            )

            line_units: List[UnitAnchor] = []
            along = along_lo + shift
            while along + along_size - 1 <= along_hi:
                for column_start, facing in columns:
                    unit = self._try_unit(slot, along, column_start, facing)
                    if unit is None:
                        skipped += 1
                    else:
                        line_units.append(unit)
                along += self.spacing.along_pitch

            if line_units:
                line_units.sort(key=lambda u: frame.flow_key(frame.along_of(u.position)))
                anchors.extend(line_units)
                slots.append(slot)

            pair_index += 1
            pair_start += self.spacing.pair_pitch

        self.diagnostics.info(
            f"Packed {len(anchors)} unit(s) on {len(slots)} line(s) "
            f"({self.strategy.value}), skipped {skipped} lattice position(s)",
            stage="packing",
        )
        return anchors, slots

    def _try_unit(
        self, slot: LineSlot, along: int, cross: int, facing: Direction
    ) -> Optional[UnitAnchor]:
        frame = self.frame
        rect = frame.rect(along, cross, self.footprint.width, self.footprint.height)
        material = self.region.material_of(rect)
        if material is None:
            return None
        if self.material is not None and material != self.material:
            return None
        return UnitAnchor(
            position=(rect.left, rect.top),
            size=(rect.width, rect.height),
            direction=facing,
            line_index=slot.index,
            flow_direction=frame.direction,
            drop=frame.to_tile(along + self.footprint.width // 2, slot.cross),
            material=material,
            modules=self.modules,
            fluid_required=self.region.requires_fluid(rect),
        )
