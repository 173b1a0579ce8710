"""Fluid segments between units of the same column."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import FootprintSpec
from mine_planner.src.common.exceptions import IncompatibleConfiguration
from mine_planner.src.common.geometry import AxisFrame
from .layout_plan import FluidSegment, LineSlot, UnitAnchor


def fluid_needed(units: Sequence[UnitAnchor]) -> bool:
    return any(unit.fluid_required for unit in units)


class FluidRouter:
    """Chain the fluid inputs of each unit column with single-tile segments.

    Units sit on the column's centre axis with their fluid inputs facing up
    and down the column, so filling the along gap between neighbours at the
    centre cross coordinate joins them. Touching units need nothing.
    """

    def __init__(
        self,
        fluid_segment_type: Optional[str],
        footprint: FootprintSpec,
        diagnostics: PlanDiagnostics,
    ) -> None:
        self.fluid_segment_type = fluid_segment_type
        self.footprint = footprint
        self.diagnostics = diagnostics

    def route(
        self, units: Sequence[UnitAnchor], slots: Sequence[LineSlot]
    ) -> List[FluidSegment]:
        if not fluid_needed(units):
            return []
        if self.fluid_segment_type is None:
            raise IncompatibleConfiguration(
                "Region needs fluid but no fluid segment type is configured",
                stage="fluid",
            )
        if not self.footprint.fluid_input:
            raise IncompatibleConfiguration(
                f"Region needs fluid but '{self.footprint.name}' has no fluid input",
                stage="fluid",
            )

        segments: List[FluidSegment] = []
        for slot in slots:
            frame = AxisFrame(slot.direction)
            columns: Dict[int, List[UnitAnchor]] = {}
            for unit in units:
                if unit.line_index == slot.index:
                    columns.setdefault(frame.cross_of(unit.position), []).append(unit)

            for column_start in sorted(columns):
                column = columns[column_start]
                if not fluid_needed(column):
                    continue
                centre = column_start + self.footprint.height // 2
                for along in self._gap_alongs(frame, column):
                    segments.append(
                        FluidSegment(
                            frame.to_tile(along, centre),
                            self.fluid_segment_type,
                            slot.index,
                        )
                    )

        self.diagnostics.debug(f"Placed {len(segments)} fluid segment(s)", stage="fluid")
        return segments

    def _gap_alongs(self, frame: AxisFrame, column: Sequence[UnitAnchor]) -> List[int]:
        spans: List[Tuple[int, int]] = sorted(
            frame.along_range(unit.rect) for unit in column
        )
        alongs: List[int] = []
        for (_, end), (start, _) in zip(spans, spans[1:]):
            alongs.extend(range(end + 1, start))
        return sorted(alongs, key=frame.flow_key)
