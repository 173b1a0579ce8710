"""Transport line routing for one pair of unit columns."""

from __future__ import annotations

from typing import List, Optional, Sequence

from mine_planner.src.common.constants import BRIDGE_FOOTPRINT_THRESHOLD
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import FootprintSpec, SegmentSpec
from mine_planner.src.common.exceptions import (
    IncompatibleConfiguration,
    InternalPlannerError,
)
from mine_planner.src.common.geometry import AxisFrame
from .layout_plan import BridgePair, Line, LineSegment, LineSlot, SegmentKind, UnitAnchor

# Shortest bridge span the fixed pattern needs: entry, power tile, exit
MIN_BRIDGE_DISTANCE = 3


class LineRouter:
    """Build the ordered segment sequence of a line.

    Footprints at least three tiles long exhaust onto a bridge entry at their
    drop tile. The tile after it is left for the unit's power node, and the
    stream surfaces one tile before the next unit's drop. Shorter footprints
    get a plain segment on every tile of the line.
    """

    def __init__(
        self,
        segment: Optional[SegmentSpec],
        footprint: FootprintSpec,
        diagnostics: PlanDiagnostics,
    ) -> None:
        self.segment = segment
        self.footprint = footprint
        self.diagnostics = diagnostics
        self.bridged = footprint.width >= BRIDGE_FOOTPRINT_THRESHOLD
        if segment is not None and self.bridged:
            if segment.bridge_type is None:
                raise IncompatibleConfiguration(
                    f"'{segment.name}' has no bridge variant, required for "
                    f"{footprint.name}"
                )
            if segment.bridge_max_distance < MIN_BRIDGE_DISTANCE:
                raise IncompatibleConfiguration(
                    f"'{segment.bridge_type}' reaches {segment.bridge_max_distance} "
                    f"tiles, at least {MIN_BRIDGE_DISTANCE} are needed"
                )

    def route(self, slot: LineSlot, units: Sequence[UnitAnchor]) -> Line:
        self._check_membership(slot, units)
        line = Line(index=slot.index, direction=slot.direction)
        if self.segment is None or not units:
            return line

        frame = AxisFrame(slot.direction)
        if self.bridged:
            self._route_bridged(line, frame, slot, units)
        else:
            self._route_plain(line, frame, slot, units)

        self.diagnostics.debug(
            f"Line {slot.index}: {len(line.segments)} segment(s), "
            f"{len(line.bridges)} bridge pair(s)",
            stage="routing",
        )
        return line

    def _check_membership(self, slot: LineSlot, units: Sequence[UnitAnchor]) -> None:
        for unit in units:
            if unit.line_index != slot.index or unit.flow_direction != slot.direction:
                raise InternalPlannerError(
                    f"Unit at {unit.position} belongs to line {unit.line_index} "
                    f"({unit.flow_direction.value}), not line {slot.index} "
                    f"({slot.direction.value})"
                )

    def _route_plain(
        self,
        line: Line,
        frame: AxisFrame,
        slot: LineSlot,
        units: Sequence[UnitAnchor],
    ) -> None:
        starts = [frame.along_of(unit.position) for unit in units]
        lo = min(starts)
        hi = max(starts) + self.footprint.width - 1
        alongs = range(lo, hi + 1) if frame.sign > 0 else range(hi, lo - 1, -1)
        for along in alongs:
            line.segments.append(
                LineSegment(frame.to_tile(along, slot.cross), slot.direction)
            )

    def _route_bridged(
        self,
        line: Line,
        frame: AxisFrame,
        slot: LineSlot,
        units: Sequence[UnitAnchor],
    ) -> None:
        max_distance = self.segment.bridge_max_distance
        drops = sorted({frame.along_of(unit.drop) for unit in units}, key=frame.flow_key)

        def add(along: int, kind: SegmentKind) -> None:
            line.segments.append(
                LineSegment(frame.to_tile(along, slot.cross), slot.direction, kind)
            )

        def bridge(entry: int, exit_: int) -> None:
            line.bridges.append(
                BridgePair(
                    frame.to_tile(entry, slot.cross),
                    frame.to_tile(exit_, slot.cross),
                    slot.direction,
                )
            )
            for offset in range(1, (exit_ - entry) * frame.sign):
                line.free_tiles.append(frame.to_tile(frame.step(entry, offset), slot.cross))
            add(exit_, SegmentKind.EXIT)

        for position, drop in enumerate(drops):
            if position + 1 < len(drops):
                target = frame.step(drops[position + 1], -1)
            else:
                target = frame.step(drop, 2)

            start = drop
            add(start, SegmentKind.ENTRY)
            distance = (target - start) * frame.sign
            while distance > max_distance:
                exit_ = frame.step(start, min(max_distance, distance - 2))
                bridge(start, exit_)
                start = frame.step(exit_, 1)
                add(start, SegmentKind.ENTRY)
                distance = (target - start) * frame.sign
            bridge(start, target)
