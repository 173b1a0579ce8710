from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Set, Tuple

from mine_planner.src.common.constants import BRIDGE_FOOTPRINT_THRESHOLD, LINE_MARGIN
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import FootprintSpec, NodeSpec
from mine_planner.src.common.exceptions import IncompatibleConfiguration
from mine_planner.src.common.geometry import AxisFrame, Rect
from .layout_plan import Line, LineSlot, PowerAnchor, UnitAnchor

"""Power node placement along and beside transport lines."""


class FixedPatternRule:
    """One node per unit, on the line tile right after the unit's drop.

    Consecutive nodes further apart than the link reach get relays on free
    tiles under the bridge spans between them.
    """

    def __init__(self, node: NodeSpec, diagnostics: PlanDiagnostics) -> None:
        self.node = node
        self.diagnostics = diagnostics
        self.reach = math.floor(node.wire_reach)

    def place_line(
        self,
        slot: LineSlot,
        units: Sequence[Tuple[int, UnitAnchor]],
        line: Line,
        region_bounds: Rect,
        all_units: Sequence[UnitAnchor],
        slots: Sequence[LineSlot],
    ) -> List[PowerAnchor]:
        frame = AxisFrame(slot.direction)

        owners: Dict[int, int] = {}
        for index, unit in units:
            along = frame.along_of(unit.drop)
            owners[along] = min(index, owners.get(along, index))
        drops = sorted(owners, key=frame.flow_key)
        node_alongs = [frame.step(drop, 1) for drop in drops]

        if line.segments:
            free = {frame.along_of(tile) for tile in line.free_tiles}
        elif node_alongs:
            first, last = sorted(node_alongs)[0], sorted(node_alongs)[-1]
            free = set(range(first, last + 1))
        else:
            free = set()
        free -= set(node_alongs)

        anchors: List[PowerAnchor] = []
        previous: Optional[int] = None
        for drop, along in zip(drops, node_alongs):
            if previous is not None:
                for relay in self._relays(frame, previous, along, free):
                    anchors.append(self._anchor(frame, slot, relay, None, relay=True))
            anchors.append(self._anchor(frame, slot, along, owners[drop]))
            previous = along
        return anchors

    def _relays(
        self, frame: AxisFrame, previous: int, target: int, free: Set[int]
    ) -> List[int]:
        relays: List[int] = []
        while (target - previous) * frame.sign > self.reach:
            reachable = [
                along
                for along in free
                if 0 < (along - previous) * frame.sign <= self.reach
            ]
            if not reachable:
                raise IncompatibleConfiguration(
                    f"'{self.node.name}' cannot link nodes {abs(target - previous)} "
                    f"tiles apart and no free tile is left for a relay",
                    stage="power",
                )
            previous = max(reachable, key=frame.flow_key)
            relays.append(previous)
        return relays

    def _anchor(
        self,
        frame: AxisFrame,
        slot: LineSlot,
        along: int,
        unit_index: Optional[int],
        relay: bool = False,
    ) -> PowerAnchor:
        return PowerAnchor(
            position=frame.to_tile(along, slot.cross),
            node_type=self.node.name,
            line_index=slot.index,
            unit_index=unit_index,
            size=(self.node.width, self.node.height),
            relay=relay,
        )


class SpacingRule:
    """Nodes in the service lanes beside each line pair, spaced as far apart
    as coverage and link reach allow.

    A line owns the lane before its left column, and the lane after its
    right column unless that lane is the next line's. Every lane of a line
    uses the same along positions, so the lanes link to each other.
    """

    def __init__(self, node: NodeSpec, diagnostics: PlanDiagnostics) -> None:
        self.node = node
        self.diagnostics = diagnostics
        self.coverage = math.floor(node.supply_distance - node.width / 2)
        self.reach = math.floor(node.wire_reach)

    def place_line(
        self,
        slot: LineSlot,
        units: Sequence[Tuple[int, UnitAnchor]],
        line: Line,
        region_bounds: Rect,
        all_units: Sequence[UnitAnchor],
        slots: Sequence[LineSlot],
    ) -> List[PowerAnchor]:
        frame = AxisFrame(slot.direction)
        left_lanes = {other.pair_start - 1 for other in slots}
        lanes = [slot.pair_start - 1]
        if slot.pair_end + 1 not in left_lanes:
            lanes.append(slot.pair_end + 1)

        spans: List[Tuple[int, int]] = []
        used_lanes: List[int] = []
        for lane in lanes:
            adjacent = [
                unit for unit in all_units if self._beside(frame, unit, lane)
            ]
            if not adjacent:
                continue
            used_lanes.append(lane)
            for unit in adjacent:
                start, end = frame.along_range(unit.rect)
                spans.append((start, end))
        if not spans:
            return []

        if len(used_lanes) > 1 and abs(used_lanes[1] - used_lanes[0]) > self.reach:
            raise IncompatibleConfiguration(
                f"'{self.node.name}' cannot link lanes "
                f"{abs(used_lanes[1] - used_lanes[0])} tiles apart",
                stage="power",
            )
        if self.coverage < 0:
            raise IncompatibleConfiguration(
                f"'{self.node.name}' supply area is too small", stage="power"
            )

        _, extent_end = frame.along_range(region_bounds.expanded(LINE_MARGIN))
        positions: List[Tuple[int, bool]] = []
        last: Optional[int] = None
        for start, end in sorted(spans):
            if last is not None and start <= last + self.coverage and end >= last - self.coverage:
                continue
            along = min(end + self.coverage, extent_end)
            if last is not None:
                while along - last > self.reach:
                    last += self.reach
                    positions.append((last, True))
            positions.append((along, False))
            last = along

        return [
            PowerAnchor(
                position=frame.to_tile(along, lane),
                node_type=self.node.name,
                line_index=slot.index,
                size=(self.node.width, self.node.height),
                relay=relay,
            )
            for lane in used_lanes
            for along, relay in positions
        ]

    @staticmethod
    def _beside(frame: AxisFrame, unit: UnitAnchor, lane: int) -> bool:
        start, end = frame.cross_range(unit.rect)
        return end == lane - 1 or start == lane + 1


class PowerPlacer:
    """Choose the spacing rule once from the footprint and run it per line."""

    def __init__(
        self,
        node: Optional[NodeSpec],
        footprint: FootprintSpec,
        region_bounds: Rect,
        diagnostics: PlanDiagnostics,
    ) -> None:
        self.node = node
        self.region_bounds = region_bounds
        self.diagnostics = diagnostics
        self.rule = None
        if node is None:
            return
        if node.width > 1 or node.height > 1:
            raise IncompatibleConfiguration(
                f"'{node.name}' is {node.width}x{node.height}; power nodes must fit "
                f"a one-tile line or service lane",
                stage="power",
            )
        if footprint.width >= BRIDGE_FOOTPRINT_THRESHOLD:
            self.rule = FixedPatternRule(node, diagnostics)
        else:
            self.rule = SpacingRule(node, diagnostics)

    def place(
        self,
        units: Sequence[UnitAnchor],
        slots: Sequence[LineSlot],
        lines: Sequence[Line],
    ) -> List[PowerAnchor]:
        if self.rule is None:
            return []
        by_index = {line.index: line for line in lines}
        anchors: List[PowerAnchor] = []
        for slot in slots:
            members = [(i, unit) for i, unit in enumerate(units) if unit.line_index == slot.index]
            line = by_index.get(slot.index, Line(slot.index, slot.direction))
            placed = self.rule.place_line(
                slot, members, line, self.region_bounds, units, slots
            )
            anchors.extend(placed)
            self.diagnostics.debug(
                f"Line {slot.index}: {len(placed)} power node(s) "
                f"({sum(1 for a in placed if a.relay)} relay(s))",
                stage="power",
            )
        return anchors
