"""Tests for line_router.py - segment sequences and bridge pairs."""

from dataclasses import replace

import pytest

from mine_planner.src.common.config import PackingStrategy
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog, SegmentSpec
from mine_planner.src.common.exceptions import (
    IncompatibleConfiguration,
    InternalPlannerError,
)
from mine_planner.src.common.geometry import AxisFrame, Direction
from mine_planner.src.layout.grid_packer import GridPacker
from mine_planner.src.layout.layout_plan import BridgePair, SegmentKind
from mine_planner.src.layout.line_router import LineRouter
from mine_planner.src.layout.region import Region

CATALOG = EntityCatalog.builtin()
BELT = CATALOG.segment("transport-belt")


def _route(rows, unit="electric-mining-drill", flow=Direction.SOUTH, segment=BELT):
    region = Region.from_rows(rows, {"x": "iron-ore"})
    footprint = CATALOG.unit(unit)
    units, slots = GridPacker(
        region, footprint, PackingStrategy.DENSE, flow, PlanDiagnostics()
    ).pack()
    router = LineRouter(segment, footprint, PlanDiagnostics())
    slot = slots[0]
    return router.route(slot, [u for u in units if u.line_index == slot.index]), units


def _layout(line):
    return [(s.position, s.kind) for s in line.segments]


class TestBridgedLines:
    def test_two_adjacent_units_flowing_south(self):
        """Exit one tile before the next drop, entry at the drop, power tile after it."""
        line, _ = _route(["x" * 7] * 6)
        assert _layout(line) == [
            ((3, 1), SegmentKind.ENTRY),
            ((3, 3), SegmentKind.EXIT),
            ((3, 4), SegmentKind.ENTRY),
            ((3, 6), SegmentKind.EXIT),
        ]
        assert line.bridges == [
            BridgePair((3, 1), (3, 3), Direction.SOUTH),
            BridgePair((3, 4), (3, 6), Direction.SOUTH),
        ]
        assert line.free_tiles == [(3, 2), (3, 5)]
        assert all(s.direction is Direction.SOUTH for s in line.segments)

    def test_reversed_flow_mirrors_offsets_across_unit_centres(self):
        south, units = _route(["x" * 7] * 6, flow=Direction.SOUTH)
        north, _ = _route(["x" * 7] * 6, flow=Direction.NORTH)

        def offsets(line, flow):
            frame = AxisFrame(flow)
            centres = sorted({frame.along_of(u.drop) for u in units})
            result = {}
            for segment in line.segments:
                along = frame.along_of(segment.position)
                nearest = min(centres, key=lambda c: abs(c - along))
                result.setdefault(segment.kind, set()).add(along - nearest)
            return result

        south_offsets = offsets(south, Direction.SOUTH)
        north_offsets = offsets(north, Direction.NORTH)
        assert south_offsets[SegmentKind.ENTRY] == north_offsets[SegmentKind.ENTRY] == {0}
        assert {-o for o in south_offsets[SegmentKind.EXIT]} == north_offsets[SegmentKind.EXIT]
        assert _layout(north) == [
            ((3, 4), SegmentKind.ENTRY),
            ((3, 2), SegmentKind.EXIT),
            ((3, 1), SegmentKind.ENTRY),
            ((3, -1), SegmentKind.EXIT),
        ]

    def test_exit_precedes_entry_at_every_later_unit(self):
        line, units = _route(["x" * 7] * 12)
        frame = AxisFrame(Direction.SOUTH)
        kinds = {frame.along_of(s.position): s.kind for s in line.segments}
        drops = sorted({frame.along_of(u.drop) for u in units})
        for drop in drops[1:]:
            assert kinds[drop] is SegmentKind.ENTRY
            assert kinds[drop - 1] is SegmentKind.EXIT

    def test_long_gap_is_chained(self):
        rows = ["x" * 7] * 3 + ["." * 7] * 9 + ["x" * 7] * 3
        line, _ = _route(rows)
        assert _layout(line) == [
            ((3, 1), SegmentKind.ENTRY),
            ((3, 6), SegmentKind.EXIT),
            ((3, 7), SegmentKind.ENTRY),
            ((3, 12), SegmentKind.EXIT),
            ((3, 13), SegmentKind.ENTRY),
            ((3, 15), SegmentKind.EXIT),
        ]
        for bridge in line.bridges:
            assert bridge.exit[1] - bridge.entry[1] <= BELT.bridge_max_distance

    def test_east_flow(self):
        line, _ = _route(["x" * 6] * 7, flow=Direction.EAST)
        assert _layout(line)[:2] == [
            ((1, 3), SegmentKind.ENTRY),
            ((3, 3), SegmentKind.EXIT),
        ]
        assert all(s.direction is Direction.EAST for s in line.segments)


class TestPlainLines:
    def test_small_footprint_gets_plain_segments(self):
        line, _ = _route(["x" * 5] * 6, unit="burner-mining-drill")
        assert line.tiles == [(2, y) for y in range(6)]
        assert all(s.kind is SegmentKind.PLAIN for s in line.segments)
        assert line.bridges == []

    def test_plain_segments_follow_flow_order(self):
        line, _ = _route(["x" * 5] * 6, unit="burner-mining-drill", flow=Direction.NORTH)
        assert line.tiles == [(2, y) for y in range(5, -1, -1)]
        assert all(s.direction is Direction.NORTH for s in line.segments)


class TestRouterErrors:
    def test_mismatched_line_membership(self):
        region = Region.from_rows(["x" * 7] * 6, {"x": "iron-ore"})
        footprint = CATALOG.unit("electric-mining-drill")
        units, slots = GridPacker(
            region, footprint, PackingStrategy.DENSE, Direction.SOUTH, PlanDiagnostics()
        ).pack()
        router = LineRouter(BELT, footprint, PlanDiagnostics())
        stray = replace(units[0], line_index=5)
        with pytest.raises(InternalPlannerError):
            router.route(slots[0], [stray] + units[1:])

    def test_mismatched_flow_direction(self):
        region = Region.from_rows(["x" * 7] * 6, {"x": "iron-ore"})
        footprint = CATALOG.unit("electric-mining-drill")
        units, slots = GridPacker(
            region, footprint, PackingStrategy.DENSE, Direction.SOUTH, PlanDiagnostics()
        ).pack()
        router = LineRouter(BELT, footprint, PlanDiagnostics())
        with pytest.raises(InternalPlannerError):
            router.route(slots[0], [replace(units[0], flow_direction=Direction.NORTH)])

    def test_large_footprint_needs_bridge_variant(self):
        with pytest.raises(IncompatibleConfiguration):
            LineRouter(
                SegmentSpec("pipe", None, 0),
                CATALOG.unit("electric-mining-drill"),
                PlanDiagnostics(),
            )

    def test_bridge_too_short(self):
        with pytest.raises(IncompatibleConfiguration):
            LineRouter(
                SegmentSpec("transport-belt", "underground-belt", 2),
                CATALOG.unit("electric-mining-drill"),
                PlanDiagnostics(),
            )

    def test_no_segment_type_routes_nothing(self):
        line, _ = _route(["x" * 7] * 6, segment=None)
        assert line.segments == []
