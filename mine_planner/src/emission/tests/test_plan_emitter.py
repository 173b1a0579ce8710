"""Tests for plan_emitter.py - placeholder merge and collision pass."""

import pytest

from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import (
    CollisionOverflow,
    InternalPlannerError,
    NoValidPlacement,
)
from mine_planner.src.common.geometry import Direction
from mine_planner.src.emission.plan import Placeholder, PlaceholderKind
from mine_planner.src.emission.plan_emitter import (
    PlanEmitter,
    collision_threshold,
    resolve_collisions,
)
from mine_planner.src.layout.layout_plan import (
    EmitterAnchor,
    LayoutPlan,
    PowerAnchor,
)
from mine_planner.src.layout.planner import LayoutPlanner
from mine_planner.src.layout.region import Obstruction, Region

CATALOG = EntityCatalog.builtin()


def _layout(config, rows=None, obstructions=()):
    rows = rows or ["x" * 7] * 6
    region = Region.from_rows(rows, {"x": "iron-ore"}, obstructions=obstructions)
    layout = LayoutPlanner(config, CATALOG, PlanDiagnostics()).plan_layout(region)
    return layout, region


class TestResolveCollisions:
    def test_lower_priority_dropped(self):
        unit = Placeholder("electric-mining-drill", (0, 0), (3, 3))
        beacon = Placeholder("beacon", (2, 2), (3, 3), PlaceholderKind.EMITTER)
        pole = Placeholder("small-electric-pole", (5, 5), kind=PlaceholderKind.POWER)
        kept, dropped = resolve_collisions([beacon, unit, pole])
        assert kept == [unit, pole]
        assert dropped == 1

    def test_power_loses_to_line(self):
        pole = Placeholder("small-electric-pole", (3, 1), kind=PlaceholderKind.POWER)
        belt = Placeholder("transport-belt", (3, 1), kind=PlaceholderKind.LINE_SEGMENT)
        kept, dropped = resolve_collisions([pole, belt])
        assert kept == [belt]

    def test_earlier_wins_within_kind(self):
        first = Placeholder("pipe", (0, 0), kind=PlaceholderKind.FLUID_SEGMENT)
        second = Placeholder("pipe", (0, 0), kind=PlaceholderKind.FLUID_SEGMENT, quality="rare")
        kept, _ = resolve_collisions([first, second])
        assert kept == [first]

    def test_threshold(self):
        assert collision_threshold(10, 0.25) == 4
        assert collision_threshold(100, 0.25) == 25


class TestPlanEmitter:
    def test_placeholder_kinds_and_names(self):
        config = PlannerConfig(strategy="dense", quality="uncommon")
        layout, region = _layout(config)
        plan = PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)

        units = plan.by_kind(PlaceholderKind.UNIT)
        segments = plan.by_kind(PlaceholderKind.LINE_SEGMENT)
        assert len(units) == 4
        assert {p.name for p in segments} == {"underground-belt"}
        assert [p.io_type for p in segments] == ["input", "output", "input", "output"]
        assert all(p.direction is Direction.SOUTH for p in segments)
        assert all(p.quality == "uncommon" for p in plan.placeholders)
        assert plan.dropped_count == 0

    def test_plain_segments_use_segment_name(self):
        config = PlannerConfig(unit_type="burner-mining-drill", node_type="small-electric-pole",
                               strategy="dense")
        layout, region = _layout(config, rows=["x" * 5] * 6)
        plan = PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)
        segments = plan.by_kind(PlaceholderKind.LINE_SEGMENT)
        assert {p.name for p in segments} == {"transport-belt"}
        assert all(p.io_type is None for p in segments)

    def test_no_overlap_in_result(self):
        config = PlannerConfig(emitter_type="beacon")
        layout, region = _layout(config, rows=["x" * 30] * 30)
        plan = PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)
        seen = set()
        for placeholder in plan.placeholders:
            tiles = set(placeholder.tiles())
            assert not tiles & seen
            seen |= tiles

    def test_collision_overflow(self):
        config = PlannerConfig(strategy="dense", collision_drop_ratio=0.0)
        layout, region = _layout(config)
        # Power nodes stacked on the units, more than the floor of four allows
        layout.power.extend(
            PowerAnchor(unit.position, "medium-electric-pole", 0) for unit in layout.units
        )
        layout.power.append(PowerAnchor((1, 1), "medium-electric-pole", 0))
        with pytest.raises(CollisionOverflow) as exc_info:
            PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)
        assert exc_info.value.dropped == 5
        assert exc_info.value.threshold == 4

    def test_collisions_within_threshold_are_reported(self):
        config = PlannerConfig(strategy="dense")
        layout, region = _layout(config)
        layout.emitters.append(EmitterAnchor((0, 0), "beacon", (3, 3), (0,)))
        plan = PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)
        assert plan.dropped_count == 1
        assert not plan.by_kind(PlaceholderKind.EMITTER)

    def test_element_outside_footprint_is_internal_error(self):
        config = PlannerConfig(strategy="dense")
        layout, region = _layout(config)
        layout.power.append(PowerAnchor((40, 40), "medium-electric-pole", 0))
        with pytest.raises(InternalPlannerError):
            PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)

    def test_everything_blocked(self):
        config = PlannerConfig(strategy="dense")
        wall = Obstruction("rail-support", "rail-support", (-1, -1), (10, 10))
        layout, region = _layout(config, obstructions=(wall,))
        with pytest.raises(NoValidPlacement):
            PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)

    def test_deconstruct_orders_collected(self):
        config = PlannerConfig(strategy="dense")
        tree = Obstruction("tree-05", "tree", (1, 1))
        layout, region = _layout(config, obstructions=(tree,))
        plan = PlanEmitter(config, CATALOG, PlanDiagnostics()).emit(layout, region)
        assert [order.name for order in plan.deconstruct] == ["tree-05"]
        assert plan.excluded_count == 0
