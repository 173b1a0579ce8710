"""Tests for layout/planner.py - the layout stage orchestrator."""

import pytest

from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import (
    EmptyRegion,
    IncompatibleConfiguration,
    NoValidPlacement,
)
from mine_planner.src.common.geometry import Rect
from mine_planner.src.layout.planner import LayoutPlanner
from mine_planner.src.layout.region import Region

CATALOG = EntityCatalog.builtin()


def _planner(**settings):
    return LayoutPlanner(PlannerConfig(**settings), CATALOG, PlanDiagnostics())


class TestLayoutPlanner:
    def test_all_stages_run(self):
        region = Region.from_rows(["x" * 14] * 12, {"x": "iron-ore"})
        plan = _planner(strategy="dense", emitter_type="beacon").plan_layout(region)
        assert plan.units
        assert len(plan.lines) == len(plan.slots) == 2
        assert plan.power
        assert plan.emitters
        assert plan.fluid == []

    def test_units_carry_truncated_modules(self):
        region = Region.from_rows(["x" * 7] * 6, {"x": "iron-ore"})
        plan = _planner(modules=("m1", "m2", "m3", "m4")).plan_layout(region)
        assert all(unit.modules == ("m1", "m2", "m3") for unit in plan.units)

    def test_optional_stages_skip(self):
        region = Region.from_rows(["x" * 7] * 6, {"x": "iron-ore"})
        plan = _planner(segment_type=None, node_type=None).plan_layout(region)
        assert plan.units
        assert all(line.segments == [] for line in plan.lines)
        assert plan.power == []

    def test_fresh_plan_per_call(self):
        region = Region.from_rows(["x" * 7] * 6, {"x": "iron-ore"})
        planner = _planner(emitter_type="beacon")
        first = planner.plan_layout(region)
        second = planner.plan_layout(region)
        assert first is not second
        assert [u.emitter_count for u in first.units] == [u.emitter_count for u in second.units]


class TestLayoutPlannerErrors:
    def test_empty_region(self):
        with pytest.raises(EmptyRegion) as exc_info:
            _planner().plan_layout(Region(Rect(0, 0, 10, 10)))
        assert exc_info.value.empty_outcome

    def test_region_too_small(self):
        region = Region.from_rows(["xx", "xx"], {"x": "iron-ore"})
        with pytest.raises(NoValidPlacement) as exc_info:
            _planner().plan_layout(region)
        assert exc_info.value.empty_outcome

    def test_checkerboard_never_fits(self):
        rows = ["ab" * 5, "ba" * 5] * 5
        region = Region.from_rows(rows, {"a": "iron-ore", "b": "copper-ore"})
        with pytest.raises(NoValidPlacement):
            _planner(strategy="dense").plan_layout(region)

    def test_fluid_without_fluid_segment_type(self):
        region = Region.from_rows(
            ["uuu"] * 3, {"u": {"material": "uranium-ore", "fluid_required": True}}
        )
        with pytest.raises(IncompatibleConfiguration) as exc_info:
            _planner(fluid_segment_type=None).plan_layout(region)
        assert not exc_info.value.empty_outcome

    def test_unknown_unit_type(self):
        with pytest.raises(IncompatibleConfiguration):
            _planner(unit_type="assembling-machine-9")
