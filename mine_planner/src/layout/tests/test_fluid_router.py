"""Tests for fluid_router.py - fluid segments between units."""

import pytest

from mine_planner.src.common.config import PackingStrategy
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import IncompatibleConfiguration
from mine_planner.src.common.geometry import Direction
from mine_planner.src.layout.fluid_router import FluidRouter
from mine_planner.src.layout.grid_packer import GridPacker
from mine_planner.src.layout.region import Region

CATALOG = EntityCatalog.builtin()
LEGEND = {
    "x": "iron-ore",
    "u": {"material": "uranium-ore", "fluid_required": True},
}


def _fluid(rows, unit="electric-mining-drill", strategy=PackingStrategy.STAGGERED,
           fluid_type="pipe", flow=Direction.SOUTH):
    region = Region.from_rows(rows, LEGEND)
    footprint = CATALOG.unit(unit)
    units, slots = GridPacker(region, footprint, strategy, flow, PlanDiagnostics()).pack()
    return FluidRouter(fluid_type, footprint, PlanDiagnostics()).route(units, slots)


class TestFluidRouter:
    def test_no_fluid_needed(self):
        assert _fluid(["x" * 3] * 13) == []

    def test_staggered_column_gaps_filled_at_centre(self):
        segments = _fluid(["u" * 3] * 13)
        assert [s.position for s in segments] == [(1, 3), (1, 4), (1, 8), (1, 9)]
        assert all(s.fluid_segment_type == "pipe" for s in segments)
        assert all(s.line_index == 0 for s in segments)

    def test_follows_flow_order(self):
        segments = _fluid(["u" * 3] * 13, flow=Direction.NORTH)
        assert [s.position for s in segments] == [(1, 9), (1, 8), (1, 4), (1, 3)]

    def test_dense_units_touch(self):
        assert _fluid(["u" * 3] * 9, strategy=PackingStrategy.DENSE) == []

    def test_hole_in_column_is_bridged(self):
        rows = ["u" * 3] * 3 + ["." * 3] * 3 + ["u" * 3] * 3
        segments = _fluid(rows, strategy=PackingStrategy.DENSE)
        assert [s.position for s in segments] == [(1, 3), (1, 4), (1, 5)]

    def test_columns_without_fluid_are_skipped(self):
        rows = ["uuu.xxx"] * 13
        segments = _fluid(rows)
        assert {s.position[0] for s in segments} == {1}

    def test_missing_fluid_segment_type(self):
        with pytest.raises(IncompatibleConfiguration):
            _fluid(["u" * 3] * 13, fluid_type=None)

    def test_unit_without_fluid_input(self):
        with pytest.raises(IncompatibleConfiguration):
            _fluid(["u" * 2] * 6, unit="burner-mining-drill")
