"""Main layout planning orchestrator."""

from __future__ import annotations

from typing import Optional

from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import (
    EmptyRegion,
    IncompatibleConfiguration,
    NoValidPlacement,
)

from .emitter_filler import EmitterFiller
from .fluid_router import FluidRouter
from .grid_packer import GridPacker
from .layout_plan import LayoutPlan
from .line_router import LineRouter
from .power_planner import PowerPlacer
from .region import Region
from .tile_grid import TileGrid


class LayoutPlanner:
    """Coordinate the layout stages for one region."""

    def __init__(
        self,
        config: PlannerConfig,
        catalog: EntityCatalog,
        diagnostics: PlanDiagnostics,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.diagnostics = diagnostics
        self.diagnostics.default_stage = "layout"

        self.footprint = catalog.unit(config.unit_type, config.quality)
        self.segment = (
            catalog.segment(config.segment_type, config.bridge_type)
            if config.segment_type
            else None
        )
        self.node = catalog.node(config.node_type) if config.node_type else None
        self.emitter = catalog.emitter(config.emitter_type) if config.emitter_type else None
        if config.fluid_segment_type:
            catalog.fluid_segment(config.fluid_segment_type)

        self.tile_grid = TileGrid()
        self.layout_plan = LayoutPlan()

    def plan_layout(self, region: Region) -> LayoutPlan:
        """Produce a fresh layout plan for ``region``.

        FLOW:
        1. Pack units (sole source of anchors)
        2. Route each line
        3. Place power nodes
        4. Route fluid segments
        5. Fill emitters around everything above
        """
        if region.is_empty:
            raise EmptyRegion("Region contains no extraction points", stage="packing")
        if any(p.fluid_required for p in region.points) and not self.config.fluid_segment_type:
            raise IncompatibleConfiguration(
                "Region needs fluid but no fluid segment type is configured",
                stage="fluid",
            )

        self.tile_grid = TileGrid()
        self.layout_plan = LayoutPlan()
        plan = self.layout_plan

        self._pack_units(region)
        self._route_lines()
        self._place_power(region)
        self._route_fluid()

        self.tile_grid.rebuild_from_plan(plan)
        for line in plan.lines:
            self.tile_grid.mark_tiles(line.free_tiles)
        self._fill_emitters(region)

        self.diagnostics.info(
            f"Layout: {len(plan.units)} unit(s), "
            f"{sum(len(line.segments) for line in plan.lines)} line segment(s), "
            f"{len(plan.power)} power node(s), {len(plan.fluid)} fluid segment(s), "
            f"{len(plan.emitters)} emitter(s)"
        )
        return plan

    def _pack_units(self, region: Region) -> None:
        packer = GridPacker(
            region,
            self.footprint,
            self.config.strategy,
            self.config.flow_direction,
            self.diagnostics,
            material=self.config.material,
            modules=self.config.unit_modules(self.footprint.module_slots),
        )
        units, slots = packer.pack()
        if not units:
            raise NoValidPlacement(
                f"'{self.footprint.name}' fits nowhere in the region without "
                f"overlapping a second material",
                stage="packing",
            )
        self.layout_plan.units = units
        self.layout_plan.slots = slots

    def _route_lines(self) -> None:
        router = LineRouter(self.segment, self.footprint, self.diagnostics)
        plan = self.layout_plan
        plan.lines = [
            router.route(slot, [plan.units[i] for i in plan.units_on_line(slot.index)])
            for slot in plan.slots
        ]

    def _place_power(self, region: Region) -> None:
        placer = PowerPlacer(self.node, self.footprint, region.bounds, self.diagnostics)
        plan = self.layout_plan
        plan.power = placer.place(plan.units, plan.slots, plan.lines)

    def _route_fluid(self) -> None:
        router = FluidRouter(
            self.config.fluid_segment_type, self.footprint, self.diagnostics
        )
        self.layout_plan.fluid = router.route(self.layout_plan.units, self.layout_plan.slots)

    def _fill_emitters(self, region: Region) -> None:
        if self.emitter is None:
            return
        filler = EmitterFiller(
            self.emitter,
            self.config.max_emitters_per_unit,
            self.config.effective_emitter_target,
            region.bounds,
            self.diagnostics,
            modules=self.config.emitter_module_list(self.emitter.module_slots),
        )
        plan = self.layout_plan
        plan.emitters = filler.fill(plan.units, plan.slots, self.tile_grid)
