"""Entry points tying the layout and emission stages together."""

from __future__ import annotations

from typing import Iterable, Optional, Union

from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.geometry import Rect
from mine_planner.src.emission.ghost_remover import GhostRemover
from mine_planner.src.emission.plan import Placeholder, Plan, RemovalList
from mine_planner.src.emission.plan_emitter import PlanEmitter
from mine_planner.src.layout.planner import LayoutPlanner
from mine_planner.src.layout.region import Region


def plan_mining_layout(
    region: Region,
    config: Optional[PlannerConfig] = None,
    catalog: Optional[EntityCatalog] = None,
    diagnostics: Optional[PlanDiagnostics] = None,
) -> Plan:
    """Plan one region.

    Pure function of its arguments: every intermediate structure is built
    for this call only. Raises a :class:`PlanningError` instead of returning
    a partial or empty plan.
    """
    config = config or PlannerConfig()
    catalog = catalog or EntityCatalog.builtin()
    diagnostics = diagnostics or PlanDiagnostics()

    layout = LayoutPlanner(config, catalog, diagnostics).plan_layout(region)
    return PlanEmitter(config, catalog, diagnostics).emit(layout, region)


def remove_plan_ghosts(
    area: Union[Region, Rect],
    world: Iterable[Placeholder],
    diagnostics: Optional[PlanDiagnostics] = None,
) -> RemovalList:
    """Return every placeholder this planner emitted around ``area``."""
    bounds = area.bounds if isinstance(area, Region) else area
    return GhostRemover(diagnostics).find(bounds, world)
