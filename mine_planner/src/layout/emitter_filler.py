"""Capacity-bounded effect emitter placement."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from mine_planner.src.common.constants import EMITTER_MARGIN
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EmitterSpec
from mine_planner.src.common.geometry import Rect, Tile
from .layout_plan import EmitterAnchor, LineSlot, UnitAnchor
from .tile_grid import TileGrid


class EmitterFiller:
    """Greedy emitter placement, one line at a time.

    Each round picks the free position that helps the most units of the
    current line still below their target; ties go to the position first in
    (y, x) order. A position is never used if any unit it reaches, on any
    line, already has ``max_per_unit`` emitters. Units that reached the
    target stop attracting emitters but can still be reached by them.
    """

    def __init__(
        self,
        emitter: Optional[EmitterSpec],
        max_per_unit: int,
        target_per_unit: int,
        region_bounds: Rect,
        diagnostics: PlanDiagnostics,
        modules: Tuple[str, ...] = (),
    ) -> None:
        self.emitter = emitter
        self.max_per_unit = max_per_unit
        self.target_per_unit = target_per_unit
        self.bounds = region_bounds.expanded(EMITTER_MARGIN)
        self.diagnostics = diagnostics
        self.modules = modules

    def fill(
        self,
        units: Sequence[UnitAnchor],
        slots: Sequence[LineSlot],
        grid: TileGrid,
    ) -> List[EmitterAnchor]:
        if self.emitter is None or not units:
            return []

        size = (self.emitter.width, self.emitter.height)
        candidates = self._candidates(units, grid)
        placed: List[EmitterAnchor] = []

        for slot in slots:
            while True:
                candidates = [
                    (tile, affected)
                    for tile, affected in candidates
                    if grid.is_available(tile, size)
                ]
                best: Optional[Tuple[Tile, Tuple[int, ...]]] = None
                best_score = 0
                for tile, affected in candidates:
                    if any(units[i].emitter_count >= self.max_per_unit for i in affected):
                        continue
                    score = sum(
                        1
                        for i in affected
                        if units[i].line_index == slot.index
                        and units[i].emitter_count < self.target_per_unit
                    )
                    if score > best_score:
                        best, best_score = (tile, affected), score
                if best is None:
                    break

                tile, affected = best
                grid.mark_occupied(tile, size)
                for i in affected:
                    units[i].emitter_count += 1
                placed.append(
                    EmitterAnchor(
                        position=tile,
                        emitter_type=self.emitter.name,
                        size=size,
                        affected_units=affected,
                        modules=self.modules,
                    )
                )

        self.diagnostics.debug(f"Placed {len(placed)} emitter(s)", stage="emitters")
        return placed

    def _candidates(
        self, units: Sequence[UnitAnchor], grid: TileGrid
    ) -> List[Tuple[Tile, Tuple[int, ...]]]:
        """Every free emitter position that reaches at least one unit, in (y, x) order."""
        width, height = self.emitter.width, self.emitter.height
        reach = self.emitter.supply_distance
        reached: Dict[Tile, List[int]] = {}
        for index, unit in enumerate(units):
            rect = unit.rect
            # Anchors whose coverage rectangle overlaps the unit
            for y in range(rect.top - reach - height + 1, rect.bottom + reach + 1):
                for x in range(rect.left - reach - width + 1, rect.right + reach + 1):
                    reached.setdefault((x, y), []).append(index)

        candidates = []
        for (x, y), affected in reached.items():
            if not self.bounds.contains(Rect(x, y, width, height)):
                continue
            if not grid.is_available((x, y), (width, height)):
                continue
            candidates.append(((x, y), tuple(affected)))
        candidates.sort(key=lambda item: (item[0][1], item[0][0]))
        return candidates
