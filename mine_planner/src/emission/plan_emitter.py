"""Merge layout stages into placeholders and resolve collisions."""

from __future__ import annotations

from typing import List, Sequence, Set, Tuple

from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.constants import (
    EMITTER_MARGIN,
    LINE_MARGIN,
    MIN_COLLISION_DROP_THRESHOLD,
    PLAN_TAG,
)
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import (
    CollisionOverflow,
    InternalPlannerError,
    NoValidPlacement,
)
from mine_planner.src.common.geometry import Rect, Tile
from mine_planner.src.layout.layout_plan import LayoutPlan, SegmentKind
from mine_planner.src.layout.region import Region
from .obstruction_marker import ObstructionMarker
from .plan import COLLISION_PRIORITY, Placeholder, PlaceholderKind, Plan

BRIDGE_IO_TYPES = {SegmentKind.ENTRY: "input", SegmentKind.EXIT: "output"}


def collision_threshold(total: int, ratio: float) -> int:
    return max(MIN_COLLISION_DROP_THRESHOLD, int(total * ratio))


def resolve_collisions(placeholders: Sequence[Placeholder]) -> Tuple[List[Placeholder], int]:
    """Keep higher-priority placeholders where footprints overlap.

    Tiles are claimed in priority order (earlier placeholders first within a
    kind); anything touching a claimed tile is dropped. Survivors keep their
    original order.
    """
    order = sorted(
        range(len(placeholders)),
        key=lambda i: (-COLLISION_PRIORITY[placeholders[i].kind], i),
    )
    claimed: Set[Tile] = set()
    kept: Set[int] = set()
    for index in order:
        tiles = list(placeholders[index].tiles())
        if any(tile in claimed for tile in tiles):
            continue
        claimed.update(tiles)
        kept.add(index)
    survivors = [p for i, p in enumerate(placeholders) if i in kept]
    return survivors, len(placeholders) - len(survivors)


class PlanEmitter:
    """Produce the externally visible :class:`Plan` from a layout."""

    def __init__(
        self,
        config: PlannerConfig,
        catalog: EntityCatalog,
        diagnostics: PlanDiagnostics,
    ) -> None:
        self.config = config
        self.diagnostics = diagnostics
        self.segment = (
            catalog.segment(config.segment_type, config.bridge_type)
            if config.segment_type
            else None
        )

    def emit(self, layout: LayoutPlan, region: Region) -> Plan:
        placeholders = self.build_placeholders(layout)
        self._check_margins(placeholders, region.bounds)

        marker = ObstructionMarker(self.config.non_destructive, self.diagnostics)
        placeholders, deconstruct, excluded = marker.mark(placeholders, region.obstructions)
        if not placeholders:
            raise NoValidPlacement(
                "Every planned element is blocked by existing structures",
                stage="obstruction",
            )

        total = len(placeholders)
        placeholders, dropped = resolve_collisions(placeholders)
        threshold = collision_threshold(total, self.config.collision_drop_ratio)
        if dropped > threshold:
            raise CollisionOverflow(dropped, threshold)
        if dropped:
            self.diagnostics.warning(
                f"Dropped {dropped} colliding placeholder(s)", stage="emission"
            )

        self.diagnostics.info(
            f"Plan: {len(placeholders)} placeholder(s), {len(deconstruct)} "
            f"deconstruction order(s)",
            stage="emission",
        )
        return Plan(
            placeholders=placeholders,
            dropped_count=dropped,
            deconstruct=deconstruct,
            excluded_count=excluded,
        )

    def build_placeholders(self, layout: LayoutPlan) -> List[Placeholder]:
        quality = self.config.quality
        placeholders: List[Placeholder] = []

        for unit in layout.units:
            placeholders.append(
                Placeholder(
                    name=self.config.unit_type,
                    position=unit.position,
                    size=unit.size,
                    kind=PlaceholderKind.UNIT,
                    direction=unit.direction,
                    quality=quality,
                    modules=unit.modules,
                    removal_tag=PLAN_TAG,
                )
            )

        for line in layout.lines:
            for segment in line.segments:
                if segment.kind is SegmentKind.PLAIN:
                    name = self.segment.name
                else:
                    name = self.segment.bridge_type
                placeholders.append(
                    Placeholder(
                        name=name,
                        position=segment.position,
                        kind=PlaceholderKind.LINE_SEGMENT,
                        direction=segment.direction,
                        io_type=BRIDGE_IO_TYPES.get(segment.kind),
                        quality=quality,
                        removal_tag=PLAN_TAG,
                    )
                )

        for anchor in layout.power:
            placeholders.append(
                Placeholder(
                    name=anchor.node_type,
                    position=anchor.position,
                    size=anchor.size,
                    kind=PlaceholderKind.POWER,
                    quality=quality,
                    removal_tag=PLAN_TAG,
                )
            )

        for segment in layout.fluid:
            placeholders.append(
                Placeholder(
                    name=segment.fluid_segment_type,
                    position=segment.position,
                    kind=PlaceholderKind.FLUID_SEGMENT,
                    quality=quality,
                    removal_tag=PLAN_TAG,
                )
            )

        for emitter in layout.emitters:
            placeholders.append(
                Placeholder(
                    name=emitter.emitter_type,
                    position=emitter.position,
                    size=emitter.size,
                    kind=PlaceholderKind.EMITTER,
                    quality=quality,
                    modules=emitter.modules,
                    removal_tag=PLAN_TAG,
                )
            )
        return placeholders

    def _check_margins(self, placeholders: Sequence[Placeholder], bounds: Rect) -> None:
        limits = {
            PlaceholderKind.UNIT: bounds,
            PlaceholderKind.LINE_SEGMENT: bounds.expanded(LINE_MARGIN),
            PlaceholderKind.POWER: bounds.expanded(LINE_MARGIN),
            PlaceholderKind.FLUID_SEGMENT: bounds.expanded(LINE_MARGIN),
            PlaceholderKind.EMITTER: bounds.expanded(EMITTER_MARGIN),
        }
        for placeholder in placeholders:
            if not limits[placeholder.kind].contains(placeholder.rect):
                raise InternalPlannerError(
                    f"{placeholder.kind.value} '{placeholder.name}' at "
                    f"{placeholder.position} lies outside the region footprint"
                )
