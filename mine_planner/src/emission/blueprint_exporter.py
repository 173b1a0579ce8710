"""
Blueprint export for planned layouts.

Materializes a :class:`Plan` as a Factorio blueprint with factorio-draftsman,
for callers that build from a blueprint string instead of placeholders.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Optional

from draftsman.blueprintable import Blueprint
from draftsman.classes.entity import Entity
from draftsman.constants import Direction as BlueprintDirection
from draftsman.entity import new_entity

from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.geometry import Direction
from .plan import Placeholder, Plan

DEFAULT_BLUEPRINT_LABEL = "Mining layout"

_DIRECTIONS: Dict[Direction, BlueprintDirection] = {
    Direction.NORTH: BlueprintDirection.NORTH,
    Direction.EAST: BlueprintDirection.EAST,
    Direction.SOUTH: BlueprintDirection.SOUTH,
    Direction.WEST: BlueprintDirection.WEST,
}


class BlueprintExporter:
    """Materialize a :class:`Plan` into a Factorio blueprint."""

    def __init__(self, diagnostics: PlanDiagnostics) -> None:
        self.diagnostics = diagnostics
        self.diagnostics.default_stage = "export"
        self.blueprint = Blueprint()

    def export(self, plan: Plan, label: str = DEFAULT_BLUEPRINT_LABEL) -> Blueprint:
        self.blueprint = Blueprint()
        self.blueprint.label = label
        self.blueprint.version = (2, 0)

        for placeholder in plan.placeholders:
            entity = self.create_entity(placeholder)
            if entity is None:
                continue
            self.blueprint.entities.append(entity, copy=False)

        try:
            self.blueprint.generate_power_connections()
        except Exception as exc:  # pragma: no cover - draftsman warnings
            self.diagnostics.warning(f"Failed to auto-generate power connections: {exc}")

        return self.blueprint

    def create_entity(self, placeholder: Placeholder) -> Optional[Entity]:
        try:
            entity = new_entity(placeholder.name)
        except Exception as exc:  # pragma: no cover - draftsman errors
            self.diagnostics.error(
                f"Failed to instantiate entity '{placeholder.name}': {exc}",
                position=placeholder.position,
            )
            return None

        if placeholder.direction is not None:
            try:
                entity.direction = _DIRECTIONS[placeholder.direction]
            except Exception as exc:
                self.diagnostics.info(
                    f"Could not set direction on '{placeholder.name}': {exc}"
                )

        entity.tile_position = placeholder.position

        if placeholder.io_type is not None:
            try:
                entity.io_type = placeholder.io_type
            except Exception as exc:
                self.diagnostics.info(f"Could not set io_type on '{placeholder.name}': {exc}")

        if placeholder.quality and hasattr(entity, "quality"):
            try:
                entity.quality = placeholder.quality
            except Exception as exc:
                self.diagnostics.info(f"Could not set quality on '{placeholder.name}': {exc}")

        if placeholder.modules:
            try:
                entity.items = dict(Counter(placeholder.modules))
            except Exception as exc:
                self.diagnostics.info(
                    f"Could not request modules for '{placeholder.name}': {exc}"
                )

        return entity

    def to_string(self, plan: Plan, label: str = DEFAULT_BLUEPRINT_LABEL) -> str:
        return self.export(plan, label).to_string()
