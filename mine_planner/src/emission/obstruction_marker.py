"""Classify what already stands inside the plan footprint."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence, Set, Tuple

from mine_planner.src.common.constants import (
    IGNORED_OBSTRUCTION_TYPES,
    NATURAL_OBSTRUCTION_TYPES,
    PERMANENT_OBSTRUCTION_TYPES,
)
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.geometry import Tile
from mine_planner.src.layout.region import Obstruction
from .plan import DeconstructOrder, Placeholder


class ObstructionAction(Enum):
    IGNORE = "ignore"
    DECONSTRUCT = "deconstruct"
    BLOCK = "block"


def classify_obstruction(obstruction: Obstruction, non_destructive: bool) -> ObstructionAction:
    """Decide what the plan does about one existing entity.

    Natural clutter is always cleared. Rail ramps, rail supports and anything
    flagged permanent always block. Other buildings are cleared unless the
    plan is non-destructive, in which case they block.
    """
    if obstruction.kind in IGNORED_OBSTRUCTION_TYPES:
        return ObstructionAction.IGNORE
    if obstruction.kind in NATURAL_OBSTRUCTION_TYPES:
        return ObstructionAction.DECONSTRUCT
    if obstruction.permanent or obstruction.kind in PERMANENT_OBSTRUCTION_TYPES:
        return ObstructionAction.BLOCK
    if non_destructive:
        return ObstructionAction.BLOCK
    return ObstructionAction.DECONSTRUCT


class ObstructionMarker:
    """Drop placeholders that land on blocking structures and collect the
    clutter the remaining ones need cleared."""

    def __init__(self, non_destructive: bool, diagnostics: PlanDiagnostics) -> None:
        self.non_destructive = non_destructive
        self.diagnostics = diagnostics

    def mark(
        self,
        placeholders: Sequence[Placeholder],
        obstructions: Sequence[Obstruction],
    ) -> Tuple[List[Placeholder], List[DeconstructOrder], int]:
        """Return (kept placeholders, deconstruction orders, excluded count)."""
        blocked: Set[Tile] = set()
        removable: Dict[Tile, List[int]] = {}
        for index, obstruction in enumerate(obstructions):
            action = classify_obstruction(obstruction, self.non_destructive)
            if action is ObstructionAction.BLOCK:
                blocked.update(obstruction.rect.tiles())
            elif action is ObstructionAction.DECONSTRUCT:
                for tile in obstruction.rect.tiles():
                    removable.setdefault(tile, []).append(index)

        kept: List[Placeholder] = []
        excluded = 0
        to_clear: Set[int] = set()
        for placeholder in placeholders:
            tiles = list(placeholder.tiles())
            if any(tile in blocked for tile in tiles):
                excluded += 1
                self.diagnostics.info(
                    f"Excluded {placeholder.name}: tile held by a structure that stays",
                    stage="obstruction",
                    position=placeholder.position,
                )
                continue
            kept.append(placeholder)
            for tile in tiles:
                to_clear.update(removable.get(tile, ()))

        orders = [
            DeconstructOrder(obstructions[i].name, obstructions[i].position, obstructions[i].size)
            for i in sorted(to_clear)
        ]
        if excluded:
            self.diagnostics.warning(
                f"Excluded {excluded} placeholder(s) on blocked tiles", stage="obstruction"
            )
        return kept, orders, excluded
