"""Find placeholders this planner emitted earlier."""

from __future__ import annotations

from typing import Iterable, Optional

from mine_planner.src.common.constants import EMITTER_MARGIN, PLAN_TAG
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.geometry import Rect
from .plan import Placeholder, RemovalList


class GhostRemover:
    """Select every tagged placeholder touching a region.

    Selection goes by removal tag only; placeholders of every kind are
    returned together. The search area is the region grown by the emitter
    margin, the furthest any placeholder is ever emitted.
    """

    def __init__(self, diagnostics: Optional[PlanDiagnostics] = None, tag: str = PLAN_TAG):
        self.diagnostics = diagnostics or PlanDiagnostics()
        self.tag = tag

    def find(self, bounds: Rect, world: Iterable[Placeholder]) -> RemovalList:
        area = bounds.expanded(EMITTER_MARGIN)
        found = [
            placeholder
            for placeholder in world
            if placeholder.removal_tag == self.tag and area.intersects(placeholder.rect)
        ]
        self.diagnostics.info(f"Found {len(found)} placeholder(s) to remove", stage="removal")
        return RemovalList(found)
