"""Tile occupancy shared by the layout stages that place after routing."""

from typing import Iterable, Set

from mine_planner.src.common.geometry import Rect, Tile
from .layout_plan import LayoutPlan


class TileGrid:
    """Claimed tiles of a layout in progress.

    The planner rebuilds it once units, lines, power and fluid are placed;
    the emitter filler then only ever claims tiles that are still free.
    """

    def __init__(self):
        self._claimed: Set[Tile] = set()

    def __contains__(self, tile: Tile) -> bool:
        return tile in self._claimed

    def __len__(self) -> int:
        return len(self._claimed)

    def is_rect_available(self, rect: Rect) -> bool:
        return self._claimed.isdisjoint(rect.tiles())

    def is_available(self, tile_pos: Tile, footprint: Tile) -> bool:
        """Whether a footprint with top-left ``tile_pos`` touches no claimed tile."""
        return self.is_rect_available(Rect(tile_pos[0], tile_pos[1], *footprint))

    def mark_tiles(self, tiles: Iterable[Tile]) -> None:
        self._claimed.update(tiles)

    def mark_occupied(self, tile_pos: Tile, footprint: Tile) -> None:
        self.mark_tiles(Rect(tile_pos[0], tile_pos[1], *footprint).tiles())

    def reserve_exact(self, tile_pos: Tile, footprint: Tile) -> bool:
        """Claim the footprint if it is entirely free; report whether it was."""
        if not self.is_available(tile_pos, footprint):
            return False
        self.mark_occupied(tile_pos, footprint)
        return True

    def rebuild_from_plan(self, plan: LayoutPlan) -> None:
        self._claimed = set(plan.occupied_tiles())
