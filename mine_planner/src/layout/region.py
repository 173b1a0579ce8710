"""The selected region: bounds, extraction points and existing obstructions."""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from mine_planner.src.common.geometry import Rect, Tile


@dataclass(frozen=True)
class ExtractionPoint:
    """One mineable tile."""

    position: Tile
    material: str
    fluid_required: bool = False


@dataclass(frozen=True)
class Obstruction:
    """Something already standing in the world.

    ``kind`` is the prototype type (``tree``, ``cliff``, ``assembling-machine``).
    ``permanent`` marks structures that must never be removed.
    """

    name: str
    kind: str
    position: Tile  # top-left tile
    size: Tile = (1, 1)
    permanent: bool = False

    @property
    def rect(self) -> Rect:
        return Rect(self.position[0], self.position[1], self.size[0], self.size[1])


@dataclass(frozen=True)
class Region:
    """Immutable rectangle of tiles with the points found inside it."""

    bounds: Rect
    points: Tuple[ExtractionPoint, ...] = ()
    obstructions: Tuple[Obstruction, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "obstructions", tuple(self.obstructions))
        seen = set()
        for point in self.points:
            if not self.bounds.contains_tile(point.position):
                raise ValueError(
                    f"Extraction point {point.position} lies outside region bounds"
                )
            if point.position in seen:
                raise ValueError(f"Duplicate extraction point at {point.position}")
            seen.add(point.position)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @cached_property
    def materials(self) -> Tuple[str, ...]:
        return tuple(sorted({point.material for point in self.points}))

    @cached_property
    def _rasters(self) -> Tuple[np.ndarray, np.ndarray]:
        # Material codes are 1-based indices into ``materials``; 0 is bare ground
        codes = {name: index + 1 for index, name in enumerate(self.materials)}
        material = np.zeros((self.bounds.height, self.bounds.width), dtype=np.int32)
        fluid = np.zeros((self.bounds.height, self.bounds.width), dtype=bool)
        for point in self.points:
            x = point.position[0] - self.bounds.left
            y = point.position[1] - self.bounds.top
            material[y, x] = codes[point.material]
            fluid[y, x] = point.fluid_required
        return material, fluid

    @property
    def material_raster(self) -> np.ndarray:
        return self._rasters[0]

    @property
    def fluid_raster(self) -> np.ndarray:
        return self._rasters[1]

    def _window(self, raster: np.ndarray, rect: Rect) -> np.ndarray:
        top = rect.top - self.bounds.top
        left = rect.left - self.bounds.left
        return raster[top : top + rect.height, left : left + rect.width]

    def material_of(self, rect: Rect) -> Optional[str]:
        """The single material under ``rect``.

        Returns None when the rectangle leaves the region, covers no material
        or covers more than one.
        """
        if not self.bounds.contains(rect):
            return None
        window = self._window(self.material_raster, rect)
        codes = np.unique(window[window > 0])
        if len(codes) != 1:
            return None
        return self.materials[int(codes[0]) - 1]

    def requires_fluid(self, rect: Rect) -> bool:
        if not self.bounds.intersects(rect):
            return False
        clipped = Rect.from_corners(
            max(rect.left, self.bounds.left),
            max(rect.top, self.bounds.top),
            min(rect.right, self.bounds.right),
            min(rect.bottom, self.bounds.bottom),
        )
        return bool(self._window(self.fluid_raster, clipped).any())

    # Construction helpers

    @classmethod
    def from_points(
        cls,
        points: Iterable[ExtractionPoint],
        obstructions: Iterable[Obstruction] = (),
        bounds: Optional[Rect] = None,
    ) -> "Region":
        """Region spanning ``points`` unless explicit bounds are given."""
        points = tuple(points)
        if bounds is None:
            if not points:
                bounds = Rect(0, 0, 0, 0)
            else:
                xs = [p.position[0] for p in points]
                ys = [p.position[1] for p in points]
                bounds = Rect.from_corners(min(xs), min(ys), max(xs), max(ys))
        return cls(bounds, points, tuple(obstructions))

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[str],
        legend: Mapping[str, Any],
        origin: Tile = (0, 0),
        obstructions: Iterable[Obstruction] = (),
    ) -> "Region":
        """Build a region from a character map.

        Each legend entry maps a character to a material name, or to a dict
        with ``material`` and ``fluid_required``. Unmapped characters are bare
        ground. The bounds always cover the full map.
        """
        points: List[ExtractionPoint] = []
        width = max((len(row) for row in rows), default=0)
        for dy, row in enumerate(rows):
            for dx, char in enumerate(row):
                entry = legend.get(char)
                if entry is None:
                    continue
                if isinstance(entry, Mapping):
                    material = entry["material"]
                    fluid = bool(entry.get("fluid_required", False))
                else:
                    material, fluid = str(entry), False
                position = (origin[0] + dx, origin[1] + dy)
                points.append(ExtractionPoint(position, material, fluid))
        bounds = Rect(origin[0], origin[1], width, len(rows))
        return cls(bounds, tuple(points), tuple(obstructions))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Region":
        obstructions = tuple(
            Obstruction(
                name=entry["name"],
                kind=entry.get("type", entry["name"]),
                position=(int(entry["x"]), int(entry["y"])),
                size=(int(entry.get("width", 1)), int(entry.get("height", 1))),
                permanent=bool(entry.get("permanent", False)),
            )
            for entry in data.get("obstructions", [])
        )
        bounds = None
        if "bounds" in data:
            raw = data["bounds"]
            if isinstance(raw, Mapping):
                bounds = Rect(raw["left"], raw["top"], raw["width"], raw["height"])
            else:
                bounds = Rect(*[int(v) for v in raw])

        if "rows" in data:
            origin = tuple(data.get("origin", (0, 0)))
            region = cls.from_rows(data["rows"], data.get("legend", {}), origin, obstructions)
            if bounds is not None:
                region = cls(bounds, region.points, obstructions)
            return region

        points = tuple(
            ExtractionPoint(
                (int(entry["x"]), int(entry["y"])),
                entry["material"],
                bool(entry.get("fluid_required", False)),
            )
            for entry in data.get("points", [])
        )
        return cls.from_points(points, obstructions, bounds)
