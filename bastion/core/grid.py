"""Grid / terrain model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from bastion.core.enums import TerrainType

# Terrain enemies cannot path through
OBSTACLES: frozenset[TerrainType] = frozenset({TerrainType.WALL, TerrainType.TREE, TerrainType.WATER})

# Terrain a tower may be placed on (occupancy is checked separately)
BUILDABLE: frozenset[TerrainType] = frozenset({
    TerrainType.GRASS, TerrainType.SWAMP, TerrainType.POWER, TerrainType.MINE,
})


@dataclass(frozen=True, slots=True)
class Cell:
    terrain: TerrainType
    variant: int = 0


class Grid:
    """2D tile grid backed by flat lists for cache-friendly access.

    Out-of-bounds reads report WALL so callers never need a separate
    bounds check before asking about passability.
    """

    __slots__ = ("width", "height", "_terrain", "_variant")

    def __init__(self, width: int, height: int, default: TerrainType = TerrainType.GRASS) -> None:
        self.width = width
        self.height = height
        self._terrain: list[TerrainType] = [default] * (width * height)
        self._variant: list[int] = [0] * (width * height)

    # -- access --

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> TerrainType:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self._terrain[y * self.width + x]
        return TerrainType.WALL

    def set(self, x: int, y: int, terrain: TerrainType) -> None:
        if self.in_bounds(x, y):
            self._terrain[y * self.width + x] = terrain

    def variant(self, x: int, y: int) -> int:
        if self.in_bounds(x, y):
            return self._variant[y * self.width + x]
        return 0

    def set_variant(self, x: int, y: int, variant: int) -> None:
        if self.in_bounds(x, y):
            self._variant[y * self.width + x] = variant

    def cell(self, x: int, y: int) -> Cell:
        return Cell(self.get(x, y), self.variant(x, y))

    def is_passable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.get(x, y) not in OBSTACLES

    def is_buildable(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and self.get(x, y) in BUILDABLE

    def is_swamp(self, x: int, y: int) -> bool:
        return self.get(x, y) == TerrainType.SWAMP

    def count(self, terrain: TerrainType) -> int:
        return self._terrain.count(terrain)

    def cells_of(self, terrain: TerrainType) -> Iterator[tuple[int, int]]:
        w = self.width
        for idx, t in enumerate(self._terrain):
            if t == terrain:
                yield idx % w, idx // w

    # -- conversion --

    def terrain_codes(self) -> list[int]:
        """Row-major integer terrain codes."""
        return [int(t) for t in self._terrain]

    def variant_codes(self) -> list[int]:
        return list(self._variant)

    def to_rows(self) -> list[list[int]]:
        w = self.width
        return [[int(t) for t in self._terrain[y * w:(y + 1) * w]] for y in range(self.height)]

    @classmethod
    def from_rows(cls, rows: list[list[int]], variants: list[list[int]] | None = None) -> Grid:
        """Build a grid from row-major terrain codes.

        Raises ValueError on ragged rows or unknown codes.
        """
        height = len(rows)
        width = len(rows[0]) if height else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"row {y} has {len(row)} cells, expected {width}")
            for x, code in enumerate(row):
                grid._terrain[y * width + x] = TerrainType(int(code))
                if variants is not None:
                    grid._variant[y * width + x] = variants[y][x]
        return grid

    # -- copy --

    def copy(self) -> Grid:
        new = Grid.__new__(Grid)
        new.width = self.width
        new.height = self.height
        new._terrain = list(self._terrain)
        new._variant = list(self._variant)
        return new

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._terrain == other._terrain
        )
