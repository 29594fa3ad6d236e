"""Map generation: procedural terrain and the theme-provider fallback chain."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from bastion.core.enums import Domain, TerrainType
from bastion.core.grid import Grid
from bastion.systems.pathfinding import can_place, compute_flow_field

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.systems.rng import DeterministicRNG
    from bastion.systems.theme import ThemeMapProvider

logger = logging.getLogger(__name__)

# Entity-id namespaces so each placement pass draws independent numbers
_MINE_KEY = 1000
_POWER_KEY = 2000
_SWAMP_KEY = 3000
_TREE_KEY = 4000
_WATER_KEY = 5000


def castle_cells(config: GameConfig) -> tuple[tuple[int, int], ...]:
    cx, cy = config.castle_x, config.castle_y
    return ((cx, cy), (cx + 1, cy), (cx, cy + 1), (cx + 1, cy + 1))


def noise_variant(x: int, y: int) -> int:
    """Cosmetic 0-3 variant from smooth trigonometric noise."""
    noise = math.sin(x * 0.3) * math.cos(y * 0.3) + math.sin((x + y) * 0.1)
    if noise > 0.6:
        return 3
    if noise > 0.1:
        return 2
    if noise > -0.4:
        return 1
    return 0


def stamp_castle(grid: Grid, config: GameConfig) -> None:
    for x, y in castle_cells(config):
        grid.set(x, y, TerrainType.CASTLE_ZONE)
        grid.set_variant(x, y, 0)


def blank_map(config: GameConfig) -> Grid:
    """All-grass field with the castle; used for sandbox games and tests."""
    grid = Grid(config.grid_width, config.grid_height)
    for y in range(grid.height):
        for x in range(grid.width):
            grid.set_variant(x, y, noise_variant(x, y))
    stamp_castle(grid, config)
    return grid


def generate_procedural(config: GameConfig, rng: DeterministicRNG) -> Grid:
    """Scatter resources and obstacles over a grass field.

    Obstacles are only committed when the placement validator accepts them,
    so the generated map always has a path from the top edge to the castle.
    """
    grid = blank_map(config)
    goals = castle_cells(config)
    w, h = config.grid_width, config.grid_height

    def scatter(terrain: TerrainType, count: int, key: int, obstacle: bool = False) -> None:
        for i in range(count):
            x = rng.next_int(Domain.MAP_GEN, key + i, 0, 1, w - 2)
            y = rng.next_int(Domain.MAP_GEN, key + i, 1, 1, h - 2)
            if y <= 2 or grid.get(x, y) != TerrainType.GRASS:
                continue
            if obstacle and not can_place(grid, goals, x, y):
                continue
            grid.set(x, y, terrain)

    scatter(TerrainType.MINE, config.num_mines, _MINE_KEY)
    scatter(TerrainType.POWER, config.num_power_tiles, _POWER_KEY)
    scatter(TerrainType.SWAMP, config.num_swamps, _SWAMP_KEY)
    scatter(TerrainType.TREE, config.num_trees, _TREE_KEY, obstacle=True)

    # Water clumps around a fixed centre
    for i in range(config.num_water):
        ox = config.water_center_x + math.floor(rng.next_uniform(Domain.MAP_GEN, _WATER_KEY + i, 0, -0.5, 0.5) * 6)
        oy = config.water_center_y + math.floor(rng.next_uniform(Domain.MAP_GEN, _WATER_KEY + i, 1, -0.5, 0.5) * 6)
        if 0 < ox < w - 1 and 0 < oy < h - 1 and grid.get(ox, oy) != TerrainType.CASTLE_ZONE:
            if can_place(grid, goals, ox, oy):
                grid.set(ox, oy, TerrainType.WATER)

    logger.debug(
        "Procedural map: %d mines, %d power, %d swamp, %d trees, %d water",
        grid.count(TerrainType.MINE), grid.count(TerrainType.POWER), grid.count(TerrainType.SWAMP),
        grid.count(TerrainType.TREE), grid.count(TerrainType.WATER),
    )
    return grid


def grid_from_theme(rows: list[list[int]], config: GameConfig, rng: DeterministicRNG) -> Grid | None:
    """Turn provider rows into a playable grid, or None if it is unusable."""
    if len(rows) != config.grid_height or any(len(r) != config.grid_width for r in rows):
        return None
    try:
        grid = Grid.from_rows(rows)
    except ValueError:
        return None
    for y in range(grid.height):
        for x in range(grid.width):
            grid.set_variant(x, y, rng.next_int(Domain.MAP_GEN, y * grid.width + x, 7, 0, 2))
    stamp_castle(grid, config)
    if not compute_flow_field(grid, castle_cells(config)).reaches_spawn_edge():
        logger.warning("Theme map has no path from the top edge to the castle.")
        return None
    return grid


def build_map(
    config: GameConfig,
    rng: DeterministicRNG,
    theme: str | None = None,
    provider: ThemeMapProvider | None = None,
) -> Grid:
    """Return the battlefield grid: themed if possible, procedural otherwise."""
    if theme and provider is not None:
        rows = provider.generate(theme, config.grid_width, config.grid_height)
        if rows is not None:
            grid = grid_from_theme(rows, config, rng)
            if grid is not None:
                logger.info("Using themed map for %r", theme)
                return grid
        logger.warning("Falling back to procedural map for theme %r", theme)
    if not config.procedural_map:
        return blank_map(config)
    return generate_procedural(config, rng)
