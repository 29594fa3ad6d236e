"""Flow-field pathfinding and the placement validator.

A flow field is a multi-source breadth-first distance map seeded at 0 on
every goal cell and expanded through 4-connected passable cells. Enemies
walk it greedily: from any cell with a finite distance there is always a
neighbour exactly one step closer, so greedy descent is a shortest path.

Usage:
    field = compute_flow_field(grid, goals)
    field.get(x, y)                # int distance or None (unreachable)
    field.next_cell(x, y)          # neighbour to step to, or None
    can_place(grid, goals, x, y)   # would blocking (x, y) keep the map solvable?
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Iterable

from bastion.core.enums import TerrainType

if TYPE_CHECKING:
    from bastion.core.grid import Grid

# Scan order for greedy descent: up, down, left, right. Ties keep the first.
_DIRS: tuple[tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


class FlowField:
    """Grid of optional non-negative distances to the nearest goal cell."""

    __slots__ = ("width", "height", "_dist")

    def __init__(self, width: int, height: int, dist: list[int | None] | None = None) -> None:
        self.width = width
        self.height = height
        self._dist: list[int | None] = dist if dist is not None else [None] * (width * height)

    def get(self, x: int, y: int) -> int | None:
        if 0 <= x < self.width and 0 <= y < self.height:
            return self._dist[y * self.width + x]
        return None

    def next_cell(self, x: int, y: int) -> tuple[int, int] | None:
        """Return the neighbour one step closer to the goal.

        Returns ``(x, y)`` itself on a goal cell and None when the cell is
        unreachable.
        """
        best = self.get(x, y)
        if best is None:
            return None
        step = (x, y)
        for dx, dy in _DIRS:
            d = self.get(x + dx, y + dy)
            if d is not None and d < best:
                best = d
                step = (x + dx, y + dy)
        return step

    def spawn_columns(self) -> list[int]:
        """Columns of the spawn edge (row 0) that can reach the goal."""
        return [x for x in range(self.width) if self._dist[x] is not None]

    def reaches_spawn_edge(self) -> bool:
        return any(self._dist[x] is not None for x in range(self.width))

    def to_rows(self) -> list[list[int | None]]:
        w = self.width
        return [list(self._dist[y * w:(y + 1) * w]) for y in range(self.height)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlowField):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._dist == other._dist


def compute_flow_field(grid: Grid, goals: Iterable[tuple[int, int]]) -> FlowField:
    """Breadth-first distance field from all *goals* over passable cells.

    Standard BFS layering makes the result independent of the order in
    which neighbours are visited.
    """
    width, height = grid.width, grid.height
    dist: list[int | None] = [None] * (width * height)
    queue: deque[tuple[int, int]] = deque()

    for gx, gy in goals:
        if grid.in_bounds(gx, gy) and dist[gy * width + gx] is None:
            dist[gy * width + gx] = 0
            queue.append((gx, gy))

    while queue:
        cx, cy = queue.popleft()
        d = dist[cy * width + cx]
        for dx, dy in _DIRS:
            nx, ny = cx + dx, cy + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            idx = ny * width + nx
            if dist[idx] is None and grid.is_passable(nx, ny):
                dist[idx] = d + 1
                queue.append((nx, ny))

    return FlowField(width, height, dist)


def can_place(grid: Grid, goals: Iterable[tuple[int, int]], x: int, y: int) -> bool:
    """Return True if turning (x, y) into an obstacle keeps the spawn edge connected.

    The grid is restored before returning, whatever the outcome; the live
    flow field is never touched, so a rejected placement leaves it matching
    the unmodified terrain.
    """
    if not grid.in_bounds(x, y):
        return False
    original = grid.get(x, y)
    grid.set(x, y, TerrainType.WALL)
    try:
        tentative = compute_flow_field(grid, goals)
    finally:
        grid.set(x, y, original)
    return tentative.reaches_spawn_edge()
