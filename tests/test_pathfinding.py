"""Unit tests for the flow field and the placement validator."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bastion.core.enums import TerrainType
from bastion.core.grid import Grid
from bastion.systems.pathfinding import FlowField, can_place, compute_flow_field

GOALS = ((9, 28), (10, 28), (9, 29), (10, 29))


def _grid(w: int = 20, h: int = 30) -> Grid:
    g = Grid(w, h)
    for x, y in GOALS:
        g.set(x, y, TerrainType.CASTLE_ZONE)
    return g


def _wall_row(g: Grid, y: int, gap: int | None = None) -> None:
    for x in range(g.width):
        if x != gap:
            g.set(x, y, TerrainType.WALL)


# ---------------------------------------------------------------------------
# Flow field
# ---------------------------------------------------------------------------

class TestFlowField:
    def test_goal_cells_are_zero(self):
        field = compute_flow_field(_grid(), GOALS)
        for x, y in GOALS:
            assert field.get(x, y) == 0

    def test_open_grid_is_manhattan_distance(self):
        field = compute_flow_field(_grid(), GOALS)
        assert field.get(9, 27) == 1
        assert field.get(9, 0) == 28
        assert field.get(0, 0) == 9 + 28
        assert field.get(19, 29) == 9

    def test_out_of_bounds_is_none(self):
        field = compute_flow_field(_grid(), GOALS)
        assert field.get(-1, 0) is None
        assert field.get(0, 30) is None

    def test_obstacles_are_unreached(self):
        g = _grid()
        g.set(3, 3, TerrainType.WALL)
        g.set(4, 4, TerrainType.TREE)
        g.set(5, 5, TerrainType.WATER)
        g.set(6, 6, TerrainType.SWAMP)
        field = compute_flow_field(g, GOALS)
        assert field.get(3, 3) is None
        assert field.get(4, 4) is None
        assert field.get(5, 5) is None
        assert field.get(6, 6) is not None

    def test_enclosed_pocket_is_unreachable(self):
        g = _grid()
        _wall_row(g, 10)
        field = compute_flow_field(g, GOALS)
        assert field.get(0, 0) is None
        assert field.get(0, 11) is not None
        assert not field.reaches_spawn_edge()
        assert field.spawn_columns() == []

    def test_detour_through_gap(self):
        g = _grid()
        _wall_row(g, 10, gap=0)
        field = compute_flow_field(g, GOALS)
        # From (9, 9) the only way down is via column 0
        assert field.get(9, 9) == 9 + 1 + 27
        assert field.get(0, 10) is not None
        assert field.spawn_columns() == list(range(20))

    def test_deterministic(self):
        g = _grid()
        g.set(9, 20, TerrainType.WALL)
        a = compute_flow_field(g, GOALS)
        b = compute_flow_field(g, tuple(reversed(GOALS)))
        assert a == b


class TestGreedyDescent:
    def test_next_cell_steps_closer(self):
        field = compute_flow_field(_grid(), GOALS)
        assert field.next_cell(9, 0) == (9, 1)

    def test_tie_prefers_scan_order(self):
        field = compute_flow_field(_grid(), GOALS)
        # Down and right are equally close; down is scanned first
        assert field.next_cell(5, 5) == (5, 6)

    def test_goal_returns_itself(self):
        field = compute_flow_field(_grid(), GOALS)
        assert field.next_cell(9, 28) == (9, 28)

    def test_unreachable_returns_none(self):
        g = _grid()
        _wall_row(g, 10)
        field = compute_flow_field(g, GOALS)
        assert field.next_cell(0, 0) is None

    def test_descent_reaches_goal(self):
        g = _grid()
        _wall_row(g, 12, gap=17)
        field = compute_flow_field(g, GOALS)
        x, y = 2, 0
        for _ in range(200):
            if field.get(x, y) == 0:
                break
            x, y = field.next_cell(x, y)
            assert g.is_passable(x, y)
        assert field.get(x, y) == 0

    def test_to_rows_shape(self):
        field = FlowField(3, 2, [0, 1, None, 2, 3, 4])
        assert field.to_rows() == [[0, 1, None], [2, 3, 4]]


# ---------------------------------------------------------------------------
# Placement validator
# ---------------------------------------------------------------------------

class TestCanPlace:
    def test_open_cell_allowed(self):
        assert can_place(_grid(), GOALS, 3, 3)

    def test_sealing_last_gap_rejected(self):
        g = _grid()
        _wall_row(g, 10, gap=4)
        assert not can_place(g, GOALS, 4, 10)

    def test_terrain_restored_after_check(self):
        g = _grid()
        _wall_row(g, 10, gap=4)
        before = g.copy()
        can_place(g, GOALS, 4, 10)
        can_place(g, GOALS, 7, 7)
        assert g == before
        assert g.get(4, 10) == TerrainType.GRASS

    def test_out_of_bounds_rejected(self):
        assert not can_place(_grid(), GOALS, -1, 0)
        assert not can_place(_grid(), GOALS, 20, 0)

    def test_sealing_the_castle_rejected(self):
        g = _grid()
        # Ring the castle, leave one opening at (8, 28)
        for x, y in ((9, 27), (10, 27), (11, 28), (11, 29)):
            g.set(x, y, TerrainType.WALL)
        assert can_place(g, GOALS, 8, 29)
        g.set(8, 29, TerrainType.WALL)
        assert not can_place(g, GOALS, 8, 28)
