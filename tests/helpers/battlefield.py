"""Battlefield: end-to-end test fixture for the game loop.

Creates a blank-map GameSession with controllable enemies and towers,
runs ticks, and collects events for assertion.

Usage:
    field = Battlefield(gold=1000)
    tower = field.build(5, 10, TowerType.KNIGHT)
    enemy = field.add_enemy(EnemyType.PEASANT, cell=(5, 11))
    field.run_ticks(60)
    assert field.enemy(enemy.id) is None
"""

from __future__ import annotations

import os
import sys
from typing import Callable

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from bastion.config import GameConfig
from bastion.core.balance import ENEMY_STATS
from bastion.core.enums import EnemyType, TerrainType, TowerType
from bastion.core.models import Enemy, Tower
from bastion.engine.session import GameSession
from bastion.systems.pathfinding import compute_flow_field
from bastion.utils.event_log import SimEvent


def make_config(**overrides) -> GameConfig:
    """Small deterministic config: blank map, no critters."""
    defaults = dict(procedural_map=False, num_critters=0, seed=7)
    defaults.update(overrides)
    return GameConfig(**defaults)


class Battlefield:
    """E2E test fixture wrapping a GameSession on a blank map."""

    def __init__(self, gold: int | None = None, **config_overrides) -> None:
        self.config = make_config(**config_overrides)
        self.session = GameSession(self.config)
        if gold is not None:
            self.state.gold = gold
        self._all_events: list[SimEvent] = []

    @property
    def state(self):
        return self.session.state

    @property
    def actions(self):
        return self.session.actions

    # -- builders --

    def build(self, gx: int, gy: int, kind: TowerType) -> Tower:
        assert self.actions.build(gx, gy, kind), f"build {kind} at ({gx}, {gy}) rejected"
        tower = self.state.tower_at_cell(gx, gy)
        assert tower is not None
        return tower

    def add_enemy(
        self,
        kind: EnemyType = EnemyType.PEASANT,
        cell: tuple[int, int] | None = None,
        pos: tuple[float, float] | None = None,
        *,
        hp: float | None = None,
        armor: float | None = None,
    ) -> Enemy:
        """Drop an enemy at a cell centre (or exact pixel position)."""
        stats = ENEMY_STATS[kind]
        cs = self.config.cell_size
        if pos is None:
            gx, gy = cell if cell is not None else (0, 0)
            pos = (gx * cs + cs / 2, gy * cs + cs / 2)
        eid = self.state.allocate_id()
        enemy = Enemy(
            id=eid,
            kind=kind,
            x=pos[0],
            y=pos[1],
            hp=hp if hp is not None else stats.hp,
            max_hp=hp if hp is not None else stats.hp,
            speed=stats.speed,
            armor=armor if armor is not None else stats.armor,
        )
        self.state.enemies[eid] = enemy
        return enemy

    def set_terrain(self, x: int, y: int, terrain: TerrainType) -> None:
        self.state.grid.set(x, y, terrain)
        self.state.flow_field = compute_flow_field(self.state.grid, self.state.goal_cells)

    # -- running --

    def run_ticks(self, n: int) -> list[SimEvent]:
        events: list[SimEvent] = []
        for _ in range(n):
            if not self.session.loop.tick_once():
                break
            events.extend(self.session.loop.tick_events)
        events.extend(self.actions.drain_events())
        self._all_events.extend(events)
        return events

    def run_until(self, condition: Callable[[], bool], max_ticks: int = 5000) -> int:
        """Tick until *condition* holds. Returns the number of ticks run."""
        for i in range(max_ticks):
            if condition():
                return i
            if not self.session.loop.tick_once():
                return i
            self._all_events.extend(self.session.loop.tick_events)
        return max_ticks

    # -- inspection --

    def enemy(self, eid: int) -> Enemy | None:
        return self.state.enemies.get(eid)

    @property
    def all_events(self) -> list[SimEvent]:
        return self._all_events

    def events_by_category(self, category: str) -> list[SimEvent]:
        return [e for e in self._all_events if e.category == category]
