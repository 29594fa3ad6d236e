"""Mutable authoritative game state, mutated only by the tick and the action API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bastion.core.enums import Ability, EnemyType, Season, TowerType
from bastion.core.grid import Grid
from bastion.core.models import Critter, Enemy, Projectile, Soldier, Tower

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.systems.pathfinding import FlowField


class GameState:
    """The single source of truth for one game session.

    Entity collections are arenas keyed by a monotonic integer id.
    Dict insertion order is spawn order, which is what "first found"
    targeting and deterministic iteration rely on.
    """

    __slots__ = (
        "config", "tick", "grid", "wear", "flow_field",
        "gold", "lives", "wave", "wave_active", "wave_queue",
        "season", "next_season", "season_lerp", "day_time",
        "citadel_level", "next_boss", "cooldowns",
        "paused", "speed", "game_over",
        "enemies", "towers", "soldiers", "projectiles", "critters",
        "selected_tower_type", "selected_tower_id", "kills_per_wave",
        "_next_id",
    )

    def __init__(self, config: GameConfig, grid: Grid, flow_field: FlowField) -> None:
        self.config = config
        self.tick: int = 0
        self.grid: Grid = grid
        self.wear: list[float] = [0.0] * (grid.width * grid.height)
        self.flow_field: FlowField = flow_field

        self.gold: int = config.start_gold
        self.lives: int = config.start_lives
        self.wave: int = 1
        self.wave_active: bool = False
        self.wave_queue: list[EnemyType] = []

        self.season: Season = Season.SUMMER
        self.next_season: Season = Season.SUMMER
        self.season_lerp: float = 0.0
        self.day_time: float = 0.0          # 0.0 day .. night_darkness
        self.citadel_level: int = 0
        self.next_boss: EnemyType = EnemyType.PEASANT
        self.cooldowns: dict[Ability, int] = {a: 0 for a in Ability}

        self.paused: bool = False
        self.speed: float = 1.0
        self.game_over: bool = False

        self.enemies: dict[int, Enemy] = {}
        self.towers: dict[int, Tower] = {}
        self.soldiers: dict[int, Soldier] = {}
        self.projectiles: dict[int, Projectile] = {}
        self.critters: dict[int, Critter] = {}

        # View state set by the UI collaborator
        self.selected_tower_type: TowerType | None = None
        self.selected_tower_id: int | None = None

        self.kills_per_wave: dict[int, int] = {}
        self._next_id: int = 1

    # -- ids --

    def allocate_id(self) -> int:
        eid = self._next_id
        self._next_id += 1
        return eid

    # -- derived values --

    @property
    def damage_multiplier(self) -> float:
        """Global citadel multiplier applied to tower and soldier damage."""
        return 1.0 + self.config.citadel_damage_step * self.citadel_level

    @property
    def is_night(self) -> bool:
        return self.day_time > self.config.night_threshold

    @property
    def is_winter(self) -> bool:
        return self.season == Season.WINTER or (
            self.season_lerp > 0.5 and self.next_season == Season.WINTER
        )

    @property
    def goal_cells(self) -> tuple[tuple[int, int], ...]:
        cx, cy = self.config.castle_x, self.config.castle_y
        return ((cx, cy), (cx + 1, cy), (cx, cy + 1), (cx + 1, cy + 1))

    @property
    def goal_center(self) -> tuple[float, float]:
        cs = self.config.cell_size
        return self.config.castle_x * cs + cs, self.config.castle_y * cs + cs

    # -- lookups --

    def tower_at_cell(self, gx: int, gy: int) -> Tower | None:
        for tower in self.towers.values():
            if tower.gx == gx and tower.gy == gy:
                return tower
        return None

    def soldiers_of(self, tower_id: int) -> list[Soldier]:
        return [s for s in self.soldiers.values() if s.owner_id == tower_id]

    def add_wear(self, gx: int, gy: int, amount: float = 0.005, cap: float = 1.5) -> None:
        if self.grid.in_bounds(gx, gy):
            idx = gy * self.grid.width + gx
            if self.wear[idx] < cap:
                self.wear[idx] += amount

    def record_kill(self) -> None:
        self.kills_per_wave[self.wave] = self.kills_per_wave.get(self.wave, 0) + 1
