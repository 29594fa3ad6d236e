"""Immutable snapshot of the game state for API readers."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from bastion.core.enums import Ability, EnemyType, Season
from bastion.core.grid import Grid
from bastion.core.models import Critter, Enemy, Projectile, Soldier, Tower

if TYPE_CHECKING:
    from bastion.core.game_state import GameState
    from bastion.systems.pathfinding import FlowField


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of the game, safe to share across threads.

    Entities and the grid are copied; entity arenas are wrapped in
    MappingProxyType. The flow field is replaced wholesale on every
    recompute and never mutated, so it is shared by reference.
    """

    tick: int
    seed: int
    grid: Grid
    flow_field: FlowField
    wear: tuple[float, ...]
    gold: int
    lives: int
    wave: int
    wave_active: bool
    queued: int
    season: Season
    next_season: Season
    season_lerp: float
    day_time: float
    citadel_level: int
    damage_multiplier: float
    next_boss: EnemyType
    cooldowns: Mapping[Ability, int]
    paused: bool
    speed: float
    game_over: bool
    enemies: Mapping[int, Enemy]
    towers: Mapping[int, Tower]
    soldiers: Mapping[int, Soldier]
    projectiles: Mapping[int, Projectile]
    critters: Mapping[int, Critter]
    selected_tower_type: str | None
    selected_tower_id: int | None
    kills_per_wave: Mapping[int, int]

    @classmethod
    def from_state(cls, state: GameState) -> Snapshot:
        return cls(
            tick=state.tick,
            seed=state.config.seed,
            grid=state.grid.copy(),
            flow_field=state.flow_field,
            wear=tuple(state.wear),
            gold=state.gold,
            lives=state.lives,
            wave=state.wave,
            wave_active=state.wave_active,
            queued=len(state.wave_queue),
            season=state.season,
            next_season=state.next_season,
            season_lerp=state.season_lerp,
            day_time=state.day_time,
            citadel_level=state.citadel_level,
            damage_multiplier=state.damage_multiplier,
            next_boss=state.next_boss,
            cooldowns=MappingProxyType(dict(state.cooldowns)),
            paused=state.paused,
            speed=state.speed,
            game_over=state.game_over,
            enemies=MappingProxyType({k: e.copy() for k, e in state.enemies.items()}),
            towers=MappingProxyType({k: t.copy() for k, t in state.towers.items()}),
            soldiers=MappingProxyType({k: s.copy() for k, s in state.soldiers.items()}),
            projectiles=MappingProxyType({k: p.copy() for k, p in state.projectiles.items()}),
            critters=MappingProxyType({k: c.copy() for k, c in state.critters.items()}),
            selected_tower_type=state.selected_tower_type.value if state.selected_tower_type else None,
            selected_tower_id=state.selected_tower_id,
            kills_per_wave=MappingProxyType(dict(state.kills_per_wave)),
        )
