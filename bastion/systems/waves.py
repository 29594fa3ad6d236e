"""Wave/spawn director: builds each wave's queue and releases it on a timer."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from bastion.core.balance import ENEMY_STATS
from bastion.core.enums import Domain, EnemyType, TowerType
from bastion.core.models import Enemy

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState
    from bastion.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

# Wave-number thresholds gating each regular kind
RARE_SPIDER_AFTER = 5
SKELETON_AFTER = 15
SPIDER_AFTER = 10
SNAKE_AFTER = 20
KNIGHT_AFTER = 6
WOLF_AFTER = 3

SPAWN_Y = -20.0
SPAWN_MARGIN = 20.0


def build_wave_queue(wave: int, config: GameConfig, rng: DeterministicRNG) -> list[EnemyType]:
    """Return the ordered enemy kinds for *wave*.

    Boss waves hold a single boss; other waves blend the regular kinds by
    fixed modulo rules, with a rare early spider roll and a reward kobold
    at the midpoint of every fifth wave.
    """
    if wave % config.boss_wave_every == 0:
        return [EnemyType.BOSS]

    queue: list[EnemyType] = []
    count = 4 + math.floor(wave * 1.5)
    for i in range(count):
        r = rng.next_float(Domain.WAVE, i, wave)
        if wave > RARE_SPIDER_AFTER and r < config.rare_spawn_chance:
            queue.append(EnemyType.SPIDER)
        elif wave > SKELETON_AFTER and i % 4 == 0:
            queue.append(EnemyType.SKELETON)
        elif wave > SPIDER_AFTER and i % 5 == 0:
            queue.append(EnemyType.SPIDER)
        elif wave > SNAKE_AFTER and i % 6 == 0:
            queue.append(EnemyType.SNAKE)
        elif wave > KNIGHT_AFTER and i % 3 == 0:
            queue.append(EnemyType.KNIGHT)
        elif wave > WOLF_AFTER and i % 2 == 0:
            queue.append(EnemyType.WOLF)
        else:
            queue.append(EnemyType.PEASANT)

    if wave % config.reward_wave_every == 0:
        queue.insert(len(queue) // 2, EnemyType.KOBOLD)
    return queue


def spawn_interval(config: GameConfig, speed: float) -> int:
    """Ticks between releases; shrinks with game speed down to a floor."""
    return max(config.spawn_interval_min, math.floor(config.spawn_interval_base / speed))


class WaveDirector:
    """Starts waves, releases queued enemies and detects wave completion."""

    __slots__ = ("_config", "_rng")

    def __init__(self, config: GameConfig, rng: DeterministicRNG) -> None:
        self._config = config
        self._rng = rng

    def start_wave(self, state: GameState) -> bool:
        """Build the queue for the current wave. No-op while a wave runs."""
        if state.wave_active or state.game_over:
            return False
        for tower in state.towers.values():
            if tower.kind == TowerType.BLITZ:
                tower.ammo = tower.ammo_max
        state.wave_queue = build_wave_queue(state.wave, self._config, self._rng)
        state.wave_active = True
        if state.wave % self._config.boss_wave_every == 0:
            state.next_boss = EnemyType.BOSS if state.wave % (2 * self._config.boss_wave_every) == 0 else EnemyType.KNIGHT
        logger.info("Tick %d: Wave %d started (%d enemies queued)", state.tick, state.wave, len(state.wave_queue))
        return True

    def update(self, state: GameState) -> Enemy | None:
        """Release the next queued enemy when due.

        Returns the spawned enemy, if any. Completion of an emptied wave is
        reported by :meth:`wave_finished`.
        """
        if not state.wave_active or not state.wave_queue:
            return None
        if state.tick % spawn_interval(self._config, state.speed) != 0:
            return None
        kind = state.wave_queue.pop(0)
        if kind in (EnemyType.BOSS, EnemyType.KNIGHT, EnemyType.SPIDER):
            state.next_boss = kind
        enemy = self.spawn(state, kind)
        state.enemies[enemy.id] = enemy
        logger.debug("Tick %d: Spawned %s #%d at x=%.1f", state.tick, kind.value, enemy.id, enemy.x)
        return enemy

    def wave_finished(self, state: GameState) -> bool:
        return state.wave_active and not state.wave_queue and not state.enemies

    def spawn(self, state: GameState, kind: EnemyType) -> Enemy:
        """Create an enemy of *kind* above a spawn column that reaches the goal."""
        cfg = self._config
        stats = ENEMY_STATS[kind]
        eid = state.allocate_id()
        cs = cfg.cell_size

        columns = state.flow_field.spawn_columns() or list(range(cfg.grid_width))
        col = self._rng.choice(Domain.SPAWN, eid, state.tick, columns)
        x = col * cs + self._rng.next_uniform(Domain.SPAWN, eid, state.tick + 1, 0.0, cs)
        x = min(max(x, SPAWN_MARGIN), cfg.grid_width * cs - SPAWN_MARGIN)

        hp = stats.hp * cfg.enemy_hp_growth ** (state.wave - 1)
        return Enemy(
            id=eid,
            kind=kind,
            x=x,
            y=SPAWN_Y,
            hp=hp,
            max_hp=hp,
            speed=stats.speed,
            armor=stats.armor,
            noise_offset=self._rng.next_uniform(Domain.SPAWN, eid, state.tick + 2, 0.0, 1000.0),
        )
