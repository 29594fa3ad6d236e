"""GameLoop: the authoritative fixed-order tick.

Phase order per tick:
  1. Progression: time of day, season blend, ability cooldowns
  2. Waves: settle a finished wave or release the next queued enemy
  3. Enemies: status effects, deaths, movement, arrival at the castle
  4. Soldiers: engage, block, fight, return and regenerate
  5. Towers: cooldowns, targeting, firing
  6. Projectiles: steering and impact
  7. Critters: ambient random walk
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from bastion.core.balance import ENEMY_STATS
from bastion.core.enums import Ability, EnemyType, ProjectileKind, TargetStrategy, TowerType
from bastion.core.models import Projectile, distance
from bastion.core.snapshot import Snapshot
from bastion.engine.combat import deal_damage, resolve_impact, tick_status
from bastion.engine.critters import panic_near, tick_critters
from bastion.utils.event_log import SimEvent

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState
    from bastion.core.models import Enemy, Soldier, Tower
    from bastion.engine.progression import Progression
    from bastion.systems.rng import DeterministicRNG
    from bastion.systems.waves import WaveDirector

logger = logging.getLogger(__name__)

_PROJECTILE_COLORS = {
    ProjectileKind.PLAIN: "#ffffff",
    ProjectileKind.AREA: "#f97316",
    ProjectileKind.POISON: "#84cc16",
    ProjectileKind.BURN: "#ef4444",
}

_NIGHT_RANGE_MULT = {
    TowerType.ARCHER: 0.7,
    TowerType.CROSSBOW: 0.7,
    TowerType.FIRE: 1.2,
}

_NEIGHBOURS = ((0, -1), (0, 1), (-1, 0), (1, 0))


def select_target(candidates: list[Enemy], strategy: TargetStrategy) -> Enemy:
    """Pick among in-range enemies. FIRST keeps spawn order."""
    if strategy == TargetStrategy.STRONG:
        return max(candidates, key=lambda e: e.hp)
    if strategy == TargetStrategy.WEAK:
        return min(candidates, key=lambda e: e.hp)
    return candidates[0]


class GameLoop:
    """The heartbeat of the game.

    Single-threaded mutation of GameState. Callers serialize ticks and
    player actions on the same state.
    """

    __slots__ = (
        "_config",
        "_state",
        "_rng",
        "_director",
        "_progression",
        "_tick_events",
    )

    def __init__(
        self,
        config: GameConfig,
        state: GameState,
        director: WaveDirector,
        progression: Progression,
        rng: DeterministicRNG,
    ) -> None:
        self._config = config
        self._state = state
        self._director = director
        self._progression = progression
        self._rng = rng
        self._tick_events: list[SimEvent] = []

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def tick_events(self) -> list[SimEvent]:
        """Events emitted during the most recent tick."""
        return self._tick_events

    def _emit(self, category: str, message: str,
              entity_ids: tuple[int, ...] = (), metadata: dict | None = None) -> None:
        self._tick_events.append(SimEvent(
            tick=self._state.tick,
            category=category,
            message=message,
            entity_ids=entity_ids,
            metadata=metadata,
        ))

    def tick_once(self) -> bool:
        """Advance one tick. Returns False when paused or the game is over."""
        state = self._state
        self._tick_events = []
        if state.paused or state.game_over:
            return False

        state.tick += 1
        self._progression.advance(state)
        self._phase_waves()
        self._phase_enemies()
        if state.game_over:
            return True
        self._phase_soldiers()
        self._phase_towers()
        self._phase_projectiles()
        tick_critters(state, self._rng)
        return True

    def create_snapshot(self) -> Snapshot:
        return Snapshot.from_state(self._state)

    def run(self, max_ticks: int | None = None) -> None:
        """Tick until the game ends, the game is paused or *max_ticks* is reached."""
        limit = max_ticks if max_ticks is not None else self._config.max_ticks
        logger.info("=== Game started (seed=%d) ===", self._config.seed)
        while self._state.tick < limit:
            if not self.tick_once():
                break
        logger.info(
            "=== Game stopped at tick %d (wave %d, lives %d, gold %d) ===",
            self._state.tick, self._state.wave, self._state.lives, self._state.gold,
        )

    # -- waves --

    def _phase_waves(self) -> None:
        state = self._state
        enemy = self._director.update(state)
        if enemy is not None:
            self._emit("spawn", f"{enemy.kind.value} #{enemy.id} entered the field",
                       (enemy.id,), {"kind": enemy.kind.value, "x": enemy.x})
        elif self._director.wave_finished(state):
            granted = self._progression.complete_wave(state)
            self._emit("wave", f"Wave {state.wave - 1} cleared (+{granted}g)",
                       metadata={"wave": state.wave - 1, "gold": granted})

    # -- enemies --

    def _phase_enemies(self) -> None:
        state = self._state
        for enemy in list(state.enemies.values()):
            tick_status(enemy, state.tick, self._config)
            if not enemy.alive:
                self._kill(enemy)
                continue

            if enemy.blocked_by is not None:
                blocker = state.soldiers.get(enemy.blocked_by)
                if blocker is not None and blocker.alive:
                    continue
                enemy.blocked_by = None

            self._move_enemy(enemy)

            if self._at_goal(enemy) or self._past_bottom(enemy):
                self._leak(enemy)
                if state.game_over:
                    return

    def _enemy_speed(self, enemy: Enemy, gx: int, gy: int) -> float:
        cfg = self._config
        state = self._state
        if enemy.frozen > 0:
            return 0.0
        stats = ENEMY_STATS[enemy.kind]
        spd = enemy.speed * state.speed
        if state.grid.is_swamp(gx, gy) and not stats.ignore_slow:
            spd *= cfg.swamp_speed_mult
        if state.is_winter:
            spd *= cfg.winter_speed_mult
        if enemy.slow_timer > 0:
            spd *= cfg.slow_resist_speed_mult if stats.ignore_slow else cfg.slow_speed_mult
        if state.cooldowns[Ability.ICE] > 0:
            spd *= cfg.ice_speed_mult
        if stats.night_runner and state.is_night:
            spd *= cfg.night_runner_speed_mult
        return spd

    def _move_enemy(self, enemy: Enemy) -> None:
        state = self._state
        cs = self._config.cell_size
        gx, gy = enemy.cell(cs)
        spd = self._enemy_speed(enemy, gx, gy)

        step = state.flow_field.next_cell(gx, gy)
        if step is None:
            # Off-field or unreachable cell: walk straight down
            enemy.y += spd
            return

        tx = step[0] * cs + cs / 2
        ty = step[1] * cs + cs / 2
        dx = tx - enemy.x
        dy = ty - enemy.y
        dist = math.hypot(dx, dy)
        enemy.dx = dx
        if dist <= spd:
            enemy.x = tx
            enemy.y = ty
        else:
            wobble = math.sin(state.tick * 0.05 + enemy.noise_offset) * self._config.path_noise * spd
            enemy.x += dx / dist * spd + wobble
            enemy.y += dy / dist * spd
        state.add_wear(gx, gy)

    def _at_goal(self, enemy: Enemy) -> bool:
        gx, gy = self._state.goal_center
        r = self._config.goal_radius
        return abs(enemy.x - gx) < r and abs(enemy.y - gy) < r

    def _past_bottom(self, enemy: Enemy) -> bool:
        cfg = self._config
        return enemy.y >= cfg.grid_height * cfg.cell_size

    def _kill(self, enemy: Enemy) -> None:
        state = self._state
        reward = ENEMY_STATS[enemy.kind].reward
        state.gold += reward
        state.record_kill()
        tower = state.towers.get(enemy.last_hit_by) if enemy.last_hit_by is not None else None
        if tower is not None:
            tower.kills += 1
        del state.enemies[enemy.id]
        self._emit("kill", f"{enemy.kind.value} #{enemy.id} slain (+{reward}g)",
                   (enemy.id,), {"kind": enemy.kind.value, "gold": reward,
                                 "tower": tower.id if tower is not None else None})

    def _leak(self, enemy: Enemy) -> None:
        state = self._state
        cost = self._config.boss_life_cost if enemy.kind == EnemyType.BOSS else 1
        state.lives = max(0, state.lives - cost)
        del state.enemies[enemy.id]
        self._emit("leak", f"{enemy.kind.value} #{enemy.id} reached the castle (-{cost} lives)",
                   (enemy.id,), {"kind": enemy.kind.value, "lives": state.lives})
        if state.lives <= 0:
            state.game_over = True
            logger.warning("Tick %d: The castle has fallen on wave %d", state.tick, state.wave)
            self._emit("game_over", f"The castle fell on wave {state.wave}",
                       metadata={"wave": state.wave})

    # -- soldiers --

    def _phase_soldiers(self) -> None:
        state = self._state
        for soldier in list(state.soldiers.values()):
            if not soldier.alive or soldier.owner_id not in state.towers:
                del state.soldiers[soldier.id]
                continue

            target = state.enemies.get(soldier.target_id) if soldier.target_id is not None else None
            if target is None or not target.alive:
                target = self._find_engagement(soldier)
                soldier.target_id = target.id if target is not None else None

            if target is not None:
                self._fight(soldier, target)
            else:
                self._return_to_post(soldier)

    def _find_engagement(self, soldier: Soldier) -> Enemy | None:
        """Nearest live enemy within aggro radius that nobody is holding."""
        state = self._state
        best: Enemy | None = None
        best_d = 0.0
        radius = self._config.soldier_aggro_radius
        for enemy in state.enemies.values():
            if not enemy.alive:
                continue
            if enemy.blocked_by is not None and enemy.blocked_by in state.soldiers:
                continue
            d = distance(soldier.x, soldier.y, enemy.x, enemy.y)
            if d <= radius and (best is None or d < best_d):
                best, best_d = enemy, d
        return best

    def _fight(self, soldier: Soldier, target: Enemy) -> None:
        cfg = self._config
        state = self._state
        d = distance(soldier.x, soldier.y, target.x, target.y)
        if d > cfg.soldier_melee_range:
            step = min(cfg.soldier_speed * state.speed, d)
            soldier.x += (target.x - soldier.x) / d * step
            soldier.y += (target.y - soldier.y) / d * step
            return

        target.blocked_by = soldier.id
        if state.tick % cfg.soldier_attack_period == 0:
            deal_damage(state, target, soldier.dmg * state.damage_multiplier, soldier.owner_id)
            night = state.day_time > cfg.soldier_night_threshold
            soldier.hp -= cfg.soldier_counter_damage_night if night else cfg.soldier_counter_damage

    def _return_to_post(self, soldier: Soldier) -> None:
        cfg = self._config
        state = self._state
        d = distance(soldier.x, soldier.y, soldier.spawn_x, soldier.spawn_y)
        if d > cfg.soldier_leash:
            step = min(state.speed, d)
            soldier.x += (soldier.spawn_x - soldier.x) / d * step
            soldier.y += (soldier.spawn_y - soldier.y) / d * step
        elif soldier.hp < soldier.max_hp and state.tick % cfg.soldier_regen_period == 0:
            soldier.hp = min(soldier.max_hp, soldier.hp + cfg.soldier_regen)

    # -- towers --

    def _phase_towers(self) -> None:
        state = self._state
        for tower in list(state.towers.values()):
            if tower.cooldown > 0:
                tower.cooldown -= state.speed
            if tower.cooldown > 0:
                continue

            match tower.kind:
                case TowerType.WALL:
                    continue
                case TowerType.BARRACKS:
                    # Garrison is spawned at build time; the timer only idles
                    tower.cooldown = tower.speed
                    continue
                case TowerType.BLITZ if tower.ammo <= 0:
                    continue

            reach = self._tower_range(tower)
            in_range = [
                e for e in state.enemies.values()
                if e.alive and distance(tower.x, tower.y, e.x, e.y) <= reach
            ]
            if not in_range:
                continue
            target = select_target(in_range, tower.strategy)
            self._fire(tower, target, in_range)
            tower.cooldown = tower.speed

    def _tower_range(self, tower: Tower) -> float:
        reach = tower.range * self._config.cell_size
        if self._state.is_night:
            reach *= _NIGHT_RANGE_MULT.get(tower.kind, 1.0)
        return reach

    def _fire(self, tower: Tower, target: Enemy, in_range: list[Enemy]) -> None:
        state = self._state
        dmg = tower.damage * state.damage_multiplier

        match tower.kind:
            case TowerType.BLITZ:
                chain = self._chain_bolt(tower, target, dmg)
                tower.ammo -= 1
                self._emit("fire", f"Blitz #{tower.id} chained {len(chain)} enemies",
                           (tower.id, *chain), {"kind": ProjectileKind.BOLT.value, "ammo": tower.ammo})
            case TowerType.TAR:
                for enemy in in_range:
                    enemy.slow_timer = tower.slow_ticks
                    enemy.tarred = True
                self._emit("fire", f"Tar #{tower.id} coated {len(in_range)} enemies",
                           (tower.id,), {"kind": ProjectileKind.PULSE.value, "x": tower.x, "y": tower.y})
            case TowerType.KNIGHT:
                deal_damage(state, target, dmg, tower.id)
            case TowerType.ARCHER | TowerType.CROSSBOW | TowerType.FIRE:
                self._launch(tower, target, dmg)
            case TowerType.BARRACKS | TowerType.WALL:
                pass

    def _chain_bolt(self, tower: Tower, target: Enemy, dmg: float) -> list[int]:
        """Armor-ignoring bolt that jumps to the nearest unhit enemies."""
        state = self._state
        radius = self._config.chain_radius_cells * self._config.cell_size
        hit = [target.id]
        deal_damage(state, target, dmg, tower.id)
        last = target
        for _ in range(self._config.chain_jumps):
            candidates = [
                e for e in state.enemies.values()
                if e.alive and e.id not in hit and distance(last.x, last.y, e.x, e.y) <= radius
            ]
            if not candidates:
                break
            last = min(candidates, key=lambda e: distance(last.x, last.y, e.x, e.y))
            deal_damage(state, last, dmg, tower.id)
            hit.append(last.id)
        return hit

    def _launch(self, tower: Tower, target: Enemy, dmg: float) -> None:
        state = self._state
        kind = ProjectileKind.PLAIN
        armor_pierce = False
        speed = 5.0
        splash = 0.0

        if tower.kind == TowerType.ARCHER:
            if tower.special == "B":
                kind = ProjectileKind.POISON
            elif self._has_fire_neighbour(tower):
                kind = ProjectileKind.BURN
        elif tower.kind == TowerType.FIRE:
            kind = ProjectileKind.AREA
            splash = tower.splash_radius
        elif tower.kind == TowerType.CROSSBOW:
            speed = 10.0
            if tower.special == "A":
                armor_pierce = True
            elif tower.special == "B" and target.kind == EnemyType.BOSS:
                dmg *= 3

        pid = state.allocate_id()
        state.projectiles[pid] = Projectile(
            id=pid,
            x=tower.x,
            y=tower.y - 10,
            target_id=target.id,
            damage=dmg,
            kind=kind,
            speed=speed,
            color=_PROJECTILE_COLORS[kind],
            source_id=tower.id,
            splash_radius=splash,
            armor_pierce=armor_pierce,
        )

    def _has_fire_neighbour(self, tower: Tower) -> bool:
        for dx, dy in _NEIGHBOURS:
            other = self._state.tower_at_cell(tower.gx + dx, tower.gy + dy)
            if other is not None and other.kind in (TowerType.FIRE, TowerType.TAR):
                return True
        return False

    # -- projectiles --

    def _phase_projectiles(self) -> None:
        state = self._state
        for proj in list(state.projectiles.values()):
            target = state.enemies.get(proj.target_id)
            if target is None or not target.alive:
                proj.active = False
                del state.projectiles[proj.id]
                continue

            step = proj.speed * state.speed
            dx = target.x - proj.x
            dy = target.y - proj.y
            dist = math.hypot(dx, dy)
            if dist < step:
                proj.x, proj.y = target.x, target.y
                hit = resolve_impact(state, proj, target)
                if proj.kind == ProjectileKind.AREA:
                    panic_near(state, proj.x, proj.y, self._config.critter_panic_radius)
                    self._emit("impact", f"Blast hit {len(hit)} enemies",
                               tuple(hit), {"kind": proj.kind.value, "x": proj.x, "y": proj.y})
                proj.active = False
                del state.projectiles[proj.id]
            else:
                proj.x += dx / dist * step
                proj.y += dy / dist * step

