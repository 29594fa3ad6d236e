"""Combat resolution: damage, armor, status effects and projectile impacts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bastion.core.balance import ENEMY_STATS
from bastion.core.enums import ProjectileKind
from bastion.core.models import distance

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState
    from bastion.core.models import Enemy, Projectile


def armor_damage(damage: float, armor: float) -> float:
    """Plain-hit damage after armor: ``d * (1 - a)``, never negative."""
    return max(0.0, damage * (1.0 - armor))


def deal_damage(state: GameState, enemy: Enemy, amount: float, source_id: int | None = None) -> float:
    """Subtract *amount* from *enemy* and credit the source tower."""
    amount = max(0.0, amount)
    enemy.hp -= amount
    if source_id is not None:
        enemy.last_hit_by = source_id
        tower = state.towers.get(source_id)
        if tower is not None:
            tower.damage_dealt += amount
    return amount


def apply_poison(enemy: Enemy, ticks: int) -> bool:
    if ENEMY_STATS[enemy.kind].immune_poison:
        return False
    enemy.poison_stack = ticks
    return True


def apply_burn(enemy: Enemy, config: GameConfig) -> None:
    enemy.burn_stack = config.burn_ticks
    enemy.slow_timer = config.burn_slow_ticks


def tick_status(enemy: Enemy, tick: int, config: GameConfig) -> None:
    """Decay status timers; burn and poison deal their periodic damage."""
    if enemy.burn_stack > 0:
        enemy.burn_stack -= 1
        if tick % config.burn_period == 0:
            enemy.hp -= config.burn_damage
    if enemy.poison_stack > 0:
        enemy.poison_stack -= 1
        if tick % config.poison_period == 0:
            enemy.hp -= max(config.poison_min_damage, enemy.max_hp * config.poison_hp_fraction)
    if enemy.slow_timer > 0:
        enemy.slow_timer -= 1
    if enemy.frozen > 0:
        enemy.frozen -= 1


def resolve_impact(state: GameState, projectile: Projectile, target: Enemy) -> list[int]:
    """Apply *projectile*'s effect on arrival. Returns ids of enemies hit."""
    cfg = state.config
    src = projectile.source_id

    if projectile.kind == ProjectileKind.AREA:
        radius = projectile.splash_radius or cfg.splash_radius
        hit: list[int] = []
        for enemy in state.enemies.values():
            if not enemy.alive:
                continue
            if distance(enemy.x, enemy.y, projectile.x, projectile.y) >= radius:
                continue
            deal_damage(state, enemy, projectile.damage, src)
            if enemy.tarred:
                enemy.tarred = False
                enemy.burn_stack += cfg.burn_ticks
                deal_damage(state, enemy, cfg.tar_ignite_damage, src)
            hit.append(enemy.id)
        return hit

    dmg = projectile.damage
    if projectile.kind == ProjectileKind.PLAIN and not projectile.armor_pierce:
        dmg = armor_damage(dmg, target.armor)
    elif projectile.kind == ProjectileKind.POISON:
        apply_poison(target, cfg.poison_ticks)
    elif projectile.kind == ProjectileKind.BURN:
        apply_burn(target, cfg)
    deal_damage(state, target, dmg, src)
    return [target.id]
