"""Core data models: enemies, towers, soldiers, projectiles, critters.

Positions are continuous pixel coordinates; grid cells are derived with
``floor(pixel / cell_size)``. Cross-entity references (``blocked_by``,
``target_id``, ``owner_id``, ``source_id``) are plain integer ids into the
arenas on GameState: a stale id simply fails lookup.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from bastion.core.enums import EnemyType, ProjectileKind, TargetStrategy, TowerType


@dataclass(slots=True)
class Enemy:
    id: int
    kind: EnemyType
    x: float
    y: float
    hp: float
    max_hp: float
    speed: float
    armor: float = 0.0

    # Status timers (ticks)
    frozen: int = 0
    slow_timer: int = 0
    burn_stack: int = 0
    poison_stack: int = 0
    tarred: bool = False

    blocked_by: int | None = None   # soldier id
    dx: float = 0.0                 # facing delta for the renderer
    noise_offset: float = 0.0
    last_hit_by: int | None = None  # tower id, for kill attribution

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def cell(self, cell_size: int) -> tuple[int, int]:
        return math.floor(self.x / cell_size), math.floor(self.y / cell_size)

    def copy(self) -> Enemy:
        return replace(self)


@dataclass(slots=True)
class Tower:
    id: int
    gx: int
    gy: int
    x: float
    y: float
    kind: TowerType
    damage: float
    range: float                    # cells
    speed: float                    # ticks between attacks
    level: int = 0                  # 0 base, 1 veteran, 2 specialized, 3 master
    cooldown: float = 0.0
    ammo: int = 0
    ammo_max: int = 0
    master: bool = False
    special: str | None = None      # "A" or "B" once specialized
    strategy: TargetStrategy = TargetStrategy.FIRST
    splash_radius: float = 0.0      # px, area kinds only
    slow_ticks: int = 0             # tar only
    empowered: bool = False         # built on a POWER tile
    kills: int = 0
    damage_dealt: float = 0.0

    def copy(self) -> Tower:
        return replace(self)


@dataclass(slots=True)
class Soldier:
    id: int
    owner_id: int
    x: float
    y: float
    spawn_x: float
    spawn_y: float
    hp: float
    max_hp: float
    dmg: float
    target_id: int | None = None

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def copy(self) -> Soldier:
        return replace(self)


@dataclass(slots=True)
class Projectile:
    id: int
    x: float
    y: float
    target_id: int
    damage: float
    kind: ProjectileKind
    speed: float
    color: str
    source_id: int
    splash_radius: float = 0.0
    armor_pierce: bool = False
    active: bool = True

    def copy(self) -> Projectile:
        return replace(self)


@dataclass(slots=True)
class Critter:
    """Ambient animal. Purely cosmetic, no gameplay coupling."""

    id: int
    x: float
    y: float
    icon: str
    base_speed: float
    vx: float = 0.0
    vy: float = 0.0
    panic: int = 0

    def copy(self) -> Critter:
        return replace(self)


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(ax - bx, ay - by)
