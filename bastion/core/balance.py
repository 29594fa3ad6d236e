"""Static balance tables: per-kind tower and enemy stats.

Tables are keyed by the closed TowerType / EnemyType sets and are never
mutated at runtime; per-instance changes (upgrades, wave scaling) live on
the entity itself.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from bastion.core.enums import EnemyType, TowerType, UpgradeChoice


@dataclass(frozen=True, slots=True)
class TowerStats:
    name: str
    cost: int
    range: float        # cells
    damage: float
    speed: int          # ticks between attacks (lower is faster)
    color: str
    light: bool = False
    spawner: bool = False
    ammo: int = 0       # burst-limited kinds only


@dataclass(frozen=True, slots=True)
class EnemyStats:
    name: str
    hp: float
    speed: float        # px per tick at speed 1
    reward: int
    armor: float        # damage fraction absorbed by plain hits, in [0, 1)
    size: int
    ignore_slow: bool = False
    immune_poison: bool = False
    night_runner: bool = False


TOWER_STATS: Mapping[TowerType, TowerStats] = MappingProxyType({
    TowerType.ARCHER:   TowerStats("Archer", 60, 4.5, 15, 45, "#a16207"),
    TowerType.KNIGHT:   TowerStats("Knight", 80, 1.5, 45, 55, "#94a3b8"),
    TowerType.CROSSBOW: TowerStats("Crossbow", 120, 7.5, 80, 90, "#451a03"),
    TowerType.FIRE:     TowerStats("Pitch", 150, 3.0, 30, 70, "#ea580c", light=True),
    TowerType.TAR:      TowerStats("Tar", 100, 4.0, 0, 40, "#1e1b4b"),
    TowerType.BLITZ:    TowerStats("Blitz", 300, 3.0, 120, 600, "#0ea5e9", light=True, ammo=2),
    TowerType.BARRACKS: TowerStats("Barracks", 100, 2.5, 0, 600, "#374151", spawner=True),
    TowerType.WALL:     TowerStats("Wall", 10, 0.0, 0, 0, "#525252"),
})

ENEMY_STATS: Mapping[EnemyType, EnemyStats] = MappingProxyType({
    EnemyType.PEASANT:  EnemyStats("Peasant", 30, 1.5, 2, 0.0, 20),
    EnemyType.WOLF:     EnemyStats("Wolf", 20, 2.8, 3, 0.0, 20, night_runner=True),
    EnemyType.KNIGHT:   EnemyStats("Knight", 90, 0.9, 7, 0.5, 20),
    EnemyType.SPIDER:   EnemyStats("Spider", 40, 2.2, 5, 0.1, 18, ignore_slow=True, night_runner=True),
    EnemyType.SKELETON: EnemyStats("Skeleton", 50, 1.4, 4, 0.2, 20, immune_poison=True),
    EnemyType.SNAKE:    EnemyStats("Snake", 35, 3.0, 5, 0.0, 18),
    EnemyType.BOSS:     EnemyStats("General", 3000, 0.6, 100, 0.4, 40),
    EnemyType.KOBOLD:   EnemyStats("Kobold", 180, 1.5, 50, 0.0, 20),
})

# Specialization labels shown by the UI for the level-1 -> level-2 choice.
UPGRADE_LABELS: Mapping[TowerType, Mapping[UpgradeChoice, str]] = MappingProxyType({
    TowerType.ARCHER:   {UpgradeChoice.A: "Longbow (+30% range)", UpgradeChoice.B: "Poison arrows"},
    TowerType.KNIGHT:   {UpgradeChoice.A: "Swift (+20% attack speed)", UpgradeChoice.B: "Greatsword (+100% damage)"},
    TowerType.CROSSBOW: {UpgradeChoice.A: "Armor piercing", UpgradeChoice.B: "Boss killer (3x damage)"},
    TowerType.FIRE:     {UpgradeChoice.A: "Great cauldron (+radius)", UpgradeChoice.B: "Napalm (+damage)"},
    TowerType.TAR:      {UpgradeChoice.A: "High pressure (+range)", UpgradeChoice.B: "Sticky tar (+slow)"},
    TowerType.BLITZ:    {UpgradeChoice.A: "Coil (+range)", UpgradeChoice.B: "Fast charger (-20% cooldown)"},
    TowerType.BARRACKS: {UpgradeChoice.A: "Veterans (+hp)", UpgradeChoice.B: "Drill (+damage)"},
})

# Ambient critters: (icon, base speed)
ANIMALS: tuple[tuple[str, float], ...] = (("sheep", 0.3), ("rooster", 0.6), ("rabbit", 0.8))


def tower_cost(kind: TowerType) -> int:
    return TOWER_STATS[kind].cost


def refund_for(kind: TowerType, rate: float) -> int:
    """Gold returned when a tower of *kind* is sold."""
    return math.floor(TOWER_STATS[kind].cost * rate + 1e-9)
