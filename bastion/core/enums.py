"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class TerrainType(IntEnum):
    """Cell terrain kinds.

    The integer codes double as the wire mapping used by the external
    map-theme generator, so they must not be renumbered.
    """

    GRASS = 0           # Open, buildable
    WALL = 1            # Obstacle; every built tower turns its cell into WALL
    SWAMP = 2           # Halves enemy speed unless slow-resistant
    POWER = 3           # Damage boost for a tower built on it
    MINE = 4            # Pays gold at wave completion
    TREE = 5            # Decorative obstacle
    WATER = 6           # Impassable liquid
    CASTLE_ZONE = 9     # Goal


@unique
class TowerType(str, Enum):
    ARCHER = "ARCHER"
    KNIGHT = "KNIGHT"
    CROSSBOW = "CROSSBOW"
    FIRE = "FIRE"
    TAR = "TAR"
    BLITZ = "BLITZ"
    BARRACKS = "BARRACKS"
    WALL = "WALL"


@unique
class EnemyType(str, Enum):
    PEASANT = "PEASANT"
    WOLF = "WOLF"
    KNIGHT = "KNIGHT"
    SPIDER = "SPIDER"
    SKELETON = "SKELETON"
    SNAKE = "SNAKE"
    BOSS = "BOSS"
    KOBOLD = "KOBOLD"


@unique
class Season(str, Enum):
    SUMMER = "summer"
    AUTUMN = "autumn"
    WINTER = "winter"
    SPRING = "spring"


SEASON_CYCLE: tuple[Season, ...] = (Season.SUMMER, Season.AUTUMN, Season.WINTER, Season.SPRING)


@unique
class TargetStrategy(str, Enum):
    """How a tower picks among the enemies in range."""

    FIRST = "FIRST"     # First found (spawn order)
    STRONG = "STRONG"   # Highest hp
    WEAK = "WEAK"       # Lowest hp


@unique
class ProjectileKind(str, Enum):
    """Effect applied when a shot lands.

    PULSE and BOLT are instant effects (tar pulse, chain bolt) and never
    travel as projectiles; they appear only in fire events.
    """

    PLAIN = "proj"
    AREA = "aoe"
    POISON = "poison"
    BURN = "fire"
    PULSE = "pulse"
    BOLT = "bolt"


@unique
class UpgradeChoice(str, Enum):
    VETERAN = "VETERAN"
    A = "A"
    B = "B"
    MASTER = "MASTER"


@unique
class Ability(str, Enum):
    ARROW = "arrow"     # Volley hitting every enemy on the field
    TAX = "tax"         # Instant gold
    ICE = "ice"         # Global slow while the cooldown runs


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    MAP_GEN = 0
    WAVE = 1
    SPAWN = 2
    MOVEMENT = 3
    CRITTER = 4
