"""Core data models and game representation."""

from bastion.core.enums import Ability, Domain, EnemyType, Season, TargetStrategy, TerrainType, TowerType
from bastion.core.models import Critter, Enemy, Projectile, Soldier, Tower
from bastion.core.grid import Grid
from bastion.core.game_state import GameState
from bastion.core.snapshot import Snapshot

__all__ = [
    "Ability",
    "Critter",
    "Domain",
    "Enemy",
    "EnemyType",
    "GameState",
    "Grid",
    "Projectile",
    "Season",
    "Snapshot",
    "Soldier",
    "TargetStrategy",
    "TerrainType",
    "Tower",
    "TowerType",
]
