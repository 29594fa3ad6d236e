"""Tower upgrade tiers.

Each tier is gated by the tower's current level and a gold cost; the stat
changes are applied in place on the tower (and, for barracks, on its squad).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from bastion.core.enums import TowerType, UpgradeChoice

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState
    from bastion.core.models import Tower

# Level a tower must be at before each choice is offered
REQUIRED_LEVEL: dict[UpgradeChoice, int] = {
    UpgradeChoice.VETERAN: 0,
    UpgradeChoice.A: 1,
    UpgradeChoice.B: 1,
    UpgradeChoice.MASTER: 2,
}

_RESULT_LEVEL: dict[UpgradeChoice, int] = {
    UpgradeChoice.VETERAN: 1,
    UpgradeChoice.A: 2,
    UpgradeChoice.B: 2,
    UpgradeChoice.MASTER: 3,
}

GREAT_CAULDRON_RADIUS = 90.0
STICKY_TAR_TICKS = 150


def upgrade_cost(choice: UpgradeChoice, config: GameConfig) -> int:
    if choice == UpgradeChoice.VETERAN:
        return config.veteran_cost
    if choice == UpgradeChoice.MASTER:
        return config.master_cost
    return config.specialization_cost


def can_upgrade(tower: Tower, choice: UpgradeChoice) -> bool:
    """Walls never upgrade; every other kind follows the level ladder."""
    return tower.kind != TowerType.WALL and tower.level == REQUIRED_LEVEL[choice]


def apply_upgrade(state: GameState, tower: Tower, choice: UpgradeChoice) -> None:
    """Apply *choice* to *tower*. Preconditions are the caller's job."""
    match choice:
        case UpgradeChoice.VETERAN:
            tower.damage *= 1.1
            tower.range *= 1.1
        case UpgradeChoice.A | UpgradeChoice.B:
            tower.special = choice.value
            _specialize(state, tower, choice)
        case UpgradeChoice.MASTER:
            tower.master = True
            tower.damage *= 2
            tower.range *= 1.3
            _master(state, tower)
    tower.level = _RESULT_LEVEL[choice]


def _specialize(state: GameState, tower: Tower, choice: UpgradeChoice) -> None:
    a = choice == UpgradeChoice.A
    match tower.kind:
        case TowerType.ARCHER:
            if a:
                tower.range *= 1.3
            # B switches the arrows to poison when fired
        case TowerType.KNIGHT:
            if a:
                tower.speed *= 0.8
            else:
                tower.damage *= 2
                tower.speed *= 1.2
        case TowerType.CROSSBOW:
            # A pierces armor, B triples damage against bosses; both read at fire time
            pass
        case TowerType.FIRE:
            if a:
                tower.splash_radius = GREAT_CAULDRON_RADIUS
            else:
                tower.damage *= 1.5
        case TowerType.TAR:
            if a:
                tower.range *= 1.3
            else:
                tower.slow_ticks = STICKY_TAR_TICKS
        case TowerType.BLITZ:
            if a:
                tower.range *= 1.3
            else:
                tower.speed *= 0.8
        case TowerType.BARRACKS:
            for soldier in state.soldiers_of(tower.id):
                if a:
                    soldier.max_hp *= 1.5
                    soldier.hp *= 1.5
                else:
                    soldier.dmg *= 2
        case TowerType.WALL:
            pass


def _master(state: GameState, tower: Tower) -> None:
    match tower.kind:
        case TowerType.ARCHER:
            tower.speed *= 0.5
        case TowerType.BLITZ:
            tower.ammo_max += 2
            tower.ammo += 2
        case TowerType.BARRACKS:
            for soldier in state.soldiers_of(tower.id):
                soldier.max_hp = 150.0
                soldier.hp = 150.0
                soldier.dmg = 15.0
        case _:
            pass
