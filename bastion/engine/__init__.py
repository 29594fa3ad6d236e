"""Engine layer: game loop, combat, progression."""

from bastion.engine.game_loop import GameLoop
from bastion.engine.progression import Progression

__all__ = ["GameLoop", "Progression"]
