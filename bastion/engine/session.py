"""GameSession: wires the map, state, loop and action API for one game."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bastion.actions.commands import GameActions
from bastion.core.game_state import GameState
from bastion.engine.critters import spawn_critters
from bastion.engine.game_loop import GameLoop
from bastion.engine.progression import Progression
from bastion.systems.mapgen import build_map, castle_cells
from bastion.systems.pathfinding import compute_flow_field
from bastion.systems.rng import DeterministicRNG
from bastion.systems.waves import WaveDirector

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.systems.theme import ThemeMapProvider

logger = logging.getLogger(__name__)


class GameSession:
    """Owns the live game and rebuilds it from scratch on reset."""

    def __init__(
        self,
        config: GameConfig,
        theme_provider: ThemeMapProvider | None = None,
        theme: str | None = None,
    ) -> None:
        self.config = config
        self.theme_provider = theme_provider
        self.rng = DeterministicRNG(config.seed)
        self.theme: str | None = None
        self.state: GameState
        self.loop: GameLoop
        self.actions: GameActions
        self.director: WaveDirector
        self.new_game(theme)

    def new_game(self, theme: str | None = None) -> GameState:
        """Discard the current game and start a fresh one.

        A *theme* is handed to the theme provider; any failure there falls
        back to the procedural map.
        """
        cfg = self.config
        self.theme = theme
        grid = build_map(cfg, self.rng, theme=theme, provider=self.theme_provider)
        state = GameState(cfg, grid, compute_flow_field(grid, castle_cells(cfg)))
        spawn_critters(state, self.rng)

        self.director = WaveDirector(cfg, self.rng)
        self.state = state
        self.loop = GameLoop(cfg, state, self.director, Progression(cfg), self.rng)
        self.actions = GameActions(cfg, state, self.director)
        logger.info(
            "New game (seed=%d, theme=%r): %dx%d map, %d gold, %d lives",
            cfg.seed, theme, grid.width, grid.height, state.gold, state.lives,
        )
        return state

    def set_paused(self, paused: bool) -> None:
        self.state.paused = paused

    def set_speed(self, speed: float) -> None:
        """Game-speed multiplier; scales per-tick advancement, not tick rate."""
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self.state.speed = speed
