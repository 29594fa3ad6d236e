"""Economy & progression: day/night, seasons, ability cooldowns, wave payouts."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from bastion.core.enums import SEASON_CYCLE, Season, TerrainType

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState

logger = logging.getLogger(__name__)


def season_for_wave(wave: int, config: GameConfig) -> Season:
    """Each season spans ``season_length_waves`` waves in a four-season cycle."""
    return SEASON_CYCLE[(wave // config.season_length_waves) % len(SEASON_CYCLE)]


def wave_payout(state: GameState) -> tuple[int, int, int]:
    """Return (flat bonus, interest, mine income) for a completed wave."""
    cfg = state.config
    interest = math.floor(state.gold * cfg.interest_rate)
    mines = cfg.mine_income * state.grid.count(TerrainType.MINE)
    return cfg.wave_bonus_gold, interest, mines


class Progression:
    """Advances the per-tick timers and settles completed waves."""

    __slots__ = ("_config",)

    def __init__(self, config: GameConfig) -> None:
        self._config = config

    def advance(self, state: GameState) -> None:
        """Per-tick timers: time of day, season blend, ability cooldowns."""
        cfg = self._config

        # Darkness alternates every few waves
        phase = ((state.wave - 1) // cfg.waves_per_day_phase) % 2
        target = 0.0 if phase == 0 else cfg.night_darkness
        if state.day_time < target:
            state.day_time = min(target, state.day_time + cfg.day_time_step)
        elif state.day_time > target:
            state.day_time = max(target, state.day_time - cfg.day_time_step)

        if state.next_season != state.season:
            state.season_lerp += cfg.season_blend_step
            if state.season_lerp >= 1.0:
                state.season = state.next_season
                state.season_lerp = 0.0
                logger.info("Tick %d: Season is now %s", state.tick, state.season.value)

        for ability, remaining in state.cooldowns.items():
            if remaining > 0:
                state.cooldowns[ability] = remaining - 1

    def complete_wave(self, state: GameState) -> int:
        """Close the active wave, pay out and queue the season change.

        Returns the gold granted.
        """
        flat, interest, mines = wave_payout(state)
        state.wave_active = False
        state.wave += 1
        granted = flat + interest + mines
        state.gold += granted

        upcoming = season_for_wave(state.wave, self._config)
        if upcoming != state.next_season:
            state.next_season = upcoming
            state.season_lerp = 0.0

        logger.info(
            "Tick %d: Wave %d cleared, +%dg (%d interest, %d mines) -> %dg",
            state.tick, state.wave - 1, granted, interest, mines, state.gold,
        )
        return granted
