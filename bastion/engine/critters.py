"""Ambient critters: bounded random walk with a panic burst. Cosmetic only."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bastion.core.balance import ANIMALS
from bastion.core.enums import Domain
from bastion.core.models import Critter, distance

if TYPE_CHECKING:
    from bastion.core.game_state import GameState
    from bastion.systems.rng import DeterministicRNG

# Entity-id offsets keeping heading draws apart from the per-tick turn roll
_VX_KEY = 1_000_000
_VY_KEY = 2_000_000


def spawn_critters(state: GameState, rng: DeterministicRNG) -> None:
    cfg = state.config
    width_px = cfg.grid_width * cfg.cell_size
    height_px = cfg.grid_height * cfg.cell_size
    for _ in range(cfg.num_critters):
        cid = state.allocate_id()
        icon, base_speed = rng.choice(Domain.CRITTER, cid, 0, ANIMALS)
        state.critters[cid] = Critter(
            id=cid,
            x=rng.next_uniform(Domain.CRITTER, cid, 1, 0.0, width_px),
            y=rng.next_uniform(Domain.CRITTER, cid, 2, 0.0, height_px),
            icon=icon,
            base_speed=base_speed,
        )


def tick_critters(state: GameState, rng: DeterministicRNG) -> None:
    cfg = state.config
    width_px = cfg.grid_width * cfg.cell_size
    height_px = cfg.grid_height * cfg.cell_size
    for c in state.critters.values():
        if c.panic > 0:
            c.x += c.vx * 2
            c.y += c.vy * 2
            c.panic -= 1
        else:
            c.x += c.vx
            c.y += c.vy
            if rng.next_bool(Domain.CRITTER, c.id, state.tick, cfg.critter_turn_chance):
                c.vx = rng.next_uniform(Domain.CRITTER, _VX_KEY + c.id, state.tick, -0.5, 0.5) * c.base_speed
                c.vy = rng.next_uniform(Domain.CRITTER, _VY_KEY + c.id, state.tick, -0.5, 0.5) * c.base_speed
        if c.x < 0 or c.x > width_px:
            c.vx = -c.vx
            c.x = min(max(c.x, 0.0), float(width_px))
        if c.y < 0 or c.y > height_px:
            c.vy = -c.vy
            c.y = min(max(c.y, 0.0), float(height_px))


def panic_near(state: GameState, x: float, y: float, radius: float | None = None) -> int:
    """Scatter critters within *radius* of (x, y) away from the blast.

    ``radius=None`` panics every critter. Returns the number startled.
    """
    cfg = state.config
    startled = 0
    for c in state.critters.values():
        d = distance(c.x, c.y, x, y)
        if radius is not None and d > radius:
            continue
        if d > 0:
            c.vx = (c.x - x) / d * c.base_speed
            c.vy = (c.y - y) / d * c.base_speed
        c.panic = cfg.critter_panic_ticks
        startled += 1
    return startled
