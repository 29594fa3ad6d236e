"""Player actions: the only write path into the map topology from outside the tick.

Every action returns True when accepted. A rejected action leaves the
game state untouched and never raises.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from bastion.actions.upgrades import apply_upgrade, can_upgrade, upgrade_cost
from bastion.core.balance import TOWER_STATS, refund_for
from bastion.core.enums import Ability, TargetStrategy, TerrainType, TowerType, UpgradeChoice
from bastion.core.models import Soldier, Tower
from bastion.engine.combat import deal_damage
from bastion.engine.critters import panic_near
from bastion.systems.pathfinding import can_place, compute_flow_field
from bastion.utils.event_log import SimEvent

if TYPE_CHECKING:
    from bastion.config import GameConfig
    from bastion.core.game_state import GameState
    from bastion.systems.waves import WaveDirector

logger = logging.getLogger(__name__)


class GameActions:
    """Build, sell, upgrade and ability entry points for the UI layer."""

    __slots__ = ("_config", "_state", "_director", "_events")

    def __init__(self, config: GameConfig, state: GameState, director: WaveDirector) -> None:
        self._config = config
        self._state = state
        self._director = director
        self._events: list[SimEvent] = []

    def drain_events(self) -> list[SimEvent]:
        events, self._events = self._events, []
        return events

    def _emit(self, category: str, message: str,
              entity_ids: tuple[int, ...] = (), metadata: dict | None = None) -> None:
        self._events.append(SimEvent(
            tick=self._state.tick,
            category=category,
            message=message,
            entity_ids=entity_ids,
            metadata=metadata,
        ))

    def _recompute_field(self) -> None:
        state = self._state
        state.flow_field = compute_flow_field(state.grid, state.goal_cells)

    # -- coordinates --

    def cell_at(self, px: float, py: float) -> tuple[int, int]:
        cs = self._config.cell_size
        return math.floor(px / cs), math.floor(py / cs)

    def tower_at(self, px: float, py: float) -> Tower | None:
        return self._state.tower_at_cell(*self.cell_at(px, py))

    # -- topology --

    def build(self, gx: int, gy: int, kind: TowerType) -> bool:
        """Place a *kind* tower on cell (gx, gy).

        Rejected unless the player can afford it, the cell is vacant
        buildable terrain with no enemy standing on it, and blocking it keeps a path from the top edge
        to the castle.
        """
        state = self._state
        cfg = self._config
        stats = TOWER_STATS[kind]
        if state.game_over or state.gold < stats.cost:
            return False
        if not state.grid.is_buildable(gx, gy) or state.tower_at_cell(gx, gy) is not None:
            return False
        if any(e.alive and e.cell(cfg.cell_size) == (gx, gy) for e in state.enemies.values()):
            return False
        if not can_place(state.grid, state.goal_cells, gx, gy):
            logger.debug("Tick %d: Build at (%d, %d) would seal the castle", state.tick, gx, gy)
            return False

        empowered = state.grid.get(gx, gy) == TerrainType.POWER
        state.gold -= stats.cost
        state.grid.set(gx, gy, TerrainType.WALL)

        cs = cfg.cell_size
        tid = state.allocate_id()
        tower = Tower(
            id=tid,
            gx=gx,
            gy=gy,
            x=gx * cs + cs / 2,
            y=gy * cs + cs / 2,
            kind=kind,
            damage=stats.damage * ((1 + cfg.power_tile_damage_bonus) if empowered else 1),
            range=stats.range,
            speed=stats.speed,
            ammo=stats.ammo,
            ammo_max=stats.ammo,
            empowered=empowered,
        )
        if kind == TowerType.FIRE:
            tower.splash_radius = cfg.splash_radius
        elif kind == TowerType.TAR:
            tower.slow_ticks = cfg.tar_slow_ticks
        state.towers[tid] = tower

        if stats.spawner:
            for _ in range(cfg.squad_size):
                sid = state.allocate_id()
                state.soldiers[sid] = Soldier(
                    id=sid,
                    owner_id=tid,
                    x=tower.x,
                    y=tower.y,
                    spawn_x=tower.x,
                    spawn_y=tower.y,
                    hp=cfg.soldier_hp,
                    max_hp=cfg.soldier_hp,
                    dmg=cfg.soldier_damage,
                )

        self._recompute_field()
        logger.info("Tick %d: Built %s #%d at (%d, %d) for %dg", state.tick, kind.value, tid, gx, gy, stats.cost)
        self._emit("build", f"{stats.name} built at ({gx}, {gy})", (tid,),
                   {"kind": kind.value, "x": gx, "y": gy, "cost": stats.cost})
        return True

    def sell(self, tower_id: int) -> bool:
        state = self._state
        tower = state.towers.get(tower_id)
        if tower is None or state.game_over:
            return False

        refund = refund_for(tower.kind, self._config.sell_refund_rate)
        state.gold += refund
        state.grid.set(tower.gx, tower.gy, TerrainType.GRASS)
        for soldier in state.soldiers_of(tower_id):
            del state.soldiers[soldier.id]
        del state.towers[tower_id]
        if state.selected_tower_id == tower_id:
            state.selected_tower_id = None

        self._recompute_field()
        logger.info("Tick %d: Sold %s #%d for %dg", state.tick, tower.kind.value, tower_id, refund)
        self._emit("sell", f"{TOWER_STATS[tower.kind].name} sold (+{refund}g)", (tower_id,),
                   {"kind": tower.kind.value, "refund": refund})
        return True

    # -- upgrades --

    def upgrade(self, tower_id: int, choice: UpgradeChoice) -> bool:
        state = self._state
        tower = state.towers.get(tower_id)
        if tower is None or state.game_over or not can_upgrade(tower, choice):
            return False
        cost = upgrade_cost(choice, self._config)
        if state.gold < cost:
            return False

        state.gold -= cost
        apply_upgrade(state, tower, choice)
        logger.info("Tick %d: %s #%d upgraded (%s) -> level %d",
                    state.tick, tower.kind.value, tower_id, choice.value, tower.level)
        self._emit("upgrade", f"{TOWER_STATS[tower.kind].name} upgraded to level {tower.level}",
                   (tower_id,), {"choice": choice.value, "level": tower.level, "cost": cost})
        return True

    def upgrade_citadel(self) -> bool:
        state = self._state
        cost = self._config.citadel_cost
        if state.game_over or state.gold < cost:
            return False
        state.gold -= cost
        state.citadel_level += 1
        logger.info("Tick %d: Citadel level %d (x%.1f damage)",
                    state.tick, state.citadel_level, state.damage_multiplier)
        self._emit("citadel", f"Citadel raised to level {state.citadel_level}",
                   metadata={"level": state.citadel_level})
        return True

    # -- abilities --

    def use_ability(self, ability: Ability) -> bool:
        state = self._state
        cfg = self._config
        if state.game_over or state.cooldowns[ability] > 0:
            return False

        match ability:
            case Ability.ARROW:
                for enemy in state.enemies.values():
                    deal_damage(state, enemy, cfg.arrow_damage)
                cs = cfg.cell_size
                panic_near(state, cfg.grid_width * cs / 2, cfg.grid_height * cs / 2)
                state.cooldowns[ability] = cfg.arrow_cooldown
            case Ability.TAX:
                state.gold += cfg.tax_gold
                state.cooldowns[ability] = cfg.tax_cooldown
            case Ability.ICE:
                # The slow lasts as long as the cooldown runs
                state.cooldowns[ability] = cfg.ice_cooldown

        logger.info("Tick %d: Ability %s used", state.tick, ability.value)
        self._emit("ability", f"{ability.value} unleashed", metadata={"ability": ability.value})
        return True

    # -- waves & view state --

    def start_wave(self) -> bool:
        started = self._director.start_wave(self._state)
        if started:
            self._emit("wave", f"Wave {self._state.wave} begins",
                       metadata={"wave": self._state.wave, "queued": len(self._state.wave_queue)})
        return started

    def set_strategy(self, tower_id: int, strategy: TargetStrategy) -> bool:
        tower = self._state.towers.get(tower_id)
        if tower is None or self._state.game_over:
            return False
        tower.strategy = strategy
        return True

    def select_tower_type(self, kind: TowerType | None) -> bool:
        self._state.selected_tower_type = kind
        if kind is not None:
            self._state.selected_tower_id = None
        return True

    def select_tower(self, tower_id: int | None) -> bool:
        if tower_id is not None and tower_id not in self._state.towers:
            return False
        self._state.selected_tower_id = tower_id
        if tower_id is not None:
            self._state.selected_tower_type = None
        return True
