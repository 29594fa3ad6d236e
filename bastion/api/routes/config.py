"""GET /api/v1/config: expose game configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bastion.api.dependencies import get_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.schemas import GameConfigResponse
from bastion.core.balance import TOWER_STATS

router = APIRouter()


@router.get("/config", response_model=GameConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> GameConfigResponse:
    cfg = manager.config
    return GameConfigResponse(
        seed=cfg.seed,
        grid_width=cfg.grid_width,
        grid_height=cfg.grid_height,
        cell_size=cfg.cell_size,
        castle_x=cfg.castle_x,
        castle_y=cfg.castle_y,
        start_gold=cfg.start_gold,
        start_lives=cfg.start_lives,
        sell_refund_rate=cfg.sell_refund_rate,
        veteran_cost=cfg.veteran_cost,
        specialization_cost=cfg.specialization_cost,
        master_cost=cfg.master_cost,
        citadel_cost=cfg.citadel_cost,
        cooldowns={"arrow": cfg.arrow_cooldown, "tax": cfg.tax_cooldown, "ice": cfg.ice_cooldown},
        tower_costs={kind.value: stats.cost for kind, stats in TOWER_STATS.items()},
        tick_rate=manager.tick_rate,
    )
