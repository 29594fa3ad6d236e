"""POST /api/v1/actions/*: player actions.

Rejected actions answer 200 with ``accepted: false``; only a reference to
a tower that does not exist is a 404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from bastion.api.dependencies import get_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.schemas import (
    AbilityRequest,
    ActionResponse,
    BuildRequest,
    SelectRequest,
    StrategyRequest,
    UpgradeRequest,
)

router = APIRouter(prefix="/actions")


def _respond(manager: EngineManager, accepted: bool, tower_id: int | None = None) -> ActionResponse:
    snapshot = manager.get_snapshot()
    return ActionResponse(
        accepted=accepted,
        tick=snapshot.tick if snapshot else 0,
        gold=snapshot.gold if snapshot else 0,
        tower_id=tower_id,
    )


def _require_tower(manager: EngineManager, tower_id: int) -> None:
    snapshot = manager.get_snapshot()
    if snapshot is None or tower_id not in snapshot.towers:
        raise HTTPException(status_code=404, detail=f"Tower {tower_id} not found")


@router.post("/build", response_model=ActionResponse)
def build(body: BuildRequest, manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    def _build(actions) -> int | None:
        if not actions.build(body.gx, body.gy, body.kind):
            return None
        tower = manager.session.state.tower_at_cell(body.gx, body.gy)
        return tower.id if tower else None

    tower_id = manager.perform(_build)
    return _respond(manager, tower_id is not None, tower_id)


@router.post("/towers/{tower_id}/sell", response_model=ActionResponse)
def sell(tower_id: int, manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    _require_tower(manager, tower_id)
    return _respond(manager, manager.perform(lambda a: a.sell(tower_id)))


@router.post("/towers/{tower_id}/upgrade", response_model=ActionResponse)
def upgrade(
    tower_id: int,
    body: UpgradeRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    _require_tower(manager, tower_id)
    return _respond(manager, manager.perform(lambda a: a.upgrade(tower_id, body.choice)), tower_id)


@router.post("/towers/{tower_id}/strategy", response_model=ActionResponse)
def set_strategy(
    tower_id: int,
    body: StrategyRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    _require_tower(manager, tower_id)
    return _respond(manager, manager.perform(lambda a: a.set_strategy(tower_id, body.strategy)), tower_id)


@router.post("/ability", response_model=ActionResponse)
def use_ability(body: AbilityRequest, manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    return _respond(manager, manager.perform(lambda a: a.use_ability(body.ability)))


@router.post("/citadel", response_model=ActionResponse)
def upgrade_citadel(manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    return _respond(manager, manager.perform(lambda a: a.upgrade_citadel()))


@router.post("/wave", response_model=ActionResponse)
def start_wave(manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    return _respond(manager, manager.perform(lambda a: a.start_wave()))


@router.post("/select", response_model=ActionResponse)
def select(body: SelectRequest, manager: EngineManager = Depends(get_engine_manager)) -> ActionResponse:
    if body.tower_id is not None:
        _require_tower(manager, body.tower_id)
        return _respond(manager, manager.perform(lambda a: a.select_tower(body.tower_id)), body.tower_id)
    return _respond(manager, manager.perform(lambda a: a.select_tower_type(body.tower_type)))
