"""POST /api/v1/control/{action}: game lifecycle controls."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Body, Depends

from bastion.api.dependencies import get_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.schemas import ControlResponse, ResetRequest, SpeedRequest

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    step = "step"
    reset = "reset"


def _tick(manager: EngineManager) -> int:
    snapshot = manager.get_snapshot()
    return snapshot.tick if snapshot else 0


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    body: ResetRequest | None = Body(None),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    tick = _tick(manager)
    snapshot = manager.get_snapshot()
    if action in (ControlAction.start, ControlAction.resume, ControlAction.step) and snapshot and snapshot.game_over:
        return ControlResponse(status="error", message="The castle has fallen; reset to play again.", tick=tick)

    match action:
        case ControlAction.start:
            if manager.running:
                return ControlResponse(status="noop", message="Already running.", tick=tick)
            manager.start()
            return ControlResponse(status="ok", message="Game started.", tick=tick)

        case ControlAction.pause:
            if not manager.running:
                return ControlResponse(status="error", message="Not running.", tick=tick)
            manager.pause()
            return ControlResponse(status="ok", message="Game paused.", tick=tick)

        case ControlAction.resume:
            if not manager.running:
                return ControlResponse(status="error", message="Not running.", tick=tick)
            manager.resume()
            return ControlResponse(status="ok", message="Game resumed.", tick=tick)

        case ControlAction.step:
            if not manager.running:
                manager.start()
                manager.pause()
            manager.step()
            return ControlResponse(status="ok", message="Single tick executed.", tick=tick)

        case ControlAction.reset:
            theme = body.theme if body is not None else None
            manager.reset(theme)
            message = f"New game with theme {theme!r}." if theme else "New game."
            return ControlResponse(status="ok", message=message, tick=_tick(manager))


@router.post("/speed", response_model=ControlResponse)
def set_speed(
    body: SpeedRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    parts: list[str] = []
    if body.game_speed is not None:
        manager.set_game_speed(body.game_speed)
        parts.append(f"game speed x{body.game_speed:g}")
    if body.tps is not None:
        manager.tick_rate = 1.0 / body.tps
        parts.append(f"{body.tps:.1f} tps")
    if not parts:
        return ControlResponse(status="noop", message="Nothing to change.", tick=_tick(manager))
    return ControlResponse(status="ok", message="Speed set: " + ", ".join(parts) + ".", tick=_tick(manager))
