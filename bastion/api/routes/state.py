"""GET /api/v1/state: dynamic entity & event data (polled by UI)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from bastion.api.dependencies import get_engine_manager
from bastion.api.engine_manager import EngineManager
from bastion.api.schemas import (
    CritterSchema,
    EnemySchema,
    EventSchema,
    GameStateResponse,
    GameStats,
    ProjectileSchema,
    SoldierSchema,
    TowerSchema,
)

router = APIRouter()


@router.get("/state", response_model=GameStateResponse)
def get_state(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    manager: EngineManager = Depends(get_engine_manager),
) -> GameStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    stats = GameStats(
        tick=snapshot.tick,
        gold=snapshot.gold,
        lives=snapshot.lives,
        wave=snapshot.wave,
        wave_active=snapshot.wave_active,
        queued=snapshot.queued,
        season=snapshot.season.value,
        next_season=snapshot.next_season.value,
        season_lerp=snapshot.season_lerp,
        day_time=snapshot.day_time,
        citadel_level=snapshot.citadel_level,
        damage_multiplier=snapshot.damage_multiplier,
        next_boss=snapshot.next_boss.value,
        cooldowns={a.value: v for a, v in snapshot.cooldowns.items()},
        paused=snapshot.paused,
        speed=snapshot.speed,
        game_over=snapshot.game_over,
        selected_tower_type=snapshot.selected_tower_type,
        selected_tower_id=snapshot.selected_tower_id,
        kills_per_wave=dict(snapshot.kills_per_wave),
    )

    enemies = [
        EnemySchema(
            id=e.id, kind=e.kind.value, x=e.x, y=e.y, hp=e.hp, max_hp=e.max_hp,
            armor=e.armor, slow_timer=e.slow_timer, burn_stack=e.burn_stack,
            poison_stack=e.poison_stack, tarred=e.tarred, blocked_by=e.blocked_by, dx=e.dx,
        )
        for e in snapshot.enemies.values()
    ]
    towers = [
        TowerSchema(
            id=t.id, kind=t.kind.value, gx=t.gx, gy=t.gy, x=t.x, y=t.y, level=t.level,
            damage=t.damage, range=t.range, speed=t.speed, cooldown=t.cooldown,
            ammo=t.ammo, ammo_max=t.ammo_max, master=t.master, special=t.special,
            strategy=t.strategy.value, empowered=t.empowered, kills=t.kills,
            damage_dealt=t.damage_dealt,
        )
        for t in snapshot.towers.values()
    ]
    soldiers = [
        SoldierSchema(id=s.id, owner_id=s.owner_id, x=s.x, y=s.y, hp=s.hp,
                      max_hp=s.max_hp, target_id=s.target_id)
        for s in snapshot.soldiers.values()
    ]
    projectiles = [
        ProjectileSchema(id=p.id, x=p.x, y=p.y, kind=p.kind.value, color=p.color, target_id=p.target_id)
        for p in snapshot.projectiles.values()
    ]
    critters = [
        CritterSchema(id=c.id, x=c.x, y=c.y, icon=c.icon, panic=c.panic > 0)
        for c in snapshot.critters.values()
    ]

    events = [
        EventSchema(
            tick=ev.tick,
            category=ev.category,
            message=ev.message,
            entity_ids=list(ev.entity_ids),
            metadata=ev.metadata,
        )
        for ev in manager.event_log.since_tick(since_tick)
    ]

    return GameStateResponse(
        stats=stats,
        enemies=enemies,
        towers=towers,
        soldiers=soldiers,
        projectiles=projectiles,
        critters=critters,
        events=events,
    )
