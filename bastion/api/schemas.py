"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from bastion.core.enums import Ability, TargetStrategy, TowerType, UpgradeChoice


# --- Entities ---

class EnemySchema(BaseModel):
    id: int
    kind: str
    x: float
    y: float
    hp: float
    max_hp: float
    armor: float = 0.0
    slow_timer: int = 0
    burn_stack: int = 0
    poison_stack: int = 0
    tarred: bool = False
    blocked_by: int | None = None
    dx: float = 0.0


class TowerSchema(BaseModel):
    id: int
    kind: str
    gx: int
    gy: int
    x: float
    y: float
    level: int = 0
    damage: float
    range: float
    speed: float
    cooldown: float = 0.0
    ammo: int = 0
    ammo_max: int = 0
    master: bool = False
    special: str | None = None
    strategy: str = "FIRST"
    empowered: bool = False
    kills: int = 0
    damage_dealt: float = 0.0


class SoldierSchema(BaseModel):
    id: int
    owner_id: int
    x: float
    y: float
    hp: float
    max_hp: float
    target_id: int | None = None


class ProjectileSchema(BaseModel):
    id: int
    x: float
    y: float
    kind: str
    color: str
    target_id: int


class CritterSchema(BaseModel):
    id: int
    x: float
    y: float
    icon: str
    panic: bool = False


class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    entity_ids: list[int] = []
    metadata: dict | None = None


# --- State ---

class GameStats(BaseModel):
    tick: int
    gold: int
    lives: int
    wave: int
    wave_active: bool
    queued: int = 0
    season: str
    next_season: str
    season_lerp: float = 0.0
    day_time: float = 0.0
    citadel_level: int = 0
    damage_multiplier: float = 1.0
    next_boss: str
    cooldowns: dict[str, int] = {}
    paused: bool = False
    speed: float = 1.0
    game_over: bool = False
    selected_tower_type: str | None = None
    selected_tower_id: int | None = None
    kills_per_wave: dict[int, int] = {}


class GameStateResponse(BaseModel):
    stats: GameStats
    enemies: list[EnemySchema]
    towers: list[TowerSchema]
    soldiers: list[SoldierSchema]
    projectiles: list[ProjectileSchema]
    critters: list[CritterSchema]
    events: list[EventSchema]


# --- Map ---

class MapResponse(BaseModel):
    width: int
    height: int
    cell_size: int
    grid: list[int] = Field(description="RLE-encoded terrain: [value, count, value, count, ...]")
    variants: list[int] = Field(description="RLE-encoded cosmetic variants")
    flow_field: list[list[int | None]] | None = None


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int


class SpeedRequest(BaseModel):
    game_speed: float | None = Field(None, gt=0, le=8.0, description="Per-tick advancement multiplier")
    tps: float | None = Field(None, gt=0.5, le=240.0, description="Ticks per second")


class ResetRequest(BaseModel):
    theme: str | None = Field(None, max_length=200, description="Free-text map theme")


# --- Actions ---

class BuildRequest(BaseModel):
    gx: int
    gy: int
    kind: TowerType


class UpgradeRequest(BaseModel):
    choice: UpgradeChoice


class AbilityRequest(BaseModel):
    ability: Ability


class StrategyRequest(BaseModel):
    strategy: TargetStrategy


class SelectRequest(BaseModel):
    tower_type: TowerType | None = None
    tower_id: int | None = None


class ActionResponse(BaseModel):
    accepted: bool
    tick: int
    gold: int
    tower_id: int | None = None


# --- Config ---

class GameConfigResponse(BaseModel):
    seed: int
    grid_width: int
    grid_height: int
    cell_size: int
    castle_x: int
    castle_y: int
    start_gold: int
    start_lives: int
    sell_refund_rate: float
    veteran_cost: int
    specialization_cost: int
    master_cost: int
    citadel_cost: int
    cooldowns: dict[str, int]
    tower_costs: dict[str, int]
    tick_rate: float
