"""Game configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Immutable configuration for one game session."""

    # World
    seed: int = 42
    grid_width: int = 20
    grid_height: int = 30
    cell_size: int = 32

    # Castle (goal zone) occupies a 2x2 footprint anchored here
    castle_x: int = 9
    castle_y: int = 28
    goal_radius: float = 30.0

    # Map generation
    num_mines: int = 4
    num_power_tiles: int = 3
    num_swamps: int = 6
    num_trees: int = 20
    num_water: int = 15
    water_center_x: int = 10
    water_center_y: int = 10
    num_critters: int = 5
    procedural_map: bool = True         # False = blank grass field (tests, sandbox)

    # Economy
    start_gold: int = 250
    start_lives: int = 20
    wave_bonus_gold: int = 50
    interest_rate: float = 0.05
    mine_income: int = 5
    sell_refund_rate: float = 0.7
    boss_life_cost: int = 10

    # Upgrades
    veteran_cost: int = 50
    specialization_cost: int = 100
    master_cost: int = 500
    citadel_cost: int = 2500
    citadel_damage_step: float = 0.1
    power_tile_damage_bonus: float = 0.25

    # Waves
    enemy_hp_growth: float = 1.13
    spawn_interval_base: int = 40
    spawn_interval_min: int = 10
    boss_wave_every: int = 10
    reward_wave_every: int = 5
    rare_spawn_chance: float = 0.05
    season_length_waves: int = 10

    # Time of day / seasons
    waves_per_day_phase: int = 5
    night_darkness: float = 0.7
    night_threshold: float = 0.3
    day_time_step: float = 0.0005
    season_blend_step: float = 0.005
    winter_speed_mult: float = 0.9
    night_runner_speed_mult: float = 1.2

    # Status effects
    burn_period: int = 30
    burn_damage: float = 10.0
    poison_period: int = 60
    poison_min_damage: float = 5.0
    poison_hp_fraction: float = 0.01
    burn_ticks: int = 180
    burn_slow_ticks: int = 30
    poison_ticks: int = 300
    tar_slow_ticks: int = 90
    swamp_speed_mult: float = 0.5
    slow_speed_mult: float = 0.5
    slow_resist_speed_mult: float = 0.8
    path_noise: float = 0.25

    # Projectiles
    splash_radius: float = 60.0
    tar_ignite_damage: float = 50.0
    chain_radius_cells: float = 2.0
    chain_jumps: int = 2

    # Soldiers
    squad_size: int = 3
    soldier_hp: float = 60.0
    soldier_damage: float = 5.0
    soldier_aggro_radius: float = 60.0
    soldier_melee_range: float = 10.0
    soldier_speed: float = 1.5
    soldier_attack_period: int = 30
    soldier_counter_damage: float = 2.5
    soldier_counter_damage_night: float = 5.0
    soldier_night_threshold: float = 0.5
    soldier_regen: float = 2.0
    soldier_regen_period: int = 60
    soldier_leash: float = 5.0

    # Abilities
    arrow_cooldown: int = 1800
    arrow_damage: float = 100.0
    tax_cooldown: int = 2700
    tax_gold: int = 100
    ice_cooldown: int = 3600
    ice_speed_mult: float = 0.2

    # Critters
    critter_turn_chance: float = 0.02
    critter_panic_ticks: int = 60
    critter_panic_radius: float = 90.0

    # Host loop
    tick_rate: float = 1 / 60           # seconds between ticks when served
    max_ticks: int = 100_000

    # External map-theme generator
    theme_model: str = "gemini-2.5-flash"
    theme_timeout_seconds: float = 10.0

    # Logging
    log_level: str = "INFO"
