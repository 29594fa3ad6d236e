"""Tests for wave composition and the spawn director."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from bastion.core.enums import EnemyType, TerrainType, TowerType
from bastion.systems.rng import DeterministicRNG
from bastion.systems.waves import build_wave_queue, spawn_interval
from tests.helpers.battlefield import Battlefield, make_config

P, W, K = EnemyType.PEASANT, EnemyType.WOLF, EnemyType.KNIGHT


def _queue(wave: int, **overrides):
    cfg = make_config(**overrides)
    return build_wave_queue(wave, cfg, DeterministicRNG(cfg.seed))


class TestWaveComposition:
    def test_boss_waves(self):
        assert _queue(10) == [EnemyType.BOSS]
        assert _queue(20) == [EnemyType.BOSS]

    def test_first_wave_is_peasants(self):
        assert _queue(1) == [P] * 5

    def test_wolves_join_after_wave_three(self):
        assert _queue(4) == [W, P] * 5

    def test_knights_take_every_third_slot(self):
        q = _queue(7, rare_spawn_chance=0.0)
        assert len(q) == 4 + 10
        assert q[:6] == [K, P, W, K, W, P]

    def test_reward_wave_inserts_kobold_midpoint(self):
        q = _queue(5)
        assert len(q) == 4 + 7 + 1
        assert q[5] == EnemyType.KOBOLD
        assert q.count(EnemyType.KOBOLD) == 1

    def test_rare_spider_gated_by_wave(self):
        q = _queue(4, rare_spawn_chance=1.0)
        assert EnemyType.SPIDER not in q
        q = _queue(6, rare_spawn_chance=1.0)
        assert q == [EnemyType.SPIDER] * (4 + 9)

    def test_late_waves_blend_all_kinds(self):
        q = _queue(21, rare_spawn_chance=0.0)
        assert set(q) == {EnemyType.SKELETON, EnemyType.SPIDER, EnemyType.SNAKE, K, W, P}

    def test_deterministic_per_seed(self):
        assert _queue(9) == _queue(9)


class TestSpawnInterval:
    @pytest.mark.parametrize("speed,expected", [(1.0, 40), (2.0, 20), (3.0, 13), (8.0, 10)])
    def test_interval_shrinks_with_speed(self, speed, expected):
        assert spawn_interval(make_config(), speed) == expected


class TestDirector:
    def test_start_wave(self):
        bf = Battlefield()
        assert bf.actions.start_wave()
        assert bf.state.wave_active
        assert bf.state.wave_queue == [P] * 5
        assert not bf.actions.start_wave()

    def test_release_on_interval(self):
        bf = Battlefield()
        bf.actions.start_wave()
        events = bf.run_ticks(39)
        assert bf.state.enemies == {}
        events = bf.run_ticks(1)
        assert [e.category for e in events] == ["spawn"]
        enemy = next(iter(bf.state.enemies.values()))
        assert enemy.kind == P
        # Above the field there is no flow value, so it walks straight down
        assert enemy.y == pytest.approx(-20 + enemy.speed)
        assert 20 <= enemy.x <= 20 * 32 - 20
        assert len(bf.state.wave_queue) == 4

    def test_hp_scales_with_wave(self):
        bf = Battlefield()
        bf.state.wave = 3
        enemy = bf.session.director.spawn(bf.state, P)
        assert enemy.hp == enemy.max_hp == pytest.approx(30 * 1.13 ** 2)
        assert enemy.y == -20

    def test_spawn_columns_follow_reachability(self):
        bf = Battlefield()
        for x in range(18):
            bf.set_terrain(x, 0, TerrainType.WALL)
        for i in range(10):
            bf.state.tick = i
            enemy = bf.session.director.spawn(bf.state, P)
            assert 18 * 32 <= enemy.x <= 20 * 32 - 20

    def test_boss_wave_sets_preview(self):
        bf = Battlefield()
        bf.state.wave = 10
        bf.actions.start_wave()
        assert bf.state.next_boss == EnemyType.KNIGHT
        bf.state.wave_active = False
        bf.state.wave = 20
        bf.actions.start_wave()
        assert bf.state.next_boss == EnemyType.BOSS

    def test_start_wave_reloads_blitz(self):
        bf = Battlefield(gold=1000)
        tower = bf.build(5, 5, TowerType.BLITZ)
        tower.ammo = 0
        bf.actions.start_wave()
        assert tower.ammo == tower.ammo_max == 2

    def test_wave_finishes_only_when_field_is_clear(self):
        bf = Battlefield()
        director = bf.session.director
        bf.actions.start_wave()
        assert not director.wave_finished(bf.state)
        bf.state.wave_queue.clear()
        bf.add_enemy(P, cell=(3, 3))
        assert not director.wave_finished(bf.state)
        bf.state.enemies.clear()
        assert director.wave_finished(bf.state)
