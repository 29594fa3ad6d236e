"""Tests for damage, status effects, projectile impacts and tower fire."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from bastion.core.enums import (
    EnemyType,
    ProjectileKind,
    TargetStrategy,
    TerrainType,
    TowerType,
    UpgradeChoice,
)
from bastion.core.models import Projectile
from bastion.engine.combat import (
    apply_burn,
    apply_poison,
    armor_damage,
    deal_damage,
    resolve_impact,
    tick_status,
)
from tests.helpers.battlefield import Battlefield

def _frozen(bf: Battlefield, kind=EnemyType.PEASANT, cell=(5, 7), **kw):
    """Enemy pinned in place so firing geometry stays fixed."""
    enemy = bf.add_enemy(kind, cell=cell, **kw)
    enemy.frozen = 10_000
    return enemy


def _projectile(bf: Battlefield, target, kind=ProjectileKind.PLAIN, damage=40.0, **kw) -> Projectile:
    pid = bf.state.allocate_id()
    proj = Projectile(
        id=pid, x=target.x, y=target.y, target_id=target.id, damage=damage,
        kind=kind, speed=5.0, color="#fff", source_id=-1, **kw,
    )
    bf.state.projectiles[pid] = proj
    return proj


# ---------------------------------------------------------------------------
# Damage helpers
# ---------------------------------------------------------------------------

class TestArmor:
    def test_armor_reduces_plain_hits(self):
        assert armor_damage(100, 0.5) == 50
        assert armor_damage(80, 0.0) == 80

    def test_never_negative(self):
        assert armor_damage(10, 1.0) == 0
        assert armor_damage(-5, 0.2) == 0

    def test_deal_damage_credits_tower(self):
        bf = Battlefield()
        tower = bf.build(2, 2, TowerType.KNIGHT)
        enemy = bf.add_enemy(hp=100)
        deal_damage(bf.state, enemy, 30, tower.id)
        assert enemy.hp == 70
        assert enemy.last_hit_by == tower.id
        assert tower.damage_dealt == 30


class TestStatus:
    def test_burn_ticks_on_period(self):
        bf = Battlefield()
        enemy = bf.add_enemy(hp=100)
        apply_burn(enemy, bf.config)
        assert enemy.burn_stack == 180
        assert enemy.slow_timer == 30
        tick_status(enemy, 29, bf.config)
        assert enemy.hp == 100
        tick_status(enemy, 30, bf.config)
        assert enemy.hp == 90
        assert enemy.burn_stack == 178

    def test_poison_minimum_and_fraction(self):
        bf = Battlefield()
        small = bf.add_enemy(hp=100)
        big = bf.add_enemy(EnemyType.BOSS, hp=3000)
        assert apply_poison(small, 300)
        assert apply_poison(big, 300)
        tick_status(small, 60, bf.config)
        tick_status(big, 60, bf.config)
        assert small.hp == 95
        assert big.hp == 2970

    def test_skeletons_shrug_off_poison(self):
        bf = Battlefield()
        skel = bf.add_enemy(EnemyType.SKELETON)
        assert not apply_poison(skel, 300)
        assert skel.poison_stack == 0

    def test_timers_decay(self):
        bf = Battlefield()
        enemy = bf.add_enemy()
        enemy.slow_timer = 2
        enemy.frozen = 1
        tick_status(enemy, 1, bf.config)
        assert (enemy.slow_timer, enemy.frozen) == (1, 0)
        tick_status(enemy, 2, bf.config)
        tick_status(enemy, 3, bf.config)
        assert enemy.slow_timer == 0


class TestImpact:
    def test_plain_hit_respects_armor(self):
        bf = Battlefield()
        knight = bf.add_enemy(EnemyType.KNIGHT, hp=200)
        resolve_impact(bf.state, _projectile(bf, knight, damage=40), knight)
        assert knight.hp == 180

    def test_armor_pierce(self):
        bf = Battlefield()
        knight = bf.add_enemy(EnemyType.KNIGHT, hp=200)
        resolve_impact(bf.state, _projectile(bf, knight, damage=40, armor_pierce=True), knight)
        assert knight.hp == 160

    def test_poison_and_burn_bypass_armor(self):
        bf = Battlefield()
        a = bf.add_enemy(EnemyType.KNIGHT, hp=200)
        b = bf.add_enemy(EnemyType.KNIGHT, hp=200)
        resolve_impact(bf.state, _projectile(bf, a, ProjectileKind.POISON, 40), a)
        resolve_impact(bf.state, _projectile(bf, b, ProjectileKind.BURN, 40), b)
        assert a.hp == 160 and a.poison_stack == 300
        assert b.hp == 160 and b.burn_stack == 180

    def test_area_splash_and_tar_ignition(self):
        bf = Battlefield()
        center = bf.add_enemy(cell=(5, 5), hp=500)
        near = bf.add_enemy(pos=(center.x + 40, center.y), hp=500)
        far = bf.add_enemy(pos=(center.x + 61, center.y), hp=500)
        near.tarred = True
        proj = _projectile(bf, center, ProjectileKind.AREA, 30, splash_radius=60.0)
        hit = resolve_impact(bf.state, proj, center)
        assert sorted(hit) == sorted([center.id, near.id])
        assert center.hp == 470
        assert near.hp == 500 - 30 - 50
        assert not near.tarred
        assert near.burn_stack == 180
        assert far.hp == 500

    def test_area_blast_skips_enemies_already_dead(self):
        bf = Battlefield(gold=1000)
        knight = bf.build(2, 2, TowerType.KNIGHT)
        fire = bf.build(15, 2, TowerType.FIRE)
        corpse = bf.add_enemy(cell=(5, 7), hp=10)
        deal_damage(bf.state, corpse, 45, knight.id)
        corpse.tarred = True
        living = bf.add_enemy(cell=(5, 7), hp=100)
        proj = _projectile(bf, living, ProjectileKind.AREA, 30)
        proj.source_id = fire.id

        assert resolve_impact(bf.state, proj, living) == [living.id]
        assert corpse.last_hit_by == knight.id
        assert corpse.tarred
        assert fire.damage_dealt == 30

        bf.run_ticks(1)
        assert bf.enemy(corpse.id) is None
        assert knight.kills == 1
        assert fire.kills == 0


# ---------------------------------------------------------------------------
# Tower fire (end to end through the loop)
# ---------------------------------------------------------------------------

class TestTowerFire:
    def test_knight_hits_instantly_and_gets_the_kill(self):
        bf = Battlefield()
        tower = bf.build(5, 5, TowerType.KNIGHT)
        enemy = _frozen(bf, cell=(5, 6))
        bf.run_ticks(1)
        assert enemy.hp == 30 - 45
        bf.run_ticks(1)
        assert bf.enemy(enemy.id) is None
        assert bf.state.gold == 250 - 80 + 2
        assert tower.kills == 1
        assert bf.state.kills_per_wave[1] == 1
        assert len(bf.events_by_category("kill")) == 1

    def test_knight_ignores_armor(self):
        bf = Battlefield()
        bf.build(5, 5, TowerType.KNIGHT)
        enemy = _frozen(bf, EnemyType.KNIGHT, cell=(5, 6), hp=500)
        bf.run_ticks(1)
        assert enemy.hp == 455

    def test_cooldown_between_attacks(self):
        bf = Battlefield()
        bf.build(5, 5, TowerType.KNIGHT)
        enemy = _frozen(bf, cell=(5, 6), hp=1000)
        bf.run_ticks(55)
        assert enemy.hp == 955
        bf.run_ticks(1)
        assert enemy.hp == 910

    @pytest.mark.parametrize("strategy,victim", [
        (TargetStrategy.FIRST, 0),
        (TargetStrategy.STRONG, 1),
        (TargetStrategy.WEAK, 2),
    ])
    def test_targeting_strategy(self, strategy, victim):
        bf = Battlefield()
        tower = bf.build(5, 5, TowerType.KNIGHT)
        tower.strategy = strategy
        enemies = [
            _frozen(bf, cell=(5, 6), hp=200),
            _frozen(bf, cell=(4, 6), hp=400),
            _frozen(bf, cell=(6, 6), hp=100),
        ]
        before = [e.hp for e in enemies]
        bf.run_ticks(1)
        for i, e in enumerate(enemies):
            assert e.hp == (before[i] - 45 if i == victim else before[i])

    def test_archer_launches_homing_arrow(self):
        bf = Battlefield()
        tower = bf.build(5, 5, TowerType.ARCHER)
        enemy = _frozen(bf, cell=(5, 8), hp=1000)
        bf.run_ticks(1)
        (proj,) = bf.state.projectiles.values()
        assert proj.kind == ProjectileKind.PLAIN
        # Launched from the tower top, then already one step along
        assert proj.x == tower.x
        assert proj.y == pytest.approx(tower.y - 10 + 5)
        assert proj.source_id == tower.id
        bf.run_until(lambda: not bf.state.projectiles, max_ticks=100)
        assert enemy.hp == 985
        assert tower.damage_dealt == 15

    def test_archer_next_to_fire_shoots_burning_arrows(self):
        bf = Battlefield(gold=1000)
        archer = bf.build(5, 5, TowerType.ARCHER)
        bf.build(6, 5, TowerType.FIRE)
        _frozen(bf, cell=(5, 7), hp=1000)
        bf.run_ticks(1)
        kinds = {p.source_id: p.kind for p in bf.state.projectiles.values()}
        assert kinds[archer.id] == ProjectileKind.BURN

    def test_poison_archer(self):
        bf = Battlefield(gold=1000)
        archer = bf.build(5, 5, TowerType.ARCHER)
        bf.actions.upgrade(archer.id, UpgradeChoice.VETERAN)
        bf.actions.upgrade(archer.id, UpgradeChoice.B)
        _frozen(bf, cell=(5, 7), hp=1000)
        bf.run_ticks(1)
        (proj,) = bf.state.projectiles.values()
        assert proj.kind == ProjectileKind.POISON

    def test_crossbow_boss_killer(self):
        bf = Battlefield(gold=1000)
        xbow = bf.build(5, 5, TowerType.CROSSBOW)
        bf.actions.upgrade(xbow.id, UpgradeChoice.VETERAN)
        bf.actions.upgrade(xbow.id, UpgradeChoice.B)
        _frozen(bf, EnemyType.BOSS, cell=(5, 9), hp=5000)
        bf.run_ticks(1)
        (proj,) = bf.state.projectiles.values()
        assert proj.speed == 10
        assert proj.damage == pytest.approx(80 * 1.1 * 3)

    def test_fire_tower_lobs_area_shot(self):
        bf = Battlefield()
        bf.build(5, 5, TowerType.FIRE)
        a = _frozen(bf, cell=(5, 7), hp=1000)
        b = _frozen(bf, cell=(6, 7), hp=1000)
        bf.run_ticks(1)
        (proj,) = bf.state.projectiles.values()
        assert proj.kind == ProjectileKind.AREA
        assert proj.splash_radius == 60
        bf.run_until(lambda: not bf.state.projectiles, max_ticks=100)
        assert a.hp == 970
        assert b.hp == 970
        assert len(bf.events_by_category("impact")) == 1

    def test_tar_coats_everything_in_range(self):
        bf = Battlefield()
        bf.build(5, 5, TowerType.TAR)
        a = _frozen(bf, cell=(5, 7))
        b = _frozen(bf, cell=(3, 5))
        out = _frozen(bf, cell=(5, 12))
        bf.run_ticks(1)
        assert a.tarred and b.tarred
        assert a.slow_timer == b.slow_timer == 90
        assert not out.tarred
        assert a.hp == 30

    def test_blitz_chains_and_spends_ammo(self):
        bf = Battlefield(gold=1000)
        blitz = bf.build(5, 5, TowerType.BLITZ)
        first = _frozen(bf, EnemyType.KNIGHT, cell=(5, 6), hp=1000)
        second = _frozen(bf, EnemyType.KNIGHT, cell=(5, 7), hp=1000)
        third = _frozen(bf, EnemyType.KNIGHT, cell=(5, 8), hp=1000)
        fourth = _frozen(bf, EnemyType.KNIGHT, pos=(176.0, 312.0), hp=1000)
        bf.run_ticks(1)
        assert first.hp == second.hp == third.hp == 880
        assert fourth.hp == 1000
        assert blitz.ammo == 1

    def test_blitz_without_ammo_is_silent(self):
        bf = Battlefield(gold=1000)
        blitz = bf.build(5, 5, TowerType.BLITZ)
        blitz.ammo = 0
        enemy = _frozen(bf, cell=(5, 6), hp=1000)
        bf.run_ticks(5)
        assert enemy.hp == 1000

    def test_wall_is_passive(self):
        bf = Battlefield()
        wall = bf.build(5, 5, TowerType.WALL)
        enemy = _frozen(bf, cell=(5, 6))
        bf.run_ticks(10)
        assert enemy.hp == 30
        assert wall.cooldown == 0

    def test_night_shortens_archer_range(self):
        bf = Battlefield()
        bf.build(5, 5, TowerType.ARCHER)
        _frozen(bf, cell=(5, 9), hp=1000)
        bf.state.day_time = 0.7
        bf.state.wave = 6  # keeps the night from fading
        bf.run_ticks(1)
        assert bf.state.projectiles == {}
        bf.state.day_time = 0.0
        bf.state.wave = 1
        bf.run_ticks(1)
        assert len(bf.state.projectiles) == 1

    def test_citadel_and_power_multiply_damage(self):
        bf = Battlefield(gold=5000)
        bf.set_terrain(5, 5, TerrainType.POWER)
        bf.build(5, 5, TowerType.KNIGHT)
        bf.actions.upgrade_citadel()
        enemy = _frozen(bf, cell=(5, 6), hp=1000)
        bf.run_ticks(1)
        assert enemy.hp == pytest.approx(1000 - 45 * 1.25 * 1.1)

    def test_projectile_fizzles_when_target_vanishes(self):
        bf = Battlefield()
        tower = bf.build(5, 5, TowerType.ARCHER)
        enemy = _frozen(bf, cell=(5, 9), hp=1000)
        bf.run_ticks(1)
        assert len(bf.state.projectiles) == 1
        del bf.state.enemies[enemy.id]
        bf.run_ticks(1)
        assert bf.state.projectiles == {}
        assert tower.damage_dealt == 0
