"""Tests for src/forge_battle/engine/stages.py."""
from __future__ import annotations

import math

import pytest

from forge_battle.config import BattleSettings
from forge_battle.engine.event_log import BattleLog
from forge_battle.engine.stages import StageOrchestrator, reward_multiplier
from forge_battle.mechanics.enemies import generate_enemies
from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import (
    RoundEvent,
    StageCompleteEvent,
    StageStartEvent,
    SystemMessageEvent,
)


def _orchestrator(settings: BattleSettings, success: bool, total_stages: int = 3, seed: int = 987654):
    rng = SeededRandom(seed)
    log = BattleLog()
    orch = StageOrchestrator(
        rng, log, settings,
        dungeon_level=5, element="fire", total_stages=total_stages,
        enemy_count=3, success=success,
    )
    opening = generate_enemies(rng, 5, "fire", 3, 1, total_stages)
    return orch, log, opening


def _of_type(log: BattleLog, cls) -> list:
    return [e for e in log.events if isinstance(e, cls)]


class TestRewardMultiplier:
    @pytest.mark.parametrize("completed, total, expected", [
        (0, 3, 0.3), (1, 3, 1 / 3), (2, 3, 2 / 3), (3, 3, 1.0), (1, 8, 0.3), (8, 8, 1.0),
    ])
    def test_floor_and_ratio(self, completed, total, expected):
        assert reward_multiplier(completed, total) == pytest.approx(expected)


class TestStageOrchestrator:
    def test_strong_party_clears_every_stage(self, settings, strong_party):
        orch, log, opening = _orchestrator(settings, True)
        orch.run(strong_party, opening)

        assert orch.stages_completed == 3
        assert not orch.party_defeated
        completes = _of_type(log, StageCompleteEvent)
        assert [c.current_stage for c in completes] == [1, 2, 3]
        assert "conquered" in completes[-1].message
        starts = _of_type(log, StageStartEvent)
        assert [s.current_stage for s in starts] == [2, 3]

    def test_fresh_enemies_each_stage(self, settings, strong_party):
        orch, log, opening = _orchestrator(settings, True)
        orch.run(strong_party, opening)
        starts = _of_type(log, StageStartEvent)
        assert all(e.hp == e.max_hp for s in starts for e in s.enemies)
        assert {e.id for e in starts[0].enemies}.isdisjoint({e.id for e in opening})

    def test_stalemate_freezes_progression(self, settings, stalwart_party):
        orch, log, opening = _orchestrator(settings, False)
        orch.run(stalwart_party, opening)

        assert orch.stalemate
        assert orch.stages_completed == 0
        assert not orch.party_defeated
        assert len(_of_type(log, RoundEvent)) == settings.max_rounds_per_stage
        assert _of_type(log, StageStartEvent) == []

    def test_round_cap_is_configurable(self, stalwart_party):
        settings = BattleSettings(max_rounds_per_stage=4)
        orch, log, opening = _orchestrator(settings, False)
        orch.run(stalwart_party, opening)
        assert [r.number for r in _of_type(log, RoundEvent)] == [1, 2, 3, 4]

    def test_party_wipe_halts(self, settings, fragile_party):
        orch, log, opening = _orchestrator(settings, False)
        orch.run(fragile_party, opening)

        assert orch.party_defeated
        assert orch.stages_completed == 0
        assert orch.living_allies == []
        messages = [e.message for e in _of_type(log, SystemMessageEvent)]
        assert messages == ["Your party has been defeated at stage 1!"]
        assert isinstance(log.events[-1], SystemMessageEvent)

    def test_settle_records_completion_and_recovers(self, make_unit):
        settings = BattleSettings(stage_recovery_fraction=0.5)
        orch, log, _ = _orchestrator(settings, True)
        ally = make_unit("A", hp=10, max_hp=100)
        orch.living_allies = [ally, make_unit("B", hp=0, max_hp=100)]

        assert orch.settle_stage(1, [make_unit("E", hp=0, max_hp=10)])

        event = log.events[-1]
        assert isinstance(event, StageCompleteEvent)
        assert [a.name for a in event.alive_allies] == ["A"]
        assert event.alive_allies[0].hp == 10
        assert ally.hp == 60
        assert orch.living_allies == [ally]

    def test_no_recovery_by_default(self, settings, make_unit):
        orch, _, _ = _orchestrator(settings, True)
        ally = make_unit("A", hp=10, max_hp=100)
        orch.living_allies = [ally]
        orch.settle_stage(1, [make_unit("E", hp=0, max_hp=10)])
        assert ally.hp == 10

    def test_no_recovery_after_final_stage(self, make_unit):
        settings = BattleSettings(stage_recovery_fraction=0.5)
        orch, _, _ = _orchestrator(settings, True)
        ally = make_unit("A", hp=10, max_hp=100)
        orch.living_allies = [ally]
        orch.settle_stage(3, [make_unit("E", hp=0, max_hp=10)])
        assert ally.hp == 10

    def test_stage_boost_compounds_on_success(self, settings, strong_party):
        base = [a.skills.basic.damage for a in strong_party]
        orch, _, opening = _orchestrator(settings, True)
        orch.run(strong_party, opening)

        boosted = [math.floor(math.floor(d * 1.2) * 1.2) for d in base]
        assert [a.skills.basic.damage for a in strong_party] == boosted


class TestWipeGuard:
    def test_at_risk_when_threat_covers_party_hp(self, settings, make_unit):
        orch, _, _ = _orchestrator(settings, True)
        enemies = [make_unit("E", damage=20)]
        assert orch._party_at_risk([make_unit("A", hp=30)], enemies)
        assert not orch._party_at_risk([make_unit("A", hp=31)], enemies)
        assert orch._party_at_risk([make_unit("A", hp=31, max_hp=50), make_unit("B", hp=0, max_hp=50)], [
            make_unit("E1", damage=20), make_unit("E2", damage=1),
        ])

    def test_never_at_risk_on_failure(self, settings, make_unit):
        orch, _, _ = _orchestrator(settings, False)
        assert not orch._party_at_risk([make_unit("A", hp=1)], [make_unit("E", damage=500)])

    def test_weak_party_is_never_wiped_on_success(self, settings, fragile_party):
        orch, log, opening = _orchestrator(settings, True)
        orch.run(fragile_party, opening)

        assert not orch.party_defeated
        assert all(a.hp == 1 for a in fragile_party)
        rounds = _of_type(log, RoundEvent)
        assert rounds
        assert all(r.actions[0].skill == "Heroic Surge" for r in rounds)
        assert {r.actions[0].actor for r in rounds} <= {"Aria", "Brom", "Cael"}
        assert orch.stages_completed == 1
        assert orch.stalemate
        assert [e.current_stage for e in _of_type(log, StageStartEvent)] == [2]
