"""Shared fixtures for the forge-battle test suite."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from forge_battle.config import BattleSettings
from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import AuraBonus, BattleSkill, BattleUnit, SkillSet, UnitStats


def _make_unit(
    name: str,
    hp: int = 100,
    damage: int = 10,
    *,
    max_hp: int | None = None,
    advanced: int | None = None,
    ultimate: int | None = None,
    focus: int = 0,
    defense: int = 0,
    unit_id: str | None = None,
) -> BattleUnit:
    aura = AuraBonus(focus=focus, defense=defense) if (focus or defense) else None
    return BattleUnit(
        id=unit_id or name.lower().replace(" ", "-"),
        name=name,
        hp=hp,
        max_hp=max_hp if max_hp is not None else hp,
        stats=UnitStats(attack=damage, vitality=max(1, hp // 8), speed=10),
        skills=SkillSet(
            basic=BattleSkill(name="Basic Attack", damage=damage),
            advanced=BattleSkill(name="Quick Strike", damage=advanced, cooldown=2) if advanced else None,
            ultimate=BattleSkill(name="Power Surge", damage=ultimate, cooldown=4) if ultimate else None,
        ),
        aura_bonus=aura,
    )


@pytest.fixture
def make_unit() -> Callable[..., BattleUnit]:
    return _make_unit


@pytest.fixture
def rng() -> SeededRandom:
    return SeededRandom(12345)


@pytest.fixture
def settings() -> BattleSettings:
    return BattleSettings()


@pytest.fixture
def strong_party() -> list[BattleUnit]:
    """A party that clears a level 5 dungeon comfortably."""
    return [
        _make_unit(name, hp=4000, damage=110, advanced=145, ultimate=215, unit_id=f"char-{i}")
        for i, name in enumerate(["Aria", "Brom", "Cael"], start=1)
    ]


@pytest.fixture
def stalwart_party() -> list[BattleUnit]:
    """A party nothing can kill that barely scratches its enemies."""
    return [
        _make_unit(name, hp=1_000_000, damage=1, unit_id=f"char-{i}")
        for i, name in enumerate(["Aria", "Brom", "Cael"], start=1)
    ]


@pytest.fixture
def fragile_party() -> list[BattleUnit]:
    return [
        _make_unit(name, hp=1, damage=1, unit_id=f"char-{i}")
        for i, name in enumerate(["Aria", "Brom", "Cael"], start=1)
    ]


@pytest.fixture
def make_run() -> Callable[..., dict[str, Any]]:
    def _make_run(allies: list[BattleUnit], **overrides: Any) -> dict[str, Any]:
        run = {
            "id": 42,
            "created_at": datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc),
            "dungeon_level": 5,
            "element": "fire",
            "total_stages": 3,
            "_allies": allies,
        }
        run.update(overrides)
        return run

    return _make_run
