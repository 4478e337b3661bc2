"""Enemy roster generation: element and tier tables, pure mechanics.

Difficulty rises with stage progress; the last unit of each stage is a boss
and late stages promote the unit before it to elite.
"""
from __future__ import annotations

import logging
import math
import string
from dataclasses import dataclass
from enum import Enum

from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import BattleSkill, BattleUnit, SkillSet, UnitStats

logger = logging.getLogger(__name__)

MAX_DIFFICULTY_BONUS = 0.7
LATE_STAGE_THRESHOLD = 0.7
ELITE_STAGE_THRESHOLD = 0.5
LATE_STAGE_EXTRA_UNIT_CHANCE = 0.5
LATE_STAGE_UNIT_CAP = 3
HP_PER_VITALITY = 8


class UnitTier(str, Enum):
    REGULAR = "regular"
    ELITE = "elite"
    STAGE_BOSS = "stage_boss"
    FINAL_BOSS = "final_boss"


@dataclass(frozen=True)
class TierProfile:
    multiplier: float
    speed_factor: float
    basic_skill: str
    unlocks_advanced: bool
    unlocks_ultimate: bool
    stage_annotated: bool


TIER_PROFILES: dict[UnitTier, TierProfile] = {
    UnitTier.REGULAR: TierProfile(1.0, 1.0, "Strike", False, False, False),
    UnitTier.ELITE: TierProfile(1.5, 0.9, "Powerful Strike", True, False, False),
    UnitTier.STAGE_BOSS: TierProfile(1.8, 0.9, "Crushing Blow", True, True, True),
    UnitTier.FINAL_BOSS: TierProfile(2.2, 0.85, "Annihilating Blow", True, True, True),
}


@dataclass(frozen=True)
class ElementRoster:
    regular: str
    elite: str
    stage_boss: str
    final_boss: str
    advanced_skill: str
    ultimate_skill: str

    def name_for(self, tier: UnitTier) -> str:
        return getattr(self, tier.value)


ELEMENT_ROSTERS: dict[str, ElementRoster] = {
    "fire": ElementRoster(
        "Fire Imp", "Flame Sentinel", "Magma Warden", "Inferno Lord",
        "Fire Blast", "Cataclysm",
    ),
    "ice": ElementRoster(
        "Ice Elemental", "Frost Giant", "Glacial Warden", "Frost Monarch",
        "Ice Blast", "Absolute Zero",
    ),
    "nature": ElementRoster(
        "Thorn Beast", "Ancient Treant", "Grove Warden", "Heart of the Wild",
        "Nature Blast", "Overgrowth",
    ),
    "shadow": ElementRoster(
        "Void Wraith", "Shadow Fiend", "Night Warden", "Void Sovereign",
        "Shadow Blast", "Eclipse",
    ),
    "arcane": ElementRoster(
        "Magic Construct", "Arcane Golem", "Runic Warden", "Archmage Phantom",
        "Arcane Blast", "Mana Storm",
    ),
    "neutral": ElementRoster(
        "Dungeon Creature", "Dungeon Guardian", "Dungeon Warden", "Dungeon Overlord",
        "Savage Blast", "Overwhelming Force",
    ),
}


def element_roster(element: str) -> ElementRoster:
    """Name table for an element; unknown elements use the neutral table."""
    return ELEMENT_ROSTERS.get(element.lower(), ELEMENT_ROSTERS["neutral"])


def enemy_count_for(ally_count: int) -> int:
    """Base roster size for a party of ``ally_count``."""
    return min(5, max(2, ally_count))


def difficulty_multiplier(current_stage: int, total_stages: int) -> float:
    return 1 + (current_stage / total_stages) * MAX_DIFFICULTY_BONUS


def assign_tier(index: int, unit_count: int, current_stage: int, total_stages: int) -> UnitTier:
    """Positional tier for the unit at ``index``. The highest applicable tier wins."""
    is_last = index == unit_count - 1
    if is_last and current_stage == total_stages:
        return UnitTier.FINAL_BOSS
    if is_last:
        return UnitTier.STAGE_BOSS
    if index == unit_count - 2 and current_stage / total_stages > ELITE_STAGE_THRESHOLD:
        return UnitTier.ELITE
    return UnitTier.REGULAR


def _display_names(tiers: list[UnitTier], names: ElementRoster, current_stage: int) -> list[str]:
    base = [names.name_for(t) for t in tiers]
    out: list[str] = []
    for tier, name in zip(tiers, base):
        if TIER_PROFILES[tier].stage_annotated:
            out.append(f"{name} (Stage {current_stage})")
        elif base.count(name) > 1:
            # Letter each copy so every action names exactly one unit
            nth = sum(1 for n in out if n.startswith(name + " "))
            out.append(f"{name} {string.ascii_uppercase[nth]}")
        else:
            out.append(name)
    return out


def _build_skills(tier: UnitTier, attack: int, names: ElementRoster) -> SkillSet:
    profile = TIER_PROFILES[tier]
    return SkillSet(
        basic=BattleSkill(name=profile.basic_skill, damage=math.floor(attack * 0.9)),
        advanced=BattleSkill(
            name=names.advanced_skill, damage=math.floor(attack * 1.5), cooldown=3,
        ) if profile.unlocks_advanced else None,
        ultimate=BattleSkill(
            name=names.ultimate_skill, damage=math.floor(attack * 2.5), cooldown=5,
        ) if profile.unlocks_ultimate else None,
    )


def generate_enemies(
    rng: SeededRandom,
    dungeon_level: int,
    element: str,
    unit_count: int,
    current_stage: int,
    total_stages: int,
) -> list[BattleUnit]:
    """Build the enemy roster for one stage of a dungeon."""
    if unit_count < 1:
        raise ValueError(f"unit_count must be positive, got {unit_count}")
    if not 1 <= current_stage <= total_stages:
        raise ValueError(f"Stage {current_stage} outside 1..{total_stages}")

    stage_progress = current_stage / total_stages
    difficulty = difficulty_multiplier(current_stage, total_stages)

    if (
        stage_progress > LATE_STAGE_THRESHOLD
        and unit_count < LATE_STAGE_UNIT_CAP
        and rng.next_bool(LATE_STAGE_EXTRA_UNIT_CHANCE)
    ):
        unit_count += 1
        logger.debug(f"Stage {current_stage}: reinforcement joins, {unit_count} enemies")

    base_attack = math.floor((8 + math.floor(dungeon_level * 1.5)) * difficulty)
    base_vitality = math.floor((10 + math.floor(dungeon_level * 1.4)) * difficulty)
    base_speed = math.floor((10 + math.floor(dungeon_level * 0.7)) * difficulty)

    names = element_roster(element)
    tiers = [assign_tier(i, unit_count, current_stage, total_stages) for i in range(unit_count)]
    display_names = _display_names(tiers, names, current_stage)

    enemies: list[BattleUnit] = []
    for i, (tier, name) in enumerate(zip(tiers, display_names)):
        profile = TIER_PROFILES[tier]
        attack = math.floor(base_attack * profile.multiplier)
        vitality = math.floor(base_vitality * profile.multiplier)
        max_hp = vitality * HP_PER_VITALITY
        enemies.append(BattleUnit(
            id=f"enemy-s{current_stage}-{i}",
            name=name,
            hp=max_hp,
            max_hp=max_hp,
            stats=UnitStats(
                attack=attack,
                vitality=vitality,
                speed=math.floor(base_speed * profile.speed_factor),
            ),
            skills=_build_skills(tier, attack, names),
        ))
    return enemies
