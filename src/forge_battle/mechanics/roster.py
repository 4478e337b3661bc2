"""Building combat-ready allies from character and aura records."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from forge_battle.models.battle import AuraBonus, BattleSkill, BattleUnit, SkillSet, UnitStats

logger = logging.getLogger(__name__)

AURA_STATS = ("attack", "vitality", "speed", "focus", "accuracy", "defense", "resilience")
DEFAULT_STAT = 10


def aggregate_aura_bonus(auras: Iterable[Mapping[str, Any]]) -> AuraBonus | None:
    """Sum percentage bonuses over equipped auras. None when nothing applies."""
    totals = dict.fromkeys(AURA_STATS, 0)
    element = None
    for aura in auras:
        for stat in AURA_STATS:
            value = aura.get(stat)
            if value:
                totals[stat] += int(value)
        element = element or aura.get("element")
    if not any(v > 0 for v in totals.values()):
        return None
    return AuraBonus(**totals, element=element)


def build_ally(character: Mapping[str, Any], auras: Iterable[Mapping[str, Any]] = ()) -> BattleUnit:
    attack = int(character.get("attack") or DEFAULT_STAT)
    vitality = int(character.get("vitality") or DEFAULT_STAT)
    speed = int(character.get("speed") or DEFAULT_STAT)
    max_hp = vitality * 8

    return BattleUnit(
        id=f"char-{character['id']}",
        name=str(character["name"]),
        hp=max_hp,
        max_hp=max_hp,
        stats=UnitStats(attack=attack, vitality=vitality, speed=speed),
        aura_bonus=aggregate_aura_bonus(auras),
        skills=SkillSet(
            basic=BattleSkill(name="Basic Attack", damage=math.floor(attack * 0.9), cooldown=0),
            advanced=BattleSkill(name="Quick Strike", damage=math.floor(attack * 1.2), cooldown=2),
            ultimate=BattleSkill(name="Power Surge", damage=math.floor(attack * 1.8), cooldown=4),
        ),
    )


def build_roster(
    character_ids: Iterable[int],
    characters: Mapping[int, Mapping[str, Any]],
    auras_by_character: Mapping[int, list[Mapping[str, Any]]] | None = None,
) -> list[BattleUnit]:
    """Resolve a party into battle units, skipping characters that can't be built."""
    auras_by_character = auras_by_character or {}
    allies: list[BattleUnit] = []
    for char_id in character_ids:
        character = characters.get(char_id)
        if character is None:
            logger.warning(f"Character ID {char_id} not found, skipping")
            continue
        try:
            allies.append(build_ally(character, auras_by_character.get(char_id, [])))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error processing character ID {char_id}: {e}")
    return allies
