"""Combat resolution: crits, damage, skill choice and one round of battle."""
from __future__ import annotations

import logging
import math

from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import BattleAction, BattleSkill, BattleUnit, RoundEvent

logger = logging.getLogger(__name__)

BASE_CRIT_CHANCE = 5
MAX_CRIT_CHANCE = 30
CRIT_MULTIPLIER = 1.5
MAX_DEFENSE_REDUCTION = 0.5
DEFAULT_ADVANCED_COOLDOWN = 3
DEFAULT_ULTIMATE_COOLDOWN = 5


def crit_chance(attacker: BattleUnit) -> float:
    """Critical chance in percent: 5 plus aura focus, capped at 30."""
    chance = BASE_CRIT_CHANCE
    if attacker.aura_bonus and attacker.aura_bonus.focus:
        chance += attacker.aura_bonus.focus
    return min(MAX_CRIT_CHANCE, chance)


def is_critical_hit(rng: SeededRandom, attacker: BattleUnit) -> bool:
    return rng.next() * 100 < crit_chance(attacker)


def calculate_damage(
    rng: SeededRandom,
    attacker: BattleUnit,
    defender: BattleUnit,
    skill: BattleSkill,
) -> tuple[int, bool]:
    """Returns (damage, is_critical). Damage is always at least 1."""
    critical = is_critical_hit(rng, attacker)
    damage = skill.damage
    if critical:
        damage = math.floor(damage * CRIT_MULTIPLIER)

    if defender.aura_bonus and defender.aura_bonus.defense:
        reduction = min(MAX_DEFENSE_REDUCTION, defender.aura_bonus.defense / 100)
        damage = math.floor(damage * (1 - reduction))

    return max(1, math.floor(damage)), critical


def max_hit(unit: BattleUnit) -> int:
    """The most damage one action by ``unit`` can deal: its strongest skill, critical."""
    strongest = max(skill.damage for skill in unit.skills.all())
    return max(1, math.floor(strongest * CRIT_MULTIPLIER))


def lethal_threat(enemies: list[BattleUnit]) -> int:
    """Upper bound on the damage living ``enemies`` can deal in one round."""
    return sum(max_hit(e) for e in enemies if not e.is_defeated)


def choose_skill(unit: BattleUnit) -> BattleSkill:
    """Pick the strongest ready skill and put it on cooldown."""
    skills = unit.skills
    if skills.ultimate and unit.ultimate_skill_cooldown == 0:
        unit.ultimate_skill_cooldown = skills.ultimate.cooldown or DEFAULT_ULTIMATE_COOLDOWN
        return skills.ultimate
    if skills.advanced and unit.advanced_skill_cooldown == 0:
        unit.advanced_skill_cooldown = skills.advanced.cooldown or DEFAULT_ADVANCED_COOLDOWN
        return skills.advanced
    return skills.basic


def _sweep(
    rng: SeededRandom,
    attackers: list[BattleUnit],
    targets: list[BattleUnit],
    actions: list[BattleAction],
) -> None:
    """Each attacker hits a random unit of ``targets``; defeated targets are removed in place."""
    for attacker in attackers:
        if not targets:
            break
        index = rng.next_int(0, len(targets))
        target = targets[index]
        skill = choose_skill(attacker)
        damage, critical = calculate_damage(rng, attacker, target, skill)

        attacker.total_damage_dealt += target.take_damage(damage)
        actions.append(BattleAction(
            actor=attacker.name,
            skill=skill.name,
            target=target.name,
            damage=damage,
            is_critical=critical,
        ))
        if target.is_defeated:
            targets.pop(index)


def resolve_round(
    rng: SeededRandom,
    allies: list[BattleUnit],
    enemies: list[BattleUnit],
    round_number: int,
) -> RoundEvent:
    """Resolve one round: allies attack, then surviving enemies, then cooldowns tick."""
    living_allies = [u for u in allies if not u.is_defeated]
    living_enemies = [u for u in enemies if not u.is_defeated]

    if not living_allies or not living_enemies:
        return RoundEvent(
            number=round_number,
            actions=[],
            remaining_allies=len(living_allies),
            remaining_enemies=len(living_enemies),
        )

    actions: list[BattleAction] = []
    _sweep(rng, list(living_allies), living_enemies, actions)
    _sweep(rng, [u for u in enemies if not u.is_defeated], living_allies, actions)

    for unit in [*allies, *enemies]:
        if unit.advanced_skill_cooldown > 0:
            unit.advanced_skill_cooldown -= 1
        if unit.ultimate_skill_cooldown > 0:
            unit.ultimate_skill_cooldown -= 1

    logger.debug(
        f"Round {round_number}: {len(actions)} actions, "
        f"{len(living_allies)} allies vs {len(living_enemies)} enemies"
    )
    return RoundEvent(
        number=round_number,
        actions=actions,
        remaining_allies=len(living_allies),
        remaining_enemies=len(living_enemies),
    )
