"""Steering combat toward the predetermined outcome.

The fight is first biased (stronger allies on a success, stronger enemies on
a failure). If the opening encounter still disagrees with the outcome, a
narrated event settles it: a heroic surge or a hidden trap.
"""
from __future__ import annotations

import logging
import math

from forge_battle.config import BattleSettings
from forge_battle.engine.event_log import BattleLog
from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import BattleAction, BattleUnit, RoundEvent

logger = logging.getLogger(__name__)

SURGE_MESSAGE = "A mysterious energy surges through your party, giving them renewed strength!"
TRAP_MESSAGE = "The dungeon reveals a hidden trap!"
TRAP_ACTOR = "Dungeon Trap"
TRAP_SKILL = "Deadly Mechanism"
SURGE_ACTOR = "Mysterious Energy"
SURGE_SKILL = "Heroic Surge"


def boost_attack(unit: BattleUnit, factor: float) -> None:
    """Scale a unit's attack stat and every skill's damage by ``factor``."""
    unit.stats.attack = math.floor(unit.stats.attack * factor)
    for skill in unit.skills.all():
        skill.damage = math.floor(skill.damage * factor)


def bias_allies(
    allies: list[BattleUnit],
    success: bool,
    settings: BattleSettings,
    restore_hp: bool = True,
) -> None:
    if not success:
        return
    for ally in allies:
        boost_attack(ally, settings.ally_attack_boost)
        if restore_hp:
            ally.hp = ally.max_hp


def bias_enemies(enemies: list[BattleUnit], success: bool, settings: BattleSettings) -> None:
    if success:
        return
    for enemy in enemies:
        boost_attack(enemy, settings.enemy_attack_boost)


def apply_outcome_bias(
    allies: list[BattleUnit],
    enemies: list[BattleUnit],
    success: bool,
    settings: BattleSettings,
) -> None:
    bias_allies(allies, success, settings)
    bias_enemies(enemies, success, settings)


def _heroic_surge(
    rng: SeededRandom,
    log: BattleLog,
    allies: list[BattleUnit],
    living_enemies: list[BattleUnit],
    next_round: int,
) -> None:
    log.system(SURGE_MESSAGE)

    # Fallen heroes stay down; with nobody standing the surge itself strikes
    living_allies = [a for a in allies if not a.is_defeated]
    for enemy in living_enemies:
        damage = enemy.take_damage(enemy.hp)
        if living_allies:
            hero = rng.choice(living_allies)
            hero.total_damage_dealt += damage
            actor = hero.name
            message = f"{hero.name} delivers a devastating final blow!"
        else:
            actor = SURGE_ACTOR
            message = f"The surging energy tears {enemy.name} apart!"
        log.append(RoundEvent(
            number=next_round,
            actions=[BattleAction(
                actor=actor,
                skill=SURGE_SKILL,
                target=enemy.name,
                damage=damage,
                is_critical=True,
                message=message,
            )],
            remaining_allies=len(living_allies),
            remaining_enemies=sum(1 for e in living_enemies if not e.is_defeated),
        ))
        next_round += 1


def _hidden_trap(
    log: BattleLog,
    living_allies: list[BattleUnit],
    living_enemies: list[BattleUnit],
    next_round: int,
) -> None:
    log.system(TRAP_MESSAGE)
    damage = sum(ally.take_damage(ally.hp) for ally in living_allies)
    log.append(RoundEvent(
        number=next_round,
        actions=[BattleAction(
            actor=TRAP_ACTOR,
            skill=TRAP_SKILL,
            target="Party",
            damage=damage,
            is_critical=True,
            message="A hidden mechanism activates, overwhelming the entire party!",
        )],
        remaining_allies=0,
        remaining_enemies=len(living_enemies),
    ))


def reconcile_outcome(
    rng: SeededRandom,
    log: BattleLog,
    allies: list[BattleUnit],
    enemies: list[BattleUnit],
    success: bool,
    next_round: int,
) -> None:
    """Make the opening encounter's result match ``success``.

    Synthetic rounds are numbered on from ``next_round``.
    """
    living_allies = [a for a in allies if not a.is_defeated]
    living_enemies = [e for e in enemies if not e.is_defeated]
    organic_success = not living_enemies

    if organic_success == success:
        return

    if success:
        logger.warning(
            f"Opening encounter left {len(living_enemies)} enemies standing; forcing victory"
        )
        _heroic_surge(rng, log, allies, living_enemies, next_round)
        return

    if not living_allies:
        return

    logger.warning(
        f"Opening encounter won with {len(living_allies)} allies standing; forcing defeat"
    )
    _hidden_trap(log, living_allies, living_enemies, next_round)
