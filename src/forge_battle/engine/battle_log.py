"""Battle log generation for a dungeon run, the engine's entry point."""
from __future__ import annotations

import logging
from typing import Any

from forge_battle.config import BattleSettings
from forge_battle.engine.event_log import BattleLog
from forge_battle.engine.reconciler import apply_outcome_bias
from forge_battle.engine.stages import StageOrchestrator, reward_multiplier
from forge_battle.mechanics.enemies import enemy_count_for, generate_enemies
from forge_battle.mechanics.rng import SeededRandom, derive_seed
from forge_battle.models.battle import BattleEndEvent, BattleEvent, BattleStartEvent
from forge_battle.models.dungeon import DungeonRun

logger = logging.getLogger(__name__)

INIT_MESSAGE = "Initializing battle system..."
NO_ALLIES_MESSAGE = "No characters found for this dungeon run."


def _summary(victory: bool, completed: int, total: int) -> str:
    if victory:
        return f"Victory! Your party completed {completed} of {total} stages."
    return f"Defeat! Your party completed {completed} of {total} stages before being overwhelmed."


def generate_battle_log(
    run: DungeonRun | dict[str, Any],
    predetermined_success: bool,
    settings: BattleSettings | None = None,
) -> list[BattleEvent]:
    """Simulate a dungeon run and return its ordered event log.

    The log always ends in ``predetermined_success``. The same run always
    produces the same log. The caller's run and allies are left untouched.
    Without ``settings`` the built-in defaults apply; config files are read
    by the caller.
    """
    if not isinstance(run, DungeonRun):
        run = DungeonRun.model_validate(run)
    settings = settings or BattleSettings()

    log = BattleLog(base_timestamp=run.created_at_seconds * 1000)
    log.system(INIT_MESSAGE)
    logger.info(f"Generating battle log for run {run.id} (success preset: {predetermined_success})")

    allies = [ally.model_copy(deep=True) for ally in run.allies]
    if not allies:
        log.system(NO_ALLIES_MESSAGE)
        logger.warning(f"Run {run.id} has no characters; no battle simulated")
        return log.events

    rng = SeededRandom(derive_seed(run.id, run.created_at_seconds))
    total_stages = run.total_stages or settings.default_total_stages
    enemy_count = enemy_count_for(len(allies))

    enemies = generate_enemies(rng, run.dungeon_level, run.element, enemy_count, 1, total_stages)
    apply_outcome_bias(allies, enemies, predetermined_success, settings)

    log.append(BattleStartEvent(
        allies=[a.snapshot() for a in allies],
        enemies=[e.snapshot() for e in enemies],
        message=f"A battle begins in a level {run.dungeon_level} {run.element} dungeon!",
    ))

    orchestrator = StageOrchestrator(
        rng, log, settings,
        dungeon_level=run.dungeon_level,
        element=run.element,
        total_stages=total_stages,
        enemy_count=enemy_count,
        success=predetermined_success,
    )
    orchestrator.run(allies, enemies)

    completed = orchestrator.stages_completed
    if predetermined_success and completed < total_stages and not orchestrator.party_defeated:
        logger.info(f"Reporting {total_stages} completed stages instead of {completed} to match success")
        completed = total_stages

    log.append(BattleEndEvent(
        victory=predetermined_success,
        completed_stages=completed,
        total_stages=total_stages,
        reward_multiplier=reward_multiplier(completed, total_stages, settings.min_reward_multiplier),
        summary=_summary(predetermined_success, completed, total_stages),
        surviving_allies=[a.name for a in allies if not a.is_defeated],
    ))
    logger.info(f"Run {run.id} finished: {completed}/{total_stages} stages, {len(log)} events")
    return log.events
