"""Multi-stage dungeon progression."""
from __future__ import annotations

import logging
import math

from forge_battle.config import BattleSettings
from forge_battle.engine.event_log import BattleLog
from forge_battle.engine.reconciler import bias_allies, bias_enemies, reconcile_outcome
from forge_battle.mechanics.combat import lethal_threat, resolve_round
from forge_battle.mechanics.enemies import generate_enemies
from forge_battle.mechanics.rng import SeededRandom
from forge_battle.models.battle import BattleUnit, StageCompleteEvent, StageStartEvent

logger = logging.getLogger(__name__)


def reward_multiplier(stages_completed: int, total_stages: int, floor: float = 0.3) -> float:
    return max(floor, stages_completed / total_stages)


class StageOrchestrator:
    """Runs the opening encounter and every following stage.

    Allies carry over between stages by reference; every stage gets a fresh
    enemy roster. Progression stops on a party wipe or a stalemate.
    """

    def __init__(
        self,
        rng: SeededRandom,
        log: BattleLog,
        settings: BattleSettings,
        *,
        dungeon_level: int,
        element: str,
        total_stages: int,
        enemy_count: int,
        success: bool,
    ):
        self.rng = rng
        self.log = log
        self.settings = settings
        self.dungeon_level = dungeon_level
        self.element = element
        self.total_stages = total_stages
        self.enemy_count = enemy_count
        self.success = success

        self.stages_completed = 0
        self.party_defeated = False
        self.stalemate = False
        self.living_allies: list[BattleUnit] = []

    def _party_at_risk(self, allies: list[BattleUnit], enemies: list[BattleUnit]) -> bool:
        """True when the next round could wipe the party on a run preset to succeed."""
        if not self.success:
            return False
        standing = sum(a.hp for a in allies if not a.is_defeated)
        return standing <= lethal_threat(enemies)

    def run_encounter(self, allies: list[BattleUnit], enemies: list[BattleUnit], first_round: int = 1) -> int:
        """Fight until one side falls or the round cap is hit. Returns the next round number.

        A run preset to succeed breaks off before any round the party might not survive.
        """
        round_number = first_round
        for _ in range(self.settings.max_rounds_per_stage):
            if self._party_at_risk(allies, enemies):
                logger.info(f"Party at risk of a wipe before round {round_number}; ending encounter")
                break
            event = resolve_round(self.rng, allies, enemies, round_number)
            self.log.append(event)
            round_number += 1
            if event.remaining_allies == 0 or event.remaining_enemies == 0:
                break
        return round_number

    def _recover(self) -> None:
        fraction = self.settings.stage_recovery_fraction
        if fraction <= 0:
            return
        for ally in self.living_allies:
            ally.hp = min(ally.max_hp, ally.hp + math.floor(ally.max_hp * fraction))

    def settle_stage(self, stage: int, enemies: list[BattleUnit]) -> bool:
        """Record the stage outcome. Returns True when the party may advance."""
        living_allies = [a for a in self.living_allies if not a.is_defeated]
        living_enemies = [e for e in enemies if not e.is_defeated]
        logger.info(
            f"Stage {stage}: {len(living_allies)} allies alive, {len(living_enemies)} enemies alive"
        )

        if not living_allies:
            self.party_defeated = True
            self.living_allies = []
            self.log.system(f"Your party has been defeated at stage {stage}!")
            return False

        if living_enemies:
            self.stalemate = True
            self.living_allies = living_allies
            logger.warning(f"Stage {stage} ended without a victor; progression stops")
            return False

        self.stages_completed += 1
        self.living_allies = living_allies
        final = stage == self.total_stages
        self.log.append(StageCompleteEvent(
            current_stage=stage,
            total_stages=self.total_stages,
            alive_allies=[a.snapshot() for a in living_allies],
            message=(
                f"Stage {stage} completed!"
                + (" You have conquered the dungeon!" if final else " Preparing for the next challenge...")
            ),
        ))
        if not final:
            self._recover()
        return True

    def run(self, allies: list[BattleUnit], opening_enemies: list[BattleUnit]) -> None:
        """Drive stages 1..total_stages. Stage 1 is fought on ``opening_enemies``."""
        self.living_allies = list(allies)

        next_round = self.run_encounter(allies, opening_enemies)
        reconcile_outcome(self.rng, self.log, allies, opening_enemies, self.success, next_round)
        if not self.settle_stage(1, opening_enemies):
            return

        for stage in range(2, self.total_stages + 1):
            enemies = generate_enemies(
                self.rng, self.dungeon_level, self.element,
                self.enemy_count, stage, self.total_stages,
            )
            bias_allies(self.living_allies, self.success, self.settings, restore_hp=False)
            bias_enemies(enemies, self.success, self.settings)
            self.log.append(StageStartEvent(
                current_stage=stage,
                total_stages=self.total_stages,
                enemies=[e.snapshot() for e in enemies],
                message=f"Stage {stage} begins! New enemies approach...",
            ))
            self.run_encounter(self.living_allies, enemies)
            if not self.settle_stage(stage, enemies):
                return
