from __future__ import annotations

from forge_battle.engine.battle_log import generate_battle_log
from forge_battle.engine.event_log import BattleLog
from forge_battle.engine.stages import StageOrchestrator, reward_multiplier

__all__ = [
    "generate_battle_log",
    "BattleLog",
    "StageOrchestrator",
    "reward_multiplier",
]
