from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from forge_battle.models.battle import BattleUnit


class DungeonRun(BaseModel):
    """The slice of a dungeon-run record the battle engine reads."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    dungeon_level: int = Field(default=1, ge=1, alias="dungeonLevel")
    element: str = "neutral"
    total_stages: Optional[int] = Field(default=None, ge=1, alias="totalStages")
    allies: list[BattleUnit] = Field(default_factory=list, alias="_allies")

    @property
    def created_at_seconds(self) -> int:
        if self.created_at is None:
            return 0
        return int(self.created_at.timestamp())
