"""Battle units, skills, actions and log events.

Attributes are snake_case in Python; the JSON wire format uses the camelCase
names the web client reads (``maxHp``, ``isCritical``, ``completedStages``).
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class StatusEffect(WireModel):
    name: str
    type: str
    value: float = 0
    duration: int = 0
    source: Optional[str] = None


class BattleSkill(WireModel):
    name: str
    damage: int
    cooldown: Optional[int] = None
    special: Optional[str] = None
    aoe: Optional[bool] = None


class SkillSet(WireModel):
    basic: BattleSkill
    advanced: Optional[BattleSkill] = None
    ultimate: Optional[BattleSkill] = None

    def all(self) -> list[BattleSkill]:
        return [s for s in (self.basic, self.advanced, self.ultimate) if s is not None]


class UnitStats(WireModel):
    attack: int
    vitality: int
    speed: int
    focus: int = 0
    accuracy: int = 0
    defense: int = 0
    resilience: int = 0


class AuraBonus(WireModel):
    """Percentage modifiers aggregated from a character's equipped auras."""

    attack: int = 0
    vitality: int = 0
    speed: int = 0
    focus: int = 0
    accuracy: int = 0
    defense: int = 0
    resilience: int = 0
    element: Optional[str] = None


class BattleUnit(WireModel):
    id: str
    name: str
    hp: int
    max_hp: int
    attack_meter: int = 0
    stats: UnitStats
    skills: SkillSet
    aura_bonus: Optional[AuraBonus] = None
    advanced_skill_cooldown: int = 0
    ultimate_skill_cooldown: int = 0
    status_effects: list[StatusEffect] = Field(default_factory=list)

    total_damage_dealt: int = 0
    total_damage_received: int = 0

    @field_validator("hp")
    @classmethod
    def _hp_not_negative(cls, v: int) -> int:
        return max(0, v)

    @property
    def is_defeated(self) -> bool:
        return self.hp <= 0

    def take_damage(self, amount: int) -> int:
        """Apply damage, flooring hp at 0. Returns the hp actually removed."""
        removed = min(self.hp, max(0, amount))
        self.hp -= removed
        self.total_damage_received += removed
        return removed

    def snapshot(self) -> BattleUnit:
        return self.model_copy(deep=True)


class BattleAction(WireModel):
    actor: str
    skill: str
    target: str
    damage: int
    is_critical: bool = False
    healing: Optional[bool] = None
    message: Optional[str] = None
    type: Optional[str] = None


# -- Log events --


class _Event(WireModel):
    timestamp: int = 0


class SystemMessageEvent(_Event):
    type: Literal["system_message"] = "system_message"
    message: str


class BattleStartEvent(_Event):
    type: Literal["battle_start"] = "battle_start"
    allies: list[BattleUnit]
    enemies: list[BattleUnit]
    message: str = ""


class RoundEvent(_Event):
    type: Literal["round"] = "round"
    number: int
    actions: list[BattleAction] = Field(default_factory=list)
    remaining_allies: int
    remaining_enemies: int


class StageStartEvent(_Event):
    type: Literal["stage_start"] = "stage_start"
    current_stage: int
    total_stages: int
    enemies: list[BattleUnit]
    message: str = ""


class StageCompleteEvent(_Event):
    type: Literal["stage_complete"] = "stage_complete"
    current_stage: int
    total_stages: int
    alive_allies: list[BattleUnit]
    message: str = ""


class BattleEndEvent(_Event):
    type: Literal["battle_end"] = "battle_end"
    victory: bool
    completed_stages: int
    total_stages: int
    reward_multiplier: float
    summary: str
    surviving_allies: list[str] = Field(default_factory=list)


BattleEvent = Annotated[
    Union[
        SystemMessageEvent,
        BattleStartEvent,
        RoundEvent,
        StageStartEvent,
        StageCompleteEvent,
        BattleEndEvent,
    ],
    Field(discriminator="type"),
]

_LOG_ADAPTER: TypeAdapter[list[BattleEvent]] = TypeAdapter(list[BattleEvent])


def dump_battle_log(events: list[BattleEvent]) -> list[dict[str, Any]]:
    """Serialize a log to JSON-ready dicts using the wire field names."""
    return _LOG_ADAPTER.dump_python(events, mode="json", by_alias=True, exclude_none=True)


def dump_battle_log_json(events: list[BattleEvent], indent: int | None = None) -> str:
    return _LOG_ADAPTER.dump_json(events, by_alias=True, exclude_none=True, indent=indent).decode()


def parse_battle_log(data: Any) -> list[BattleEvent]:
    """Load a persisted log from a JSON string or a list of dicts."""
    if isinstance(data, (str, bytes)):
        return _LOG_ADAPTER.validate_json(data)
    return _LOG_ADAPTER.validate_python(data)
