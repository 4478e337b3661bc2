"""Ordered battle log with deterministic timestamps."""
from __future__ import annotations

from typing import Iterator

from forge_battle.models.battle import BattleEvent, SystemMessageEvent


class BattleLog:
    """Accumulates events in order.

    Timestamps are the run's creation time in milliseconds plus the event's
    position, so regenerating a run yields an identical log.
    """

    def __init__(self, base_timestamp: int = 0):
        self.base_timestamp = base_timestamp
        self.events: list[BattleEvent] = []

    def append(self, event: BattleEvent) -> BattleEvent:
        event.timestamp = self.base_timestamp + len(self.events)
        self.events.append(event)
        return event

    def system(self, message: str) -> SystemMessageEvent:
        return self.append(SystemMessageEvent(message=message))

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[BattleEvent]:
        return iter(self.events)
