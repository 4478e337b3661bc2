"""Seeded random source: pure math, no I/O.

Park-Miller minimal standard generator. One instance per battle log; pass it
to everything that rolls so a run always replays identically.
"""
from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

MULTIPLIER = 16807
INCREMENT = 0
MODULUS = 2**31 - 1


class SeededRandom:
    def __init__(self, seed: int):
        state = seed % MODULUS
        # 0 is a fixed point of the recurrence
        self.state = state if state != 0 else 1
        self.seed = self.state

    def next(self) -> float:
        """Advance the generator and return a float in [0, 1)."""
        self.state = (MULTIPLIER * self.state + INCREMENT) % MODULUS
        return self.state / MODULUS

    def next_int(self, min_value: int, max_value: int) -> int:
        """Return an int in [min_value, max_value)."""
        if max_value <= min_value:
            raise ValueError(f"Empty range: [{min_value}, {max_value})")
        return min_value + int(self.next() * (max_value - min_value))

    def next_bool(self, probability: float = 0.5) -> bool:
        return self.next() < probability

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[self.next_int(0, len(items))]


def derive_seed(run_id: int, created_at_seconds: int = 0) -> int:
    """Seed from the immutable identity of a dungeon run.

    The creation time is truncated to whole seconds before mixing so that
    regenerating a stored run reproduces the same rolls.
    """
    return (run_id * 100_003 + created_at_seconds % 1_000_000_007) % MODULUS
