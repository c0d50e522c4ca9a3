"""Seeded linear-congruential generator.

The state is a plain value. Every draw returns the value together with the
next state, so a generator run can be replayed from any point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, TypeVar

T = TypeVar("T")

_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 2 ** 32


@dataclass(frozen=True)
class RngState:
    value: int

    @classmethod
    def from_seed(cls, seed: int) -> RngState:
        return cls(seed % _MODULUS)


def advance(state: RngState) -> tuple[float, RngState]:
    """Step the generator once. Returns a float in [0, 1) and the new state."""
    value = (state.value * _MULTIPLIER + _INCREMENT) % _MODULUS
    return value / _MODULUS, RngState(value)


def uniform(state: RngState, low: float, high: float) -> tuple[float, RngState]:
    u, state = advance(state)
    return low + (high - low) * u, state


def choice(state: RngState, values: Sequence[T]) -> tuple[T, RngState]:
    u, state = advance(state)
    return values[math.floor(u * len(values))], state
