"""Rounding helpers."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Nearest integer, halves going up: 2.5 -> 3, -2.5 -> -2.

    Unlike round(), which sends halves to the even neighbour.
    """
    return math.floor(value + 0.5)
