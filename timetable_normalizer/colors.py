"""
Subject colors.

New subjects get a color from a fixed palette. The default assigner picks
at random, so two subjects may end up with the same color. Every normalizer
entry point accepts a `color_assigner` callable, which lets callers (and
tests) plug in a deterministic sequence instead.
"""

from __future__ import annotations

import itertools
import random
from typing import Callable, Sequence


PALETTE = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#F97316",
    "#06B6D4",
    "#84CC16",
)

ColorAssigner = Callable[[], str]


def random_color() -> str:
    return random.choice(PALETTE)


def cycle_colors(palette: Sequence[str] = PALETTE) -> ColorAssigner:
    """
    Return an assigner that walks `palette` in order and wraps around.
    """
    if not palette:
        raise ValueError("palette must not be empty")
    it = itertools.cycle(palette)
    return lambda: next(it)
