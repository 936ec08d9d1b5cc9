"""Drawer rotation: turn order construction and turn index lookups."""

from __future__ import annotations

import random
from typing import Sequence

from .models import Player


def build_order(players: Sequence[Player], rounds: int, rng: random.Random | None = None) -> list[str]:
    """Concatenate ``rounds`` independent uniform shuffles of the roster.

    Returns player ids. ``random.shuffle`` is Fisher-Yates, so every
    permutation of a pass is equally likely.
    """
    rng = rng or random.Random()
    ids = [p.id for p in players]
    order: list[str] = []
    for _ in range(max(0, rounds)):
        batch = list(ids)
        rng.shuffle(batch)
        order.extend(batch)
    return order


def drawer_for(order: Sequence[str], turn_index: int) -> str | None:
    if not order:
        return None
    return order[turn_index % len(order)]


def round_for(turn_index: int, player_count: int) -> int:
    return turn_index // max(1, player_count) + 1
