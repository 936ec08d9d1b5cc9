from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Any


@dataclass
class Player:
    id: str
    name: str
    score: int = 0


@dataclass
class Room:
    code: str
    players: list[Player] = field(default_factory=list)
    started: bool = False
    round: int = 1
    total_rounds: int = 3
    seconds_per_round: int = 75
    turn_index: int = 0
    # Player ids; built once per start, never rebuilt mid-game.
    order: list[str] = field(default_factory=list)
    drawer_id: str | None = None
    word: str | None = None
    masked_word: list[str] = field(default_factory=list)
    time_left: int = 0
    # Bumped on every start so callbacks from a previous game never match.
    game_serial: int = 0
    closed: bool = False
    timer: Any = None
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def find_player(self, player_id: str | None) -> Player | None:
        if player_id is None:
            return None
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def has_player(self, player_id: str | None) -> bool:
        return self.find_player(player_id) is not None
