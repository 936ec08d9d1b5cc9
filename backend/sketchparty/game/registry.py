from __future__ import annotations

import logging
import random
import string
from threading import RLock

from .errors import RoomNotFound
from .models import Room


logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """Live rooms by code. The lock only covers the table itself."""

    def __init__(self, code_length: int = 4, rng: random.Random | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._code_length = code_length
        self._rng = rng or random.Random()

    def _new_code(self) -> str:
        return "".join(self._rng.choices(CODE_ALPHABET, k=self._code_length))

    def create(self, **fields) -> Room:
        with self._lock:
            code = self._new_code()
            while code in self._rooms:
                logger.debug("[room-code] collision on %s, retrying", code)
                code = self._new_code()

            room = Room(code=code, **fields)
            self._rooms[code] = room
            return room

    def get(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(code)
        if room is None:
            raise RoomNotFound()
        return room

    def find(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def remove(self, code: str) -> bool:
        with self._lock:
            return self._rooms.pop(code, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._rooms
