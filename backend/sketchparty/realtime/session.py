from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock, RLock
from typing import Iterator


@dataclass(frozen=True)
class Session:
    room_code: str
    player_id: str


class SessionRouter:
    """Connection sid -> the one room (and player) it currently belongs to.

    Looked up on every inbound message; handlers never keep a session around.
    Handlers for one connection, its disconnect included, run one at a time
    under ``connection(sid)``.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: dict[str, Session] = {}
        self._guards: dict[str, RLock] = {}
        self._inflight: dict[str, int] = {}
        self._gone: set[str] = set()

    @contextmanager
    def connection(self, sid: str) -> Iterator[None]:
        with self._lock:
            guard = self._guards.setdefault(sid, RLock())
            self._inflight[sid] = self._inflight.get(sid, 0) + 1
        try:
            with guard:
                yield
        finally:
            with self._lock:
                left = self._inflight[sid] - 1
                if left:
                    self._inflight[sid] = left
                else:
                    # Nothing left that could still bind this sid.
                    del self._inflight[sid]
                    self._guards.pop(sid, None)
                    self._gone.discard(sid)

    def mark_gone(self, sid: str) -> None:
        with self._lock:
            self._gone.add(sid)

    def is_gone(self, sid: str) -> bool:
        with self._lock:
            return sid in self._gone

    def bind(self, sid: str, room_code: str) -> Session:
        session = Session(room_code=room_code, player_id=sid)
        with self._lock:
            self._sessions[sid] = session
        return session

    def lookup(self, sid: str) -> Session | None:
        with self._lock:
            return self._sessions.get(sid)

    def unbind(self, sid: str) -> Session | None:
        with self._lock:
            return self._sessions.pop(sid, None)
