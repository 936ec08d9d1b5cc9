from __future__ import annotations

import logging
from typing import Any

from flask_socketio import SocketIO


logger = logging.getLogger(__name__)


class SocketIOBroadcaster:
    """Fire-and-forget sends. Player ids are Socket.IO sids, so a sid doubles as a private room."""

    def __init__(self, socketio: SocketIO) -> None:
        self._socketio = socketio

    def _emit(self, event: str, payload: Any, to: str) -> None:
        try:
            if payload is None:
                self._socketio.emit(event, to=to)
            else:
                self._socketio.emit(event, payload, to=to)
        except Exception:
            # Best-effort: a dead connection must not break the room's transition.
            logger.exception("[emit-failed] event=%s to=%s", event, to)

    def to_room(self, room_code: str, event: str, payload: Any = None) -> None:
        self._emit(event, payload, room_code)

    def to_player(self, player_id: str, event: str, payload: Any = None) -> None:
        self._emit(event, payload, player_id)
