from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.errors import GameError, InvalidPayload, NotInRoom
from ..game.service import GameService, clean_name, normalize_code
from . import events
from .session import Session, SessionRouter


logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    return data if isinstance(data, dict) else {}


def register_socketio_handlers(socketio: SocketIO, service: GameService, sessions: SessionRouter) -> None:
    def _fail(exc: GameError) -> dict:
        emit(events.ERROR_TOAST, exc.message)
        return {"ok": False, "error": exc.code}

    def _current() -> Session:
        session = sessions.lookup(request.sid)
        if session is None:
            raise NotInRoom()
        return session

    def _leave(session: Session | None, disconnecting: bool = False) -> None:
        if session is None:
            return
        if not disconnecting:
            leave_room(session.room_code)
        service.leave(session.player_id, session.room_code)

    def _bind_or_drop(room_code: str) -> bool:
        """Bind the sid to ``room_code`` unless it disconnected mid-handler."""
        if sessions.is_gone(request.sid):
            logger.info("[disconnect] sid=%s gone before bind, leaving room=%s", request.sid, room_code)
            service.leave(request.sid, room_code)
            return False
        join_room(room_code)
        sessions.bind(request.sid, room_code)
        return True

    @socketio.on(events.ROOM_CREATE)
    def room_create(data=None):
        payload = _payload(data)
        with sessions.connection(request.sid):
            if sessions.is_gone(request.sid):
                return None
            try:
                clean_name(payload.get("name"))
                _leave(sessions.unbind(request.sid))
                room = service.create_room(request.sid, payload.get("name"))
            except GameError as exc:
                return _fail(exc)

            if not _bind_or_drop(room.code):
                return None
            return {"ok": True, "code": room.code, "playerId": request.sid}

    @socketio.on(events.ROOM_JOIN)
    def room_join(data=None):
        payload = _payload(data)
        code = normalize_code(payload.get("code"))
        with sessions.connection(request.sid):
            if sessions.is_gone(request.sid):
                return None
            previous = sessions.lookup(request.sid)
            try:
                if previous is not None and previous.room_code == code:
                    raise InvalidPayload("Already in this room")
                room = service.join_room(request.sid, code, payload.get("name"))
            except GameError as exc:
                return _fail(exc)

            # Only leave the old room once the new one accepted us.
            if previous is not None:
                sessions.unbind(request.sid)
                _leave(previous)

            if not _bind_or_drop(room.code):
                return None
            return {"ok": True, "code": room.code, "playerId": request.sid}

    @socketio.on(events.ROOM_LEAVE)
    def room_leave(data=None):
        with sessions.connection(request.sid):
            session = sessions.unbind(request.sid)
            if session is None:
                return {"ok": False, "error": NotInRoom.code}
            _leave(session)
            return {"ok": True}

    @socketio.on(events.GAME_START)
    def game_start(data=None):
        payload = _payload(data)
        with sessions.connection(request.sid):
            try:
                session = _current()
                service.start_game(
                    session.player_id,
                    session.room_code,
                    payload.get("roundsEach"),
                    payload.get("secondsPerRound"),
                )
            except GameError as exc:
                return _fail(exc)
            return {"ok": True}

    @socketio.on(events.GUESS_NEW)
    def guess_new(data=None):
        # Older clients send the bare string.
        text = data.get("text") if isinstance(data, dict) else data
        with sessions.connection(request.sid):
            try:
                session = _current()
                correct = service.submit_guess(session.player_id, session.room_code, text)
            except GameError as exc:
                return _fail(exc)
            return {"ok": True, "correct": correct}

    def _relay(event: str):
        def relay(data=None):
            session = sessions.lookup(request.sid)
            if session is None:
                return
            service.broadcaster.to_room(session.room_code, event, data)

        return relay

    for draw_event in events.DRAW_EVENTS:
        socketio.on_event(draw_event, _relay(draw_event))

    @socketio.on("disconnect")
    def on_disconnect(*_args):
        with sessions.connection(request.sid):
            sessions.mark_gone(request.sid)
            session = sessions.unbind(request.sid)
            if session is not None:
                logger.info("[disconnect] sid=%s room=%s", request.sid, session.room_code)
            _leave(session, disconnecting=True)
