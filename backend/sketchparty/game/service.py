from __future__ import annotations

import logging
import random
from dataclasses import asdict
from functools import partial
from typing import Any, Callable, Mapping, Protocol

from ..realtime import events
from .errors import InvalidPayload, InvalidStart, NotInRoom, RoomNotFound, StaleTimerFired
from .models import Player, Room
from .registry import RoomRegistry
from .scheduler import build_order, drawer_for, round_for
from .timer import RoundTimer
from .words import WordProvider


logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 16


class Broadcaster(Protocol):
    def to_room(self, room_code: str, event: str, payload: Any = None) -> None: ...

    def to_player(self, player_id: str, event: str, payload: Any = None) -> None: ...


def clean_name(name: Any) -> str:
    n = str(name or "").strip()
    if not n or len(n) > MAX_NAME_LENGTH:
        raise InvalidPayload("Name must be 1-16 characters")
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        raise InvalidPayload("Name contains invalid characters")
    if any(ord(ch) < 32 for ch in n):
        raise InvalidPayload("Name contains invalid characters")
    return n


def normalize_code(code: Any) -> str:
    return str(code or "").strip().upper()


def configured_words(raw: Any) -> list[str] | None:
    """None (built-in corpus) only when unset or blank; anything else is taken as given."""
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        return [w.strip() for w in raw.split(",") if w.strip()]
    return list(raw)


def room_public_state(room: Room, viewer_id: str | None = None) -> dict:
    """Snapshot of ``room`` as seen by ``viewer_id``.

    The secret word is included only when the viewer is the current drawer.
    """
    me = room.find_player(viewer_id)
    show_word = viewer_id is not None and viewer_id == room.drawer_id
    return {
        "code": room.code,
        "players": [asdict(p) for p in room.players],
        "me": asdict(me) if me else None,
        "drawerId": room.drawer_id,
        "word": room.word if show_word else None,
        "maskedWord": list(room.masked_word),
        "round": room.round,
        "totalRounds": room.total_rounds,
        "timeLeft": room.time_left,
        "started": room.started,
    }


class GameService:
    """Room lifecycle and the turn state machine.

    Every transition runs under the room's lock, including the broadcasts it
    produces, so a guess and a timer expiry can never interleave.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        words: WordProvider,
        broadcaster: Broadcaster,
        timer_factory: Callable[[], Any],
        *,
        default_total_rounds: int = 3,
        default_seconds_per_round: int = 75,
        max_rounds: int = 20,
        min_seconds_per_round: int = 5,
        max_seconds_per_round: int = 300,
        guesser_min_points: int = 100,
        points_per_second_left: int = 10,
        drawer_points: int = 50,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.words = words
        self.broadcaster = broadcaster
        self._timer_factory = timer_factory
        self.default_total_rounds = default_total_rounds
        self.default_seconds_per_round = default_seconds_per_round
        self.max_rounds = max_rounds
        self.min_seconds_per_round = min_seconds_per_round
        self.max_seconds_per_round = max_seconds_per_round
        self.guesser_min_points = guesser_min_points
        self.points_per_second_left = points_per_second_left
        self.drawer_points = drawer_points
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: Mapping[str, Any], broadcaster: Broadcaster, spawn: Callable[..., Any]) -> "GameService":
        interval = float(config.get("TICK_INTERVAL_SEC", 1.0))
        return cls(
            registry=RoomRegistry(code_length=int(config.get("ROOM_CODE_LENGTH", 4))),
            words=WordProvider(configured_words(config.get("WORDS"))),
            broadcaster=broadcaster,
            timer_factory=lambda: RoundTimer(spawn, interval=interval),
            default_total_rounds=int(config.get("DEFAULT_TOTAL_ROUNDS", 3)),
            default_seconds_per_round=int(config.get("DEFAULT_SECONDS_PER_ROUND", 75)),
            max_rounds=int(config.get("MAX_ROUNDS", 20)),
            min_seconds_per_round=int(config.get("MIN_SECONDS_PER_ROUND", 5)),
            max_seconds_per_round=int(config.get("MAX_SECONDS_PER_ROUND", 300)),
            guesser_min_points=int(config.get("GUESSER_MIN_POINTS", 100)),
            points_per_second_left=int(config.get("POINTS_PER_SECOND_LEFT", 10)),
            drawer_points=int(config.get("DRAWER_POINTS", 50)),
        )

    # ---- Lobby ----

    def create_room(self, player_id: str, name: Any) -> Room:
        name = clean_name(name)
        room = self.registry.create(
            total_rounds=self.default_total_rounds,
            seconds_per_round=self.default_seconds_per_round,
            timer=self._timer_factory(),
        )
        with room.lock:
            room.players.append(Player(id=player_id, name=name))
            logger.info("[room-create] room=%s player=%s", room.code, player_id)
            self.broadcaster.to_player(player_id, events.ROOM_CREATED, room_public_state(room, player_id))
            self._broadcast_state(room)
        return room

    def join_room(self, player_id: str, code: Any, name: Any) -> Room:
        name = clean_name(name)
        code = normalize_code(code)
        if not code:
            raise RoomNotFound()
        room = self.registry.get(code)
        with room.lock:
            # Lost a race with the last player leaving.
            if room.closed:
                raise RoomNotFound()
            room.players.append(Player(id=player_id, name=name))
            logger.info("[room-join] room=%s player=%s players=%d", room.code, player_id, len(room.players))
            self.broadcaster.to_player(player_id, events.ROOM_JOINED, room_public_state(room, player_id))
            self._broadcast_state(room)
        return room

    def leave(self, player_id: str, code: str) -> None:
        room = self.registry.find(code)
        if room is None:
            return
        with room.lock:
            if room.closed:
                return
            player = room.find_player(player_id)
            if player is None:
                return
            room.players.remove(player)
            logger.info("[room-leave] room=%s player=%s players=%d", room.code, player_id, len(room.players))

            if not room.players:
                self._destroy(room)
                return

            if room.started and room.drawer_id == player_id:
                self._cancel_timer(room)
                room.turn_index += 1
                if not self._finish_if_exhausted(room):
                    if len(room.players) >= 2:
                        self._advance_turn(room)
                    else:
                        self._hold(room)

            self._broadcast_state(room)

    def public_state(self, code: Any, viewer_id: str | None = None) -> dict:
        room = self.registry.get(normalize_code(code))
        with room.lock:
            return room_public_state(room, viewer_id)

    # ---- Game ----

    def start_game(self, player_id: str, code: str, rounds_each: Any, seconds_per_round: Any) -> Room:
        room = self.registry.get(code)
        with room.lock:
            if room.closed:
                raise RoomNotFound()
            if not room.has_player(player_id):
                raise NotInRoom()
            rounds, seconds = self._validate_start(room, rounds_each, seconds_per_round)

            self._cancel_timer(room)
            room.total_rounds = rounds
            room.seconds_per_round = seconds
            room.started = True
            room.round = 1
            room.turn_index = 0
            room.game_serial += 1
            room.order = build_order(room.players, rounds, self._rng)
            logger.info(
                "[game-start] room=%s rounds=%d seconds=%d players=%d",
                room.code, rounds, seconds, len(room.players),
            )

            self._advance_turn(room)
            self._broadcast_state(room)
        return room

    def _validate_start(self, room: Room, rounds_each: Any, seconds_per_round: Any) -> tuple[int, int]:
        if not room.players:
            raise InvalidStart("Need at least one player to start")
        if isinstance(rounds_each, bool) or isinstance(seconds_per_round, bool):
            raise InvalidStart("Rounds and seconds must be numbers")
        try:
            rounds = int(rounds_each)
            seconds = int(seconds_per_round)
        except (TypeError, ValueError):
            raise InvalidStart("Rounds and seconds must be numbers")
        if rounds < 1 or rounds > self.max_rounds:
            raise InvalidStart(f"Rounds must be between 1 and {self.max_rounds}")
        if seconds < self.min_seconds_per_round or seconds > self.max_seconds_per_round:
            raise InvalidStart(
                f"Seconds per round must be between {self.min_seconds_per_round} and {self.max_seconds_per_round}"
            )
        return rounds, seconds

    def submit_guess(self, player_id: str, code: str, text: Any) -> bool:
        """Returns True when the guess matched and the turn advanced."""
        room = self.registry.get(code)
        with room.lock:
            if room.closed:
                raise RoomNotFound()
            player = room.find_player(player_id)
            if player is None:
                raise NotInRoom()

            text = str(text or "")
            if not text.strip():
                return False

            matched = (
                room.started
                and room.word is not None
                and text.strip().lower() == room.word.strip().lower()
            )

            if not matched:
                self.broadcaster.to_room(room.code, events.CHAT, f"{player.name}: {text}")
                return False

            if player_id == room.drawer_id:
                logger.debug("[guess-reject] room=%s drawer tried own word", room.code)
                self.broadcaster.to_player(player_id, events.CHAT, "You can't guess your own word")
                return False

            self._score_correct_guess(room, player)
            return True

    def _score_correct_guess(self, room: Room, guesser: Player) -> None:
        guesser.score += max(self.guesser_min_points, room.time_left * self.points_per_second_left)
        drawer = room.find_player(room.drawer_id)
        if drawer is not None:
            drawer.score += self.drawer_points
        logger.info("[guess-correct] room=%s by=%s turn=%d", room.code, guesser.id, room.turn_index)

        self.broadcaster.to_room(room.code, events.GUESS_CORRECT, {"by": guesser.name, "word": room.word})
        self._cancel_timer(room)
        room.turn_index += 1
        self._advance_turn(room)
        self._broadcast_state(room)

    # ---- Turn machinery (callers hold room.lock) ----

    def _advance_turn(self, room: Room) -> None:
        if not room.started:
            return

        # Each skipped entry is a departed drawer; bounded by the order length.
        for _ in range(len(room.order) + 1):
            if self._finish_if_exhausted(room):
                return
            drawer_id = drawer_for(room.order, room.turn_index)
            if drawer_id is None or not room.players:
                # Empty roster: the leave path destroys the room.
                return
            if room.has_player(drawer_id):
                self._begin_turn(room, drawer_id)
                return
            room.turn_index += 1

        logger.info("[turn-skip] room=%s no remaining drawer in order", room.code)
        self._hold(room)

    def _begin_turn(self, room: Room, drawer_id: str) -> None:
        room.drawer_id = drawer_id
        room.word, room.masked_word = self.words.pick()
        room.time_left = room.seconds_per_round
        logger.info(
            "[turn-begin] room=%s turn=%d round=%d/%d drawer=%s",
            room.code, room.turn_index, room.round, room.total_rounds, drawer_id,
        )

        for p in room.players:
            self.broadcaster.to_player(p.id, events.TURN_BEGIN, room_public_state(room, p.id))

        self._start_timer(room)

    def _finish_if_exhausted(self, room: Room) -> bool:
        room.round = round_for(room.turn_index, len(room.players))
        if room.round <= room.total_rounds:
            return False

        self._cancel_timer(room)
        room.started = False
        room.round = room.total_rounds
        self._clear_turn(room)
        logger.info("[game-over] room=%s turns=%d", room.code, room.turn_index)

        self.broadcaster.to_room(room.code, events.CHAT, "🎉 Game over!")
        self.broadcaster.to_room(room.code, events.GAME_OVER, {"players": [asdict(p) for p in room.players]})
        return True

    def _hold(self, room: Room) -> None:
        """Drawer-less lobby; a fresh start is needed to continue."""
        self._cancel_timer(room)
        room.started = False
        self._clear_turn(room)
        logger.info("[turn-hold] room=%s players=%d", room.code, len(room.players))

    def _clear_turn(self, room: Room) -> None:
        room.drawer_id = None
        room.word = None
        room.masked_word = []
        room.time_left = 0

    def _destroy(self, room: Room) -> None:
        self._cancel_timer(room)
        room.closed = True
        room.started = False
        self._clear_turn(room)
        self.registry.remove(room.code)
        logger.info("[room-destroy] room=%s", room.code)

    # ---- Timer ----

    def _start_timer(self, room: Room) -> None:
        self._cancel_timer(room)
        if room.timer is None:
            room.timer = self._timer_factory()
        serial, turn_index = room.game_serial, room.turn_index
        room.timer.start(
            room.seconds_per_round,
            partial(self._on_tick, room, serial, turn_index),
            partial(self._on_timeout, room, serial, turn_index),
        )

    def _cancel_timer(self, room: Room) -> None:
        if room.timer is not None:
            room.timer.cancel()

    def _check_current(self, room: Room, serial: int, turn_index: int) -> None:
        if room.closed or not room.started or room.game_serial != serial or room.turn_index != turn_index:
            raise StaleTimerFired()

    def _on_tick(self, room: Room, serial: int, turn_index: int, remaining: int) -> None:
        with room.lock:
            try:
                self._check_current(room, serial, turn_index)
            except StaleTimerFired:
                logger.debug("[timer-stale] room=%s turn=%d tick ignored", room.code, turn_index)
                return
            room.time_left = max(0, remaining)
            self.broadcaster.to_room(room.code, events.TIMER_TICK, room.time_left)

    def _on_timeout(self, room: Room, serial: int, turn_index: int) -> None:
        with room.lock:
            try:
                self._check_current(room, serial, turn_index)
            except StaleTimerFired:
                logger.debug("[timer-stale] room=%s turn=%d expiry ignored", room.code, turn_index)
                return
            self._cancel_timer(room)
            room.time_left = 0
            logger.info("[turn-timeout] room=%s turn=%d", room.code, turn_index)
            self.broadcaster.to_room(room.code, events.CHAT, f"⏱️ Time up! Word was: {room.word}")
            room.turn_index += 1
            self._advance_turn(room)
            self._broadcast_state(room)

    # ---- Snapshots ----

    def _broadcast_state(self, room: Room) -> None:
        for p in room.players:
            snapshot = room_public_state(room, p.id)
            self.broadcaster.to_player(p.id, events.ROOM_STATE, snapshot)
            if room.started:
                self.broadcaster.to_player(p.id, events.GAME_STATE, snapshot)
