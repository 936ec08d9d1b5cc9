from __future__ import annotations


class GameError(Exception):
    """Base for errors scoped to a single room or request.

    ``code`` is the machine-readable identifier sent in acks, ``message`` is the
    text shown to the player in an error toast.
    """

    code = "game_error"
    message = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class RoomNotFound(GameError):
    code = "room_not_found"
    message = "Room not found"


class InvalidStart(GameError):
    code = "invalid_start"
    message = "Cannot start the game"


class InvalidPayload(GameError):
    code = "invalid_payload"
    message = "Invalid request"


class NotInRoom(GameError):
    code = "not_in_room"
    message = "You are not in a room"


class StaleTimerFired(GameError):
    """A timer callback arrived for a turn that is no longer current."""

    code = "stale_timer"
    message = "Stale timer callback"


class WordCorpusError(GameError):
    code = "word_corpus"
    message = "Word corpus is empty"
