from __future__ import annotations

import logging
from threading import Event
from typing import Any, Callable


logger = logging.getLogger(__name__)

Spawn = Callable[..., Any]


class RoundTimer:
    """Per-room countdown that ticks once per interval.

    ``spawn`` runs the countdown in the background; in the app it is
    ``socketio.start_background_task`` so it follows the configured async mode.
    Each ``start`` gets a fresh cancellation event, so a countdown that was
    cancelled never calls back again even if its worker is still sleeping.
    The timer never touches room state; callers own every transition.
    """

    def __init__(self, spawn: Spawn, interval: float = 1.0) -> None:
        self._spawn = spawn
        self._interval = interval
        self._cancel: Event | None = None

    @property
    def running(self) -> bool:
        return self._cancel is not None and not self._cancel.is_set()

    def start(
        self,
        duration: int,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
    ) -> None:
        self.cancel()
        token = Event()
        self._cancel = token
        self._spawn(self._run, token, int(duration), on_tick, on_expire)

    def cancel(self) -> None:
        if self._cancel is not None:
            self._cancel.set()

    def _run(
        self,
        token: Event,
        remaining: int,
        on_tick: Callable[[int], None],
        on_expire: Callable[[], None],
    ) -> None:
        while remaining > 0:
            # wait() returns True as soon as the token is set.
            if token.wait(self._interval):
                return
            remaining -= 1
            try:
                on_tick(remaining)
            except Exception:
                logger.exception("[timer-tick] callback failed")
        if token.is_set():
            return
        token.set()
        try:
            on_expire()
        except Exception:
            logger.exception("[timer-expire] callback failed")
