import os
import random
import sys

import pytest

# Ensure the backend root (containing the `sketchparty` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from sketchparty.game.registry import RoomRegistry
from sketchparty.game.service import GameService
from sketchparty.game.words import WordProvider
from sketchparty.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    ROOM_CODE_LENGTH = 4
    DEFAULT_TOTAL_ROUNDS = 3
    DEFAULT_SECONDS_PER_ROUND = 75
    MAX_ROUNDS = 20
    MIN_SECONDS_PER_ROUND = 1
    MAX_SECONDS_PER_ROUND = 300
    # Long enough that no tick fires during a socket test unless it asks for one
    TICK_INTERVAL_SEC = 30.0
    GUESSER_MIN_POINTS = 100
    POINTS_PER_SECOND_LEFT = 10
    DRAWER_POINTS = 50
    WORDS = ['apple']


class FakeTimer:
    """Stands in for RoundTimer; tests fire ticks and expiry by hand."""

    def __init__(self):
        self.starts = 0
        self.cancels = 0
        self.running = False
        self.duration = None
        self.on_tick = None
        self.on_expire = None

    def start(self, duration, on_tick, on_expire):
        self.cancel()
        self.starts += 1
        self.running = True
        self.duration = duration
        self.on_tick = on_tick
        self.on_expire = on_expire

    def cancel(self):
        self.cancels += 1
        self.running = False

    def tick(self, remaining):
        self.on_tick(remaining)

    def expire(self):
        callback = self.on_expire
        self.running = False
        callback()


class RecordingBroadcaster:
    def __init__(self):
        self.sent = []

    def to_room(self, room_code, event, payload=None):
        self.sent.append((room_code, event, payload))

    def to_player(self, player_id, event, payload=None):
        self.sent.append((player_id, event, payload))

    def payloads(self, event, target=None):
        return [p for t, e, p in self.sent if e == event and (target is None or t == target)]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def service(broadcaster):
    return GameService(
        registry=RoomRegistry(rng=random.Random(7)),
        words=WordProvider(['apple'], rng=random.Random(3)),
        broadcaster=broadcaster,
        timer_factory=FakeTimer,
        min_seconds_per_round=1,
        rng=random.Random(11),
    )


def make_app(**overrides):
    config = type('Config', (TestConfig,), overrides)
    return create_app(config)


@pytest.fixture()
def app_and_socketio():
    return make_app()


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(app_and_socketio):
    flask_app, socketio = app_and_socketio
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make

    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
