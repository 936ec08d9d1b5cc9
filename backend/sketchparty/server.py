from __future__ import annotations

import logging
import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.service import GameService
from .realtime.broadcaster import SocketIOBroadcaster
from .realtime.handlers import register_socketio_handlers
from .realtime.session import SessionRouter
from .routes.rooms import bp as rooms_bp


logger = logging.getLogger(__name__)


def _pick_async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    async_mode = _pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", ""))
    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    # Raises WordCorpusError on an empty corpus, before anything is served.
    service = GameService.from_config(
        app.config,
        broadcaster=SocketIOBroadcaster(socketio),
        spawn=socketio.start_background_task,
    )
    app.extensions["sketchparty"] = service

    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, service, SessionRouter())

    logger.info("[startup] async_mode=%s words=%d", async_mode, len(service.words.words))
    return app, socketio
