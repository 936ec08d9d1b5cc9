from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.errors import RoomNotFound

bp = Blueprint("rooms", __name__)


@bp.get("/rooms/<code>")
def get_room(code: str):
    # No viewer: the secret word is never part of this payload.
    service = current_app.extensions["sketchparty"]
    try:
        return jsonify(service.public_state(code))
    except RoomNotFound as exc:
        return jsonify({"error": exc.code}), 404
