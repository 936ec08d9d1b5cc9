import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty -> picked per platform in create_app)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "4"))
    DEFAULT_TOTAL_ROUNDS = int(os.environ.get("DEFAULT_TOTAL_ROUNDS", "3"))
    DEFAULT_SECONDS_PER_ROUND = int(os.environ.get("DEFAULT_SECONDS_PER_ROUND", "75"))

    # Game
    MAX_ROUNDS = int(os.environ.get("MAX_ROUNDS", "20"))
    MIN_SECONDS_PER_ROUND = int(os.environ.get("MIN_SECONDS_PER_ROUND", "5"))
    MAX_SECONDS_PER_ROUND = int(os.environ.get("MAX_SECONDS_PER_ROUND", "300"))
    TICK_INTERVAL_SEC = float(os.environ.get("TICK_INTERVAL_SEC", "1.0"))

    # Scoring
    GUESSER_MIN_POINTS = int(os.environ.get("GUESSER_MIN_POINTS", "100"))
    POINTS_PER_SECOND_LEFT = int(os.environ.get("POINTS_PER_SECOND_LEFT", "10"))
    DRAWER_POINTS = int(os.environ.get("DRAWER_POINTS", "50"))

    # Word corpus override (comma separated); unset or blank -> built-in list
    WORDS = os.environ.get("WORDS", "")
