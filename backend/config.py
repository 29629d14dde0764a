import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '10000'))
    # Comma separated; '*' allows any origin (phones join from anywhere on the LAN)
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Sessions expire this long after creation regardless of activity (seconds)
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', str(60 * 60 * 2)))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    # Session defaults, changeable by the manager before the game starts
    DEFAULT_ROUNDS = int(os.environ.get('DEFAULT_ROUNDS', '1'))
    DEFAULT_MIN_LEN = int(os.environ.get('DEFAULT_MIN_LEN', '3'))
    DEFAULT_MAX_LEN = int(os.environ.get('DEFAULT_MAX_LEN', '30'))
    DEFAULT_WRONG_LIMIT = int(os.environ.get('DEFAULT_WRONG_LIMIT', '6'))
    DEFAULT_UNLIMITED_WRONG = _env_bool('DEFAULT_UNLIMITED_WRONG', False)
    # 'letters' counts A-Z only against minLen/maxLen; 'full' counts the normalized phrase
    PHRASE_LENGTH_POLICY = os.environ.get('PHRASE_LENGTH_POLICY', 'letters')
    PHRASE_ALLOW_DIGITS = _env_bool('PHRASE_ALLOW_DIGITS', False)
    HINT_MAX_LEN = int(os.environ.get('HINT_MAX_LEN', '80'))
    # Pause after a won round before moving to the next setter. 0 disables (manager advances).
    AUTO_ADVANCE_SEC = float(os.environ.get('AUTO_ADVANCE_SEC', '0'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    # Unauthenticated /debug routes; switch off for anything public
    ENABLE_DEBUG_ROUTES = _env_bool('ENABLE_DEBUG_ROUTES', True)
