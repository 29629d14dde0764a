import os
import sys
import pytest

# Ensure the backend root (containing the `hangman` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from hangman import create_app, socketio, get_registry
from hangman.models import Player, Session, Settings

NAMESPACE = '/ws'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SOCKETIO_NAMESPACE = NAMESPACE
    MIN_PLAYERS = 2
    AUTO_ADVANCE_SEC = 0
    ENABLE_DEBUG_ROUTES = True
    PHRASE_LENGTH_POLICY = 'letters'
    PHRASE_ALLOW_DIGITS = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def connect(flask_app):
    """Factory for Socket.IO test clients on the game namespace."""
    clients = []

    def _connect():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        assert test_client.is_connected(NAMESPACE)
        clients.append(test_client)
        return test_client

    yield _connect
    for test_client in clients:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def events(test_client, name=None):
    received = test_client.get_received(NAMESPACE)
    if name is None:
        return received
    return [pkt['args'][0] if pkt['args'] else None for pkt in received if pkt['name'] == name]


def make_session(names=('Alice', 'Bob'), **settings):
    """Session with players whose ids are their lowercased names."""
    players = [Player(id=n.lower(), name=n, is_manager=(i == 0)) for i, n in enumerate(names)]
    return Session(code='ABCD23', host_sid='host', players=players, settings=Settings(**settings))
