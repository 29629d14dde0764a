from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)


def _cors_origins(value):
    if not value or value.strip() == '*':
        return '*'
    return [origin.strip() for origin in value.split(',') if origin.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # service modules log under the 'hangman' logger, which is flask_app.logger
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))
    origins = _cors_origins(flask_app.config.get('CORS_ORIGINS', '*'))

    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # One registry per app so tests get a fresh, isolated store
    from hangman.models import Settings
    from hangman.services.sessions.registry import SessionRegistry
    registry = SessionRegistry(
        ttl_seconds=flask_app.config.get('SESSION_TTL_SEC', 60 * 60 * 2),
        settings_factory=lambda: Settings.from_config(flask_app.config),
    )
    flask_app.extensions['hangman_registry'] = registry

    from hangman.routes import main
    flask_app.register_blueprint(main)

    if flask_app.config.get('ENABLE_DEBUG_ROUTES'):
        from hangman.api.debug import debug
        flask_app.register_blueprint(debug, url_prefix='/debug')

    from hangman.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    @click.command('sessions-list')
    def sessions_list_command():
        """Print the live sessions of this process."""
        for session in registry.sessions():
            click.echo(
                f"{session.code} state={session.state} players={len(session.players)} "
                f"host={'yes' if session.host_sid else 'no'}"
            )

    @click.command('sessions-purge')
    def sessions_purge_command():
        """Drop sessions that are past their TTL."""
        expired = registry.purge_expired()
        click.echo(f"Purged {len(expired)} expired session(s).")

    flask_app.cli.add_command(sessions_list_command)
    flask_app.cli.add_command(sessions_purge_command)

    return flask_app


def get_registry(app=None):
    from flask import current_app
    return (app or current_app).extensions['hangman_registry']
