from functools import wraps

from flask import current_app, request
from flask_socketio import close_room, emit, join_room, leave_room

from hangman import socketio, get_registry
from hangman.errors import GameError, NotAllowed, build_error_payload
from hangman.models import WON
from hangman.services.broadcast import (
    emit_game_state, emit_hint, emit_players, emit_session_ended, emit_snapshots,
)
from hangman.services.games import engine, scheduler
from hangman.services.games.phrase import PhraseRules
from hangman.services.sessions import presence


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def _session(registry):
    session = registry.session_for(_get_sid())
    if session is None:
        raise NotAllowed('not in a session')
    return session


def _guarded(handler):
    """Run a handler to completion under the registry lock.

    NotAllowed is dropped silently (no event); other GameErrors are reported
    to the calling connection only.
    """
    @wraps(handler)
    def wrapper(*args):
        registry = get_registry()
        with registry.lock:
            try:
                return handler(registry, *args)
            except NotAllowed as exc:
                current_app.logger.debug(
                    f"[ignored] event={handler.__name__} sid={_get_sid()} reason={exc.message}"
                )
            except GameError as exc:
                current_app.logger.info(
                    f"[rejected] event={handler.__name__} sid={_get_sid()} reply={exc.event} message={exc.message}"
                )
                emit(exc.event, build_error_payload(exc))
    return wrapper


def _after_move(session) -> None:
    """Broadcast after a round mutation; scores and timers follow a win."""
    emit_game_state(session)
    if session.game and session.game.state == WON:
        emit_players(session)
        scheduler.schedule_auto_advance(current_app._get_current_object(), session)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'message': 'Connected'})


def _announce_departure(result) -> None:
    if not result.changed:
        return
    if result.ended:
        scheduler.cancel(result.code)
        emit_session_ended(result.code)
        close_room(result.code)
        return
    emit_players(result.session)
    _after_move(result.session)


def _leave_previous(registry, code=None) -> None:
    """Take this connection out of the session it is moving away from."""
    result = presence.leave_previous(registry, _get_sid(), code)
    if result is None:
        return
    if result.code:
        leave_room(result.code)
    _announce_departure(result)


@_guarded
def handle_disconnect(registry, *args):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    _announce_departure(presence.disconnect(registry, sid))


# ---- host (presentation display) ----

@_guarded
def handle_create_session(registry, data=None):
    _leave_previous(registry)
    session = registry.create(_get_sid())
    join_room(session.code)
    emit('session:created', {'code': session.code})
    emit_snapshots(session)


@_guarded
def handle_get_players(registry, data=None):
    """Player list re-sync; also the host's way back into its session."""
    sid = _get_sid()
    code = _payload(data).get('code')
    _leave_previous(registry, code)
    session = presence.attach_host(registry, code, sid)
    join_room(session.code)
    if session.host_sid == sid:
        emit('session:created', {'code': session.code})
    emit_snapshots(session)


# ---- phones ----

@_guarded
def handle_join(registry, data=None):
    payload = _payload(data)
    _leave_previous(registry, payload.get('code'))
    session, player = presence.join(registry, payload.get('code'), _get_sid(), payload.get('name'))
    join_room(session.code)
    emit('player:joined', {'code': session.code, 'playerId': player.id,
                           'name': player.name, 'isManager': player.is_manager})
    emit_snapshots(session)


@_guarded
def handle_rejoin(registry, data=None):
    payload = _payload(data)
    _leave_previous(registry, payload.get('code'))
    session, player = presence.rejoin(registry, payload.get('code'), _get_sid(), payload.get('name'))
    join_room(session.code)
    emit('player:joined', {'code': session.code, 'playerId': player.id,
                           'name': player.name, 'isManager': player.is_manager})
    emit_snapshots(session)


@_guarded
def handle_rename(registry, data=None):
    session, _player = presence.rename(registry, _get_sid(), _payload(data).get('name'))
    emit_snapshots(session)


# ---- manager ----

@_guarded
def handle_set_settings(registry, data=None):
    payload = _payload(data)
    session = _session(registry)
    presence.set_settings(
        session, _get_sid(),
        rounds=payload.get('rounds'),
        min_len=payload.get('minLen'),
        max_len=payload.get('maxLen'),
        wrong_limit=payload.get('wrongLimit'),
        unlimited_wrong=payload.get('unlimitedWrong'),
    )
    emit_game_state(session)


@_guarded
def handle_start_game(registry, data=None):
    session = _session(registry)
    engine.start_game(session, _get_sid(), min_players=current_app.config.get('MIN_PLAYERS', 2))
    scheduler.cancel(session.code)
    emit_snapshots(session)


@_guarded
def handle_next_round(registry, data=None):
    session = _session(registry)
    engine.next_round(session, _get_sid())
    scheduler.cancel(session.code)
    emit_game_state(session)


@_guarded
def handle_end_game(registry, data=None):
    session = presence.end_session(registry, _get_sid())
    scheduler.cancel(session.code)
    emit_session_ended(session.code, session.host_sid)
    close_room(session.code)


# ---- round ----

def _rules() -> PhraseRules:
    return PhraseRules.from_config(current_app.config)


@_guarded
def handle_submit_phrase(registry, data=None):
    payload = _payload(data)
    session = _session(registry)
    engine.submit_phrase(session, _get_sid(), payload.get('phrase'), payload.get('hint'), _rules())
    emit('round:phraseAccepted', {'code': session.code})
    emit_game_state(session)


@_guarded
def handle_show_hint(registry, data=None):
    session = _session(registry)
    hint = engine.show_hint(session, _get_sid())
    if hint is None:
        return
    emit_hint(session, hint)
    emit_game_state(session)


@_guarded
def handle_guess_letter(registry, data=None):
    session = _session(registry)
    if engine.guess_letter(session, _get_sid(), _payload(data).get('letter')):
        _after_move(session)


@_guarded
def handle_solve(registry, data=None):
    session = _session(registry)
    if engine.solve(session, _get_sid(), _payload(data).get('guess'), _rules()):
        _after_move(session)


def handle_error(exc):
    # A broken event for one session must not take the listener down
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event={request.event}")


EVENTS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'atv:createSession': handle_create_session,
    'atv:getPlayers': handle_get_players,
    'player:join': handle_join,
    'player:rejoin': handle_rejoin,
    'player:rename': handle_rename,
    'game:setSettings': handle_set_settings,
    'game:start': handle_start_game,
    'game:next': handle_next_round,
    'game:end': handle_end_game,
    'round:submitPhrase': handle_submit_phrase,
    'round:showHint': handle_show_hint,
    'round:guessLetter': handle_guess_letter,
    'round:solve': handle_solve,
}


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register every Socket.IO event handler on ``namespace``."""
    for event, handler in EVENTS.items():
        socketio.on_event(event, handler, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
