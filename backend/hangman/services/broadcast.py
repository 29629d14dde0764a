"""Outbound snapshots.

``players_view`` and ``game_state_view`` are pure projections of a Session.
The ``emit_*`` helpers deliver them to the session room and, separately, to
the host connection: the room emit skips the host sid so a host that is in
the room still receives a single copy, and a host that lost its room
membership still receives one.
"""

from typing import Any, Dict, List

from flask import current_app

from hangman import socketio
from hangman.models import Session, ACTIVE, WON
from hangman.services.games.engine import current_turn_id


def players_view(session: Session) -> List[Dict[str, Any]]:
    return [p.to_dict() for p in session.players]


def game_state_view(session: Session) -> Dict[str, Any]:
    settings = session.settings
    game = session.game
    rnd = game.round if game else None
    state = session.state
    view = {
        'code': session.code,
        'state': state,
        'laps': settings.rounds,
        'roundsTotal': len(game.setter_order) if game else 0,
        'roundIndex': game.setter_pointer if game else 0,
        'setterId': rnd.setter_id if rnd else None,
        'currentTurnId': current_turn_id(rnd) if state == ACTIVE else None,
        'hintShown': bool(rnd and rnd.hint_shown),
        'hint': rnd.hint if rnd and rnd.hint_shown else None,
        'hasHint': bool(rnd and rnd.hint),
        'masked': rnd.masked if rnd else '',
        'guessedLetters': list(rnd.guessed_letters) if rnd else [],
        'wrongLimit': settings.wrong_limit if settings.limits_wrong_guesses else None,
        'wrongCount': rnd.wrong_count if rnd else 0,
        'winnerId': rnd.winner_id if rnd and state == WON else None,
        'scores': [{'id': p.id, 'name': p.name, 'score': p.score} for p in session.players],
        'settings': settings.to_dict(),
    }
    return view


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/ws')


def _deliver(session_code: str, host_sid, event: str, payload) -> None:
    namespace = _namespace()
    socketio.emit(event, payload, to=session_code, skip_sid=host_sid, namespace=namespace)
    if host_sid:
        socketio.emit(event, payload, to=host_sid, namespace=namespace)


def emit_players(session: Session) -> None:
    _deliver(session.code, session.host_sid, 'session:players',
             {'code': session.code, 'players': players_view(session)})


def emit_game_state(session: Session) -> None:
    _deliver(session.code, session.host_sid, 'game:state', game_state_view(session))


def emit_snapshots(session: Session) -> None:
    emit_players(session)
    emit_game_state(session)


def emit_hint(session: Session, hint: str) -> None:
    _deliver(session.code, session.host_sid, 'round:hint', {'hint': hint})


def emit_session_ended(code: str, host_sid=None) -> None:
    _deliver(code, host_sid, 'session:ended', {'code': code})
