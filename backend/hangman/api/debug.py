"""Unauthenticated introspection routes for manual testing.

Registered only when ENABLE_DEBUG_ROUTES is set. The simulated host and
players use made-up connection ids, so nothing is ever delivered to them.
"""

import uuid

from flask import Blueprint, current_app, jsonify, request

from hangman import get_registry
from hangman.errors import GameError, build_error_payload
from hangman.services.broadcast import emit_snapshots, game_state_view, players_view
from hangman.services.games import scheduler
from hangman.services.sessions import presence

debug = Blueprint('debug', __name__)


def _fake_sid(prefix):
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _session_dict(session):
    return {
        'code': session.code,
        'hostSid': session.host_sid,
        'createdAt': session.created_at,
        'players': players_view(session),
        'game': game_state_view(session),
    }


@debug.route('/sessions')
def list_sessions():
    registry = get_registry()
    with registry.lock:
        return jsonify({'sessions': [_session_dict(s) for s in registry.sessions()]})


@debug.route('/reset')
def reset_sessions():
    registry = get_registry()
    with registry.lock:
        count = len(registry)
        for session in registry.sessions():
            scheduler.cancel(session.code)
        registry.clear()
    current_app.logger.info(f"[debug-reset] cleared={count}")
    return jsonify({'message': 'Registry cleared', 'cleared': count})


@debug.route('/create')
def create_session():
    registry = get_registry()
    with registry.lock:
        session = registry.create(_fake_sid('debug-host'))
        return jsonify({'code': session.code, 'hostSid': session.host_sid}), 201


@debug.route('/join')
def join_session():
    code = request.args.get('code')
    name = request.args.get('name')
    if not code:
        return jsonify({'error': 'code is required'}), 400
    registry = get_registry()
    with registry.lock:
        try:
            session, player = presence.join(registry, code, _fake_sid('debug-player'), name)
        except GameError as exc:
            return jsonify(build_error_payload(exc)), 404
        emit_snapshots(session)
        return jsonify({'code': session.code, 'player': player.to_dict()}), 201
