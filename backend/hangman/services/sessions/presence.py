"""Presence and membership: join, rejoin, rename, host re-attach, settings,
session end and disconnect cleanup.

Player ids are connection sids, so a rejoin from a new connection rewrites
the id everywhere the round engine refers to it.
"""

from dataclasses import dataclass
import logging
from typing import Optional, Tuple

from hangman.errors import NotAllowed, NotFoundError, ValidationError
from hangman.models import (
    Player, Session, clean_name,
    ROUNDS_RANGE, WRONG_LIMIT_RANGE, PHRASE_MAX_CHARS,
)
from hangman.services.games import engine
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = 'Invalid or expired code.'


@dataclass
class DisconnectResult:
    code: Optional[str] = None
    session: Optional[Session] = None
    was_host: bool = False
    ended: bool = False
    # False when nothing about the session changed (unknown sid)
    changed: bool = False


def _lookup(registry: SessionRegistry, code) -> Session:
    session = registry.get(code)
    if session is None:
        raise NotFoundError(NOT_FOUND_MESSAGE, 'error:join')
    return session


def _ensure_manager(session: Session) -> None:
    """Exactly one manager whenever players exist: earliest joiner wins ties."""
    managers = [p for p in session.players if p.is_manager]
    if len(managers) == 1 or not session.players:
        return
    for p in session.players:
        p.is_manager = False
    session.players[0].is_manager = True
    logger.info(f"[manager] code={session.code} manager={session.players[0].id}")


def join(registry: SessionRegistry, code, sid: str, name) -> Tuple[Session, Player]:
    session = _lookup(registry, code)
    existing = session.player(sid)
    if existing is not None:
        return session, existing
    player = Player(id=sid, name=clean_name(name), is_manager=not session.players)
    session.players.append(player)
    registry.bind(sid, session.code)
    engine.handle_player_joined(session, sid)
    logger.info(
        f"[join] code={session.code} player={sid} name={player.name!r} manager={player.is_manager}"
    )
    return session, player


def rejoin(registry: SessionRegistry, code, sid: str, name) -> Tuple[Session, Player]:
    """Resume as an existing player matched by name, else join fresh.

    Anyone presenting the same name takes over that slot (manager role and
    score included); there is no token behind it.
    """
    session = _lookup(registry, code)
    player = session.player_by_name(name)
    if player is None:
        return join(registry, code, sid, name)
    old_id = player.id
    if old_id != sid:
        if session.player(sid) is not None:
            # this connection already holds a different slot
            return session, session.player(sid)
        player.id = sid
        engine.rebind_player(session, old_id, sid)
        if registry.code_for(old_id) == session.code:
            registry.unbind(old_id)
        registry.bind(sid, session.code)
    logger.info(f"[rejoin] code={session.code} player={sid} previous={old_id} name={player.name!r}")
    return session, player


def rename(registry: SessionRegistry, sid: str, name) -> Tuple[Session, Player]:
    session = registry.session_for(sid)
    player = session.player(sid) if session else None
    if player is None:
        raise NotAllowed('not a player')
    player.name = clean_name(name)
    logger.info(f"[rename] code={session.code} player={sid} name={player.name!r}")
    return session, player


def attach_host(registry: SessionRegistry, code, sid: str) -> Session:
    """Host reconnect path: rebind the display to an existing session.

    A phone asking for the player list of its own session is left alone.
    """
    session = _lookup(registry, code)
    if session.player(sid) is not None:
        return session
    if session.host_sid != sid:
        previous = session.host_sid
        if previous:
            registry.unbind(previous)
        session.host_sid = sid
        registry.bind(sid, session.code)
        logger.info(f"[host-attach] code={session.code} host={sid} previous={previous}")
    return session


def _coerce_bool(value, name):
    if not isinstance(value, bool):
        raise ValidationError(f'{name} must be true or false.', 'error:settings')
    return value


def _coerce_int(value, name, low, high):
    if isinstance(value, bool):
        raise ValidationError(f'{name} must be a number.', 'error:settings')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a number.', 'error:settings')
    if number < low or number > high:
        raise ValidationError(f'{name} must be between {low} and {high}.', 'error:settings')
    return number


def set_settings(session: Session, player_id, rounds=None, min_len=None, max_len=None,
                 wrong_limit=None, unlimited_wrong=None):
    """Partial update by the manager; all-or-nothing, and only before a game runs."""
    if not session.is_manager(player_id):
        raise NotAllowed('manager only')
    if session.settings_locked:
        raise NotAllowed('settings are locked while a game runs')

    current = session.settings
    new_rounds = current.rounds if rounds is None else _coerce_int(rounds, 'Rounds', *ROUNDS_RANGE)
    new_min = current.min_len if min_len is None else _coerce_int(min_len, 'Minimum length', 1, PHRASE_MAX_CHARS)
    new_max = current.max_len if max_len is None else _coerce_int(max_len, 'Maximum length', 1, PHRASE_MAX_CHARS)
    new_limit = current.wrong_limit if wrong_limit is None else _coerce_int(wrong_limit, 'Wrong guess limit', *WRONG_LIMIT_RANGE)
    new_unlimited = current.unlimited_wrong if unlimited_wrong is None else _coerce_bool(unlimited_wrong, 'Unlimited wrong guesses')
    if new_min > new_max:
        raise ValidationError('Minimum length cannot exceed maximum length.', 'error:settings')

    current.rounds = new_rounds
    current.min_len = new_min
    current.max_len = new_max
    current.wrong_limit = new_limit
    current.unlimited_wrong = new_unlimited
    logger.info(f"[settings] code={session.code} {current.to_dict()}")
    return current


def end_session(registry: SessionRegistry, sid: str) -> Session:
    """Host or manager ends the session for everyone."""
    session = registry.session_for(sid)
    if session is None:
        raise NotAllowed('no session')
    if session.host_sid != sid and not session.is_manager(sid):
        raise NotAllowed('host or manager only')
    registry.delete(session.code)
    logger.info(f"[session-end] code={session.code} by={sid}")
    return session


def remove_player(session: Session, sid: str) -> bool:
    player = session.player(sid)
    if player is None:
        return False
    session.players.remove(player)
    _ensure_manager(session)
    engine.handle_player_left(session, sid)
    return True


def disconnect(registry: SessionRegistry, sid: str) -> DisconnectResult:
    code = registry.unbind(sid)
    session = registry.get(code) if code else None
    if session is None:
        return DisconnectResult(code=code)

    result = DisconnectResult(code=session.code, session=session)
    if session.host_sid == sid:
        result.was_host = True
        result.changed = True
        if session.players:
            session.host_sid = None
            logger.info(f"[host-left] code={session.code} players={len(session.players)}")
        else:
            registry.delete(session.code)
            result.ended = True
            logger.info(f"[session-end] code={session.code} reason=host-left")
        return result

    result.changed = remove_player(session, sid)
    if result.changed:
        logger.info(f"[leave] code={session.code} player={sid} remaining={len(session.players)}")
    return result


def leave_previous(registry: SessionRegistry, sid: str, code=None) -> Optional[DisconnectResult]:
    """Detach ``sid`` from the session it is bound to before it moves on.

    A connection is a member (player or host) of one session at a time. When
    it joins, rejoins, attaches to or creates another session, it leaves the
    old one through the disconnect path. Nothing happens when ``code`` names
    the session it is already in, or names no live session.
    """
    previous = registry.code_for(sid)
    if previous is None:
        return None
    if code is not None:
        target = registry.get(code)
        if target is None or target.code == previous:
            return None
    logger.info(f"[move] sid={sid} from={previous} to={code}")
    return disconnect(registry, sid)
