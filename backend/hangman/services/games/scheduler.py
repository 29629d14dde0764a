import logging
from typing import Dict, Tuple

from hangman import socketio
from hangman.models import WON
from hangman.services.broadcast import emit_snapshots
from . import engine

logger = logging.getLogger(__name__)

# session code -> token of the round the pending timer was set for
_pending: Dict[str, Tuple[int, int]] = {}


def _token(session) -> Tuple[int, int]:
    game = session.game
    return (game.setter_pointer, game.round_serial)


def cancel(code: str) -> None:
    if _pending.pop(code, None) is not None:
        logger.info(f"[timer-cancel] code={code}")


def pending(code: str) -> bool:
    return code in _pending


def schedule_auto_advance(app, session) -> bool:
    """Schedule the move to the next setter after a won round.

    - No-op when AUTO_ADVANCE_SEC is 0 (the manager advances by hand)
    - One timer per session; scheduling again replaces the previous token
    - The timer re-checks the session before touching it, so a manual
      advance or an ended session in the meantime turns it into a no-op
    """
    delay = float(app.config.get('AUTO_ADVANCE_SEC', 0) or 0)
    game = session.game
    if delay <= 0 or game is None or game.state != WON:
        return False

    code = session.code
    token = _token(session)
    _pending[code] = token
    logger.info(f"[timer-set] code={code} pointer={token[0]} round={token[1]} delay={delay}s")
    socketio.start_background_task(_worker, app, code, token, delay)
    return True


def _worker(app, code: str, token: Tuple[int, int], delay: float) -> None:
    socketio.sleep(delay)
    fire(app, code, token)


def fire(app, code: str, token: Tuple[int, int]) -> bool:
    """Run a due auto-advance. Returns True when the game was advanced."""
    registry = app.extensions['hangman_registry']
    with app.app_context(), registry.lock:
        if _pending.get(code) != token:
            logger.info(f"[timer-abort] code={code} reason=superseded")
            return False
        _pending.pop(code, None)
        session = registry.get(code)
        if session is None or session.game is None:
            logger.info(f"[timer-abort] code={code} reason=session-gone")
            return False
        if session.game.state != WON or _token(session) != token:
            logger.info(f"[timer-abort] code={code} reason=state-changed state={session.game.state}")
            return False
        logger.info(f"[timer-fire] code={code} pointer={token[0]}")
        engine.advance(session)
        emit_snapshots(session)
        return True
