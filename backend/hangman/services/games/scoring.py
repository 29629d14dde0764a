import logging

from hangman.models import Session, Round

logger = logging.getLogger(__name__)

POINTS_NO_HINT = 2
POINTS_WITH_HINT = 1


def round_points(rnd: Round) -> int:
    """2 points when the hint stayed hidden, 1 once it was shown.

    The same value applies whether a guesser solves the phrase or the
    setter wins by forfeit.
    """
    return POINTS_WITH_HINT if rnd.hint_shown else POINTS_NO_HINT


def credit(session: Session, player_id, points: int) -> int:
    """Add points to a player still in the session. Returns points credited."""
    player = session.player(player_id)
    if player is None or points <= 0:
        return 0
    player.score += points
    return points


def award_round(session: Session, winner_id) -> int:
    rnd = session.game.round if session.game else None
    if rnd is None:
        return 0
    points = credit(session, winner_id, round_points(rnd))
    logger.info(
        f"[score] code={session.code} winner={winner_id} setter={rnd.setter_id} "
        f"points={points} hint_shown={rnd.hint_shown}"
    )
    return points
