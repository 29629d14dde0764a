"""Round/turn state machine.

idle -> waiting_phrase -> active -> won -> (next) waiting_phrase ... -> over

Every operation takes the Session and the acting player id (the player's
connection sid). Wrong role / wrong turn / wrong state raises NotAllowed and
leaves the session untouched; bad input raises ValidationError with the
event the caller should report it on.
"""

import itertools
import logging
from typing import Optional

from hangman.errors import NotAllowed, ValidationError
from hangman.models import (
    Game, Round, Session,
    IDLE, WAITING_PHRASE, ACTIVE, WON, OVER,
    PHRASE_MAX_CHARS,
)
from .phrase import (
    LETTERS, PhraseRules,
    clean_hint, is_revealed, letter_count, mask, normalize, phrase_length,
)
from .scoring import award_round

logger = logging.getLogger(__name__)

# Process-wide so a restarted game never reuses a round serial
_round_serials = itertools.count(1)


def _require_manager(session: Session, player_id) -> None:
    if not session.is_manager(player_id):
        raise NotAllowed('manager only')


def _open_round(game: Game) -> None:
    game.round = Round(setter_id=game.setter_order[game.setter_pointer])
    game.round_serial = next(_round_serials)
    game.state = WAITING_PHRASE


def _skip_departed_setters(session: Session) -> None:
    game = session.game
    while not game.finished and session.player(game.setter_order[game.setter_pointer]) is None:
        game.setter_pointer += 1


def current_turn_id(rnd: Optional[Round]):
    if rnd is None or not rnd.guesser_order:
        return None
    return rnd.guesser_order[rnd.turn_index % len(rnd.guesser_order)]


def _advance_turn(rnd: Round) -> None:
    if rnd.guesser_order:
        rnd.turn_index = (rnd.turn_index + 1) % len(rnd.guesser_order)


def _require_turn(session: Session, player_id) -> Round:
    game = session.game
    if game is None or game.state != ACTIVE or game.round is None:
        raise NotAllowed('no active round')
    if current_turn_id(game.round) != player_id:
        raise NotAllowed('not your turn')
    return game.round


def start_game(session: Session, player_id, min_players: int = 2) -> Game:
    """Build the setter order and open the first round.

    The setter order is the join order repeated once per lap, so every
    player sets exactly once per lap.
    """
    _require_manager(session, player_id)
    if session.state not in (IDLE, OVER):
        raise NotAllowed('game already running')
    needed = max(1, int(min_players or 1))
    if len(session.players) < needed:
        raise ValidationError(f'Need at least {needed} players to start.', 'error:start')

    order = [p.id for p in session.players] * session.settings.rounds
    game = Game(setter_order=order)
    session.game = game
    if order:
        _open_round(game)
    logger.info(
        f"[game-start] code={session.code} players={len(session.players)} "
        f"laps={session.settings.rounds} turns={len(order)}"
    )
    return game


def submit_phrase(session: Session, player_id, phrase, hint='', rules: PhraseRules = None) -> Round:
    rules = rules or PhraseRules()
    game = session.game
    if game is None or game.state != WAITING_PHRASE or game.round is None:
        raise NotAllowed('not waiting for a phrase')
    if game.round.setter_id != player_id:
        raise NotAllowed('not the setter')

    raw = normalize(phrase, rules.allow_digits)
    if raw is None:
        allowed = 'letters, digits' if rules.allow_digits else 'letters'
        raise ValidationError(
            f"Use {allowed}, spaces, apostrophes, hyphens and periods only.", 'error:phrase'
        )
    if letter_count(raw) == 0 or len(raw) > PHRASE_MAX_CHARS:
        raise ValidationError('That phrase cannot be played.', 'error:phrase')
    settings = session.settings
    length = phrase_length(raw, rules.length_policy)
    if length < settings.min_len or length > settings.max_len:
        unit = 'letters' if rules.length_policy == 'letters' else 'characters'
        raise ValidationError(
            f'Phrase must be {settings.min_len}-{settings.max_len} {unit} long.', 'error:phrase'
        )

    rnd = game.round
    rnd.raw = raw
    rnd.hint = clean_hint(hint, rules.hint_max_len)
    rnd.hint_shown = False
    rnd.guessed_letters = []
    rnd.wrong_count = 0
    rnd.guesser_order = [p.id for p in session.players if p.id != player_id]
    rnd.turn_index = 0
    rnd.winner_id = None
    rnd.masked = mask(raw, ())
    game.state = ACTIVE
    if not rnd.guesser_order:
        logger.warning(f"[round-no-guessers] code={session.code} setter={player_id}")
    logger.info(f"[round-active] code={session.code} setter={player_id} len={len(raw)}")
    return rnd


def show_hint(session: Session, player_id) -> Optional[str]:
    """Reveal the hint once. Returns the text the first time, None after."""
    game = session.game
    if game is None or game.state != ACTIVE or game.round is None:
        raise NotAllowed('no active round')
    rnd = game.round
    if rnd.setter_id != player_id:
        raise NotAllowed('not the setter')
    if rnd.hint_shown or not rnd.hint:
        return None
    rnd.hint_shown = True
    return rnd.hint


def guess_letter(session: Session, player_id, letter) -> bool:
    rnd = _require_turn(session, player_id)
    ch = letter.strip().upper() if isinstance(letter, str) else ''
    if len(ch) != 1 or ch not in LETTERS:
        raise ValidationError('Guess a single letter A-Z.', 'error:guess')
    if ch in rnd.guessed_letters:
        return False

    rnd.guessed_letters.append(ch)
    if ch in rnd.raw:
        rnd.masked = mask(rnd.raw, rnd.guessed_letters)
        if is_revealed(rnd.masked):
            _guesser_wins(session, player_id)
        else:
            _advance_turn(rnd)
    else:
        _register_miss(session)
    return True


def solve(session: Session, player_id, guess, rules: PhraseRules = None) -> bool:
    rules = rules or PhraseRules()
    rnd = _require_turn(session, player_id)
    attempt = normalize(guess, rules.allow_digits)
    if attempt is None:
        raise ValidationError('That is not a valid solve attempt.', 'error:guess')
    if attempt == rnd.raw:
        rnd.masked = rnd.raw
        _guesser_wins(session, player_id)
    else:
        _register_miss(session)
    return True


def _register_miss(session: Session) -> None:
    rnd = session.game.round
    rnd.wrong_count += 1
    settings = session.settings
    if settings.limits_wrong_guesses and rnd.wrong_count >= settings.wrong_limit:
        _setter_wins(session)
    else:
        _advance_turn(rnd)


def _guesser_wins(session: Session, player_id) -> None:
    game = session.game
    game.state = WON
    game.round.winner_id = player_id
    points = award_round(session, player_id)
    logger.info(f"[round-won] code={session.code} winner={player_id} points={points}")


def _setter_wins(session: Session) -> None:
    game = session.game
    rnd = game.round
    game.state = WON
    rnd.winner_id = rnd.setter_id
    rnd.masked = rnd.raw
    points = award_round(session, rnd.setter_id)
    logger.info(f"[round-forfeit] code={session.code} setter={rnd.setter_id} points={points}")


def advance(session: Session) -> Game:
    """Move to the next setter still in the session, or finish the game."""
    game = session.game
    game.setter_pointer += 1
    _skip_departed_setters(session)
    if game.finished:
        game.state = OVER
        game.round = None
        logger.info(f"[game-over] code={session.code} turns={len(game.setter_order)}")
    else:
        _open_round(game)
        logger.info(
            f"[next-round] code={session.code} pointer={game.setter_pointer} setter={game.round.setter_id}"
        )
    return game


def next_round(session: Session, player_id) -> Game:
    _require_manager(session, player_id)
    game = session.game
    if game is None:
        raise NotAllowed('no game')
    stranded = game.state == ACTIVE and game.round is not None and not game.round.guesser_order
    if game.state != WON and not stranded:
        raise NotAllowed('round still in progress')
    if stranded:
        logger.info(f"[round-skip] code={session.code} setter={game.round.setter_id} reason=no-guessers")
    return advance(session)


def handle_player_joined(session: Session, player_id) -> bool:
    """Late joiners become guessers of an active round."""
    game = session.game
    if game is None or game.state != ACTIVE or game.round is None:
        return False
    rnd = game.round
    if player_id == rnd.setter_id or player_id in rnd.guesser_order:
        return False
    rnd.guesser_order.append(player_id)
    return True


def handle_player_left(session: Session, player_id) -> bool:
    """Repair the round after a player has been removed from the session."""
    game = session.game
    if game is None or game.round is None:
        return False
    rnd = game.round

    if rnd.setter_id == player_id and game.state in (WAITING_PHRASE, ACTIVE):
        logger.info(f"[round-abandon] code={session.code} setter={player_id}")
        advance(session)
        return True

    if game.state != ACTIVE or player_id not in rnd.guesser_order:
        return False
    idx = rnd.guesser_order.index(player_id)
    rnd.guesser_order.remove(player_id)
    if not rnd.guesser_order:
        _setter_wins(session)
        return True
    if idx < rnd.turn_index:
        rnd.turn_index -= 1
    rnd.turn_index %= len(rnd.guesser_order)
    return True


def rebind_player(session: Session, old_id, new_id) -> None:
    game = session.game
    if game is None:
        return
    game.setter_order = [new_id if pid == old_id else pid for pid in game.setter_order]
    rnd = game.round
    if rnd is None:
        return
    if rnd.setter_id == old_id:
        rnd.setter_id = new_id
    if rnd.winner_id == old_id:
        rnd.winner_id = new_id
    rnd.guesser_order = [new_id if pid == old_id else pid for pid in rnd.guesser_order]
