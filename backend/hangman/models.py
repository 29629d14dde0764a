from dataclasses import dataclass, field
from typing import List, Optional
import time

# Game states
IDLE = 'idle'
WAITING_PHRASE = 'waiting_phrase'
ACTIVE = 'active'
WON = 'won'
OVER = 'over'

GAME_STATES = (IDLE, WAITING_PHRASE, ACTIVE, WON, OVER)

NAME_MAX_LEN = 16
DEFAULT_PLAYER_NAME = 'Player'

# Settings bounds
ROUNDS_RANGE = (1, 20)
WRONG_LIMIT_RANGE = (1, 26)
PHRASE_MAX_CHARS = 60


def clean_name(name) -> str:
    cleaned = str(name or '').strip()
    if not cleaned:
        cleaned = DEFAULT_PLAYER_NAME
    return cleaned[:NAME_MAX_LEN]


@dataclass
class Player:
    id: str
    name: str
    is_manager: bool = False
    score: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'isManager': self.is_manager,
            'score': self.score,
        }


@dataclass
class Settings:
    rounds: int = 1
    min_len: int = 3
    max_len: int = 30
    wrong_limit: int = 6
    unlimited_wrong: bool = False

    @classmethod
    def from_config(cls, config) -> 'Settings':
        return cls(
            rounds=int(config.get('DEFAULT_ROUNDS', 1)),
            min_len=int(config.get('DEFAULT_MIN_LEN', 3)),
            max_len=int(config.get('DEFAULT_MAX_LEN', 30)),
            wrong_limit=int(config.get('DEFAULT_WRONG_LIMIT', 6)),
            unlimited_wrong=bool(config.get('DEFAULT_UNLIMITED_WRONG', False)),
        )

    @property
    def limits_wrong_guesses(self) -> bool:
        return not self.unlimited_wrong

    def to_dict(self):
        return {
            'rounds': self.rounds,
            'minLen': self.min_len,
            'maxLen': self.max_len,
            'wrongLimit': self.wrong_limit,
            'unlimitedWrong': self.unlimited_wrong,
        }


@dataclass
class Round:
    setter_id: str
    raw: str = ''
    masked: str = ''
    hint: str = ''
    hint_shown: bool = False
    # list keeps guess order for display
    guessed_letters: List[str] = field(default_factory=list)
    wrong_count: int = 0
    guesser_order: List[str] = field(default_factory=list)
    turn_index: int = 0
    winner_id: Optional[str] = None


@dataclass
class Game:
    setter_order: List[str] = field(default_factory=list)
    setter_pointer: int = 0
    state: str = IDLE
    round: Optional[Round] = None
    # bumped on every new round so stale timers can tell rounds apart
    round_serial: int = 0

    @property
    def finished(self) -> bool:
        return self.setter_pointer >= len(self.setter_order)

    @property
    def current_setter_id(self) -> Optional[str]:
        if self.round is not None:
            return self.round.setter_id
        return None


@dataclass
class Session:
    code: str
    host_sid: Optional[str]
    created_at: float = field(default_factory=time.time)
    players: List[Player] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    game: Optional[Game] = None

    def is_expired(self, ttl: float, now: float = None) -> bool:
        if now is None:
            now = time.time()
        return now - self.created_at > ttl

    def player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_by_name(self, name: str) -> Optional[Player]:
        wanted = clean_name(name).casefold()
        for p in self.players:
            if p.name.casefold() == wanted:
                return p
        return None

    def manager(self) -> Optional[Player]:
        for p in self.players:
            if p.is_manager:
                return p
        return None

    def is_manager(self, player_id) -> bool:
        p = self.player(player_id)
        return bool(p and p.is_manager)

    @property
    def state(self) -> str:
        return self.game.state if self.game else IDLE

    @property
    def settings_locked(self) -> bool:
        return self.state not in (IDLE, OVER)
