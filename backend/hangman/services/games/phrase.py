"""Phrase normalisation and masking. Pure functions, no session state."""

from dataclasses import dataclass
import re
import string
from typing import Iterable, Optional

LETTERS = frozenset(string.ascii_uppercase)
PUNCTUATION = frozenset(" '-.")
DIGITS = frozenset(string.digits)
MASK_CHAR = '_'

LENGTH_POLICIES = ('letters', 'full')

_WHITESPACE = re.compile(r'\s+')


@dataclass(frozen=True)
class PhraseRules:
    allow_digits: bool = False
    length_policy: str = 'letters'
    hint_max_len: int = 80

    @classmethod
    def from_config(cls, config) -> 'PhraseRules':
        policy = str(config.get('PHRASE_LENGTH_POLICY', 'letters')).strip().lower()
        if policy not in LENGTH_POLICIES:
            raise ValueError(f"PHRASE_LENGTH_POLICY must be one of {LENGTH_POLICIES}, got {policy!r}")
        return cls(
            allow_digits=bool(config.get('PHRASE_ALLOW_DIGITS', False)),
            length_policy=policy,
            hint_max_len=int(config.get('HINT_MAX_LEN', 80)),
        )


def normalize(text, allow_digits: bool = False) -> Optional[str]:
    """Uppercase, collapse whitespace and validate against the allow-list.

    Returns None when a disallowed character is present or nothing is left.
    """
    if not isinstance(text, str):
        return None
    canonical = _WHITESPACE.sub(' ', text.upper()).strip()
    if not canonical:
        return None
    allowed = LETTERS | PUNCTUATION
    if allow_digits:
        allowed = allowed | DIGITS
    if any(ch not in allowed for ch in canonical):
        return None
    return canonical


def letter_count(raw: str) -> int:
    return sum(1 for ch in raw if ch in LETTERS)


def phrase_length(raw: str, policy: str = 'letters') -> int:
    if policy == 'full':
        return len(raw)
    return letter_count(raw)


def mask(raw: str, guessed: Iterable[str]) -> str:
    revealed = {str(g).upper() for g in guessed}
    return ''.join(
        (ch if ch in revealed else MASK_CHAR) if ch in LETTERS else ch
        for ch in raw
    )


def is_revealed(masked: str) -> bool:
    return MASK_CHAR not in masked


def clean_hint(hint, max_len: int = 80) -> str:
    return _WHITESPACE.sub(' ', str(hint or '')).strip()[:max_len]
