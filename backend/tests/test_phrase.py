import string

import pytest

from hangman.services.games.phrase import (
    PhraseRules, clean_hint, is_revealed, letter_count, mask, normalize, phrase_length,
)


def test_normalize_uppercases_and_collapses_whitespace():
    assert normalize('  hello   \t world ') == 'HELLO WORLD'
    assert normalize("rock-n-roll isn't dead.") == "ROCK-N-ROLL ISN'T DEAD."


@pytest.mark.parametrize('text', ['hello!', 'café', 'a/b', 'R2D2', '', '   ', None, 42])
def test_normalize_rejects_disallowed_or_empty(text):
    assert normalize(text) is None


def test_normalize_digits_only_when_allowed():
    assert normalize('r2d2') is None
    assert normalize('r2d2', allow_digits=True) == 'R2D2'


def test_mask_shows_non_letters_verbatim():
    assert mask('HELLO WORLD', []) == '_____ _____'
    assert mask("IT'S A-OK.", []) == "__'_ _-__."
    assert mask('HELLO WORLD', ['O']) == '____O _O___'


def test_mask_with_full_alphabet_reveals_raw():
    raw = "DON'T STOP-BELIEVING."
    assert mask(raw, string.ascii_uppercase) == raw
    assert is_revealed(mask(raw, string.ascii_uppercase))
    assert not is_revealed(mask(raw, 'DON'))


def test_mask_accepts_lowercase_guesses():
    assert mask('ABBA', ['b']) == '_BB_'


def test_length_policies():
    raw = "IT'S A DOG"
    assert letter_count(raw) == 7
    assert phrase_length(raw, 'letters') == 7
    assert phrase_length(raw, 'full') == 10


def test_rules_from_config():
    rules = PhraseRules.from_config({'PHRASE_LENGTH_POLICY': 'FULL', 'PHRASE_ALLOW_DIGITS': True, 'HINT_MAX_LEN': 10})
    assert rules == PhraseRules(allow_digits=True, length_policy='full', hint_max_len=10)
    with pytest.raises(ValueError):
        PhraseRules.from_config({'PHRASE_LENGTH_POLICY': 'words'})


def test_clean_hint_trims_and_caps():
    assert clean_hint('  a   famous   song ', max_len=8) == 'a famous'
    assert clean_hint(None) == ''
