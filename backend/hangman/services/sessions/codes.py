import random
from typing import Callable

# No 0/O/1/I so codes can be read off a TV and typed on a phone
CODE_LETTERS = 'ABCDEFGHJKMNPQRSTUVWXYZ'
CODE_DIGITS = '23456789'
CODE_LETTER_COUNT = 4
CODE_DIGIT_COUNT = 2


def make_code(rng=random) -> str:
    """Return a candidate code: 4 letters + 2 digits, e.g. QJBR27."""
    letters = ''.join(rng.choice(CODE_LETTERS) for _ in range(CODE_LETTER_COUNT))
    digits = ''.join(rng.choice(CODE_DIGITS) for _ in range(CODE_DIGIT_COUNT))
    return letters + digits


def generate_code(exists: Callable[[str], bool], rng=random) -> str:
    """Generate a code that ``exists`` reports as free."""
    while True:
        code = make_code(rng)
        if not exists(code):
            return code
