"""
Base-62 codec for the 20-byte KSUID block.

The alphabet is in ascending ASCII order so that comparing two encoded
strings gives the same result as comparing the numbers they encode.
"""

from core.errors import KsuidArgumentError, KsuidFormatError
from ksuid.fixed_width import (
    WORDS,
    divide_with_remainder,
    from_words,
    is_zero,
    multiply_and_add,
    to_words,
)

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
RADIX = 62
KSUID_BYTES = 20
KSUID_CHARS = 27

MAX_STRING = "aWgEPTl1tmebfsQzFP4bxwgy80V"

_INVALID = -1
_DECODE_MAP = tuple(ALPHABET.find(chr(code)) for code in range(256))


def encode(data):
    """Encode 20 bytes as a 27-character base-62 string."""
    if data is None or len(data) != KSUID_BYTES:
        size = None if data is None else len(data)
        raise KsuidArgumentError(f"expected {KSUID_BYTES} bytes, got {size}", argument="data")

    number = to_words(bytes(data))
    chars = []
    while not is_zero(number):
        number, remainder = divide_with_remainder(number, RADIX)
        chars.append(ALPHABET[remainder])

    return "".join(reversed(chars)).rjust(KSUID_CHARS, "0")


def _digit(char):
    code = ord(char)
    return _DECODE_MAP[code] if code < len(_DECODE_MAP) else _INVALID


def decode(string):
    """Decode a 27-character base-62 string into 20 bytes."""
    if not isinstance(string, str):
        raise KsuidFormatError(f"expected a string, got {type(string).__name__}")
    if len(string) != KSUID_CHARS:
        raise KsuidFormatError(
            f"expected {KSUID_CHARS} characters, got {len(string)}", value=string
        )

    number = [0] * WORDS
    for position, char in enumerate(string):
        digit = _digit(char)
        if digit == _INVALID:
            raise KsuidFormatError(
                f"invalid character {char!r} at position {position}", value=string
            )
        number = multiply_and_add(number, RADIX, digit)

    return from_words(number)


def is_valid(string):
    """Check a string without raising."""
    if not isinstance(string, str) or len(string) != KSUID_CHARS:
        return False
    if any(_digit(char) == _INVALID for char in string):
        return False
    # Same length and alphabet order: string order is numeric order.
    return string <= MAX_STRING
