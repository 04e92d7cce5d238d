"""
160-bit unsigned integer helpers.

A 20-byte block is handled as five 32-bit words, most significant first.
Every step keeps its intermediate value within 64 bits.
"""

import struct

from core.errors import KsuidArgumentError, KsuidOverflowError

WORDS = 5
WORD_BITS = 32
WORD_MASK = 0xFFFFFFFF

_WORDS_FORMAT = ">5I"


def to_words(data):
    """Split 20 big-endian bytes into five 32-bit words."""
    if len(data) != WORDS * 4:
        raise KsuidArgumentError(f"expected {WORDS * 4} bytes, got {len(data)}", argument="data")
    return list(struct.unpack(_WORDS_FORMAT, data))


def from_words(words):
    """Join five 32-bit words back into 20 big-endian bytes."""
    return struct.pack(_WORDS_FORMAT, *words)


def is_zero(number):
    return not any(number)


def divide_with_remainder(number, divisor):
    """Long division of a 160-bit number by a positive 32-bit divisor.

    Returns (quotient, remainder). The remainder of each word is carried
    into the next, lower one.
    """
    if divisor <= 0:
        raise KsuidArgumentError(f"divisor must be positive, got {divisor}", argument="divisor")

    quotient = [0] * WORDS
    remainder = 0
    for i, word in enumerate(number):
        current = (remainder << WORD_BITS) | word
        quotient[i] = current // divisor
        remainder = current % divisor
    return quotient, remainder


def multiply_and_add(number, multiplier, addend, check_overflow=True):
    """Compute number * multiplier + addend over 160 bits.

    Carries propagate from the low word to the high word. A carry out of the
    top word raises KsuidOverflowError, or is dropped when check_overflow is
    false.
    """
    if multiplier <= 0:
        raise KsuidArgumentError(f"multiplier must be positive, got {multiplier}", argument="multiplier")
    if addend < 0:
        raise KsuidArgumentError(f"addend must not be negative, got {addend}", argument="addend")

    product = [0] * WORDS
    carry = addend
    for i in range(WORDS - 1, -1, -1):
        current = number[i] * multiplier + carry
        product[i] = current & WORD_MASK
        carry = current >> WORD_BITS

    if carry and check_overflow:
        raise KsuidOverflowError("value exceeds 160 bits")
    return product
