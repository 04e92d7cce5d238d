"""Random sources for KSUID payloads."""

import random
import secrets

from core.errors import KsuidArgumentError

LONG_BYTES = 8
LONG_MASK = 0xFFFFFFFFFFFFFFFF


class RandomSource:
    """Supplies random bytes and unsigned 64-bit longs.

    Instances shared between threads must be safe for concurrent use.
    """

    def next_bytes(self, length):
        raise NotImplementedError

    def next_long(self):
        raise NotImplementedError


class SecureRandom(RandomSource):
    """Default source, backed by the operating system CSPRNG."""

    def next_bytes(self, length):
        return secrets.token_bytes(length)

    def next_long(self):
        return int.from_bytes(secrets.token_bytes(LONG_BYTES), "big")


class ByteRandom(RandomSource):
    """Wraps a caller-supplied function returning `length` random bytes."""

    def __init__(self, function):
        if not callable(function):
            raise KsuidArgumentError("byte function must be callable", argument="function")
        self._function = function

    def next_bytes(self, length):
        data = self._function(length)
        if data is None or len(data) != length:
            raise KsuidArgumentError(
                f"byte function returned {None if data is None else len(data)} bytes, expected {length}",
                argument="function",
            )
        return bytes(data)

    def next_long(self):
        return int.from_bytes(self.next_bytes(LONG_BYTES), "big")


class LongRandom(RandomSource):
    """Wraps a caller-supplied function returning a 64-bit integer."""

    def __init__(self, function):
        if not callable(function):
            raise KsuidArgumentError("long function must be callable", argument="function")
        self._function = function

    def next_long(self):
        return self._function() & LONG_MASK

    def next_bytes(self, length):
        chunks = []
        remaining = length
        while remaining > 0:
            chunks.append(self.next_long().to_bytes(LONG_BYTES, "big"))
            remaining -= LONG_BYTES
        return b"".join(chunks)[:length]


def resolve_random(source=None):
    """Turn None, a RandomSource or a random.Random into a RandomSource."""
    if source is None:
        return SecureRandom()
    if isinstance(source, RandomSource):
        return source
    if isinstance(source, random.Random):
        return LongRandom(lambda: source.getrandbits(64))
    raise KsuidArgumentError(
        f"unsupported random source {type(source).__name__}", argument="random"
    )
