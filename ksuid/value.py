"""
KSUID - K-Sortable Unique Identifier.

Time-sortable, globally unique IDs without coordination.
Format: 4 bytes timestamp + 16 bytes payload = 27 char base62 string.
"""

import functools
import struct

from core.errors import KsuidArgumentError
from ksuid import base62
from ksuid.fixed_width import from_words, multiply_and_add, to_words
from utils.timestamp import from_unix_seconds

# KSUID epoch: 2014-05-13T16:53:20Z
EPOCH_OFFSET = 1_400_000_000
TIMESTAMP_BYTES = 4
PAYLOAD_BYTES = 16
KSUID_BYTES = base62.KSUID_BYTES

_TIMESTAMP_MASK = 0xFFFFFFFF
_TIMESTAMP = struct.Struct(">I")


def _require_bytes(value, size, name):
    if value is None:
        raise KsuidArgumentError(f"{name} is required", argument=name)
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise KsuidArgumentError(
            f"{name} must be bytes, got {type(value).__name__}", argument=name
        )
    if len(value) != size:
        raise KsuidArgumentError(
            f"{name} must be {size} bytes, got {len(value)}", argument=name
        )
    return bytes(value)


@functools.total_ordering
class Ksuid:
    """Immutable 20-byte KSUID.

    Ordering and equality are byte-wise, which is the same as numeric order
    and as order of the string forms.
    """

    __slots__ = ("_bytes",)

    def __init__(self, seconds, payload):
        """Build a KSUID from Unix seconds and a 16-byte payload.

        The timestamp wraps modulo 2**32 in both directions.
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            raise KsuidArgumentError(
                f"seconds must be an int, got {type(seconds).__name__}", argument="seconds"
            )
        payload = _require_bytes(payload, PAYLOAD_BYTES, "payload")
        timestamp = (seconds - EPOCH_OFFSET) & _TIMESTAMP_MASK
        self._bytes = _TIMESTAMP.pack(timestamp) + payload

    @classmethod
    def from_bytes(cls, data):
        data = _require_bytes(data, KSUID_BYTES, "data")
        ksuid = cls.__new__(cls)
        ksuid._bytes = data
        return ksuid

    @classmethod
    def from_string(cls, string):
        return cls.from_bytes(base62.decode(string))

    @staticmethod
    def is_valid(string):
        return base62.is_valid(string)

    @staticmethod
    def get_time(string):
        """Unix seconds of a KSUID string."""
        return Ksuid.from_string(string).time

    @staticmethod
    def get_instant(string):
        return Ksuid.from_string(string).instant

    @staticmethod
    def get_payload(string):
        return Ksuid.from_string(string).payload

    @property
    def timestamp(self):
        """Seconds since the KSUID epoch, as stored."""
        return _TIMESTAMP.unpack_from(self._bytes)[0]

    @property
    def time(self):
        """Unix seconds. Not wrapped: ranges from 2014 to 2150."""
        return self.timestamp + EPOCH_OFFSET

    @property
    def instant(self):
        return from_unix_seconds(self.time)

    @property
    def payload(self):
        return self._bytes[TIMESTAMP_BYTES:]

    def to_bytes(self):
        return self._bytes

    def increment(self):
        """Next KSUID over the full 160 bits.

        An all-ones payload carries into the timestamp. Raises
        KsuidOverflowError on the maximum value.
        """
        number = multiply_and_add(to_words(self._bytes), 1, 1)
        return Ksuid.from_bytes(from_words(number))

    def __bytes__(self):
        return self._bytes

    def __int__(self):
        return int.from_bytes(self._bytes, "big")

    def __str__(self):
        return base62.encode(self._bytes)

    def __repr__(self):
        return f"Ksuid('{self}')"

    def __hash__(self):
        return hash(self._bytes)

    def __eq__(self, other):
        if not isinstance(other, Ksuid):
            return NotImplemented
        return self._bytes == other._bytes

    def __lt__(self, other):
        if not isinstance(other, Ksuid):
            return NotImplemented
        return self._bytes < other._bytes

    def __setattr__(self, name, value):
        if hasattr(self, "_bytes"):
            raise AttributeError("Ksuid is immutable")
        super().__setattr__(name, value)


MIN_KSUID = Ksuid.from_bytes(bytes(KSUID_BYTES))
MAX_KSUID = Ksuid.from_bytes(b"\xff" * KSUID_BYTES)
