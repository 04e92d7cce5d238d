"""
Sub-second precision embedded in the payload.

The fraction of the second is written into the top 10, 20 or 30 bits of
the payload, trading that much entropy for ordering within a second.
"""

from enum import Enum

from core.errors import KsuidArgumentError
from ksuid.clock import split_ns

_HEAD_BYTES = 4
_HEAD_BITS = 32


class Precision(Enum):
    MILLISECOND = 10
    MICROSECOND = 20
    NANOSECOND = 30

    @property
    def bits(self):
        return self.value

    @property
    def nanos_per_unit(self):
        return _NANOS_PER_UNIT[self]

    def from_nanos(self, nanos):
        """Convert nanoseconds within a second to this unit."""
        return nanos // self.nanos_per_unit


_NANOS_PER_UNIT = {
    Precision.MILLISECOND: 1_000_000,
    Precision.MICROSECOND: 1_000,
    Precision.NANOSECOND: 1,
}


def _check_payload(payload):
    if payload is None or len(payload) < _HEAD_BYTES:
        raise KsuidArgumentError("payload is too short for sub-second bits", argument="payload")


def embed(payload, value, precision):
    """Overwrite the top precision.bits bits of payload with value."""
    _check_payload(payload)
    bits = precision.bits
    if not 0 <= value < (1 << bits):
        raise KsuidArgumentError(
            f"{precision.name.lower()} value {value} does not fit in {bits} bits",
            argument="value",
        )

    shift = _HEAD_BITS - bits
    head = int.from_bytes(payload[:_HEAD_BYTES], "big")
    head = (value << shift) | (head & ((1 << shift) - 1))
    return head.to_bytes(_HEAD_BYTES, "big") + bytes(payload[_HEAD_BYTES:])


def extract(payload, precision):
    """Read back the value written by embed()."""
    _check_payload(payload)
    head = int.from_bytes(payload[:_HEAD_BYTES], "big")
    return head >> (_HEAD_BITS - precision.bits)


def detect_precision(clock, samples=10):
    """Finest sub-second precision the clock shows over a few readings."""
    detected = Precision.MILLISECOND
    for _ in range(samples):
        _, nanos = split_ns(clock.time_ns())
        if nanos % 1_000:
            return Precision.NANOSECOND
        if nanos % 1_000_000:
            detected = Precision.MICROSECOND
    return detected
