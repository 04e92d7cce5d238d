"""
KSUID generators and the factory that feeds them the current time.

PlainGenerator and SubsecondGenerator are stateless. MonotonicGenerator
keeps the last value it emitted and guarantees every later value from the
same instance is strictly greater.
"""

import threading

from core.errors import KsuidArgumentError
from internal.logging import get_logger
from ksuid.clock import NANOS_PER_SECOND, SystemClock, split_ns
from ksuid.entropy import resolve_random
from ksuid.subsecond import Precision, detect_precision, embed
from ksuid.value import EPOCH_OFFSET, PAYLOAD_BYTES, Ksuid
from utils.timestamp import to_unix_parts

# Backward clock moves up to this many seconds are clamped, not followed.
DEFAULT_DRIFT_TOLERANCE = 10_000

_TIMESTAMP_MASK = 0xFFFFFFFF


def _check_nanos(nanos):
    if not 0 <= nanos < NANOS_PER_SECOND:
        raise KsuidArgumentError(f"nanos out of range: {nanos}", argument="nanos")


class PlainGenerator:
    """Timestamp plus 16 random bytes."""

    def __init__(self, random=None):
        self._random = resolve_random(random)

    def create(self, seconds, nanos=0):
        return Ksuid(seconds, self._random.next_bytes(PAYLOAD_BYTES))


class SubsecondGenerator:
    """Random payload with the sub-second fraction in its top bits."""

    def __init__(self, random=None, precision=Precision.MILLISECOND):
        self._random = resolve_random(random)
        self.precision = precision

    def create(self, seconds, nanos=0):
        _check_nanos(nanos)
        payload = self._random.next_bytes(PAYLOAD_BYTES)
        payload = embed(payload, self.precision.from_nanos(nanos), self.precision)
        return Ksuid(seconds, payload)


class MonotonicGenerator:
    """Strictly increasing KSUIDs from one instance, across threads.

    When the clock stalls or steps back by less than drift_tolerance seconds
    the last timestamp is kept and the previous value is incremented. A
    larger step back is taken as a deliberate clock reset.
    """

    def __init__(self, random=None, drift_tolerance=DEFAULT_DRIFT_TOLERANCE):
        if drift_tolerance < 0:
            raise KsuidArgumentError(
                f"drift_tolerance must not be negative, got {drift_tolerance}",
                argument="drift_tolerance",
            )
        self._random = resolve_random(random)
        self.drift_tolerance = drift_tolerance
        self._lock = threading.Lock()
        self._last = None

    @property
    def last(self):
        with self._lock:
            return self._last

    def reset(self):
        with self._lock:
            self._last = None

    def create(self, seconds, nanos=0):
        timestamp = (seconds - EPOCH_OFFSET) & _TIMESTAMP_MASK
        with self._lock:
            last = self._last
            if last is None or timestamp > last.timestamp:
                value = Ksuid(seconds, self._random.next_bytes(PAYLOAD_BYTES))
            elif timestamp > last.timestamp - self.drift_tolerance:
                if timestamp < last.timestamp:
                    get_logger().debug(
                        "Clock moved backwards, keeping last timestamp",
                        now=timestamp,
                        last_timestamp=last.timestamp,
                    )
                value = last.increment()
            else:
                get_logger().warn(
                    "Clock moved backwards beyond drift tolerance, restarting sequence",
                    now=timestamp,
                    last_timestamp=last.timestamp,
                    drift_tolerance=self.drift_tolerance,
                )
                value = Ksuid(seconds, self._random.next_bytes(PAYLOAD_BYTES))
            self._last = value
            return value


class KsuidFactory:
    """Creates KSUIDs from a generator and a clock."""

    def __init__(self, generator=None, clock=None):
        self.generator = generator or PlainGenerator()
        self.clock = clock or SystemClock()

    @classmethod
    def new_instance(cls, random=None, clock=None):
        return cls(PlainGenerator(random), clock)

    @classmethod
    def new_subsecond_instance(cls, random=None, clock=None, precision=None):
        clock = clock or SystemClock()
        if precision is None:
            precision = detect_precision(clock)
        return cls(SubsecondGenerator(random, precision), clock)

    @classmethod
    def new_monotonic_instance(cls, random=None, clock=None, drift_tolerance=DEFAULT_DRIFT_TOLERANCE):
        return cls(MonotonicGenerator(random, drift_tolerance), clock)

    def create(self, instant=None):
        """KSUID for a datetime, or for the clock's current time."""
        if instant is None:
            seconds, nanos = split_ns(self.clock.time_ns())
        else:
            seconds, nanos = to_unix_parts(instant)
        return self.generator.create(seconds, nanos)

    def create_at(self, seconds, nanos=0):
        return self.generator.create(seconds, nanos)
