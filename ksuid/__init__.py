from ksuid.value import EPOCH_OFFSET, MAX_KSUID, MIN_KSUID, Ksuid
from ksuid.clock import Clock, SystemClock
from ksuid.entropy import ByteRandom, LongRandom, RandomSource, SecureRandom
from ksuid.subsecond import Precision
from ksuid.factory import KsuidFactory, MonotonicGenerator, PlainGenerator, SubsecondGenerator
from ksuid.creator import (
    fast,
    generate_ksuid,
    get_ksuid,
    get_ksuid_ms,
    get_ksuid_ns,
    get_ksuid_us,
    get_monotonic_ksuid,
    get_subsecond_ksuid,
)
from core.errors import KsuidArgumentError, KsuidError, KsuidFormatError, KsuidOverflowError

__all__ = [
    "EPOCH_OFFSET",
    "MAX_KSUID",
    "MIN_KSUID",
    "Ksuid",
    "Clock",
    "SystemClock",
    "RandomSource",
    "SecureRandom",
    "ByteRandom",
    "LongRandom",
    "Precision",
    "KsuidFactory",
    "PlainGenerator",
    "SubsecondGenerator",
    "MonotonicGenerator",
    "fast",
    "generate_ksuid",
    "get_ksuid",
    "get_ksuid_ms",
    "get_ksuid_us",
    "get_ksuid_ns",
    "get_subsecond_ksuid",
    "get_monotonic_ksuid",
    "KsuidError",
    "KsuidFormatError",
    "KsuidOverflowError",
    "KsuidArgumentError",
]
