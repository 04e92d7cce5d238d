"""Unit tests for generators and the factory."""

import json
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from core.errors import KsuidArgumentError
from internal.logging import LogLevel, StructuredLogger
from ksuid.entropy import ByteRandom, LongRandom
from ksuid.factory import (
    DEFAULT_DRIFT_TOLERANCE,
    KsuidFactory,
    MonotonicGenerator,
    PlainGenerator,
    SubsecondGenerator,
)
from ksuid.subsecond import Precision, extract
from ksuid.value import EPOCH_OFFSET

RANDOM = random.Random(5)
T = int(datetime(2021, 12, 31, 23, 59, 59, tzinfo=timezone.utc).timestamp())

THREADS = 8
CALLS = 2_000


def assert_strictly_increasing(values):
    for previous, current in zip(values, values[1:]):
        assert previous < current


class TestPlainGenerator:
    """Tests for plain KSUIDs."""

    def test_time_preserved(self):
        """Generated values carry the requested second."""
        generator = PlainGenerator()
        for _ in range(100):
            seconds = RANDOM.getrandbits(32) + EPOCH_OFFSET
            assert generator.create(seconds).time == seconds

    def test_unique(self):
        """Values are unique."""
        generator = PlainGenerator()
        assert len({generator.create(T) for _ in range(10_000)}) == 10_000

    def test_payload_from_source(self):
        """Payload comes from the injected source."""
        generator = PlainGenerator(ByteRandom(lambda n: b"\x07" * n))
        assert generator.create(T).payload == b"\x07" * 16


class TestSubsecondGenerator:
    """Tests for sub-second KSUIDs."""

    @pytest.mark.parametrize("precision", list(Precision))
    def test_embeds_fraction(self, seeded_random, precision):
        """The fraction of the second is readable from the payload."""
        generator = SubsecondGenerator(seeded_random, precision)
        for _ in range(100):
            nanos = RANDOM.randrange(1_000_000_000)
            ksuid = generator.create(T, nanos)
            assert ksuid.time == T
            assert extract(ksuid.payload, precision) == precision.from_nanos(nanos)

    def test_orders_within_second(self, seeded_random):
        """Later fractions sort after earlier ones."""
        generator = SubsecondGenerator(seeded_random, Precision.MILLISECOND)
        values = [generator.create(T, ms * 1_000_000) for ms in range(0, 1000, 37)]
        assert_strictly_increasing(values)

    def test_nanos_out_of_range(self):
        """Nanoseconds must be within one second."""
        generator = SubsecondGenerator(precision=Precision.MILLISECOND)
        with pytest.raises(KsuidArgumentError):
            generator.create(T, 1_000_000_000)


class TestMonotonicGenerator:
    """Tests for the monotonic state machine."""

    def test_same_second_increments(self, seeded_random):
        """Timestamps follow a non-decreasing clock; values strictly increase."""
        generator = MonotonicGenerator(seeded_random)
        values = [generator.create(s) for s in (T, T, T + 1, T + 2)]
        assert [v.time for v in values] == [T, T, T + 1, T + 2]
        assert_strictly_increasing(values)
        assert int(values[1]) == int(values[0]) + 1

    def test_new_second_draws_fresh_payload(self):
        """Moving forward uses a new random payload."""
        payloads = iter([b"\x01" * 16, b"\x02" * 16])
        generator = MonotonicGenerator(ByteRandom(lambda n: next(payloads)))
        generator.create(T)
        assert generator.create(T + 1).payload == b"\x02" * 16

    def test_clock_drift_is_clamped(self, seeded_random):
        """Backward jumps within tolerance keep the last timestamp."""
        diff = DEFAULT_DRIFT_TOLERANCE
        generator = MonotonicGenerator(seeded_random)
        times = [T, T, T + 1, T + 2, T + 3 - diff, T + 4 - diff, T + 5]
        values = [generator.create(s) for s in times]
        assert [v.time for v in values] == [T, T, T + 1, T + 2, T + 2, T + 2, T + 5]
        assert_strictly_increasing(values)

    def test_leap_second(self, seeded_random):
        """A repeated second does not move time backwards."""
        generator = MonotonicGenerator(seeded_random)
        first = generator.create(T)
        second = generator.create(T - 1)
        assert second.time == first.time
        assert second > first

    def test_custom_tolerance(self, seeded_random):
        """Jumps beyond the tolerance restart from the new time."""
        generator = MonotonicGenerator(seeded_random, drift_tolerance=5)
        generator.create(T)
        assert generator.create(T - 4).time == T
        assert generator.create(T - 5).time == T - 5

    def test_drift_clamp_logged_at_debug(self, seeded_random, capsys, monkeypatch):
        """A clamped backward step is logged at DEBUG."""
        monkeypatch.setattr("internal.logging._logger", StructuredLogger(LogLevel.DEBUG))
        generator = MonotonicGenerator(seeded_random, drift_tolerance=5)
        generator.create(T)
        capsys.readouterr()
        generator.create(T - 2)
        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["level"] == "DEBUG"
        assert record["last_timestamp"] == T - EPOCH_OFFSET
        assert record["now"] == T - 2 - EPOCH_OFFSET

    def test_clock_reset_logged_at_warn(self, seeded_random, capsys, monkeypatch):
        """A step back beyond the tolerance is logged at WARN."""
        monkeypatch.setattr("internal.logging._logger", StructuredLogger(LogLevel.INFO))
        generator = MonotonicGenerator(seeded_random, drift_tolerance=3)
        generator.create(T)
        capsys.readouterr()
        assert generator.create(T - 3).time == T - 3
        record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert record["level"] == "WARN"
        assert record["drift_tolerance"] == 3
        assert "beyond drift tolerance" in record["msg"]

    def test_payload_overflow_carries_into_timestamp(self):
        """An all-ones payload rolls into the next second."""
        generator = MonotonicGenerator(ByteRandom(lambda n: b"\xff" * n))
        first = generator.create(T)
        second = generator.create(T)
        assert second.time == T + 1
        assert second.payload == bytes(16)
        assert second > first

    def test_failed_random_leaves_state(self):
        """A failing source does not commit a new timestamp."""
        calls = []

        def source(n):
            calls.append(n)
            if len(calls) > 1:
                raise RuntimeError("entropy exhausted")
            return b"\x01" * n

        generator = MonotonicGenerator(ByteRandom(source))
        first = generator.create(T)
        with pytest.raises(RuntimeError):
            generator.create(T + 1)
        assert generator.last == first
        assert generator.create(T) == first.increment()

    def test_reset(self, seeded_random):
        """reset() forgets the last value."""
        generator = MonotonicGenerator(seeded_random)
        generator.create(T + 10)
        generator.reset()
        assert generator.last is None
        assert generator.create(T).time == T

    def test_negative_tolerance(self):
        """Tolerance cannot be negative."""
        with pytest.raises(KsuidArgumentError):
            MonotonicGenerator(drift_tolerance=-1)

    def test_concurrent_calls(self):
        """Threads sharing one generator never see duplicates or disorder."""
        generator = MonotonicGenerator()
        start = threading.Barrier(THREADS)

        def work(_):
            start.wait()
            return [generator.create(T) for _ in range(CALLS)]

        with ThreadPoolExecutor(max_workers=THREADS) as pool:
            batches = list(pool.map(work, range(THREADS)))

        values = [v for batch in batches for v in batch]
        assert len(set(values)) == THREADS * CALLS
        assert_strictly_increasing(sorted(values))
        for batch in batches:
            assert_strictly_increasing(batch)

    def test_independent_instances(self, seeded_random):
        """Two generators keep separate state."""
        a = MonotonicGenerator(seeded_random)
        b = MonotonicGenerator(seeded_random)
        a.create(T + 100)
        assert b.create(T).time == T


class TestKsuidFactory:
    """Tests for KsuidFactory."""

    def test_create_uses_clock(self, sequence_clock):
        """Without an instant, the clock supplies the time."""
        factory = KsuidFactory.new_instance(clock=sequence_clock([T]))
        assert factory.create().time == T

    def test_create_with_instant(self):
        """A datetime instant sets the time."""
        factory = KsuidFactory.new_instance()
        instant = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert factory.create(instant).instant == instant

    def test_naive_instant_is_utc(self):
        """Naive datetimes are read as UTC."""
        factory = KsuidFactory.new_instance()
        naive = datetime(2030, 1, 2, 3, 4, 5)
        assert factory.create(naive).instant == naive.replace(tzinfo=timezone.utc)

    def test_subsecond_instant(self, seeded_random):
        """Microseconds of the instant land in the payload."""
        factory = KsuidFactory.new_subsecond_instance(seeded_random, precision=Precision.MICROSECOND)
        instant = datetime(2030, 1, 2, 3, 4, 5, 678901, tzinfo=timezone.utc)
        ksuid = factory.create(instant)
        assert extract(ksuid.payload, Precision.MICROSECOND) == 678901
        assert ksuid.instant == instant.replace(microsecond=0)

    def test_subsecond_detects_precision(self, precision_clock):
        """Precision defaults to what the clock offers."""
        factory = KsuidFactory.new_subsecond_instance(clock=precision_clock(1_000, seed=1))
        assert factory.generator.precision == Precision.MICROSECOND

    def test_monotonic_clock_drift(self, sequence_clock, seeded_random):
        """Drifting clock through the factory is clamped."""
        diff = DEFAULT_DRIFT_TOLERANCE
        clock = sequence_clock([T, T, T + 1, T + 2, T + 3 - diff, T + 4 - diff, T + 5])
        factory = KsuidFactory.new_monotonic_instance(seeded_random, clock)
        times = [factory.create().time for _ in range(7)]
        assert times == [T, T, T + 1, T + 2, T + 2, T + 2, T + 5]

    def test_monotonic_leap_second(self, sequence_clock):
        """A leap second does not move time backwards."""
        factory = KsuidFactory.new_monotonic_instance(clock=sequence_clock([T, T - 1]))
        assert factory.create().time == factory.create().time

    def test_create_at(self):
        """create_at takes Unix seconds directly."""
        assert KsuidFactory.new_instance().create_at(T).time == T

    @pytest.mark.parametrize("builder", [
        KsuidFactory.new_instance,
        KsuidFactory.new_subsecond_instance,
        KsuidFactory.new_monotonic_instance,
    ])
    @pytest.mark.parametrize("source", [
        None,
        random.Random(),
        LongRandom(lambda: random.getrandbits(64)),
        ByteRandom(lambda n: random.randbytes(n)),
    ])
    def test_random_sources(self, builder, source):
        """Every factory accepts every kind of random source."""
        assert builder(source).create() is not None

    def test_current_time(self):
        """Default clock yields the current second."""
        start = int(time.time())
        ksuid = KsuidFactory.new_monotonic_instance().create()
        end = int(time.time())
        assert start <= ksuid.time <= end

    def test_instant_far_future(self):
        """Instants up to 2150 keep their seconds."""
        factory = KsuidFactory.new_instance()
        instant = datetime(2150, 6, 19, 23, 21, 35, tzinfo=timezone.utc)
        assert factory.create(instant).instant == instant
        assert factory.create(instant + timedelta(seconds=1)).time == EPOCH_OFFSET
