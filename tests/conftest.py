"""Pytest fixtures for all tests."""

import random

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config, GeneratorConfig, LoggingConfig
from ksuid.clock import Clock
from ksuid.entropy import LongRandom
from web.app import create_app

NANOS = 1_000_000_000


class SequenceClock(Clock):
    """Replays a fixed list of Unix seconds, cycling at the end."""

    def __init__(self, seconds, nanos=0):
        self._times = [s * NANOS + nanos for s in seconds]
        self._i = 0

    def time_ns(self):
        value = self._times[self._i % len(self._times)]
        self._i += 1
        return value


class PrecisionClock(Clock):
    """Current second with a random fraction truncated to a given unit."""

    def __init__(self, nanos_per_unit, seed=None):
        self._unit = nanos_per_unit
        self._random = random.Random(seed)

    def time_ns(self):
        fraction = self._random.randrange(NANOS)
        return 1_600_000_000 * NANOS + fraction - fraction % self._unit


@pytest.fixture
def seeded_random():
    """Deterministic random source."""
    rnd = random.Random(1234)
    return LongRandom(lambda: rnd.getrandbits(64))


@pytest.fixture
def test_config(tmp_path):
    """Service config writing crashes to a temp dir."""
    return Config(
        generator=GeneratorConfig(mode="monotonic"),
        logging=LoggingConfig(level="ERROR", crash_file=str(tmp_path / "crash.log")),
    )


@pytest.fixture
async def app(test_config):
    """Create test FastAPI app."""
    return create_app(test_config)


@pytest.fixture
async def client(app):
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def sequence_clock():
    """Factory for clocks replaying given Unix seconds."""
    return SequenceClock


@pytest.fixture
def precision_clock():
    """Factory for clocks with a fixed sub-second resolution."""
    return PrecisionClock
