"""UTC timestamp utilities."""

import time
from datetime import datetime, timedelta, timezone

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_micros():
    """Current time in microseconds since Unix epoch."""
    return time.time_ns() // 1_000


def format_timestamp(epoch_us=None):
    """Format timestamp as ISO 8601 with microseconds."""
    if epoch_us is None:
        epoch_us = now_micros()

    dt = UNIX_EPOCH + timedelta(microseconds=epoch_us)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.%f") + "Z"


def from_unix_seconds(seconds):
    """Aware UTC datetime for whole Unix seconds."""
    return UNIX_EPOCH + timedelta(seconds=seconds)


def to_unix_parts(dt):
    """Split a datetime into (seconds, nanoseconds) since the Unix epoch.

    Naive datetimes are taken as UTC. Exact integer arithmetic, no floats.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - UNIX_EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    return seconds, delta.microseconds * 1_000
