"""Clock sources."""

import time

NANOS_PER_SECOND = 1_000_000_000


class Clock:
    """Current wall time in nanoseconds since the Unix epoch."""

    def time_ns(self):
        raise NotImplementedError


class SystemClock(Clock):
    def time_ns(self):
        return time.time_ns()


def split_ns(nanos):
    """(seconds, nanoseconds within the second)."""
    return divmod(nanos, NANOS_PER_SECOND)
