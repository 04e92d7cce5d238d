"""Process-wide default factories."""

import os
import random
import threading

from ksuid.factory import KsuidFactory, SubsecondGenerator
from ksuid.subsecond import Precision

_factories = {}
_factories_lock = threading.Lock()

_fast_random = random.Random(os.urandom(16))


def _build(kind):
    if kind == "plain":
        return KsuidFactory.new_instance()
    if kind == "subsecond":
        return KsuidFactory.new_subsecond_instance()
    if kind == "monotonic":
        return KsuidFactory.new_monotonic_instance()
    if kind == "fast":
        return KsuidFactory.new_instance(_fast_random)
    return KsuidFactory(SubsecondGenerator(precision=Precision[kind]))


def _factory(kind):
    factory = _factories.get(kind)
    if factory is None:
        with _factories_lock:
            factory = _factories.get(kind)
            if factory is None:
                factory = _factories[kind] = _build(kind)
    return factory


def get_ksuid(instant=None):
    return _factory("plain").create(instant)


def get_ksuid_ms(instant=None):
    return _factory("MILLISECOND").create(instant)


def get_ksuid_us(instant=None):
    return _factory("MICROSECOND").create(instant)


def get_ksuid_ns(instant=None):
    return _factory("NANOSECOND").create(instant)


def get_subsecond_ksuid(instant=None):
    """Sub-second KSUID at the finest precision the system clock shows."""
    return _factory("subsecond").create(instant)


def get_monotonic_ksuid(instant=None):
    return _factory("monotonic").create(instant)


def fast():
    """KSUID from a non-cryptographic generator. Not for secrets."""
    return _factory("fast").create()


def generate_ksuid():
    """Generate a 27-character sortable unique ID."""
    return str(get_ksuid())

