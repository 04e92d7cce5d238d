"""KSUID generation and inspection routes."""

from typing import Literal, Optional

from fastapi import APIRouter, Query

from ksuid.value import Ksuid

router = APIRouter(prefix="/api/v1/ksuids", tags=["ksuids"])

MAX_BATCH = 1000

# Set by app.py
_factories = None
_default_mode = None


def init(factories, default_mode):
    """Initialize with one factory per mode."""
    global _factories, _default_mode
    _factories = factories
    _default_mode = default_mode


def describe(ksuid):
    return {
        "ksuid": str(ksuid),
        "timestamp": ksuid.timestamp,
        "time": ksuid.time,
        "instant": ksuid.instant.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "payload": ksuid.payload.hex().upper(),
        "bytes": ksuid.to_bytes().hex().upper(),
    }


@router.get("")
def generate(
    mode: Optional[Literal["plain", "subsecond", "monotonic"]] = None,
    count: int = Query(1, ge=1, le=MAX_BATCH),
):
    """Generate one or more KSUIDs."""
    mode = mode or _default_mode
    factory = _factories[mode]
    return {"mode": mode, "ksuids": [str(factory.create()) for _ in range(count)]}


@router.get("/{value}")
async def inspect(value: str):
    """Decode a KSUID string into its parts."""
    return describe(Ksuid.from_string(value))


@router.get("/{value}/valid")
async def validate(value: str):
    """Check a KSUID string without decoding errors."""
    return {"ksuid": value, "valid": Ksuid.is_valid(value)}
