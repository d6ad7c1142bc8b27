"""
Core Utilities.

Shared utility functions used across the client.
All modules should import utilities from this module.
"""

import time
from datetime import datetime, timezone

_last_local_id = 0


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the client are timezone-naive and assumed to
    be UTC, so notes from the server and from the local cache compare
    without surprises.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def new_local_id() -> str:
    """
    Generate an id for a note that no server has seen.

    Nanosecond timestamp, bumped when two calls land on the same tick so
    ids stay unique and increasing within the process.
    """
    global _last_local_id
    candidate = time.time_ns()
    if candidate <= _last_local_id:
        candidate = _last_local_id + 1
    _last_local_id = candidate
    return str(candidate)
