import time
from datetime import datetime, timezone
from typing import Optional

_STARTED_AT = time.monotonic()


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Shift a datetime to UTC. Naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def uptime_seconds() -> float:
    """Seconds since this process imported the module."""
    return time.monotonic() - _STARTED_AT
