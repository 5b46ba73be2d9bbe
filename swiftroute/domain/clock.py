"""Time helpers shared by use cases and adapters."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_clock(tz_name: str):
    """Return a zero-arg callable giving the current time in *tz_name*."""
    tz = ZoneInfo(tz_name)

    def _now() -> datetime:
        return datetime.now(tz)

    return _now
